# argfolio/services/fx/__init__.py
"""
FX rate resolution and retrieval.

- resolver: which rate applies to a valuation or a movement
- rate_service: live rates with last-known-good fallback
"""

from argfolio.services.fx.resolver import FxResolver, category_for_cash
from argfolio.services.fx.rate_service import FxRateService, FxRatesResult

__all__ = [
    "FxResolver",
    "category_for_cash",
    "FxRateService",
    "FxRatesResult",
]
