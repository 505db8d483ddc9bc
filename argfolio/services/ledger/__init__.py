# argfolio/services/ledger/__init__.py
"""
Ledger package: average-cost positions and the debt aggregate.

Usage:
    from argfolio.services.ledger import AverageCostLedger, PositionKey
"""

from argfolio.services.ledger.average_cost import AverageCostLedger, detect_cash_tracked_accounts
from argfolio.services.ledger.debts import DebtCalculator
from argfolio.services.ledger.types import LedgerPosition, LedgerResult, PositionKey

__all__ = [
    "AverageCostLedger",
    "detect_cash_tracked_accounts",
    "DebtCalculator",
    "LedgerPosition",
    "LedgerResult",
    "PositionKey",
]
