# argfolio/services/valuation/__init__.py
"""
Valuation Service Package.

Architecture:
    valuation/
    ├── __init__.py      # This file - package exports
    ├── types.py         # Internal data classes
    ├── calculators.py   # Holding value and portfolio totals
    └── service.py       # ValuationService (orchestrator)

Data Flow:
    Movements → AverageCostLedger → LedgerPosition
    LedgerPosition + Price + FX → HoldingValueCalculator → HoldingValuation
    Holdings + Fixed deposits + Debts → PortfolioTotalsCalculator → PortfolioValuation
"""

from argfolio.services.valuation.calculators import HoldingValueCalculator, PortfolioTotalsCalculator
from argfolio.services.valuation.service import ValuationService
from argfolio.services.valuation.types import CategoryTotal, HoldingValuation, PortfolioValuation

__all__ = [
    "ValuationService",
    "CategoryTotal",
    "HoldingValuation",
    "PortfolioValuation",
    "HoldingValueCalculator",
    "PortfolioTotalsCalculator",
]
