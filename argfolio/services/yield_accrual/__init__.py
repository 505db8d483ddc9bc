# argfolio/services/yield_accrual/__init__.py
"""Daily interest accrual for remunerated cash accounts."""

from argfolio.services.yield_accrual.engine import (
    AccrualResult,
    YieldMetrics,
    compute_tea,
    compute_yield_metrics,
    daily_rate,
    generate_accrual_movements,
    yield_movement_id,
)
from argfolio.services.yield_accrual.service import (
    AccountAccrual,
    AccrualGuard,
    AccrualRunReport,
    YieldAccrualService,
    accrual_guard,
)

__all__ = [
    "AccrualResult",
    "YieldMetrics",
    "compute_tea",
    "compute_yield_metrics",
    "daily_rate",
    "generate_accrual_movements",
    "yield_movement_id",
    "AccountAccrual",
    "AccrualGuard",
    "AccrualRunReport",
    "YieldAccrualService",
    "accrual_guard",
]
