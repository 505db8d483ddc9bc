# argfolio/schemas/yields.py
"""Pydantic schemas for wallet yield metrics and accrual runs."""

from datetime import date
from decimal import Decimal

from argfolio.schemas.common import CamelModel


class YieldMetricsResponse(CamelModel):
    """Projections for one remunerated account. `tea` is a fraction, not percent."""

    account_id: str
    account_name: str
    balance_ars: Decimal
    tna: Decimal
    daily_rate: Decimal
    tea: Decimal
    interest_tomorrow: Decimal
    projected_30d: Decimal
    projected_1y: Decimal
    last_accrued_date: date | None = None


class AccountAccrualResponse(CamelModel):
    account_id: str
    status: str
    created: int
    interest_ars: Decimal
    last_accrued_date: date | None = None


class AccrualRunResponse(CamelModel):
    run_date: date
    movements_created: int
    accounts: list[AccountAccrualResponse]
