# argfolio/schemas/debts.py
"""Pydantic schemas for debts."""

from decimal import Decimal

from pydantic import Field

from argfolio.models import Currency, DebtStatus
from argfolio.schemas.common import CamelModel


class Debt(CamelModel):
    """
    A stored debt record.

    `balance` and `status` are derived from DEBT_ADD/DEBT_PAY movements;
    only a CANCELLED status set by the user is kept as-is.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    currency: Currency = Currency.ARS
    status: DebtStatus = DebtStatus.ACTIVE
    created_at_iso: str | None = Field(default=None, alias="createdAtISO")


class DebtSummary(CamelModel):
    """Current state of one debt."""

    id: str
    name: str
    currency: Currency
    original_amount: Decimal
    paid_amount: Decimal
    balance: Decimal
    status: DebtStatus
