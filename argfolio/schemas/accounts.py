# argfolio/schemas/accounts.py
"""Pydantic schemas for accounts and their optional cash yield setup."""

from datetime import date

from pydantic import Field, field_validator

from argfolio.models import AccountKind, Currency
from argfolio.schemas.common import CamelModel, NonNegativeDecimal


class CashYield(CamelModel):
    """
    Daily-accruing yield on the account's ARS cash (remunerated wallets).

    `last_accrued_date` is the last day already credited. Accrual never
    starts on its own: with no date set, nothing is caught up.
    """

    enabled: bool = False
    tna: NonNegativeDecimal = Field(..., description="Nominal annual rate, percent", examples=["36.5"])
    last_accrued_date: date | None = None


class Account(CamelModel):
    """A broker, exchange, bank or wallet holding positions and cash."""

    id: str = Field(..., min_length=1, max_length=255, examples=["acc-mercadopago"])
    name: str = Field(..., min_length=1, max_length=100)
    kind: AccountKind = AccountKind.OTHER
    default_currency: Currency = Currency.ARS
    cash_yield: CashYield | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()

    @property
    def yield_enabled(self) -> bool:
        return self.cash_yield is not None and self.cash_yield.enabled
