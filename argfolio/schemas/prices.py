# argfolio/schemas/prices.py
"""Pydantic schemas for live quotes, manual price overrides and the price cache."""

from decimal import Decimal
from typing import Literal

from pydantic import Field

from argfolio.models import Currency
from argfolio.schemas.common import CamelModel

PriceStatus = Literal["ok", "cached", "stale", "manual", "estimated", "missing"]


class PriceQuote(CamelModel):
    """A quote as returned by a live source."""

    price_usd: Decimal = Field(..., ge=0)
    change_pct_1d: Decimal | None = Field(default=None, alias="changePct1d")


class ManualPrice(CamelModel):
    """
    User-entered price that overrides any live quote.

    Used for instruments with no live source (FCI cuotapartes) or to
    correct a bad quote. `id` is the instrument id, so there is at most
    one override per instrument.
    """

    id: str = Field(..., min_length=1, description="Instrument id")
    price: Decimal = Field(..., ge=0)
    currency: Currency = Currency.ARS
    updated_at_iso: str | None = Field(default=None, alias="updatedAtISO")


class CachedPrice(CamelModel):
    """Last-known quote for a symbol, kept as a fallback for failed fetches."""

    id: str = Field(..., description="Quote symbol")
    price_usd: Decimal
    change_pct_1d: Decimal | None = Field(default=None, alias="changePct1d")
    fetched_at_iso: str = Field(..., alias="fetchedAtISO")
