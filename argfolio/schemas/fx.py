# argfolio/schemas/fx.py
"""
Pydantic schemas for ARS/USD exchange rates.

Every rate family is a {buy, sell} pair in ARS per USD as quoted by
Argentine sources: `buy` is what the market pays you for a dollar (bid),
`sell` is what you pay for one (ask). Either side may be missing.
"""

from decimal import Decimal

from pydantic import Field

from argfolio.models import FxType
from argfolio.schemas.common import CamelModel


class FxPair(CamelModel):
    """Bid/ask pair in ARS per USD."""

    buy: Decimal | None = Field(default=None, gt=0)
    sell: Decimal | None = Field(default=None, gt=0)

    @property
    def bid(self) -> Decimal | None:
        return self.buy

    @property
    def ask(self) -> Decimal | None:
        return self.sell

    @property
    def mid(self) -> Decimal | None:
        """Average of both sides, or whichever side exists."""
        if self.buy is not None and self.sell is not None:
            return (self.buy + self.sell) / 2
        return self.buy if self.buy is not None else self.sell

    @property
    def valuation_rate(self) -> Decimal | None:
        """Rate used to value holdings now: sell side, buy side if missing."""
        return self.sell if self.sell is not None else self.buy


class FxRates(CamelModel):
    """One snapshot of all rate families."""

    oficial: FxPair = Field(default_factory=FxPair)
    blue: FxPair = Field(default_factory=FxPair)
    mep: FxPair = Field(default_factory=FxPair)
    ccl: FxPair = Field(default_factory=FxPair)
    cripto: FxPair = Field(default_factory=FxPair)
    updated_at_iso: str | None = Field(default=None, alias="updatedAtISO")
    source: str = "unknown"

    def pair(self, fx_type: FxType) -> FxPair:
        """Pair for a rate family."""
        return getattr(self, fx_type.value.lower())


class FxRatesResponse(CamelModel):
    """Current rates plus whether they came from the last-known-good cache."""

    rates: FxRates
    is_fallback: bool = False
    warnings: list[str] = Field(default_factory=list)
