# argfolio/schemas/instruments.py
"""
Pydantic schemas for instruments (static reference data).

CEDEAR ratios are written by brokers as "A:B": A receipts represent B
shares of the underlying. The ratio is normalised once, at load time, to
the single number A/B, and valuation divides by it:

    value_ars = price_usd * fx / ratio

Keep that convention; B/A silently inverts every CEDEAR valuation.
"""

from decimal import Decimal, InvalidOperation

from pydantic import Field, field_validator

from argfolio.models import AssetCategory, Currency
from argfolio.schemas.common import CamelModel


def parse_ratio(raw: str | int | float | Decimal) -> Decimal:
    """
    Normalise a CEDEAR ratio to receipts per underlying share.

    Args:
        raw: "A:B", a plain number, or a number-like string

    Returns:
        A/B as Decimal

    Raises:
        ValueError: If the text is not a ratio or either side is not positive

    Example:
        >>> parse_ratio("10:1")
        Decimal('10')
        >>> parse_ratio("2:3")
        Decimal('0.6666666666666666666666666667')
    """
    text = str(raw).strip()
    try:
        if ":" in text:
            left, right = text.split(":", 1)
            a, b = Decimal(left.strip()), Decimal(right.strip())
        else:
            a, b = Decimal(text), Decimal(1)
    except InvalidOperation:
        raise ValueError(f"Invalid CEDEAR ratio '{raw}'")

    if a <= 0 or b <= 0:
        raise ValueError(f"CEDEAR ratio must be positive, got '{raw}'")
    return a / b


class Instrument(CamelModel):
    """
    A tradable or holdable asset.

    `symbol` is the local ticker; quote lookups use `underlying_symbol`
    (CEDEARs, e.g. "AAPL") or `coingecko_id` (crypto) when set.
    """

    id: str = Field(..., min_length=1, max_length=255, examples=["cedear-aapl"])
    symbol: str = Field(..., min_length=1, max_length=20, examples=["AAPL"])
    name: str | None = Field(default=None, max_length=200)
    category: AssetCategory
    native_currency: Currency = Currency.ARS
    cedear_ratio: Decimal | None = Field(
        default=None,
        description="Receipts per underlying share; accepts 'A:B' text",
        examples=["10:1", "20"],
    )
    underlying_symbol: str | None = Field(default=None, max_length=20)
    coingecko_id: str | None = Field(default=None, max_length=100)

    @field_validator("symbol", "underlying_symbol")
    @classmethod
    def normalize_symbol(cls, v: str | None) -> str | None:
        """Trim whitespace and uppercase."""
        if v is None:
            return None
        return v.strip().upper()

    @field_validator("cedear_ratio", mode="before")
    @classmethod
    def normalize_ratio(cls, v):
        """Turn 'A:B' into A/B."""
        if v is None or v == "":
            return None
        return parse_ratio(v)

    @property
    def quote_symbol(self) -> str:
        """Symbol to request from the live quote sources."""
        return self.underlying_symbol or self.symbol

    @property
    def effective_ratio(self) -> Decimal:
        return self.cedear_ratio or Decimal(1)
