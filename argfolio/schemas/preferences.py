# argfolio/schemas/preferences.py
"""
Pydantic schema for stored user preferences.

Preferences are data, not ambient state: services read them once per
call and pass the frozen ValuationConfig derived from them into the
calculators.
"""

from pydantic import Field

from argfolio.models import FxType
from argfolio.schemas.common import CamelModel
from argfolio.services.constants import DEFAULT_TOP_N


class Preferences(CamelModel):
    """User-level valuation and automation preferences."""

    base_fx_for_usd: FxType = Field(default=FxType.MEP, alias="baseFxForUSD")
    stablecoin_fx: FxType = FxType.CRIPTO
    track_cash: bool | None = Field(
        default=None,
        description="Apply BUY/SELL cash legs; null detects per account",
    )
    auto_accrue_wallet_interest: bool = True
    auto_settle_fixed_terms: bool = True
    top_n: int = Field(default=DEFAULT_TOP_N, ge=1, le=50, alias="topN")
