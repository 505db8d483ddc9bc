# argfolio/services/valuation_config.py
"""
Immutable configuration passed into every valuation and ledger call.

Built from the stored Preferences so the calculators stay pure functions
of (movements, accounts, instruments, rates, config).
"""

from dataclasses import dataclass

from argfolio.models import FxType
from argfolio.schemas.preferences import Preferences
from argfolio.services.constants import DEFAULT_TOP_N


@dataclass(frozen=True)
class ValuationConfig:
    """
    Attributes:
        base_fx_for_usd: Rate family for CEDEARs, cash and everything not crypto
        stablecoin_fx: Rate family for stablecoins
        track_cash: Apply BUY/SELL cash legs (None = detect per account)
        top_n: Number of positions in the "top positions" list
    """

    base_fx_for_usd: FxType = FxType.MEP
    stablecoin_fx: FxType = FxType.CRIPTO
    track_cash: bool | None = None
    top_n: int = DEFAULT_TOP_N

    @classmethod
    def from_preferences(cls, preferences: Preferences) -> "ValuationConfig":
        return cls(
            base_fx_for_usd=preferences.base_fx_for_usd,
            stablecoin_fx=preferences.stablecoin_fx,
            track_cash=preferences.track_cash,
            top_n=preferences.top_n,
        )
