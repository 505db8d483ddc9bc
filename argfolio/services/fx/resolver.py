# argfolio/services/fx/resolver.py
"""
FX Resolver - picks the ARS/USD rate for a valuation or a movement.

Conventions:
- Rates are ARS per 1 USD.
- "Now" (valuation): the family's sell side, buy side if sell is missing.
- "At trade": the movement's stored `fxAtTrade` when present; otherwise the
  current rate of the family matching the category, using the ask (sell)
  for buy-side movements and the bid (buy) for sell-side movements.
- Category -> family: CRYPTO -> CRIPTO, STABLE -> stablecoin preference,
  PF -> OFICIAL, everything else -> base USD preference (MEP by default).

Missing rates are returned as None. The resolver never substitutes 1 or 0;
callers decide (the ledger documents its 1.0 fallback).

Usage:
    resolver = FxResolver(rates, ValuationConfig())
    resolver.rate_now(AssetCategory.CEDEAR)          # MEP sell
    resolver.rate_at_trade(movement, AssetCategory.CRYPTO)
"""

from decimal import Decimal

from argfolio.models import AssetCategory, Currency, FxType, MovementType
from argfolio.schemas.fx import FxRates
from argfolio.services.valuation_config import ValuationConfig

# Movements that add to a position are priced at the ask
BUY_SIDE_TYPES = frozenset({
    MovementType.BUY,
    MovementType.DEPOSIT,
    MovementType.TRANSFER_IN,
    MovementType.INTEREST,
    MovementType.DIVIDEND,
    MovementType.FEE,
})

USD_LIKE_CURRENCIES = frozenset({Currency.USD, Currency.USDT, Currency.USDC})


def category_for_cash(currency: Currency) -> AssetCategory:
    """Category of a cash balance held in `currency`."""
    if currency == Currency.ARS:
        return AssetCategory.ARS_CASH
    if currency == Currency.USD:
        return AssetCategory.USD_CASH
    if currency in USD_LIKE_CURRENCIES:
        return AssetCategory.STABLE
    return AssetCategory.CRYPTO


class FxResolver:
    """
    Resolves rates from one FxRates snapshot under one ValuationConfig.

    Attributes:
        rates: Current rates, or None when neither live nor cached rates exist
        config: User preferences for rate families
    """

    def __init__(self, rates: FxRates | None, config: ValuationConfig) -> None:
        self.rates = rates
        self.config = config

    def fx_type_for(self, category: AssetCategory) -> FxType:
        if category == AssetCategory.CRYPTO:
            return FxType.CRIPTO
        if category == AssetCategory.STABLE:
            return self.config.stablecoin_fx
        if category == AssetCategory.PF:
            return FxType.OFICIAL
        return self.config.base_fx_for_usd

    def rate(self, fx_type: FxType) -> Decimal | None:
        """Valuation rate of a family (sell, falling back to buy)."""
        if self.rates is None:
            return None
        return self.rates.pair(fx_type).valuation_rate

    def rate_now(self, category: AssetCategory) -> Decimal | None:
        """Rate to value a holding of `category` today."""
        return self.rate(self.fx_type_for(category))

    def rate_at_trade(self, movement, category: AssetCategory) -> Decimal | None:
        """
        Rate to convert a movement's amounts between ARS and USD.

        Args:
            movement: Any movement variant
            category: Category of the position the movement affects

        Returns:
            fxAtTrade if stored, else the side-appropriate current rate,
            else None
        """
        stored = getattr(movement, "fx_at_trade", None)
        if stored is not None:
            return stored

        if self.rates is None:
            return None

        pair = self.rates.pair(self.fx_type_for(category))
        if movement.movement_type in BUY_SIDE_TYPES:
            side = pair.ask
        else:
            side = pair.bid
        return side if side is not None else pair.valuation_rate
