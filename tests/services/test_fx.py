# tests/services/test_fx.py
"""
Tests for FX resolution and the rate service.

Test Coverage:
- Category to rate family mapping and preferences
- Bid/ask choice for trade-time conversion
- Live fetch, cache write and last-known-good fallback
"""

from decimal import Decimal

import pytest

from argfolio.models import AssetCategory, Currency, FxType
from argfolio.schemas.fx import FxPair
from argfolio.services.exceptions import FXRatesUnavailableError
from argfolio.services.fx.rate_service import FxRateService
from argfolio.services.fx.resolver import FxResolver, category_for_cash
from argfolio.services.valuation_config import ValuationConfig
from tests.conftest import create_fx_rates, create_trade


# =============================================================================
# RESOLVER
# =============================================================================

class TestFxResolver:
    """Tests for picking a rate."""

    @pytest.mark.parametrize("category,expected", [
        (AssetCategory.CEDEAR, Decimal("1200")),
        (AssetCategory.ARS_CASH, Decimal("1200")),
        (AssetCategory.FCI, Decimal("1200")),
        (AssetCategory.CRYPTO, Decimal("1240")),
        (AssetCategory.STABLE, Decimal("1240")),
        (AssetCategory.PF, Decimal("1050")),
    ])
    def test_rate_now_by_category(self, resolver, category, expected):
        assert resolver.rate_now(category) == expected

    def test_base_fx_preference(self, fx_rates):
        resolver = FxResolver(fx_rates, ValuationConfig(base_fx_for_usd=FxType.CCL))

        assert resolver.rate_now(AssetCategory.CEDEAR) == Decimal("1210")

    def test_stablecoin_preference(self, fx_rates):
        resolver = FxResolver(fx_rates, ValuationConfig(stablecoin_fx=FxType.MEP))

        assert resolver.rate_now(AssetCategory.STABLE) == Decimal("1200")
        assert resolver.rate_now(AssetCategory.CRYPTO) == Decimal("1240")

    def test_buy_uses_ask_and_sell_uses_bid(self, resolver):
        buy = create_trade("b1", "BUY", "1", "100")
        sell = create_trade("s1", "SELL", "1", "100")

        assert resolver.rate_at_trade(buy, AssetCategory.CEDEAR) == Decimal("1200")
        assert resolver.rate_at_trade(sell, AssetCategory.CEDEAR) == Decimal("1180")

    def test_stored_fx_at_trade_wins(self, resolver):
        buy = create_trade("b1", "BUY", "1", "100", fx_at_trade="950")

        assert resolver.rate_at_trade(buy, AssetCategory.CEDEAR) == Decimal("950")

    def test_missing_side_falls_back_to_other_side(self):
        rates = create_fx_rates()
        rates.mep = FxPair(buy=Decimal("1180"))
        resolver = FxResolver(rates, ValuationConfig())

        buy = create_trade("b1", "BUY", "1", "100")
        assert resolver.rate_at_trade(buy, AssetCategory.CEDEAR) == Decimal("1180")
        assert resolver.rate_now(AssetCategory.CEDEAR) == Decimal("1180")

    def test_no_rates_returns_none(self):
        resolver = FxResolver(None, ValuationConfig())

        assert resolver.rate_now(AssetCategory.CEDEAR) is None
        assert resolver.rate_at_trade(create_trade("b1", "BUY", "1", "1"), AssetCategory.CEDEAR) is None

    @pytest.mark.parametrize("currency,category", [
        (Currency.ARS, AssetCategory.ARS_CASH),
        (Currency.USD, AssetCategory.USD_CASH),
        (Currency.USDT, AssetCategory.STABLE),
        (Currency.BTC, AssetCategory.CRYPTO),
    ])
    def test_category_for_cash(self, currency, category):
        assert category_for_cash(currency) == category


class TestFxPair:
    """Tests for pair helpers."""

    def test_mid(self):
        assert FxPair(buy=Decimal("100"), sell=Decimal("110")).mid == Decimal("105")

    def test_empty_pair(self):
        pair = FxPair()

        assert pair.mid is None
        assert pair.valuation_rate is None


# =============================================================================
# RATE SERVICE
# =============================================================================

class TestFxRateService:
    """Tests for live rates with cached fallback."""

    def test_live_fetch_is_cached(self, fx_source, repository):
        service = FxRateService(fx_source, repository)

        result = service.get_rates()

        assert not result.is_fallback
        assert result.warnings == []
        assert repository.get_cached_fx_rates() == result.rates

    def test_outage_falls_back_to_cache(self, fx_source, repository):
        service = FxRateService(fx_source, repository)
        service.get_rates()
        fx_source.fail = True

        result = service.get_rates()

        assert result.is_fallback
        assert result.rates.mep.sell == Decimal("1200")
        assert "cached" in result.warnings[0]

    def test_outage_without_cache(self, fx_source, repository):
        fx_source.fail = True

        result = FxRateService(fx_source, repository).get_rates()

        assert result.rates is None
        assert not result.is_fallback
        assert len(result.warnings) == 1

    def test_require_rates_raises_without_any_rates(self, fx_source, repository):
        fx_source.fail = True

        with pytest.raises(FXRatesUnavailableError):
            FxRateService(fx_source, repository).require_rates()

    def test_require_rates_accepts_fallback(self, fx_source, repository):
        repository.put_cached_fx_rates(create_fx_rates())
        fx_source.fail = True

        result = FxRateService(fx_source, repository).require_rates()

        assert result.is_fallback
