# tests/services/test_ledger.py
"""
Unit tests for the average-cost ledger.

These tests fold hand-built movement lists WITHOUT any store: the ledger
is a pure function of (movements, instruments, resolver).

Test Coverage:
- Weighted average cost on repeated buys
- Realized PnL on partial and full sells
- Oversell clamping
- Cash legs and cash-tracking detection
- Fees, income, transfers and the FX fallback
"""

from decimal import Decimal

import pytest

from argfolio.models import AssetCategory, Currency
from argfolio.schemas.movements import (
    CashMovement,
    DebtMovement,
    FeeMovement,
    IncomeMovement,
    TransferMovement,
)
from argfolio.services.fx.resolver import FxResolver
from argfolio.services.ledger import AverageCostLedger, PositionKey, detect_cash_tracked_accounts
from argfolio.services.valuation_config import ValuationConfig
from tests.conftest import (
    create_cash,
    create_fixed_deposit,
    create_instrument,
    create_interest,
    create_trade,
)

AAPL_KEY = PositionKey.for_instrument("cedear-aapl", "acc-broker")
ARS_CASH_KEY = PositionKey.for_cash(Currency.ARS, "acc-broker")


@pytest.fixture
def ledger() -> AverageCostLedger:
    return AverageCostLedger()


@pytest.fixture
def instruments() -> dict:
    aapl = create_instrument()
    btc = create_instrument(
        "crypto-btc",
        "BTC",
        category=AssetCategory.CRYPTO,
        native_currency=Currency.USD,
    )
    return {aapl.id: aapl, btc.id: btc}


# =============================================================================
# POSITION KEYS
# =============================================================================

class TestPositionKey:
    """Tests for the (asset, account) key."""

    def test_cash_key_format(self):
        """Cash keys are cash:{CURRENCY}."""
        key = PositionKey.for_cash(Currency.USD, "acc-1")

        assert key.asset == "cash:USD"
        assert key.is_cash
        assert key.cash_currency == Currency.USD
        assert key.instrument_id is None

    def test_instrument_key(self):
        assert AAPL_KEY.instrument_id == "cedear-aapl"
        assert not AAPL_KEY.is_cash


# =============================================================================
# AVERAGE COST
# =============================================================================

class TestAverageCost:
    """Tests for weighted average cost accumulation."""

    def test_buys_only_average_is_weighted_mean(self, ledger, instruments, resolver):
        """avg cost equals Σ(q×p)/Σq and cost basis equals Σ(q×p)."""
        movements = [
            create_trade("b1", "BUY", "10", "100", when="2025-01-01T10:00:00"),
            create_trade("b2", "BUY", "5", "130", when="2025-01-02T10:00:00"),
            create_trade("b3", "BUY", "5", "90", when="2025-01-03T10:00:00"),
        ]

        position = ledger.build(movements, instruments, resolver).get(AAPL_KEY)

        assert position.quantity == Decimal("20")
        assert position.cost_native == Decimal("2100")
        assert position.avg_cost_native == Decimal("105")

    def test_buy_fee_is_capitalized(self, ledger, instruments, resolver):
        movements = [create_trade("b1", "BUY", "10", "100", fee="50")]

        position = ledger.build(movements, instruments, resolver).get(AAPL_KEY)

        assert position.cost_native == Decimal("1050")

    def test_movements_are_folded_in_chronological_order(self, ledger, instruments, resolver):
        """Input order does not matter; the sell happens after both buys."""
        movements = [
            create_trade("s1", "SELL", "10", "200", when="2025-01-03T10:00:00"),
            create_trade("b2", "BUY", "10", "300", when="2025-01-02T10:00:00"),
            create_trade("b1", "BUY", "10", "100", when="2025-01-01T10:00:00"),
        ]

        result = ledger.build(movements, instruments, resolver)
        position = result.get(AAPL_KEY)

        assert position.quantity == Decimal("10")
        assert position.realized_native == Decimal("0")
        assert result.oversold_movement_ids == []

    def test_usd_cost_uses_fx_at_trade(self, ledger, instruments, resolver):
        movements = [create_trade("b1", "BUY", "10", "100", fx_at_trade="1000")]

        position = ledger.build(movements, instruments, resolver).get(AAPL_KEY)

        assert position.cost_ars == Decimal("1000")
        assert position.cost_usd == Decimal("1")

    def test_usd_cost_uses_current_ask_without_fx_at_trade(self, ledger, instruments, resolver):
        """A BUY converts at the sell side of the MEP pair (1200)."""
        movements = [create_trade("b1", "BUY", "12", "100")]

        position = ledger.build(movements, instruments, resolver).get(AAPL_KEY)

        assert position.cost_usd == Decimal("1")


# =============================================================================
# REALIZED PNL
# =============================================================================

class TestRealizedPnL:
    """Tests for disposals at the average cost held before the sale."""

    def test_partial_sell(self, ledger, instruments, resolver):
        """BUY 10 @ 100 then SELL 4 @ 150 realizes 200 and leaves 6 @ 600."""
        movements = [
            create_trade("b1", "BUY", "10", "100", when="2025-01-01T10:00:00"),
            create_trade("s1", "SELL", "4", "150", when="2025-01-02T10:00:00"),
        ]

        position = ledger.build(movements, instruments, resolver).get(AAPL_KEY)

        assert position.realized_native == Decimal("200")
        assert position.quantity == Decimal("6")
        assert position.cost_native == Decimal("600")
        assert position.avg_cost_native == Decimal("100")

    def test_sell_fee_reduces_proceeds(self, ledger, instruments, resolver):
        movements = [
            create_trade("b1", "BUY", "10", "100", when="2025-01-01T10:00:00"),
            create_trade("s1", "SELL", "10", "150", fee="30", when="2025-01-02T10:00:00"),
        ]

        position = ledger.build(movements, instruments, resolver).get(AAPL_KEY)

        assert position.realized_native == Decimal("470")

    def test_full_sell_closes_position(self, ledger, instruments, resolver):
        """Closing removes the whole remaining cost, leaving no residue."""
        movements = [
            create_trade("b1", "BUY", "3", "100", when="2025-01-01T10:00:00"),
            create_trade("s1", "SELL", "3", "50", when="2025-01-02T10:00:00"),
        ]

        result = ledger.build(movements, instruments, resolver)
        position = result.get(AAPL_KEY)

        assert position.quantity == Decimal("0")
        assert position.cost_native == Decimal("0")
        assert not position.is_open
        assert position.realized_native == Decimal("-150")
        assert result.open_positions() == []

    def test_realized_totals_include_closed_positions(self, ledger, instruments, resolver):
        movements = [
            create_trade("b1", "BUY", "10", "100", when="2025-01-01T10:00:00", fx_at_trade="1000"),
            create_trade("s1", "SELL", "10", "150", when="2025-01-02T10:00:00", fx_at_trade="1000"),
        ]

        result = ledger.build(movements, instruments, resolver)

        assert result.realized_ars == Decimal("500")
        assert result.realized_usd == Decimal("0.5")


# =============================================================================
# OVERSELL
# =============================================================================

class TestOversell:
    """Tests for selling more than is held."""

    def test_oversell_clamps_and_flags(self, ledger, instruments, resolver):
        movements = [
            create_trade("b1", "BUY", "5", "100", when="2025-01-01T10:00:00"),
            create_trade("s1", "SELL", "8", "200", when="2025-01-02T10:00:00"),
        ]

        result = ledger.build(movements, instruments, resolver)
        position = result.get(AAPL_KEY)

        assert position.quantity == Decimal("0")
        assert result.oversold_movement_ids == ["s1"]
        assert any("s1" in w for w in result.warnings)
        # Proceeds scaled to the 5 units actually held: 5 × 200 - 500
        assert position.realized_native == Decimal("500")

    def test_sell_without_position_never_goes_negative(self, ledger, instruments, resolver):
        movements = [create_trade("s1", "SELL", "1", "100")]

        result = ledger.build(movements, instruments, resolver)

        assert result.get(AAPL_KEY).quantity == Decimal("0")
        assert result.oversold_movement_ids == ["s1"]


# =============================================================================
# CASH
# =============================================================================

class TestCashLegs:
    """Tests for settlement cash legs and cash-tracking detection."""

    def test_untracked_account_has_no_cash_legs(self, ledger, instruments, resolver):
        movements = [create_trade("b1", "BUY", "10", "100")]

        result = ledger.build(movements, instruments, resolver)

        assert result.get(ARS_CASH_KEY) is None
        assert result.cash_tracked_accounts == set()

    def test_deposit_makes_account_tracked(self, ledger, instruments, resolver):
        movements = [
            create_cash("d1", "5000", when="2025-01-01T09:00:00"),
            create_trade("b1", "BUY", "10", "100", fee="10", when="2025-01-02T10:00:00"),
            create_trade("s1", "SELL", "5", "120", when="2025-01-03T10:00:00"),
        ]

        result = ledger.build(movements, instruments, resolver)

        assert result.cash_tracked_accounts == {"acc-broker"}
        # 5000 - 1000 - 10 + 600
        assert result.cash_balance("acc-broker") == Decimal("4590")

    def test_track_cash_preference_forces_cash_legs(self, ledger, instruments, fx_rates):
        resolver = FxResolver(fx_rates, ValuationConfig(track_cash=True))
        movements = [create_trade("b1", "BUY", "10", "100")]

        result = ledger.build(movements, instruments, resolver)

        assert result.get(ARS_CASH_KEY).quantity == Decimal("0")
        assert result.oversold_movement_ids == ["b1"]

    def test_track_cash_false_disables_detection(self, ledger, instruments, fx_rates):
        resolver = FxResolver(fx_rates, ValuationConfig(track_cash=False))
        movements = [
            create_cash("d1", "5000", when="2025-01-01T09:00:00"),
            create_trade("b1", "BUY", "10", "100", when="2025-01-02T10:00:00"),
        ]

        result = ledger.build(movements, instruments, resolver)

        assert result.cash_balance("acc-broker") == Decimal("5000")

    def test_withdraw_reduces_cash(self, ledger, instruments, resolver):
        movements = [
            create_cash("d1", "1000", when="2025-01-01T09:00:00"),
            create_cash("w1", "400", side="WITHDRAW", when="2025-01-02T09:00:00"),
        ]

        result = ledger.build(movements, instruments, resolver)

        assert result.cash_balance("acc-broker") == Decimal("600")

    def test_usd_cash_is_separate_position(self, ledger, instruments, resolver):
        movements = [create_cash("d1", "100", currency=Currency.USD)]

        result = ledger.build(movements, instruments, resolver)

        assert result.cash_balance("acc-broker", Currency.USD) == Decimal("100")
        assert result.cash_balance("acc-broker") == Decimal("0")
        assert result.get(PositionKey.for_cash(Currency.USD, "acc-broker")).category == AssetCategory.USD_CASH

    def test_fixed_deposit_lifecycle_is_not_a_tracking_signal(self):
        movements = [create_fixed_deposit(account_id="acc-bank")]

        assert detect_cash_tracked_accounts(movements) == set()

    def test_fixed_deposit_debits_tracked_cash(self, ledger, instruments, resolver):
        movements = [
            create_cash("d1", "1500000", account_id="acc-bank", when="2024-12-31T10:00:00"),
            create_fixed_deposit(account_id="acc-bank"),
        ]

        result = ledger.build(movements, instruments, resolver)

        assert result.cash_balance("acc-bank") == Decimal("500000")


# =============================================================================
# INCOME, FEES, TRANSFERS
# =============================================================================

class TestIncomeFeesTransfers:
    """Tests for non-trade movement types."""

    def test_interest_adds_quantity_without_cost(self, ledger, instruments, resolver):
        movements = [
            create_cash("d1", "1000", when="2025-01-01T09:00:00"),
            create_interest("i1", "10", when="2025-01-02T00:01:00"),
        ]

        position = ledger.build(movements, instruments, resolver).get(ARS_CASH_KEY)

        assert position.quantity == Decimal("1010")
        assert position.cost_ars == Decimal("1000")

    def test_in_kind_income_credits_instrument_units(self, ledger, instruments, resolver):
        movements = [
            create_trade(
                "b1", "BUY", "1", "60000",
                instrument_id="crypto-btc", currency=Currency.USD, when="2025-01-01T10:00:00",
            ),
            IncomeMovement(
                id="stake-1",
                type="INTEREST",
                datetime_iso="2025-01-05T00:00:00",
                account_id="acc-broker",
                instrument_id="crypto-btc",
                quantity=Decimal("0.01"),
                total_amount=Decimal("600"),
                trade_currency=Currency.USD,
            ),
        ]

        result = ledger.build(movements, instruments, resolver)
        position = result.get(PositionKey.for_instrument("crypto-btc", "acc-broker"))

        assert position.quantity == Decimal("1.01")
        assert position.cost_native == Decimal("60000")
        assert result.get(PositionKey.for_cash(Currency.USD, "acc-broker")) is None

    def test_instrument_fee_is_capitalized(self, ledger, instruments, resolver):
        movements = [
            create_trade("b1", "BUY", "10", "100", when="2025-01-01T10:00:00"),
            FeeMovement(
                id="f1",
                type="FEE",
                datetime_iso="2025-01-02T10:00:00",
                account_id="acc-broker",
                instrument_id="cedear-aapl",
                fee_amount=Decimal("20"),
            ),
        ]

        position = ledger.build(movements, instruments, resolver).get(AAPL_KEY)

        assert position.quantity == Decimal("10")
        assert position.cost_native == Decimal("1020")

    def test_cash_fee_only_reduces_cash(self, ledger, instruments, resolver):
        movements = [
            create_cash("d1", "1000", when="2025-01-01T09:00:00"),
            FeeMovement(
                id="f1",
                type="FEE",
                datetime_iso="2025-01-02T10:00:00",
                account_id="acc-broker",
                fee_amount=Decimal("15"),
            ),
        ]

        position = ledger.build(movements, instruments, resolver).get(ARS_CASH_KEY)

        assert position.quantity == Decimal("985")
        assert position.cost_ars == Decimal("985")
        assert position.realized_ars == Decimal("0")
        assert position.realized_usd == Decimal("0")

    def test_transfer_moves_cost_without_realizing(self, ledger, instruments, resolver):
        movements = [
            create_trade("b1", "BUY", "10", "100", when="2025-01-01T10:00:00"),
            TransferMovement(
                id="t-out",
                type="TRANSFER_OUT",
                datetime_iso="2025-01-02T10:00:00",
                account_id="acc-broker",
                instrument_id="cedear-aapl",
                quantity=Decimal("4"),
                to_account_id="acc-other",
            ),
            TransferMovement(
                id="t-in",
                type="TRANSFER_IN",
                datetime_iso="2025-01-02T10:00:01",
                account_id="acc-other",
                instrument_id="cedear-aapl",
                quantity=Decimal("4"),
                total_amount=Decimal("400"),
            ),
        ]

        result = ledger.build(movements, instruments, resolver)
        source = result.get(AAPL_KEY)
        target = result.get(PositionKey.for_instrument("cedear-aapl", "acc-other"))

        assert source.quantity == Decimal("6")
        assert source.cost_native == Decimal("600")
        assert source.realized_native == Decimal("0")
        assert target.quantity == Decimal("4")
        assert target.cost_native == Decimal("400")

    def test_transfer_in_without_amount_warns(self, ledger, instruments, resolver):
        movements = [
            TransferMovement(
                id="t-in",
                type="TRANSFER_IN",
                datetime_iso="2025-01-02T10:00:00",
                account_id="acc-broker",
                instrument_id="cedear-aapl",
                quantity=Decimal("2"),
            ),
        ]

        result = ledger.build(movements, instruments, resolver)

        assert result.get(AAPL_KEY).cost_native == Decimal("0")
        assert any("t-in" in w for w in result.warnings)

    def test_debt_movements_are_ignored(self, ledger, instruments, resolver):
        movements = [
            DebtMovement(
                id="debt-1",
                type="DEBT_ADD",
                datetime_iso="2025-01-01T10:00:00",
                account_id="acc-broker",
                debt_id="loan",
                total_amount=Decimal("1000"),
            ),
        ]

        result = ledger.build(movements, instruments, resolver)

        assert result.positions == {}

    def test_unknown_instrument_is_skipped_with_warning(self, ledger, instruments, resolver):
        movements = [create_trade("b1", "BUY", "1", "100", instrument_id="ghost")]

        result = ledger.build(movements, instruments, resolver)

        assert result.positions == {}
        assert any("ghost" in w for w in result.warnings)


# =============================================================================
# FX FALLBACK
# =============================================================================

class TestFxFallback:
    """Tests for conversion when no rate exists at all."""

    def test_missing_rates_convert_at_one_and_flag(self, ledger, instruments):
        resolver = FxResolver(None, ValuationConfig())
        movements = [create_trade("b1", "BUY", "10", "100")]

        result = ledger.build(movements, instruments, resolver)
        position = result.get(AAPL_KEY)

        assert position.cost_usd == Decimal("1000")
        assert result.fx_fallback_movement_ids == ["b1"]
        assert any("1.0" in w for w in result.warnings)

    def test_cash_movement_with_instrument_moves_units(self, ledger, instruments, resolver):
        movements = [
            CashMovement(
                id="d-btc",
                type="DEPOSIT",
                datetime_iso="2025-01-01T10:00:00",
                account_id="acc-broker",
                instrument_id="crypto-btc",
                quantity=Decimal("0.5"),
                total_amount=Decimal("30000"),
                trade_currency=Currency.USD,
            ),
        ]

        result = ledger.build(movements, instruments, resolver)
        position = result.get(PositionKey.for_instrument("crypto-btc", "acc-broker"))

        assert position.quantity == Decimal("0.5")
        assert position.cost_usd == Decimal("30000")
        assert position.cost_ars == Decimal("30000") * Decimal("1240")
