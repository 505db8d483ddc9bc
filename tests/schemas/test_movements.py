# tests/schemas/test_movements.py
"""
Tests for movement schemas.

Test Coverage:
- Discriminated union dispatch on `type`
- camelCase wire format
- Per-variant validation rules
- Deterministic ordering
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from argfolio.schemas.movements import (
    CashMovement,
    DebtMovement,
    FeeMovement,
    IncomeMovement,
    TradeMovement,
    TransferMovement,
    parse_movement,
    sort_movements,
)
from tests.conftest import create_fixed_deposit, create_trade


def base(**overrides) -> dict:
    data = {"id": "m1", "datetimeISO": "2025-03-01T14:30:00", "accountId": "acc-1"}
    data.update(overrides)
    return data


# =============================================================================
# DISPATCH
# =============================================================================

class TestParseMovement:
    """Tests for the discriminated union."""

    @pytest.mark.parametrize("payload,expected_type", [
        (base(type="BUY", instrumentId="i", quantity="1", unitPrice="10"), TradeMovement),
        (base(type="SELL", instrumentId="i", quantity="1", totalAmount="10"), TradeMovement),
        (base(type="DEPOSIT", totalAmount="100"), CashMovement),
        (base(type="WITHDRAW", totalAmount="100"), CashMovement),
        (base(type="INTEREST", totalAmount="1"), IncomeMovement),
        (base(type="DIVIDEND", totalAmount="1", tradeCurrency="USD"), IncomeMovement),
        (base(type="FEE", feeAmount="5"), FeeMovement),
        (base(type="TRANSFER_OUT", totalAmount="5", toAccountId="acc-2"), TransferMovement),
        (base(type="DEBT_ADD", debtId="loan", totalAmount="500"), DebtMovement),
    ])
    def test_variant_by_type(self, payload, expected_type):
        assert isinstance(parse_movement(payload), expected_type)

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            parse_movement(base(type="SWAP", totalAmount="1"))

    def test_snake_case_is_accepted(self):
        movement = parse_movement({
            "id": "m1",
            "type": "DEPOSIT",
            "datetime_iso": "2025-03-01",
            "account_id": "acc-1",
            "total_amount": "100",
        })

        assert movement.account_id == "acc-1"

    def test_to_document_is_camel_case_without_nulls(self):
        document = create_trade("b1", "BUY", "2", "10.5").to_document()

        assert document == {
            "id": "b1",
            "type": "BUY",
            "datetimeISO": "2025-01-10T12:00:00",
            "accountId": "acc-broker",
            "instrumentId": "cedear-aapl",
            "quantity": "2",
            "unitPrice": "10.5",
            "tradeCurrency": "ARS",
        }

    def test_fixed_deposit_terms_alias(self):
        document = create_fixed_deposit().to_document()

        assert document["fixedDeposit"]["principalARS"] == "1000000"
        assert document["fixedDeposit"]["termDays"] == 30


# =============================================================================
# VALIDATION
# =============================================================================

class TestValidation:
    """Tests for per-variant rules."""

    def test_trade_needs_price_or_total(self):
        with pytest.raises(ValidationError):
            parse_movement(base(type="BUY", instrumentId="i", quantity="1"))

    def test_trade_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            parse_movement(base(type="BUY", instrumentId="i", quantity="0", unitPrice="1"))

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            parse_movement(base(type="DEPOSIT", totalAmount="-1"))

    @pytest.mark.parametrize("value", ["", "yesterday", "01/03/2025"])
    def test_datetime_needs_iso_date(self, value):
        with pytest.raises(ValidationError):
            parse_movement(base(type="DEPOSIT", totalAmount="1", datetimeISO=value))

    def test_fixed_deposit_only_on_deposit(self):
        terms = {"bank": "Galicia", "principalARS": "1000", "tna": "30"}

        with pytest.raises(ValidationError):
            parse_movement(base(type="WITHDRAW", totalAmount="1000", fixedDeposit=terms))

    def test_cannot_open_and_settle(self):
        terms = {"bank": "Galicia", "principalARS": "1000", "tna": "30"}

        with pytest.raises(ValidationError):
            parse_movement(base(type="DEPOSIT", totalAmount="1000", fixedDeposit=terms, fixedDepositId="pf-0"))

    def test_instrument_transfer_needs_quantity(self):
        with pytest.raises(ValidationError):
            parse_movement(base(type="TRANSFER_IN", instrumentId="i"))

    def test_cash_transfer_needs_amount(self):
        with pytest.raises(ValidationError):
            parse_movement(base(type="TRANSFER_IN"))


# =============================================================================
# DERIVED FIELDS
# =============================================================================

class TestDerivedFields:
    """Tests for properties used by the engine."""

    def test_notional_prefers_unit_price(self):
        trade = parse_movement(base(type="BUY", instrumentId="i", quantity="3", unitPrice="10", totalAmount="99"))

        assert trade.notional == Decimal("30")

    def test_notional_from_total(self):
        trade = parse_movement(base(type="BUY", instrumentId="i", quantity="3", totalAmount="99"))

        assert trade.notional == Decimal("99")

    def test_on_date(self):
        movement = parse_movement(base(type="DEPOSIT", totalAmount="1"))

        assert movement.on_date.isoformat() == "2025-03-01"

    def test_sort_breaks_ties_by_id(self):
        late = create_trade("b", "BUY", "1", "1", when="2025-01-02T00:00:00")
        tie_b = create_trade("z", "BUY", "1", "1", when="2025-01-01T00:01:00")
        tie_a = create_trade("a", "BUY", "1", "1", when="2025-01-01T00:01:00")

        assert [m.id for m in sort_movements([late, tie_b, tie_a])] == ["a", "z", "b"]
