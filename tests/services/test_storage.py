# tests/services/test_storage.py
"""
Tests for the document stores and the repository on top of them.

Both stores are run through the same cases; upsert-by-id is the only
consistency guarantee the engine relies on.
"""

from datetime import date
from decimal import Decimal

import pytest

from argfolio.models import FxType
from argfolio.schemas.debts import Debt
from argfolio.schemas.movements import CashMovement, TradeMovement
from argfolio.schemas.preferences import Preferences
from argfolio.schemas.prices import ManualPrice
from argfolio.services.exceptions import (
    AccountNotFoundError,
    DebtNotFoundError,
    MovementNotFoundError,
)
from argfolio.services.storage.repository import PortfolioRepository
from tests.conftest import create_account, create_fixed_deposit, create_trade


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    """Each test runs once per store backend."""
    return request.getfixturevalue("store" if request.param == "memory" else "sql_store")


# =============================================================================
# DOCUMENT STORE
# =============================================================================

class TestDocumentStore:
    """Tests for the raw store contract."""

    def test_put_get(self, any_store):
        any_store.put("things", {"id": "a", "value": 1})

        assert any_store.get("things", "a") == {"id": "a", "value": 1}
        assert any_store.get("things", "missing") is None

    def test_put_is_upsert(self, any_store):
        any_store.put("things", {"id": "a", "value": 1})
        any_store.put("things", {"id": "a", "value": 2})

        assert any_store.list("things") == [{"id": "a", "value": 2}]

    def test_collections_are_separate(self, any_store):
        any_store.put("one", {"id": "a"})
        any_store.put("two", {"id": "a", "other": True})

        assert any_store.get("one", "a") == {"id": "a"}
        assert len(any_store.list("two")) == 1

    def test_put_many(self, any_store):
        count = any_store.put_many("things", [{"id": "a"}, {"id": "b"}, {"id": "a", "v": 1}])

        assert count == 3
        assert sorted(r["id"] for r in any_store.list("things")) == ["a", "b"]
        assert any_store.get("things", "a") == {"id": "a", "v": 1}

    def test_delete(self, any_store):
        any_store.put("things", {"id": "a"})

        assert any_store.delete("things", "a") is True
        assert any_store.delete("things", "a") is False
        assert any_store.list("things") == []

    def test_memory_store_returns_copies(self, store):
        record = {"id": "a", "nested": {"x": 1}}
        store.put("things", record)
        record["nested"]["x"] = 2

        fetched = store.get("things", "a")
        fetched["nested"]["x"] = 3

        assert store.get("things", "a")["nested"]["x"] == 1


# =============================================================================
# REPOSITORY
# =============================================================================

class TestPortfolioRepository:
    """Tests for typed access over a store."""

    @pytest.fixture
    def repo(self, any_store) -> PortfolioRepository:
        return PortfolioRepository(any_store)

    def test_account_round_trip(self, repo):
        account = create_account("acc-wallet", tna="36.5", last_accrued_date=date(2025, 3, 1))
        repo.put_account(account)

        assert repo.require_account("acc-wallet") == account
        assert repo.get_account("nope") is None

    def test_require_missing_account(self, repo):
        with pytest.raises(AccountNotFoundError):
            repo.require_account("nope")

    def test_movement_variants_survive_storage(self, repo):
        repo.put_movements([
            create_trade("b1", "BUY", "1.5", "100.25", fee="1"),
            create_fixed_deposit(),
        ])

        trade = repo.require_movement("b1")
        deposit = repo.require_movement("pf-1")

        assert isinstance(trade, TradeMovement)
        assert trade.quantity == Decimal("1.5")
        assert trade.fee_amount == Decimal("1")
        assert isinstance(deposit, CashMovement)
        assert deposit.fixed_deposit.principal_ars == Decimal("1000000")

    def test_same_movement_id_is_replaced(self, repo):
        repo.put_movement(create_trade("b1", "BUY", "1", "100"))
        repo.put_movement(create_trade("b1", "BUY", "2", "100"))

        assert len(repo.list_movements()) == 1
        assert repo.require_movement("b1").quantity == Decimal("2")

    def test_delete_movement(self, repo):
        repo.put_movement(create_trade("b1", "BUY", "1", "100"))
        repo.delete_movement("b1")

        with pytest.raises(MovementNotFoundError):
            repo.require_movement("b1")

    def test_manual_prices(self, repo):
        repo.put_manual_price(ManualPrice(id="fci-x", price=Decimal("12.5")))

        assert [p.id for p in repo.list_manual_prices()] == ["fci-x"]
        assert repo.delete_manual_price("fci-x") is True
        assert repo.delete_manual_price("fci-x") is False

    def test_debts(self, repo):
        repo.put_debt(Debt(id="loan", name="Préstamo"))

        assert repo.require_debt("loan").name == "Préstamo"
        with pytest.raises(DebtNotFoundError):
            repo.require_debt("other")

    def test_preferences_default_and_update(self, repo):
        assert repo.get_preferences() == Preferences()

        repo.put_preferences(Preferences(base_fx_for_usd=FxType.CCL, track_cash=True))

        preferences = repo.get_preferences()
        assert preferences.base_fx_for_usd == FxType.CCL
        assert preferences.track_cash is True

    def test_fx_cache(self, repo, fx_rates):
        assert repo.get_cached_fx_rates() is None

        repo.put_cached_fx_rates(fx_rates)

        assert repo.get_cached_fx_rates() == fx_rates
