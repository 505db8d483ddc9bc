# tests/services/test_yield_accrual.py
"""
Tests for daily yield accrual.

Test Coverage:
- Engine: day range, compounding, deterministic ids, skipped days
- Rate math: daily rate, TEA, projections
- Service: persistence, lastAccruedDate update, idempotency, guard
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from argfolio.services.yield_accrual import (
    YieldAccrualService,
    compute_tea,
    compute_yield_metrics,
    daily_rate,
    generate_accrual_movements,
    yield_movement_id,
)
from tests.conftest import create_account, create_cash

TODAY = date(2025, 3, 5)


@pytest.fixture
def wallet():
    return create_account("acc-wallet", "Mercado Pago", tna="36.5", last_accrued_date=TODAY - timedelta(days=4))


@pytest.fixture
def service(repository, accrual_guard) -> YieldAccrualService:
    return YieldAccrualService(repository, accrual_guard)


def seed_wallet(repository, account, amount: str = "100000") -> None:
    repository.put_account(account)
    repository.put_movement(create_cash("dep-1", amount, when="2025-02-01T10:00:00", account_id=account.id))


# =============================================================================
# RATE MATH
# =============================================================================

class TestRateMath:
    """Tests for TNA conversions."""

    def test_daily_rate(self):
        assert daily_rate(Decimal("36.5")) == Decimal("0.001")

    def test_tea_compounds_daily(self):
        tea = compute_tea(Decimal("36.5"))

        assert abs(tea - Decimal("0.440251")) < Decimal("0.00001")

    def test_metrics_projection(self):
        metrics = compute_yield_metrics(Decimal("100000"), Decimal("36.5"))

        assert metrics.interest_tomorrow == Decimal("100")
        assert metrics.projected_30d > Decimal("3000")
        assert abs(metrics.projected_1y - Decimal("44025.1")) < Decimal("1")

    def test_metrics_on_negative_balance_project_zero(self):
        metrics = compute_yield_metrics(Decimal("-500"), Decimal("36.5"))

        assert metrics.balance_ars == Decimal("-500")
        assert metrics.interest_tomorrow == Decimal("0")
        assert metrics.projected_1y == Decimal("0")


# =============================================================================
# ENGINE
# =============================================================================

class TestGenerateAccrualMovements:
    """Tests for the pure catch-up function."""

    def test_three_missing_days_compound(self, wallet):
        """Days after lastAccruedDate up to yesterday, each on the grown balance."""
        result = generate_accrual_movements(wallet, Decimal("100000"), TODAY)

        amounts = [m.total_amount for m in result.movements]
        assert amounts == [Decimal("100"), Decimal("100.1"), Decimal("100.2001")]
        assert result.final_balance_ars == Decimal("100300.3001")
        assert result.total_interest == Decimal("300.3001")

    def test_today_is_never_accrued(self, wallet):
        result = generate_accrual_movements(wallet, Decimal("100000"), TODAY)

        assert result.movements[-1].on_date == TODAY - timedelta(days=1)
        assert result.last_accrued_date == TODAY - timedelta(days=1)

    def test_ids_and_timestamps_are_deterministic(self, wallet):
        result = generate_accrual_movements(wallet, Decimal("100000"), TODAY)
        first = result.movements[0]

        assert first.id == "yield-acc-wallet-2025-03-02"
        assert first.id == yield_movement_id("acc-wallet", date(2025, 3, 2))
        assert first.datetime_iso == "2025-03-02T00:01:00"
        assert first.type == "INTEREST"

    def test_same_inputs_same_output(self, wallet):
        first = generate_accrual_movements(wallet, Decimal("100000"), TODAY)
        second = generate_accrual_movements(wallet, Decimal("100000"), TODAY)

        assert [m.id for m in first.movements] == [m.id for m in second.movements]
        assert [m.total_amount for m in first.movements] == [m.total_amount for m in second.movements]

    def test_non_positive_balance_skips_days(self, wallet):
        result = generate_accrual_movements(wallet, Decimal("0"), TODAY)

        assert result.movements == []
        assert result.skipped_days == 3
        assert result.last_accrued_date == wallet.cash_yield.last_accrued_date

    def test_caught_up_account_emits_nothing(self):
        account = create_account("acc-wallet", tna="36.5", last_accrued_date=TODAY - timedelta(days=1))

        result = generate_accrual_movements(account, Decimal("100000"), TODAY)

        assert result.movements == []

    def test_missing_start_date_emits_nothing(self):
        account = create_account("acc-wallet", tna="36.5")

        result = generate_accrual_movements(account, Decimal("100000"), TODAY)

        assert result.movements == []
        assert result.last_accrued_date is None

    def test_disabled_yield_emits_nothing(self):
        account = create_account("acc-broker")

        result = generate_accrual_movements(account, Decimal("100000"), TODAY)

        assert result.movements == []


# =============================================================================
# SERVICE
# =============================================================================

class TestYieldAccrualService:
    """Tests for the persisted accrual run."""

    def test_run_stores_movements_and_advances_pointer(self, service, repository, wallet):
        seed_wallet(repository, wallet)

        report = service.run(today=TODAY)

        assert report.movements_created == 3
        assert report.accounts[0].status == "accrued"
        stored = [m for m in repository.list_movements() if m.id.startswith("yield-")]
        assert len(stored) == 3
        account = repository.require_account("acc-wallet")
        assert account.cash_yield.last_accrued_date == date(2025, 3, 4)

    def test_second_run_same_day_is_guarded(self, service, repository, wallet):
        seed_wallet(repository, wallet)
        service.run(today=TODAY)

        report = service.run(today=TODAY)

        assert report.accounts[0].status == "already_ran"
        assert report.movements_created == 0

    def test_forced_rerun_is_up_to_date(self, service, repository, wallet):
        seed_wallet(repository, wallet)
        service.run(today=TODAY)

        report = service.run(today=TODAY, force=True)

        assert report.accounts[0].status == "up_to_date"
        assert len(repository.list_movements()) == 4

    def test_replaying_a_run_upserts_same_ids(self, repository, wallet, accrual_guard):
        """A rerun from the same starting point overwrites instead of duplicating."""
        seed_wallet(repository, wallet)
        YieldAccrualService(repository, accrual_guard).run(today=TODAY)
        ids_first = sorted(m.id for m in repository.list_movements())

        repository.put_account(wallet)
        accrual_guard.reset()
        YieldAccrualService(repository, accrual_guard).run(today=TODAY)

        assert sorted(m.id for m in repository.list_movements()) == ids_first

    def test_balance_comes_from_ledger(self, service, repository, wallet):
        seed_wallet(repository, wallet)
        repository.put_movement(
            create_cash("wd-1", "50000", side="WITHDRAW", when="2025-02-10T10:00:00", account_id="acc-wallet")
        )

        report = service.run(today=TODAY)

        first = repository.get_movement("yield-acc-wallet-2025-03-02")
        assert first.total_amount == Decimal("50")
        assert report.accounts[0].interest_ars > Decimal("150")

    def test_no_balance(self, service, repository, wallet):
        repository.put_account(wallet)

        report = service.run(today=TODAY)

        assert report.accounts[0].status == "no_balance"
        assert repository.list_movements() == []

    def test_no_start_date(self, service, repository):
        account = create_account("acc-wallet", tna="36.5")
        seed_wallet(repository, account)

        report = service.run(today=TODAY)

        assert report.accounts[0].status == "no_start"
        assert len(repository.list_movements()) == 1

    def test_accounts_without_yield_are_not_reported(self, service, repository):
        repository.put_account(create_account("acc-broker"))

        report = service.run(today=TODAY)

        assert report.accounts == []

    def test_concurrent_run_is_skipped(self, service, repository, wallet, accrual_guard):
        seed_wallet(repository, wallet)
        lock = accrual_guard.lock_for("acc-wallet")
        lock.acquire()
        try:
            report = service.run(today=TODAY)
        finally:
            lock.release()

        assert report.accounts[0].status == "busy"
        assert len(repository.list_movements()) == 1

    def test_get_metrics(self, service, repository, wallet):
        seed_wallet(repository, wallet)

        metrics = service.get_metrics()

        assert set(metrics) == {"acc-wallet"}
        assert metrics["acc-wallet"].balance_ars == Decimal("100000")
        assert metrics["acc-wallet"].interest_tomorrow == Decimal("100")
