# argfolio/services/yield_accrual/service.py
"""
Yield Accrual Service - runs the engine and persists its output.

Guarding:
- Each account is processed under its own non-blocking lock; a second
  caller arriving while a run is in progress skips that account instead
  of waiting and re-emitting the same movements.
- After a successful run an account is marked as done for the local
  date, so repeated calls on the same day return immediately.
- Even without the guard, storing yield-{accountId}-{date} ids twice is
  an upsert, never a duplicate.

Balances come from the average-cost ledger over all stored movements,
converted with the cached FX rates only: accrual works in ARS and never
waits on a live rate fetch.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from argfolio.models import Currency
from argfolio.schemas.accounts import Account
from argfolio.services.fx.resolver import FxResolver
from argfolio.services.ledger.average_cost import AverageCostLedger
from argfolio.services.storage.repository import PortfolioRepository
from argfolio.services.valuation_config import ValuationConfig
from argfolio.services.yield_accrual.engine import (
    YieldMetrics,
    compute_yield_metrics,
    generate_accrual_movements,
)
from argfolio.utils.date_utils import today_local

logger = logging.getLogger(__name__)


# =============================================================================
# GUARD
# =============================================================================

class AccrualGuard:
    """
    Process-wide debounce for accrual runs.

    Thread-safe: the lock table itself is protected by `_mutex`.
    """

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._ran_on: dict[str, date] = {}

    def lock_for(self, account_id: str) -> threading.Lock:
        with self._mutex:
            lock = self._locks.get(account_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[account_id] = lock
            return lock

    def ran_today(self, account_id: str, today: date) -> bool:
        with self._mutex:
            return self._ran_on.get(account_id) == today

    def mark_ran(self, account_id: str, today: date) -> None:
        with self._mutex:
            self._ran_on[account_id] = today

    def reset(self) -> None:
        with self._mutex:
            self._ran_on.clear()


accrual_guard = AccrualGuard()


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass
class AccountAccrual:
    """
    What happened to one account during a run.

    status values:
        accrued      - movements were stored
        up_to_date   - nothing to catch up
        no_start     - yield enabled without lastAccruedDate
        no_balance   - no positive ARS cash to accrue on
        already_ran  - guarded: already processed today
        busy         - guarded: another run holds the account
    """

    account_id: str
    status: str
    created: int = 0
    interest_ars: Decimal = Decimal("0")
    last_accrued_date: date | None = None


@dataclass
class AccrualRunReport:
    """Outcome of YieldAccrualService.run()."""

    run_date: date
    accounts: list[AccountAccrual] = field(default_factory=list)

    @property
    def movements_created(self) -> int:
        return sum(a.created for a in self.accounts)


# =============================================================================
# SERVICE
# =============================================================================

class YieldAccrualService:
    """
    Catches up daily interest for every remunerated account.

    Attributes:
        repository: Storage facade
        guard: Debounce state shared by every service instance
    """

    def __init__(self, repository: PortfolioRepository, guard: AccrualGuard | None = None) -> None:
        self.repository = repository
        self.guard = guard or accrual_guard
        self._ledger = AverageCostLedger()

    def cash_balances_ars(self) -> dict[str, Decimal]:
        """ARS cash per account from the ledger."""
        config = ValuationConfig.from_preferences(self.repository.get_preferences())
        resolver = FxResolver(self.repository.get_cached_fx_rates(), config)
        instruments = {i.id: i for i in self.repository.list_instruments()}
        ledger = self._ledger.build(self.repository.list_movements(), instruments, resolver)

        return {
            account.id: ledger.cash_balance(account.id, Currency.ARS)
            for account in self.repository.list_accounts()
        }

    def run(self, today: date | None = None, force: bool = False) -> AccrualRunReport:
        """
        Accrue every enabled account up to yesterday.

        Args:
            today: Local date to accrue up to (exclusive); defaults to now
            force: Ignore the once-per-day guard (the per-account lock
                still applies)

        Returns:
            AccrualRunReport with one entry per enabled account
        """
        today = today or today_local()
        report = AccrualRunReport(run_date=today)

        accounts = [a for a in self.repository.list_accounts() if a.yield_enabled]
        if not accounts:
            return report

        balances = self.cash_balances_ars()
        for account in accounts:
            report.accounts.append(
                self._run_account(account, balances.get(account.id, Decimal("0")), today, force)
            )

        if report.movements_created:
            logger.info(
                f"Yield accrual stored {report.movements_created} movement(s) "
                f"across {sum(1 for a in report.accounts if a.created)} account(s)"
            )
        return report

    def _run_account(self, account: Account, balance: Decimal, today: date, force: bool) -> AccountAccrual:
        if not force and self.guard.ran_today(account.id, today):
            return AccountAccrual(account.id, "already_ran", last_accrued_date=account.cash_yield.last_accrued_date)

        lock = self.guard.lock_for(account.id)
        if not lock.acquire(blocking=False):
            logger.info(f"Accrual for account {account.id} already in progress, skipping")
            return AccountAccrual(account.id, "busy", last_accrued_date=account.cash_yield.last_accrued_date)

        try:
            return self._accrue(account, balance, today)
        finally:
            lock.release()

    def _accrue(self, account: Account, balance: Decimal, today: date) -> AccountAccrual:
        last = account.cash_yield.last_accrued_date
        if last is None:
            logger.warning(f"Account {account.id} has yield enabled but no lastAccruedDate; skipped")
            self.guard.mark_ran(account.id, today)
            return AccountAccrual(account.id, "no_start")

        if balance <= 0:
            self.guard.mark_ran(account.id, today)
            return AccountAccrual(account.id, "no_balance", last_accrued_date=last)

        result = generate_accrual_movements(account, balance, today)
        if not result.movements:
            self.guard.mark_ran(account.id, today)
            return AccountAccrual(account.id, "up_to_date", last_accrued_date=last)

        self.repository.put_movements(result.movements)
        updated_yield = account.cash_yield.model_copy(update={"last_accrued_date": result.last_accrued_date})
        self.repository.put_account(account.model_copy(update={"cash_yield": updated_yield}))
        self.guard.mark_ran(account.id, today)

        logger.info(
            f"Accrued {len(result.movements)} day(s) for account {account.id}: "
            f"{result.total_interest:.2f} ARS, lastAccruedDate {result.last_accrued_date}"
        )
        return AccountAccrual(
            account.id,
            "accrued",
            created=len(result.movements),
            interest_ars=result.total_interest,
            last_accrued_date=result.last_accrued_date,
        )

    def get_metrics(self) -> dict[str, YieldMetrics]:
        """Projections for every enabled account, keyed by account id."""
        accounts = [a for a in self.repository.list_accounts() if a.yield_enabled]
        if not accounts:
            return {}

        balances = self.cash_balances_ars()
        return {
            account.id: compute_yield_metrics(balances.get(account.id, Decimal("0")), account.cash_yield.tna)
            for account in accounts
        }
