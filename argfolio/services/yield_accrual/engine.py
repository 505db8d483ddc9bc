# argfolio/services/yield_accrual/engine.py
"""
Yield Accrual Engine - daily interest catch-up for remunerated cash.

Algorithm:
    daily_rate = tna / 100 / 365
    balance    = ARS cash of the account at invocation time
    pointer    = lastAccruedDate + 1 day

    while pointer < today:
        if balance > 0:
            interest = balance × daily_rate
            emit INTEREST dated pointer, id "yield-{accountId}-{pointer}"
            balance += interest
        pointer += 1 day

Today is never accrued: its interest compounds on today's closing
balance and is credited once today becomes yesterday.

The ids are deterministic, so storing the output twice (or from two
racing runs) upserts the same records instead of double-crediting.

Everything here is a pure function of its arguments; persistence lives
in YieldAccrualService.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from argfolio.models import Currency
from argfolio.schemas.accounts import Account
from argfolio.schemas.movements import IncomeMovement
from argfolio.services.constants import (
    DAYS_PER_YEAR,
    PROJECTION_DAYS_SHORT,
    SYNTHETIC_MOVEMENT_TIME,
    YIELD_ID_PREFIX,
)

ZERO = Decimal("0")
ONE = Decimal("1")


# =============================================================================
# RATE MATH
# =============================================================================

def daily_rate(tna: Decimal) -> Decimal:
    """Simple daily rate of a nominal annual rate given in percent."""
    return tna / Decimal(100) / Decimal(DAYS_PER_YEAR)


def compute_tea(tna: Decimal) -> Decimal:
    """
    Effective annual rate (as a fraction) of a TNA in percent.

    Example:
        >>> round(compute_tea(Decimal("36.5")), 6)
        Decimal('0.440251')
    """
    return (ONE + daily_rate(tna)) ** DAYS_PER_YEAR - ONE


def compound_factor(tna: Decimal, days: int) -> Decimal:
    """Growth factor of `days` days of daily compounding."""
    return (ONE + daily_rate(tna)) ** days


def yield_movement_id(account_id: str, day: date) -> str:
    return f"{YIELD_ID_PREFIX}-{account_id}-{day.isoformat()}"


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class YieldMetrics:
    """
    Read-only projections for one account.

    Attributes:
        daily_rate: tna / 100 / 365
        tea: Effective annual rate as a fraction
        interest_tomorrow: Interest the current balance earns in one day
        projected_30d: Interest over 30 days of daily compounding
        projected_1y: Interest over 365 days of daily compounding
    """

    balance_ars: Decimal
    tna: Decimal
    daily_rate: Decimal
    tea: Decimal
    interest_tomorrow: Decimal
    projected_30d: Decimal
    projected_1y: Decimal


@dataclass
class AccrualResult:
    """
    Output of one catch-up run for one account.

    Attributes:
        movements: INTEREST movements to upsert, oldest first
        last_accrued_date: Date of the last emitted movement, or the
            previous value when nothing was emitted
        final_balance_ars: Balance after compounding every emitted day
        skipped_days: Days passed over because the balance was not positive
    """

    account_id: str
    movements: list[IncomeMovement] = field(default_factory=list)
    last_accrued_date: date | None = None
    final_balance_ars: Decimal = ZERO
    skipped_days: int = 0

    @property
    def total_interest(self) -> Decimal:
        return sum((m.total_amount for m in self.movements), ZERO)


# =============================================================================
# ENGINE
# =============================================================================

def compute_yield_metrics(balance_ars: Decimal, tna: Decimal) -> YieldMetrics:
    """Projections shown next to a remunerated account."""
    positive = max(balance_ars, ZERO)
    return YieldMetrics(
        balance_ars=balance_ars,
        tna=tna,
        daily_rate=daily_rate(tna),
        tea=compute_tea(tna),
        interest_tomorrow=positive * daily_rate(tna),
        projected_30d=positive * (compound_factor(tna, PROJECTION_DAYS_SHORT) - ONE),
        projected_1y=positive * (compound_factor(tna, DAYS_PER_YEAR) - ONE),
    )


def generate_accrual_movements(account: Account, balance_ars: Decimal, today: date) -> AccrualResult:
    """
    Catch up the missing daily interest of one account.

    Args:
        account: Account with its cash yield configuration
        balance_ars: Current ARS cash balance from the ledger
        today: Local calendar date; never accrued itself

    Returns:
        AccrualResult; empty when yield is disabled, no lastAccruedDate is
        set, or the account is already caught up
    """
    cash_yield = account.cash_yield
    last = cash_yield.last_accrued_date if cash_yield is not None else None
    result = AccrualResult(account_id=account.id, last_accrued_date=last, final_balance_ars=balance_ars)

    if cash_yield is None or not cash_yield.enabled or not cash_yield.tna or last is None:
        return result
    if last >= today:
        return result

    rate = daily_rate(cash_yield.tna)
    running = balance_ars
    pointer = last + timedelta(days=1)

    while pointer < today:
        if running > ZERO:
            interest = running * rate
            result.movements.append(IncomeMovement(
                id=yield_movement_id(account.id, pointer),
                type="INTEREST",
                datetime_iso=f"{pointer.isoformat()}{SYNTHETIC_MOVEMENT_TIME}",
                account_id=account.id,
                total_amount=interest,
                trade_currency=Currency.ARS,
                note=f"Rendimiento diario {cash_yield.tna}% TNA",
            ))
            running += interest
            result.last_accrued_date = pointer
        else:
            result.skipped_days += 1
        pointer += timedelta(days=1)

    result.final_balance_ars = running
    return result
