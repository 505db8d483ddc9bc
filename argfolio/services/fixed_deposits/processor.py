# argfolio/services/fixed_deposits/processor.py
"""
Fixed-Term Deposit (plazo fijo) processor.

Positions are derived, never stored: every DEPOSIT carrying
`fixedDeposit` terms constitutes one position whose id is the movement
id. A DEPOSIT whose `fixedDepositId` points back at it is its payout.

Lifecycle:

    active  --(today >= maturity)-->  matured  --(settlement stored)-->  matured, settled

Math (365-day basis, daily compounding over the term):
    maturity          = start + termDays
    expected_interest = principal × ((1 + tna/100/365)^termDays - 1)
    tea               = compute_tea(tna), the same figure wallets show

Settlement is one DEPOSIT per position with id "ftd-settle-{movementId}",
dated on the maturity date, so re-running after maturity upserts the
same record.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal

from argfolio.models import Currency
from argfolio.schemas.movements import CashMovement, Movement
from argfolio.services.constants import FIXED_DEPOSIT_SETTLEMENT_PREFIX, SYNTHETIC_MOVEMENT_TIME
from argfolio.services.yield_accrual.engine import compound_factor, compute_tea

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")

STATUS_ACTIVE = "active"
STATUS_MATURED = "matured"


def settlement_movement_id(movement_id: str) -> str:
    return f"{FIXED_DEPOSIT_SETTLEMENT_PREFIX}-{movement_id}"


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class FixedDepositPosition:
    """
    One plazo fijo.

    Attributes:
        id: Originating movement id
        start_date / maturity_date: Calendar dates of the term
        expected_interest_ars: Interest due at maturity
        expected_total_ars: Principal plus interest
        status: "active" or "matured"
        settled: True once the payout movement exists
        settlement_movement_id: Id of the payout (stored or due)
    """

    id: str
    account_id: str
    bank: str
    alias: str | None
    principal_ars: Decimal
    tna: Decimal
    tea: Decimal
    term_days: int
    start_date: date
    maturity_date: date
    expected_interest_ars: Decimal
    expected_total_ars: Decimal
    status: str
    settled: bool
    settlement_movement_id: str

    @property
    def movement_id(self) -> str:
        return self.id

    @property
    def needs_settlement(self) -> bool:
        return self.status == STATUS_MATURED and not self.settled


@dataclass
class FixedDepositTotals:
    """
    Aggregates in ARS, with USD at the OFICIAL rate (None when no rate).

    `active_*` covers running deposits; `matured_*` covers deposits due
    but not yet paid out. Settled deposits live on as cash and are not
    counted here.
    """

    active_principal_ars: Decimal = ZERO
    active_interest_ars: Decimal = ZERO
    active_total_ars: Decimal = ZERO
    matured_total_ars: Decimal = ZERO
    active_total_usd: Decimal | None = None
    matured_total_usd: Decimal | None = None

    @property
    def outstanding_total_ars(self) -> Decimal:
        return self.active_total_ars + self.matured_total_ars


@dataclass
class FixedDepositState:
    """All positions split by lifecycle stage."""

    active: list[FixedDepositPosition] = field(default_factory=list)
    matured: list[FixedDepositPosition] = field(default_factory=list)
    settled: list[FixedDepositPosition] = field(default_factory=list)
    totals: FixedDepositTotals = field(default_factory=FixedDepositTotals)

    @property
    def positions(self) -> list[FixedDepositPosition]:
        return self.active + self.matured + self.settled

    @property
    def unsettled(self) -> list[FixedDepositPosition]:
        return self.active + self.matured


# =============================================================================
# PROCESSOR
# =============================================================================

class FixedDepositProcessor:
    """Pure derivation of plazo fijo state from movements."""

    def expected_interest(self, principal: Decimal, tna: Decimal, term_days: int) -> Decimal:
        return principal * (compound_factor(tna, term_days) - ONE)

    def derive(
            self,
            movements: list[Movement],
            today: date,
            oficial_rate: Decimal | None = None,
    ) -> FixedDepositState:
        """
        Build every position and classify it.

        Args:
            movements: Full movement list
            today: Local date used for the maturity check
            oficial_rate: OFICIAL ARS/USD rate for the USD totals

        Returns:
            FixedDepositState with totals
        """
        settled_ids = {
            m.fixed_deposit_id
            for m in movements
            if isinstance(m, CashMovement) and m.fixed_deposit_id is not None
        }

        state = FixedDepositState()
        for movement in sorted(movements, key=lambda m: m.sort_key):
            if not isinstance(movement, CashMovement) or movement.fixed_deposit is None:
                continue

            position = self._position(movement, today, movement.id in settled_ids)
            if position.settled:
                state.settled.append(position)
            elif position.status == STATUS_MATURED:
                state.matured.append(position)
                state.totals.matured_total_ars += position.expected_total_ars
            else:
                state.active.append(position)
                state.totals.active_principal_ars += position.principal_ars
                state.totals.active_interest_ars += position.expected_interest_ars
                state.totals.active_total_ars += position.expected_total_ars

        if oficial_rate:
            state.totals.active_total_usd = state.totals.active_total_ars / oficial_rate
            state.totals.matured_total_usd = state.totals.matured_total_ars / oficial_rate

        return state

    def _position(self, movement: CashMovement, today: date, settled: bool) -> FixedDepositPosition:
        terms = movement.fixed_deposit
        start = terms.start_date or movement.on_date
        maturity = start + timedelta(days=terms.term_days)
        interest = self.expected_interest(terms.principal_ars, terms.tna, terms.term_days)

        matured = settled or today >= maturity
        return FixedDepositPosition(
            id=movement.id,
            account_id=movement.account_id,
            bank=terms.bank,
            alias=terms.alias,
            principal_ars=terms.principal_ars,
            tna=terms.tna,
            tea=compute_tea(terms.tna),
            term_days=terms.term_days,
            start_date=start,
            maturity_date=maturity,
            expected_interest_ars=interest,
            expected_total_ars=terms.principal_ars + interest,
            status=STATUS_MATURED if matured else STATUS_ACTIVE,
            settled=settled,
            settlement_movement_id=settlement_movement_id(movement.id),
        )

    def settlement_movements(self, state: FixedDepositState) -> list[CashMovement]:
        """Payout DEPOSITs for matured, unpaid positions."""
        return [
            CashMovement(
                id=position.settlement_movement_id,
                type="DEPOSIT",
                datetime_iso=f"{position.maturity_date.isoformat()}{SYNTHETIC_MOVEMENT_TIME}",
                account_id=position.account_id,
                total_amount=position.expected_total_ars,
                trade_currency=Currency.ARS,
                fixed_deposit_id=position.id,
                note=f"Acreditación plazo fijo {position.bank}",
            )
            for position in state.matured
            if position.needs_settlement
        ]
