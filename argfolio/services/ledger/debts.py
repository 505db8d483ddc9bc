# argfolio/services/ledger/debts.py
"""
Debt aggregate, kept apart from the average-cost ledger.

    balance = max(0, Σ DEBT_ADD - Σ DEBT_PAY)

Status is derived: ACTIVE while a balance remains, PAID at zero.
A CANCELLED status set by the user is never overwritten.
"""

import logging
from decimal import Decimal

from argfolio.models import DebtStatus, MovementType
from argfolio.schemas.debts import Debt, DebtSummary
from argfolio.schemas.movements import DebtMovement, Movement, sort_movements

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class DebtCalculator:
    """Summarizes every debt from its movements."""

    def calculate(self, debts: list[Debt], movements: list[Movement]) -> list[DebtSummary]:
        """
        Args:
            debts: Stored debt records
            movements: Full movement list; only DEBT_* movements are read

        Returns:
            One summary per stored debt, plus one per debt id that only
            appears in movements (named after its id)
        """
        added: dict[str, Decimal] = {}
        paid: dict[str, Decimal] = {}
        known = {debt.id: debt for debt in debts}
        order = [debt.id for debt in debts]
        currencies = {debt.id: debt.currency for debt in debts}

        for movement in sort_movements(movements):
            if not isinstance(movement, DebtMovement):
                continue
            if movement.debt_id not in known and movement.debt_id not in added:
                logger.warning(f"Movement {movement.id} references unknown debt {movement.debt_id}")
                order.append(movement.debt_id)
                currencies[movement.debt_id] = movement.trade_currency
            bucket = added if movement.movement_type == MovementType.DEBT_ADD else paid
            bucket[movement.debt_id] = bucket.get(movement.debt_id, ZERO) + movement.total_amount
            added.setdefault(movement.debt_id, ZERO)

        summaries = []
        for debt_id in order:
            debt = known.get(debt_id)
            original = added.get(debt_id, ZERO)
            paid_amount = paid.get(debt_id, ZERO)
            balance = max(ZERO, original - paid_amount)

            if debt is not None and debt.status == DebtStatus.CANCELLED:
                status = DebtStatus.CANCELLED
            elif balance == ZERO and original > ZERO:
                status = DebtStatus.PAID
            else:
                status = DebtStatus.ACTIVE

            summaries.append(DebtSummary(
                id=debt_id,
                name=debt.name if debt is not None else debt_id,
                currency=currencies[debt_id],
                original_amount=original,
                paid_amount=paid_amount,
                balance=balance,
                status=status,
            ))
        return summaries
