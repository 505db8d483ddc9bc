# argfolio/services/fixed_deposits/service.py
"""
Fixed Deposit Service - reads plazo fijo state and stores payouts.

Settlement runs under a process-wide lock so two concurrent calls do
not both compute and write the same payouts; the deterministic ids make
a race harmless anyway.
"""

import logging
import threading
from datetime import date

from argfolio.models import FxType
from argfolio.schemas.movements import CashMovement
from argfolio.services.fixed_deposits.processor import FixedDepositProcessor, FixedDepositState
from argfolio.services.storage.repository import PortfolioRepository
from argfolio.utils.date_utils import today_local

logger = logging.getLogger(__name__)

_settlement_lock = threading.Lock()


class FixedDepositService:
    """Plazo fijo positions and auto-settlement."""

    def __init__(self, repository: PortfolioRepository) -> None:
        self.repository = repository
        self.processor = FixedDepositProcessor()

    def _oficial_rate(self):
        rates = self.repository.get_cached_fx_rates()
        return rates.pair(FxType.OFICIAL).valuation_rate if rates is not None else None

    def get_state(self, today: date | None = None) -> FixedDepositState:
        return self.processor.derive(
            self.repository.list_movements(),
            today or today_local(),
            self._oficial_rate(),
        )

    def settle_matured(self, today: date | None = None) -> list[CashMovement]:
        """
        Store payouts for every matured, unpaid position.

        Returns:
            The payout movements written by this call (empty when none due)
        """
        today = today or today_local()
        with _settlement_lock:
            state = self.processor.derive(self.repository.list_movements(), today)
            payouts = self.processor.settlement_movements(state)
            if not payouts:
                return []

            self.repository.put_movements(payouts)

        total = sum(p.total_amount for p in payouts)
        logger.info(f"Settled {len(payouts)} fixed deposit(s) for {total:.2f} ARS")
        return payouts
