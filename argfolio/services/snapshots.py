# argfolio/services/snapshots.py
"""
Daily portfolio snapshots.

One snapshot per local date, keyed by the date itself, so capturing
twice on the same day overwrites instead of duplicating.
"""

import logging

from argfolio.schemas.snapshots import Snapshot
from argfolio.services.storage.repository import PortfolioRepository
from argfolio.services.valuation.types import PortfolioValuation
from argfolio.utils.date_utils import now_iso

logger = logging.getLogger(__name__)


class SnapshotService:
    """Captures and lists portfolio snapshots."""

    def __init__(self, repository: PortfolioRepository) -> None:
        self.repository = repository

    def capture(self, valuation: PortfolioValuation) -> Snapshot:
        """Upsert the snapshot for `valuation.as_of`."""
        day = valuation.as_of.isoformat()
        snapshot = Snapshot(
            id=day,
            date_local=day,
            total_ars=valuation.total_value_ars,
            total_usd=valuation.total_value_usd,
            breakdown_ars={c.category.value: c.value_ars for c in valuation.categories},
            created_at_iso=now_iso(),
        )
        self.repository.put_snapshot(snapshot)
        logger.info(f"Snapshot {day} stored: {valuation.total_value_ars:.2f} ARS")
        return snapshot

    def list(self) -> list[Snapshot]:
        return self.repository.list_snapshots()
