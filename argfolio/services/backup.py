# argfolio/services/backup.py
"""
Backup export and import.

Envelope (also the remote sync push body):

    {
      "version": 1,
      "exportedAtISO": "...",
      "data": {accounts, instruments, movements, manualPrices, debts, preferences}
    }

Import is an upsert by id per record: re-importing the same file is a
no-op and importing into an empty store reproduces the exported state.
Each collection is exported sorted by id so two exports of the same
state are byte-identical apart from `exportedAtISO`.
"""

import logging

from pydantic import ValidationError as PydanticValidationError

from argfolio.schemas.backup import BackupData, BackupPayload, ImportCounts
from argfolio.services.constants import (
    BACKUP_VERSION,
    COLLECTION_ACCOUNTS,
    COLLECTION_DEBTS,
    COLLECTION_INSTRUMENTS,
    COLLECTION_MANUAL_PRICES,
    COLLECTION_MOVEMENTS,
)
from argfolio.services.exceptions import BackupFormatError
from argfolio.services.storage.repository import PortfolioRepository
from argfolio.utils.date_utils import now_iso

logger = logging.getLogger(__name__)

ARRAY_FIELDS = ("accounts", "instruments", "movements", "manualPrices", "debts")


class BackupService:
    """Serializes the user's data to and from the backup envelope."""

    def __init__(self, repository: PortfolioRepository) -> None:
        self.repository = repository

    def export(self) -> BackupPayload:
        repo = self.repository
        data = BackupData(
            accounts=sorted(repo.list_accounts(), key=lambda r: r.id),
            instruments=sorted(repo.list_instruments(), key=lambda r: r.id),
            movements=sorted(repo.list_movements(), key=lambda r: r.id),
            manual_prices=sorted(repo.list_manual_prices(), key=lambda r: r.id),
            debts=sorted(repo.list_debts(), key=lambda r: r.id),
            preferences=repo.get_preferences(),
        )
        payload = BackupPayload(version=BACKUP_VERSION, exported_at_iso=now_iso(), data=data)
        logger.info(
            f"Exported backup: {len(data.accounts)} accounts, {len(data.instruments)} instruments, "
            f"{len(data.movements)} movements, {len(data.debts)} debts"
        )
        return payload

    def parse(self, raw: object) -> BackupPayload:
        """
        Validate a raw backup document.

        Raises:
            BackupFormatError: Wrong version, missing arrays or invalid records
        """
        if not isinstance(raw, dict):
            raise BackupFormatError("payload must be a JSON object")
        if raw.get("version") != BACKUP_VERSION:
            raise BackupFormatError(f"unsupported version {raw.get('version')!r}, expected {BACKUP_VERSION}")

        data = raw.get("data")
        if not isinstance(data, dict):
            raise BackupFormatError("'data' must be an object")
        for name in ARRAY_FIELDS:
            if name in data and not isinstance(data[name], list):
                raise BackupFormatError(f"'data.{name}' must be an array")
        if "exportedAtISO" not in raw:
            raw = {**raw, "exportedAtISO": now_iso()}

        try:
            return BackupPayload.model_validate(raw)
        except PydanticValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise BackupFormatError(f"{e.error_count()} invalid field(s), first at {location}: {first['msg']}")

    def import_payload(self, raw: object) -> ImportCounts:
        """Validate then upsert every record; nothing is written if validation fails."""
        payload = self.parse(raw)
        data = payload.data
        store = self.repository.store

        counts = ImportCounts(
            accounts=store.put_many(COLLECTION_ACCOUNTS, [r.to_document() for r in data.accounts]),
            instruments=store.put_many(COLLECTION_INSTRUMENTS, [r.to_document() for r in data.instruments]),
            movements=store.put_many(COLLECTION_MOVEMENTS, [r.to_document() for r in data.movements]),
            manual_prices=store.put_many(COLLECTION_MANUAL_PRICES, [r.to_document() for r in data.manual_prices]),
            debts=store.put_many(COLLECTION_DEBTS, [r.to_document() for r in data.debts]),
        )
        if data.preferences is not None:
            self.repository.put_preferences(data.preferences)

        logger.info(f"Imported backup from {payload.exported_at_iso}: {counts.model_dump()}")
        return counts
