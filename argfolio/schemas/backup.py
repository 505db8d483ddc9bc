# argfolio/schemas/backup.py
"""
Backup / sync payload.

The same envelope is written by export, read by import, and pushed to
the remote sync API.
"""

from pydantic import Field

from argfolio.schemas.accounts import Account
from argfolio.schemas.common import CamelModel
from argfolio.schemas.debts import Debt
from argfolio.schemas.instruments import Instrument
from argfolio.schemas.movements import Movement
from argfolio.schemas.preferences import Preferences
from argfolio.schemas.prices import ManualPrice
from argfolio.schemas.snapshots import Snapshot


class BackupData(CamelModel):
    accounts: list[Account] = Field(default_factory=list)
    instruments: list[Instrument] = Field(default_factory=list)
    movements: list[Movement] = Field(default_factory=list)
    manual_prices: list[ManualPrice] = Field(default_factory=list)
    debts: list[Debt] = Field(default_factory=list)
    preferences: Preferences | None = None


class BackupPayload(CamelModel):
    version: int
    exported_at_iso: str = Field(..., alias="exportedAtISO")
    data: BackupData


class ImportCounts(CamelModel):
    """Records upserted per collection."""

    accounts: int = 0
    instruments: int = 0
    movements: int = 0
    manual_prices: int = 0
    debts: int = 0
    snapshots: int = 0
    skipped: int = 0


class BootstrapPayload(CamelModel):
    """Remote state returned by GET /api/sync/bootstrap."""

    as_of_iso: str | None = Field(default=None, alias="asOfISO")
    accounts: list[Account] = Field(default_factory=list)
    instruments: list[Instrument] = Field(default_factory=list)
    movements: list[Movement] = Field(default_factory=list)
    snapshots: list[Snapshot] = Field(default_factory=list)
