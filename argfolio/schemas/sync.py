# argfolio/schemas/sync.py
"""Pydantic schemas for the remote sync endpoints."""

from pydantic import Field

from argfolio.schemas.backup import ImportCounts
from argfolio.schemas.common import CamelModel


class SyncStatusResponse(CamelModel):
    enabled: bool
    url_configured: bool
    remote: dict | None = Field(default=None, description="Remote /api/sync/status body")
    error: str | None = None


class SyncPushResponse(CamelModel):
    pushed_movements: int
    remote: dict


class SyncBootstrapResponse(CamelModel):
    as_of_iso: str | None = Field(default=None, alias="asOfISO")
    counts: ImportCounts
