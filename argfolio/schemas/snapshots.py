# argfolio/schemas/snapshots.py
"""Pydantic schemas for daily portfolio snapshots."""

from decimal import Decimal

from pydantic import Field

from argfolio.schemas.common import CamelModel


class Snapshot(CamelModel):
    """Portfolio totals for one local date; `id` equals `date_local`."""

    id: str
    date_local: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    total_ars: Decimal | None = Field(default=None, alias="totalARS")
    total_usd: Decimal | None = Field(default=None, alias="totalUSD")
    breakdown_ars: dict[str, Decimal] = Field(default_factory=dict, alias="breakdownARS")
    created_at_iso: str | None = Field(default=None, alias="createdAtISO")
