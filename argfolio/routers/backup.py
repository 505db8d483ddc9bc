# argfolio/routers/backup.py
"""Backup export and import."""

from fastapi import APIRouter, Body, Depends

from argfolio.dependencies import get_backup_service
from argfolio.schemas.backup import BackupPayload, ImportCounts
from argfolio.services.backup import BackupService

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/backup",
    tags=["Backup"],
)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/export", response_model=BackupPayload, summary="Export all data")
def export_backup(service: BackupService = Depends(get_backup_service)) -> BackupPayload:
    """Accounts, instruments, movements, manual prices and preferences in one versioned document."""
    return service.export()


@router.post("/import", response_model=ImportCounts, summary="Import a backup")
def import_backup(
        body: dict = Body(...),
        service: BackupService = Depends(get_backup_service),
) -> ImportCounts:
    """
    Upsert every record of an exported backup.

    The whole document is validated before anything is written. Raises
    **400** for an unsupported version or invalid records.
    """
    return service.import_payload(body)
