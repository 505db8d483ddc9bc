# argfolio/routers/sync.py
"""
Remote sync endpoints.

Pushes the local backup to a remote sync server and bootstraps local
data from it. Disabled unless REMOTE_SYNC_ENABLED and REMOTE_SYNC_URL
are set.

Key features:
- Status check that reports remote errors instead of failing
- Push of the full backup envelope
- Bootstrap that skips invalid remote records
"""

import logging

from fastapi import APIRouter, Depends, Request

from argfolio.dependencies import get_remote_sync_client, get_remote_sync_service
from argfolio.middleware.rate_limit import limiter
from argfolio.schemas.sync import SyncBootstrapResponse, SyncPushResponse, SyncStatusResponse
from argfolio.services.constants import RATE_LIMIT_SYNC
from argfolio.services.exceptions import SyncError
from argfolio.services.remote_sync import RemoteSyncClient, RemoteSyncService

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/sync",
    tags=["Remote Sync"],
)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "/status",
    response_model=SyncStatusResponse,
    summary="Get remote sync status",
)
@limiter.limit(RATE_LIMIT_SYNC)
def get_sync_status(
        request: Request,  # Required for rate limiting
        client: RemoteSyncClient = Depends(get_remote_sync_client),
) -> SyncStatusResponse:
    """
    Whether sync is configured and, if so, what the remote reports.

    Remote failures are returned in **error** rather than raised.
    """
    response = SyncStatusResponse(enabled=client.enabled, url_configured=bool(client.base_url))
    if not response.enabled or not response.url_configured:
        return response

    try:
        response.remote = client.status()
    except SyncError as e:
        logger.warning(f"Remote sync status failed: {e}")
        response.error = str(e)
    return response


@router.post(
    "/push",
    response_model=SyncPushResponse,
    summary="Push local data to the remote",
)
@limiter.limit(RATE_LIMIT_SYNC)
def push(
        request: Request,  # Required for rate limiting
        service: RemoteSyncService = Depends(get_remote_sync_service),
) -> SyncPushResponse:
    """
    Send the full backup to the remote.

    Raises **409** when sync is disabled, **502** when the remote fails.
    """
    body = service.push()
    return SyncPushResponse(pushed_movements=len(service.repository.list_movements()), remote=body)


@router.post(
    "/bootstrap",
    response_model=SyncBootstrapResponse,
    summary="Pull remote data into local storage",
)
@limiter.limit(RATE_LIMIT_SYNC)
def bootstrap(
        request: Request,  # Required for rate limiting
        service: RemoteSyncService = Depends(get_remote_sync_service),
) -> SyncBootstrapResponse:
    """Upsert the remote accounts, instruments, movements and snapshots locally."""
    payload, counts = service.bootstrap()
    return SyncBootstrapResponse(as_of_iso=payload.as_of_iso, counts=counts)
