# argfolio/services/remote_sync.py
"""
Remote sync - mirrors local data to a remote JSON API.

Endpoints (relative to REMOTE_SYNC_URL, Bearer token auth):
    GET  /api/sync/status     -> {ok, writeEnabled, counts}
    POST /api/sync/push       <- backup envelope
    GET  /api/sync/bootstrap  -> {asOfISO, accounts, instruments, movements, snapshots}

Replication is at-least-once: a push or bootstrap that is retried or
repeated upserts the same ids again, which is harmless.

Error mapping:
    feature flag off       -> SyncDisabledError
    HTTP 401 / 403         -> SyncAuthError (not retried)
    transport error / 5xx  -> SyncError after tenacity retries
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from argfolio.config import settings
from argfolio.schemas.accounts import Account
from argfolio.schemas.backup import BootstrapPayload, ImportCounts
from argfolio.schemas.instruments import Instrument
from argfolio.schemas.movements import parse_movement
from argfolio.schemas.snapshots import Snapshot
from argfolio.services.backup import BackupService
from argfolio.services.constants import (
    COLLECTION_ACCOUNTS,
    COLLECTION_INSTRUMENTS,
    COLLECTION_MOVEMENTS,
    COLLECTION_SNAPSHOTS,
)
from argfolio.services.exceptions import SyncAuthError, SyncDisabledError, SyncError
from argfolio.services.storage.repository import PortfolioRepository

logger = logging.getLogger(__name__)

PUSH_PATH = "/api/sync/push"
BOOTSTRAP_PATH = "/api/sync/bootstrap"
STATUS_PATH = "/api/sync/status"


def _is_transient(error: BaseException) -> bool:
    if isinstance(error, SyncAuthError):
        return False
    return isinstance(error, SyncError) and (error.status_code is None or error.status_code >= 500)


# =============================================================================
# CLIENT
# =============================================================================

class RemoteSyncClient:
    """
    Thin HTTP client for the sync API.

    Attributes:
        enabled: Feature flag; every call raises SyncDisabledError when off
        base_url: Remote origin, without trailing slash
    """

    def __init__(
            self,
            base_url: str | None = None,
            token: str | None = None,
            enabled: bool | None = None,
            client: httpx.Client | None = None,
            max_retry_attempts: int = 3,
    ) -> None:
        self.enabled = settings.remote_sync_enabled if enabled is None else enabled
        self.base_url = (base_url or settings.remote_sync_url or "").rstrip("/")
        self._token = token if token is not None else settings.remote_sync_token
        self._client = client
        self.max_retry_attempts = max_retry_attempts

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=settings.http_timeout_seconds)
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _request(self, method: str, path: str, json: Any = None) -> dict:
        if not self.enabled:
            raise SyncDisabledError()
        if not self.base_url:
            raise SyncError("REMOTE_SYNC_URL is not configured")

        @retry(
            stop=stop_after_attempt(self.max_retry_attempts),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception(_is_transient),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        def _send() -> dict:
            try:
                response = self.client.request(method, f"{self.base_url}{path}", json=json, headers=self._headers())
            except httpx.HTTPError as e:
                raise SyncError(f"Remote sync unreachable: {type(e).__name__}: {e}") from e

            if response.status_code in (401, 403):
                raise SyncAuthError(response.status_code)
            if response.status_code >= 400:
                raise SyncError(f"Remote sync {method} {path} failed", status_code=response.status_code)
            try:
                body = response.json()
            except ValueError as e:
                raise SyncError(f"Remote sync {path} returned invalid JSON", status_code=response.status_code) from e
            if not isinstance(body, dict):
                raise SyncError(f"Remote sync {path} returned a non-object body")
            return body

        return _send()

    def status(self) -> dict:
        return self._request("GET", STATUS_PATH)

    def push(self, payload: dict) -> dict:
        return self._request("POST", PUSH_PATH, json=payload)

    def bootstrap(self) -> dict:
        return self._request("GET", BOOTSTRAP_PATH)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()


# =============================================================================
# SERVICE
# =============================================================================

class RemoteSyncService:
    """Pushes the local backup and pulls the remote state."""

    def __init__(self, repository: PortfolioRepository, client: RemoteSyncClient) -> None:
        self.repository = repository
        self.client = client

    def push(self) -> dict:
        """POST the full backup envelope; returns the remote response body."""
        payload = BackupService(self.repository).export()
        body = self.client.push(payload.to_document())
        logger.info(
            f"Pushed {len(payload.data.movements)} movement(s) to remote sync "
            f"({body.get('counts', {})})"
        )
        return body

    def bootstrap(self) -> tuple[BootstrapPayload, ImportCounts]:
        """
        Pull the remote state and upsert it locally.

        Records the remote sends that do not validate are skipped and
        counted; one bad movement never blocks the rest.
        """
        raw = self.client.bootstrap()
        counts = ImportCounts()

        accounts = self._parse_list(raw.get("accounts"), Account.model_validate, counts)
        instruments = self._parse_list(raw.get("instruments"), Instrument.model_validate, counts)
        movements = self._parse_list(raw.get("movements"), parse_movement, counts)
        snapshots = self._parse_list(raw.get("snapshots"), Snapshot.model_validate, counts)

        store = self.repository.store
        counts.accounts = store.put_many(COLLECTION_ACCOUNTS, [r.to_document() for r in accounts])
        counts.instruments = store.put_many(COLLECTION_INSTRUMENTS, [r.to_document() for r in instruments])
        counts.movements = store.put_many(COLLECTION_MOVEMENTS, [r.to_document() for r in movements])
        counts.snapshots = store.put_many(COLLECTION_SNAPSHOTS, [r.to_document() for r in snapshots])

        if counts.skipped:
            logger.warning(f"Bootstrap skipped {counts.skipped} invalid remote record(s)")

        payload = BootstrapPayload(
            as_of_iso=raw.get("asOfISO"),
            accounts=accounts,
            instruments=instruments,
            movements=movements,
            snapshots=snapshots,
        )
        return payload, counts

    @staticmethod
    def _parse_list(items: Any, parse, counts: ImportCounts) -> list:
        if not isinstance(items, list):
            return []
        parsed = []
        for item in items:
            try:
                parsed.append(parse(item))
            except (PydanticValidationError, TypeError):
                counts.skipped += 1
        return parsed
