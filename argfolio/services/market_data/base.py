# argfolio/services/market_data/base.py
"""
Base class for live market data sources (prices and FX rates).

Sources are collaborators of the engine: they return typed quotes and
raise MarketDataError subclasses on failure. Callers decide on fallback
(cached rates, last-known prices).

Design Principles:
- One retry policy for every source (tenacity, exponential backoff)
- Transport errors and 5xx map to ProviderUnavailableError (retryable)
- 429 maps to RateLimitError (retryable, honours Retry-After for logging)
- Sources accept an injected httpx.Client so tests can use MockTransport
"""

import logging
from abc import ABC, abstractmethod
from typing import TypeVar, Callable, Any

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from argfolio.config import settings
from argfolio.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


class MarketDataSource(ABC):
    """
    Abstract base for HTTP-backed and library-backed market data sources.

    Attributes:
        max_retry_attempts: Total attempts per call (1 disables retries)
        retry_multiplier: Exponential backoff multiplier (seconds)
        retry_min_wait: Minimum wait between attempts (seconds)
        retry_max_wait: Maximum wait between attempts (seconds)
    """

    def __init__(
            self,
            client: httpx.Client | None = None,
            max_retry_attempts: int = 3,
            retry_multiplier: float = 1.0,
            retry_min_wait: float = 1.0,
            retry_max_wait: float = 10.0,
    ) -> None:
        self._client = client
        self.max_retry_attempts = max_retry_attempts
        self.retry_multiplier = retry_multiplier
        self.retry_min_wait = retry_min_wait
        self.retry_max_wait = retry_max_wait

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier used in logs and error messages."""
        pass

    # =========================================================================
    # HTTP HELPERS
    # =========================================================================

    @property
    def client(self) -> httpx.Client:
        """Shared HTTP client, created lazily."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=settings.http_timeout_seconds,
                headers={"Accept": "application/json"},
            )
        return self._client

    def _get_json(self, url: str, params: dict | None = None) -> Any:
        """
        GET a JSON document, mapping failures to domain exceptions.

        Raises:
            RateLimitError: HTTP 429
            ProviderUnavailableError: Transport error, non-2xx, or invalid JSON
        """
        try:
            response = self.client.get(url, params=params)
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(self.name, f"{type(e).__name__}: {e}") from e

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                self.name,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.status_code >= 400:
            raise ProviderUnavailableError(self.name, f"HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise ProviderUnavailableError(self.name, "invalid JSON body") from e

    # =========================================================================
    # RETRY HELPER METHOD
    # =========================================================================

    def _execute_with_retry(
            self,
            func: Callable[..., T],
            *args: Any,
            **kwargs: Any,
    ) -> T:
        """
        Execute a function with retry logic for transient failures.

        Retries ProviderUnavailableError and RateLimitError with
        exponential backoff; anything else propagates immediately.

        Raises:
            The last exception if all retries fail
        """

        @retry(
            stop=stop_after_attempt(self.max_retry_attempts),
            wait=wait_exponential(
                multiplier=self.retry_multiplier,
                min=self.retry_min_wait,
                max=self.retry_max_wait,
            ),
            retry=retry_if_exception_type((ProviderUnavailableError, RateLimitError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        def _inner() -> T:
            return func(*args, **kwargs)

        return _inner()

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
