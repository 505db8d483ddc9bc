# argfolio/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The router layer is responsible for mapping these to appropriate HTTP responses.

Data-quality problems (oversell, missing FX, missing price) are NOT
exceptions: calculators report them as warnings and null values.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── BackupFormatError
    ├── NotFoundError
    │   ├── AccountNotFoundError
    │   ├── InstrumentNotFoundError
    │   ├── MovementNotFoundError
    │   └── DebtNotFoundError
    ├── StorageError
    ├── MarketDataError
    │   ├── ProviderUnavailableError
    │   ├── QuoteNotFoundError
    │   └── RateLimitError
    ├── FXRateError
    │   └── FXRatesUnavailableError
    └── SyncError
        ├── SyncDisabledError
        └── SyncAuthError
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails.

    This is for programmatic validation errors (unknown references,
    inconsistent movement shapes, etc.), NOT for request body validation
    which is handled by Pydantic.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class BackupFormatError(ValidationError):
    """Raised when a backup payload has an unsupported version or shape."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid backup payload: {reason}", field="payload")


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Account", "Instrument")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class AccountNotFoundError(NotFoundError):
    """Raised when an account id is not in the store."""

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(
            f"Account '{account_id}' not found",
            resource_type="Account",
            resource_id=account_id,
        )


class InstrumentNotFoundError(NotFoundError):
    """Raised when an instrument id is not in the store."""

    def __init__(self, instrument_id: str) -> None:
        self.instrument_id = instrument_id
        super().__init__(
            f"Instrument '{instrument_id}' not found",
            resource_type="Instrument",
            resource_id=instrument_id,
        )


class MovementNotFoundError(NotFoundError):
    """Raised when a movement id is not in the store."""

    def __init__(self, movement_id: str) -> None:
        self.movement_id = movement_id
        super().__init__(
            f"Movement '{movement_id}' not found",
            resource_type="Movement",
            resource_id=movement_id,
        )


class DebtNotFoundError(NotFoundError):
    """Raised when a debt id is not in the store."""

    def __init__(self, debt_id: str) -> None:
        self.debt_id = debt_id
        super().__init__(
            f"Debt '{debt_id}' not found",
            resource_type="Debt",
            resource_id=debt_id,
        )


# =============================================================================
# STORAGE ERRORS
# =============================================================================


class StorageError(ServiceError):
    """
    Raised when the document store cannot complete an operation.

    Attributes:
        collection: Collection being accessed
    """

    def __init__(self, message: str, collection: str | None = None) -> None:
        self.collection = collection
        super().__init__(message)


# =============================================================================
# MARKET DATA PROVIDER ERRORS
# =============================================================================


class MarketDataError(ServiceError):
    """
    Base exception for market data provider failures.

    Attributes:
        provider: Name of the provider that failed
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(MarketDataError):
    """
    Raised when a market data provider is temporarily unavailable.

    Examples:
    - Network timeout
    - Server errors (500, 502, 503)
    - Malformed response body

    This is a retryable error.
    """

    def __init__(self, provider: str, reason: str) -> None:
        message = f"Provider '{provider}' is unavailable: {reason}"
        super().__init__(message, provider=provider)
        self.reason = reason


class QuoteNotFoundError(MarketDataError):
    """
    Raised when a provider has no quote for a symbol.

    This is NOT a retryable error.
    """

    def __init__(self, symbol: str, provider: str) -> None:
        message = f"No quote for '{symbol}' from {provider}"
        super().__init__(message, provider=provider)
        self.symbol = symbol


class RateLimitError(MarketDataError):
    """
    Raised when the provider's rate limit has been exceeded.

    This is a retryable error (with backoff).

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by API)
    """

    def __init__(self, provider: str, retry_after: int | None = None) -> None:
        message = f"Rate limit exceeded for provider '{provider}'"
        if retry_after:
            message += f" (retry after {retry_after}s)"
        super().__init__(message, provider=provider)
        self.retry_after = retry_after


# =============================================================================
# FX RATE ERRORS
# =============================================================================


class FXRateError(ServiceError):
    """Base exception for FX rate failures."""
    pass


class FXRatesUnavailableError(FXRateError):
    """
    Raised when no live FX rates could be fetched and no cached set exists.

    Only raised by callers that require rates (e.g. GET /fx); valuation
    treats the same situation as "USD values unavailable".
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"FX rates unavailable and no cached rates exist: {reason}")


# =============================================================================
# SYNC ERRORS
# =============================================================================


class SyncError(ServiceError):
    """
    Base exception for remote sync failures.

    Attributes:
        status_code: HTTP status returned by the remote, if any
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class SyncDisabledError(SyncError):
    """Raised when a sync operation is requested while remote sync is off."""

    def __init__(self) -> None:
        super().__init__("Remote sync is disabled (set REMOTE_SYNC_ENABLED=true)")


class SyncAuthError(SyncError):
    """Raised when the remote rejects the sync token (401/403)."""

    def __init__(self, status_code: int) -> None:
        super().__init__(
            f"Remote sync rejected credentials (HTTP {status_code})",
            status_code=status_code,
        )
