# argfolio/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers under /api/v1
- Defines global endpoints (health checks)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from argfolio.config import settings
from argfolio.database import check_database_health, init_db
from argfolio.middleware import CorrelationIdMiddleware, limiter, rate_limit_exceeded_handler
from argfolio.routers import (
    accounts_router,
    backup_router,
    debts_router,
    fixed_deposits_router,
    fx_router,
    instruments_router,
    movements_router,
    portfolio_router,
    preferences_router,
    sync_router,
    yields_router,
)
from argfolio.schemas.errors import ErrorDetail, ValidationErrorDetail
from argfolio.services.constants import RATE_LIMIT_HEALTH
from argfolio.services.exceptions import (
    FXRatesUnavailableError,
    NotFoundError,
    ProviderUnavailableError,
    RateLimitError,
    ServiceError,
    StorageError,
    SyncAuthError,
    SyncDisabledError,
    SyncError,
    ValidationError,
)
from argfolio.utils import setup_logging

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()


# =============================================================================
# APPLICATION SETUP
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.document_store == "sql":
        init_db()
    logger.info(f"{settings.app_name} started ({settings.document_store} document store)")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Argentine multi-currency portfolio valuation API",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# CORS MIDDLEWARE
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# MIDDLEWARE (order matters: last added = first executed)
# =============================================================================

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Service-layer exceptions become consistent ErrorDetail responses.
# Starlette picks the handler of the most specific class in the MRO.
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def _error(status_code: int, exc: Exception, details: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorDetail(
            error=type(exc).__name__,
            message=str(exc),
            details=details,
        ).model_dump(),
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle missing accounts, instruments, movements and debts (404)."""
    logger.warning(f"Not found: {exc}")
    return _error(404, exc, {"resource_type": exc.resource_type, "resource_id": exc.resource_id})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle validation and backup format errors (400)."""
    logger.warning(f"Validation error: {exc}")
    return _error(400, exc, {"field": exc.field} if exc.field else None)


@app.exception_handler(SyncDisabledError)
async def sync_disabled_handler(request: Request, exc: SyncDisabledError) -> JSONResponse:
    """Handle calls to remote sync while it is switched off (409)."""
    return _error(409, exc)


@app.exception_handler(SyncAuthError)
async def sync_auth_handler(request: Request, exc: SyncAuthError) -> JSONResponse:
    """Handle rejected sync credentials (502)."""
    logger.error(f"Remote sync rejected credentials: {exc}")
    return _error(502, exc, {"remote_status": exc.status_code})


@app.exception_handler(SyncError)
async def sync_error_handler(request: Request, exc: SyncError) -> JSONResponse:
    """Handle remote sync failures (502)."""
    logger.error(f"Remote sync failed: {exc}")
    return _error(502, exc, {"remote_status": exc.status_code} if exc.status_code else None)


@app.exception_handler(FXRatesUnavailableError)
async def fx_unavailable_handler(request: Request, exc: FXRatesUnavailableError) -> JSONResponse:
    """Handle FX source down with an empty cache (503)."""
    logger.error(f"FX rates unavailable: {exc}")
    return _error(503, exc)


@app.exception_handler(ProviderUnavailableError)
async def provider_unavailable_handler(request: Request, exc: ProviderUnavailableError) -> JSONResponse:
    """Handle market data provider unavailable (503)."""
    logger.error(f"Provider unavailable: {exc}")
    return _error(503, exc, {"provider": exc.provider})


@app.exception_handler(RateLimitError)
async def rate_limit_handler(request: Request, exc: RateLimitError) -> JSONResponse:
    """Handle upstream rate limit exceeded (429)."""
    logger.warning(f"Rate limit exceeded: {exc}")
    return _error(429, exc, {"retry_after": exc.retry_after} if exc.retry_after else None)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Handle document store failures (500)."""
    logger.error(f"Storage error: {exc}")
    return _error(500, exc, {"collection": exc.collection} if exc.collection else None)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return _error(500, exc)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle all HTTPExceptions with consistent error format.

    Converts FastAPI's default {"detail": "..."} format to ErrorDetail.
    """
    error_types = {
        400: "BadRequestError",
        404: "NotFoundError",
        405: "MethodNotAllowedError",
        409: "ConflictError",
        422: "ValidationError",
        429: "RateLimitError",
        500: "InternalServerError",
        503: "ServiceUnavailableError",
    }
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorDetail(
            error=error_types.get(exc.status_code, "HTTPError"),
            message=str(exc.detail) if exc.detail else "An error occurred",
            details=None,
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Convert the default 422 body to ValidationErrorDetail."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(details=errors).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(accounts_router, prefix=API_PREFIX)  # /api/v1/accounts
app.include_router(instruments_router, prefix=API_PREFIX)  # /api/v1/instruments
app.include_router(movements_router, prefix=API_PREFIX)  # /api/v1/movements
app.include_router(portfolio_router, prefix=API_PREFIX)  # /api/v1/portfolio
app.include_router(fx_router, prefix=API_PREFIX)  # /api/v1/fx
app.include_router(yields_router, prefix=API_PREFIX)  # /api/v1/yield
app.include_router(fixed_deposits_router, prefix=API_PREFIX)  # /api/v1/fixed-deposits
app.include_router(debts_router, prefix=API_PREFIX)  # /api/v1/debts
app.include_router(preferences_router, prefix=API_PREFIX)  # /api/v1/preferences
app.include_router(backup_router, prefix=API_PREFIX)  # /api/v1/backup
app.include_router(sync_router, prefix=API_PREFIX)  # /api/v1/sync


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    """API root - returns basic application info."""
    return {
        "message": f"Welcome to {settings.app_name}!",
        "docs": "/docs",
        "api": API_PREFIX,
    }


@app.get("/health", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def health_check(request: Request):
    """
    Health check endpoint.

    - 200: document store reachable
    - 503: SQL document store selected and the database is down
    """
    if settings.document_store != "sql":
        return {"status": "healthy", "checks": {"store": {"status": "healthy", "backend": "memory"}}}

    database = check_database_health()
    response_data = {
        "status": database["status"],
        "checks": {"store": database},
    }
    if database["status"] != "healthy":
        return JSONResponse(status_code=503, content=response_data)
    return response_data


@app.get("/health/live", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def liveness_check(request: Request):
    """Liveness probe. Always 200 while the process is up; does not check dependencies."""
    return {"status": "alive"}


@app.get("/health/ready", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def readiness_check(request: Request):
    """Readiness probe. 503 while the SQL document store is unreachable."""
    if settings.document_store == "sql" and check_database_health()["status"] != "healthy":
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "error": "Database unavailable"},
        )
    return {"status": "ready"}
