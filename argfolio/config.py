# argfolio/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- DATABASE_URL: SQLAlchemy URL for the document store (SQLite by default)
- DOLARAPI_URL / COINGECKO_URL: Market data endpoints
- REMOTE_SYNC_*: Optional remote push/pull mirror

Environment-specific behavior:
- test: In-memory SQLite, remote sync always disabled
- development: File-backed SQLite next to the working directory
- production: DATABASE_URL must be set explicitly

User preferences (FX rate used for USD, cash tracking, auto accrual) are
NOT settings: they live in the document store and are passed explicitly
into each valuation call as a ValuationConfig.

Usage:
    from argfolio.config import settings

    if settings.remote_sync_enabled:
        ...
"""
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - DATABASE_URL: SQLAlchemy connection string
        - DOCUMENT_STORE: "sql" (default) or "memory"
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: json in production)
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] | None = Field(
        default=None,
        description="Log output format; defaults to json in production"
    )

    database_url: str | None = Field(
        default=None,
        description="SQLAlchemy connection string for the document store"
    )
    document_store: Literal["sql", "memory"] = Field(
        default="sql",
        description="Document store backend"
    )

    app_name: str = "Argfolio"
    debug: bool = False

    # =========================================================================
    # MARKET DATA
    # =========================================================================
    dolarapi_url: str = Field(
        default="https://dolarapi.com/v1/dolares",
        description="Endpoint returning the list of ARS/USD quotes by 'casa'"
    )
    coingecko_url: str = Field(
        default="https://api.coingecko.com/api/v3/simple/price",
        description="CoinGecko simple price endpoint"
    )
    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for outbound HTTP requests"
    )
    fetch_max_workers: int = Field(
        default=4,
        ge=1,
        le=16,
        description="Thread pool size for concurrent quote fetches"
    )
    price_cache_ttl_hours: int = Field(
        default=6,
        ge=1,
        description="Age after which a cached price is reported as stale"
    )

    # =========================================================================
    # REMOTE SYNC
    # =========================================================================
    remote_sync_enabled: bool = Field(
        default=False,
        description="Mirror accounts/movements/instruments to a remote store"
    )
    remote_sync_url: str | None = Field(
        default=None,
        description="Base URL of the remote sync API"
    )
    remote_sync_token: str | None = Field(
        default=None,
        description="Bearer token sent to the remote sync API"
    )

    # =========================================================================
    # RATE LIMITING
    # =========================================================================
    rate_limit_enabled: bool = Field(
        default=True,
        description="Throttle endpoints that trigger third-party fetches"
    )

    # =========================================================================
    # CORS
    # =========================================================================
    cors_origins: list[str] = Field(
        default=["http://localhost:5173", "http://127.0.0.1:5173"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_environment(self) -> "Settings":
        """
        Fill environment-dependent defaults and validate combinations.

        Rules:
        - test: in-memory SQLite, remote sync and rate limiting forced off
        - development: file SQLite if DATABASE_URL is unset
        - production: DATABASE_URL required
        - remote sync enabled: REMOTE_SYNC_URL required
        """
        if self.is_test:
            if self.database_url is None:
                object.__setattr__(self, "database_url", "sqlite:///:memory:")
            object.__setattr__(self, "remote_sync_enabled", False)
            object.__setattr__(self, "rate_limit_enabled", False)
            return self

        if self.database_url is None:
            if self.environment == "production":
                raise ValueError(
                    "DATABASE_URL is required in production environment. "
                    "Example: sqlite:////var/lib/argfolio/argfolio.db"
                )
            object.__setattr__(self, "database_url", "sqlite:///./argfolio.db")

        if self.remote_sync_enabled and not self.remote_sync_url:
            raise ValueError(
                "REMOTE_SYNC_URL is required when REMOTE_SYNC_ENABLED is true."
            )

        return self

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database."""
        return self.database_url is not None and self.database_url.lower().startswith("sqlite://")

    @property
    def is_memory_sqlite(self) -> bool:
        """Check if using an in-memory SQLite database."""
        return self.is_sqlite and ":memory:" in self.database_url

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"

    @property
    def effective_log_format(self) -> str:
        """Log format, defaulting to json in production and text elsewhere."""
        if self.log_format is not None:
            return self.log_format
        return "json" if self.is_production else "text"


# Create single instance
settings = Settings()
