# argfolio/utils/logging.py
"""
Logging configuration for Argfolio.

This module provides centralized logging setup with:
- Level from LOG_LEVEL (INFO by default)
- Correlation ID on every record
- JSON output for production, pipe-separated text elsewhere
- Quieter third-party HTTP and market data libraries

Usage:
    from argfolio.utils import setup_logging

    setup_logging()

What goes where:
    DEBUG   - Per-movement ledger steps, cache hits, raw provider payloads
    INFO    - Accrual runs, settlements, imports, sync pushes
    WARNING - Data-quality findings (oversell, missing FX or price),
              skipped misconfigured accounts, fallbacks to cached rates
    ERROR   - Failures with no fallback
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from argfolio.config import settings
from argfolio.utils.context import get_correlation_id

# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(correlation_id)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "-"

NOISY_LOGGERS = [
    "yfinance",
    "urllib3",
    "urllib3.connectionpool",
    "httpx",
    "httpcore",
    "peewee",
    "sqlalchemy.engine",
]

# LogRecord attributes that are not user-supplied "extra" fields
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "correlation_id", "message", "taskName",
}


# =============================================================================
# FILTER AND FORMATTER
# =============================================================================

class CorrelationIdFilter(logging.Filter):
    """Adds `correlation_id` to every record passing through the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line.

    Output format:
    {
        "timestamp": "2025-03-01T10:30:00.123+00:00",
        "level": "WARNING",
        "logger": "argfolio.services.ledger.average_cost",
        "correlation_id": "abc-123",
        "message": "Oversell on sell-2 ...",
        "extra": {...}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {}
        for key, value in record.__dict__.items():
            if key in _STANDARD_ATTRS:
                continue
            try:
                json.dumps(value)
                extra[key] = value
            except (TypeError, ValueError):
                extra[key] = str(value)

        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry)


# =============================================================================
# SETUP FUNCTION
# =============================================================================

def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        suppress_noisy_loggers: bool = True,
) -> None:
    """
    Configure the root logger once at application startup.

    Args:
        level: Log level name. Defaults to settings.log_level.
        log_format: 'text' or 'json'. Defaults to settings.effective_log_format.
        suppress_noisy_loggers: Set third-party loggers to WARNING.

    Raises:
        ValueError: If the level name is not a valid logging level
    """
    log_level_str = (level or settings.log_level).upper().strip()
    log_level = logging.getLevelName(log_level_str)
    if not isinstance(log_level, int):
        raise ValueError(f"Invalid log level: '{log_level_str}'")

    format_type = (log_format or settings.effective_log_format).lower()

    if format_type == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=DEFAULT_TEXT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if suppress_noisy_loggers:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging configured: level={log_level_str}, format={format_type}"
    )
