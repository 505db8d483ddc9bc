# argfolio/utils/__init__.py
"""
Cross-cutting utilities:
- logging: Logging configuration with correlation ID support
- context: Request context (correlation ID)
- date_utils: Local-date helpers for ISO movement timestamps
"""

from argfolio.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
)
from argfolio.utils.logging import setup_logging

__all__ = [
    "setup_logging",
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]
