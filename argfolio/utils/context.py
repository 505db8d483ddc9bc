# argfolio/utils/context.py
"""
Request context management.

Holds the correlation ID of the request being served so that every log
line emitted while handling it (including from services several layers
down) can be tied back to the request.

Uses contextvars, so the value follows the request through FastAPI's
threadpool and any awaits without being passed around explicitly.

Usage:
    from argfolio.utils.context import get_correlation_id, set_correlation_id

    set_correlation_id("abc-123")
    get_correlation_id()  # "abc-123"
"""

from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """
    Get the current request's correlation ID.

    Returns:
        The correlation ID for the current request, or None if not set.
    """
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current request."""
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    """Clear the correlation ID at the end of a request."""
    _correlation_id_var.set(None)
