# argfolio/middleware/__init__.py
"""
ASGI middleware:
- Correlation ID tracking for request tracing
- Rate limiting for endpoints that trigger third-party fetches
"""

from argfolio.middleware.correlation import CorrelationIdMiddleware
from argfolio.middleware.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    "CorrelationIdMiddleware",
    "limiter",
    "rate_limit_exceeded_handler",
]
