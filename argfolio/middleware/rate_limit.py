# argfolio/middleware/rate_limit.py
"""
Rate limiting for endpoints that hit third-party quotas.

CoinGecko's free tier answers 429 after a handful of calls per minute and
dolarapi.com is a community service, so the endpoints that trigger live
fetches (valuation refresh, FX) and the remote sync endpoints are
throttled per client IP. Everything else uses the default limit.

Usage:
    @router.get("/fx")
    @limiter.limit(RATE_LIMIT_MARKET)
    def get_fx(request: Request): ...
"""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from argfolio.config import settings
from argfolio.services.constants import RATE_LIMIT_DEFAULT

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 60

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """
    Return 429 in the same shape as every other API error.

    Args:
        request: The request that exceeded the rate limit
        exc: The RateLimitExceeded exception

    Returns:
        JSONResponse with 429 status and a Retry-After header
    """
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {"retry_after": RETRY_AFTER_SECONDS},
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )
