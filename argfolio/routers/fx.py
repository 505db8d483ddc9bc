# argfolio/routers/fx.py
"""FX rate endpoint: current ARS/USD rates with cached fallback."""

from fastapi import APIRouter, Depends, Request

from argfolio.dependencies import get_fx_rate_service
from argfolio.middleware.rate_limit import limiter
from argfolio.schemas.fx import FxRatesResponse
from argfolio.services.constants import RATE_LIMIT_MARKET
from argfolio.services.fx.rate_service import FxRateService

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/fx",
    tags=["FX Rates"],
)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "",
    response_model=FxRatesResponse,
    summary="Get current FX rates",
)
@limiter.limit(RATE_LIMIT_MARKET)
def get_fx_rates(
        request: Request,  # Required for rate limiting
        service: FxRateService = Depends(get_fx_rate_service),
) -> FxRatesResponse:
    """
    Oficial, blue, MEP, CCL and cripto rates in ARS per USD.

    - **isFallback**: true when the live source failed and the last
      cached set was returned

    Raises **503** when the source is down and nothing is cached.
    """
    result = service.require_rates()
    return FxRatesResponse(rates=result.rates, is_fallback=result.is_fallback, warnings=result.warnings)
