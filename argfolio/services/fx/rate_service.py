# argfolio/services/fx/rate_service.py
"""
FX Rate Service - current ARS/USD rates with last-known-good fallback.

Resolution order:
1. Live fetch from the configured FxRateSource (with retries)
2. On failure, the last successfully fetched set stored in `fxCache`
3. Nothing cached: rates are None and USD/ARS cross values downstream
   are reported as unavailable

Every successful live fetch overwrites the cache. The cache is the only
FX state the service ever persists.

Usage:
    service = FxRateService(DolarApiFxSource(), repository)
    result = service.get_rates()
    if result.is_fallback:
        ...
"""

import logging
from dataclasses import dataclass, field

from argfolio.schemas.fx import FxRates
from argfolio.services.exceptions import FXRatesUnavailableError, MarketDataError
from argfolio.services.protocols import FxRateSource
from argfolio.services.storage.repository import PortfolioRepository

logger = logging.getLogger(__name__)


@dataclass
class FxRatesResult:
    """
    Outcome of a rate lookup.

    Attributes:
        rates: Rates to use, or None when nothing is available
        is_fallback: True when rates came from the cache
        warnings: Why a fallback (or nothing) was used
    """

    rates: FxRates | None
    is_fallback: bool = False
    warnings: list[str] = field(default_factory=list)


class FxRateService:
    """Fetches current rates and maintains the fallback cache."""

    def __init__(self, source: FxRateSource, repository: PortfolioRepository) -> None:
        self._source = source
        self._repository = repository

    def get_rates(self) -> FxRatesResult:
        """
        Current rates, falling back to the cached set.

        Never raises for provider failures; see require_rates().
        """
        try:
            rates = self._source.fetch_fx_rates()
        except MarketDataError as e:
            return self._fallback(str(e))

        self._repository.put_cached_fx_rates(rates)
        logger.info(f"FX rates refreshed from {rates.source} (updated {rates.updated_at_iso})")
        return FxRatesResult(rates=rates)

    def require_rates(self) -> FxRatesResult:
        """
        Like get_rates() but raises when no rates exist at all.

        Raises:
            FXRatesUnavailableError: Live fetch failed and cache is empty
        """
        result = self.get_rates()
        if result.rates is None:
            raise FXRatesUnavailableError("; ".join(result.warnings) or "no source")
        return result

    def _fallback(self, reason: str) -> FxRatesResult:
        cached = self._repository.get_cached_fx_rates()
        if cached is None:
            message = f"FX rates unavailable ({reason}) and no cached rates exist"
            logger.error(message)
            return FxRatesResult(rates=None, is_fallback=False, warnings=[message])

        message = f"FX live fetch failed ({reason}); using cached rates from {cached.updated_at_iso}"
        logger.warning(message)
        return FxRatesResult(rates=cached, is_fallback=True, warnings=[message])
