# argfolio/services/market_data/dolar_api.py
"""
ARS/USD rates from dolarapi.com.

GET https://dolarapi.com/v1/dolares returns one object per "casa":

    [{"casa": "oficial", "compra": 1050.5, "venta": 1090.5,
      "fechaActualizacion": "2025-03-01T15:00:00.000Z"}, ...]

Casa to family mapping:
    oficial -> OFICIAL, blue -> BLUE, bolsa -> MEP,
    contadoconliqui -> CCL, cripto -> CRIPTO
The cripto family falls back to MEP when the API omits it.
"""

import logging
from decimal import Decimal, InvalidOperation

import httpx

from argfolio.config import settings
from argfolio.schemas.fx import FxPair, FxRates
from argfolio.services.exceptions import ProviderUnavailableError
from argfolio.services.market_data.base import MarketDataSource
from argfolio.utils.date_utils import now_iso

logger = logging.getLogger(__name__)

CASA_TO_FIELD = {
    "oficial": "oficial",
    "blue": "blue",
    "bolsa": "mep",
    "contadoconliqui": "ccl",
    "cripto": "cripto",
}


def _to_decimal(value) -> Decimal | None:
    if value is None:
        return None
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return None
    return result if result > 0 else None


class DolarApiFxSource(MarketDataSource):
    """Live FX source backed by dolarapi.com."""

    def __init__(self, url: str | None = None, client: httpx.Client | None = None, **retry_kwargs) -> None:
        super().__init__(client=client, **retry_kwargs)
        self._url = url or settings.dolarapi_url

    @property
    def name(self) -> str:
        return "dolarapi"

    def fetch_fx_rates(self) -> FxRates:
        """
        Fetch all rate families.

        Returns:
            FxRates tagged with source "dolarapi"

        Raises:
            ProviderUnavailableError: Unreachable, bad payload, or no usable casa
            RateLimitError: HTTP 429 after retries
        """
        payload = self._execute_with_retry(self._get_json, self._url)
        if not isinstance(payload, list):
            raise ProviderUnavailableError(self.name, "expected a list of quotes")

        pairs: dict[str, FxPair] = {}
        updated_at: str | None = None
        for item in payload:
            if not isinstance(item, dict):
                continue
            field_name = CASA_TO_FIELD.get(str(item.get("casa", "")).lower())
            if field_name is None:
                continue
            pairs[field_name] = FxPair(
                buy=_to_decimal(item.get("compra")),
                sell=_to_decimal(item.get("venta")),
            )
            stamp = item.get("fechaActualizacion")
            if isinstance(stamp, str) and (updated_at is None or stamp > updated_at):
                updated_at = stamp

        if not pairs:
            raise ProviderUnavailableError(self.name, "no known casa in response")

        if "cripto" not in pairs and "mep" in pairs:
            pairs["cripto"] = pairs["mep"]

        logger.debug(f"Fetched {len(pairs)} FX families from {self.name}")
        return FxRates(
            **pairs,
            updated_at_iso=updated_at or now_iso(),
            source=self.name,
        )
