# argfolio/services/market_data/coingecko.py
"""
Crypto and stablecoin USD quotes from CoinGecko's simple price API.

GET /api/v3/simple/price?ids=bitcoin,tether&vs_currencies=usd&include_24hr_change=true

    {"bitcoin": {"usd": 65000.1, "usd_24h_change": -1.23}, ...}

Symbols map to CoinGecko ids through COINGECKO_IDS; an instrument may
override its id. Unknown symbols are tried lower-cased as ids.
"""

import logging
from decimal import Decimal, InvalidOperation

import httpx

from argfolio.config import settings
from argfolio.schemas.prices import PriceQuote
from argfolio.services.market_data.base import MarketDataSource

logger = logging.getLogger(__name__)

COINGECKO_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "SOL": "solana",
    "ADA": "cardano",
    "DOT": "polkadot",
    "MATIC": "matic-network",
    "LINK": "chainlink",
    "UNI": "uniswap",
    "AAVE": "aave",
    "USDT": "tether",
    "USDC": "usd-coin",
    "DAI": "dai",
}


class CoinGeckoQuoteSource(MarketDataSource):
    """USD quotes for crypto assets."""

    def __init__(self, url: str | None = None, client: httpx.Client | None = None, **retry_kwargs) -> None:
        super().__init__(client=client, **retry_kwargs)
        self._url = url or settings.coingecko_url

    @property
    def name(self) -> str:
        return "coingecko"

    def fetch_quotes(
            self,
            symbols: list[str],
            id_overrides: dict[str, str] | None = None,
    ) -> dict[str, PriceQuote]:
        """
        Fetch USD quotes for crypto symbols in one request.

        Args:
            symbols: Ticker symbols (e.g. ["BTC", "USDT"])
            id_overrides: symbol -> CoinGecko id for symbols not in the map

        Returns:
            Quotes keyed by the requested symbol; unknown ids are omitted

        Raises:
            RateLimitError: HTTP 429 after retries
            ProviderUnavailableError: Network error or bad payload
        """
        overrides = {k.upper(): v for k, v in (id_overrides or {}).items()}
        ids_by_symbol = {}
        for symbol in {s.strip().upper() for s in symbols if s}:
            ids_by_symbol[symbol] = overrides.get(symbol) or COINGECKO_IDS.get(symbol, symbol.lower())

        if not ids_by_symbol:
            return {}

        params = {
            "ids": ",".join(sorted(set(ids_by_symbol.values()))),
            "vs_currencies": "usd",
            "include_24hr_change": "true",
        }
        payload = self._execute_with_retry(self._get_json, self._url, params)
        if not isinstance(payload, dict):
            payload = {}

        quotes = {}
        for symbol, coin_id in ids_by_symbol.items():
            entry = payload.get(coin_id)
            if not isinstance(entry, dict) or entry.get("usd") is None:
                logger.warning(f"CoinGecko returned no price for {symbol} ({coin_id})")
                continue
            try:
                price = Decimal(str(entry["usd"]))
                change = entry.get("usd_24h_change")
                quotes[symbol] = PriceQuote(
                    price_usd=price,
                    change_pct_1d=Decimal(str(change)).quantize(Decimal("0.01")) if change is not None else None,
                )
            except (InvalidOperation, ValueError):
                logger.warning(f"CoinGecko returned an invalid price for {symbol}: {entry}")

        return quotes
