# argfolio/services/market_data/price_service.py
"""
Price Service - resolves one price per instrument for a valuation.

Resolution order per instrument:
1. Manual override (status "manual"), in the currency the user entered
2. Live quote from the category's source (status "ok"), in USD
3. Last-known quote from `priceCache` (status "cached", or "stale" when
   older than PRICE_CACHE_TTL_HOURS)
4. Stablecoins only: 1 USD (status "estimated")
5. Nothing: price None (status "missing")

Sources are queried concurrently (one task per source on a thread pool)
and joined before anything is returned. The price cache is written only
after every fetch finished, so an abandoned request never leaves a
partially updated cache behind.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from argfolio.config import settings
from argfolio.models import AssetCategory, Currency
from argfolio.schemas.instruments import Instrument
from argfolio.schemas.prices import CachedPrice, PriceQuote, PriceStatus
from argfolio.services.exceptions import MarketDataError
from argfolio.services.market_data.coingecko import CoinGeckoQuoteSource
from argfolio.services.protocols import QuoteSource
from argfolio.services.storage.repository import PortfolioRepository

logger = logging.getLogger(__name__)

CRYPTO_CATEGORIES = frozenset({AssetCategory.CRYPTO, AssetCategory.STABLE})


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class ResolvedPrice:
    """
    Price chosen for one instrument.

    Attributes:
        instrument_id: Instrument the price belongs to
        price: Unit price, or None when missing
        currency: Currency of `price` (USD for live quotes)
        status: Where the price came from
        change_pct_1d: Daily change in percent, when the source provides it
    """

    instrument_id: str
    price: Decimal | None
    currency: Currency
    status: PriceStatus
    change_pct_1d: Decimal | None = None


@dataclass
class PriceSnapshot:
    """All resolved prices plus fetch warnings."""

    prices: dict[str, ResolvedPrice] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def get(self, instrument_id: str) -> ResolvedPrice | None:
        return self.prices.get(instrument_id)


# =============================================================================
# SERVICE
# =============================================================================

class PriceService:
    """
    Attributes:
        _crypto_source: Source for CRYPTO and STABLE instruments
        _equity_source: Source for CEDEAR underlyings
    """

    def __init__(
            self,
            repository: PortfolioRepository,
            crypto_source: QuoteSource,
            equity_source: QuoteSource,
            max_workers: int | None = None,
            cache_ttl_hours: int | None = None,
    ) -> None:
        self._repository = repository
        self._crypto_source = crypto_source
        self._equity_source = equity_source
        self._max_workers = max_workers or settings.fetch_max_workers
        self._cache_ttl = timedelta(hours=cache_ttl_hours or settings.price_cache_ttl_hours)

    def resolve_prices(
            self,
            instruments: list[Instrument],
            fetch_live: bool = True,
            now: datetime | None = None,
    ) -> PriceSnapshot:
        """
        Resolve a price for every instrument.

        Args:
            instruments: Instruments to price
            fetch_live: False to skip network calls (manual + cache only)
            now: Clock override for cache staleness

        Returns:
            PriceSnapshot with one ResolvedPrice per instrument
        """
        now = now or datetime.now(timezone.utc)
        snapshot = PriceSnapshot()

        live: dict[str, PriceQuote] = {}
        if fetch_live:
            live = self._fetch_live(instruments, snapshot.warnings)
            if live:
                self._repository.put_cached_prices([
                    CachedPrice(
                        id=symbol,
                        price_usd=quote.price_usd,
                        change_pct_1d=quote.change_pct_1d,
                        fetched_at_iso=now.isoformat(),
                    )
                    for symbol, quote in live.items()
                ])

        manual = {p.id: p for p in self._repository.list_manual_prices()}
        cached = self._repository.list_cached_prices()

        for instrument in instruments:
            snapshot.prices[instrument.id] = self._resolve_one(instrument, manual, live, cached, now)

        missing = [i.symbol for i in instruments if snapshot.prices[i.id].status == "missing"]
        if missing:
            logger.warning(f"No price for {len(missing)} instrument(s): {', '.join(sorted(missing))}")

        return snapshot

    # =========================================================================
    # PRIVATE
    # =========================================================================

    def _fetch_live(self, instruments: list[Instrument], warnings: list[str]) -> dict[str, PriceQuote]:
        crypto = [i for i in instruments if i.category in CRYPTO_CATEGORIES]
        equities = [i for i in instruments if i.category == AssetCategory.CEDEAR]

        tasks = {}
        with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="quotes") as pool:
            if crypto:
                tasks[self._crypto_source.name] = pool.submit(self._fetch_crypto, crypto)
            if equities:
                tasks[self._equity_source.name] = pool.submit(
                    self._equity_source.fetch_quotes,
                    sorted({i.quote_symbol for i in equities}),
                )

            quotes: dict[str, PriceQuote] = {}
            for source_name, future in tasks.items():
                try:
                    quotes.update(future.result())
                except MarketDataError as e:
                    message = f"Quote source {source_name} failed: {e}"
                    logger.warning(message)
                    warnings.append(message)

        logger.debug(f"Fetched {len(quotes)} live quote(s) from {len(tasks)} source(s)")
        return quotes

    def _fetch_crypto(self, instruments: list[Instrument]) -> dict[str, PriceQuote]:
        symbols = sorted({i.quote_symbol for i in instruments})
        if isinstance(self._crypto_source, CoinGeckoQuoteSource):
            overrides = {i.quote_symbol: i.coingecko_id for i in instruments if i.coingecko_id}
            return self._crypto_source.fetch_quotes(symbols, id_overrides=overrides)
        return self._crypto_source.fetch_quotes(symbols)

    def _resolve_one(
            self,
            instrument: Instrument,
            manual: dict,
            live: dict[str, PriceQuote],
            cached: dict[str, CachedPrice],
            now: datetime,
    ) -> ResolvedPrice:
        override = manual.get(instrument.id)
        if override is not None:
            return ResolvedPrice(instrument.id, override.price, override.currency, "manual")

        symbol = instrument.quote_symbol
        quote = live.get(symbol)
        if quote is not None:
            return ResolvedPrice(instrument.id, quote.price_usd, Currency.USD, "ok", quote.change_pct_1d)

        last_known = cached.get(symbol)
        if last_known is not None and instrument.category in CRYPTO_CATEGORIES | {AssetCategory.CEDEAR}:
            fetched_at = datetime.fromisoformat(last_known.fetched_at_iso)
            if fetched_at.tzinfo is None:
                fetched_at = fetched_at.replace(tzinfo=timezone.utc)
            status = "stale" if now - fetched_at > self._cache_ttl else "cached"
            return ResolvedPrice(
                instrument.id, last_known.price_usd, Currency.USD, status, last_known.change_pct_1d
            )

        if instrument.category == AssetCategory.STABLE:
            return ResolvedPrice(instrument.id, Decimal(1), Currency.USD, "estimated")

        return ResolvedPrice(instrument.id, None, instrument.native_currency, "missing")
