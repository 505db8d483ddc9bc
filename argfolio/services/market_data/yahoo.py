# argfolio/services/market_data/yahoo.py
"""
Yahoo Finance quote source (via yfinance) for CEDEAR underlyings.

CEDEARs are valued from the USD price of the underlying share on its home
market (AAPL, KO, MELI, ...) divided by the receipt ratio, so this source
only needs the last close and the previous close for a 1-day change.

yfinance has no batch "last price" call that reports per-symbol failures,
so symbols are fetched one by one; a failing symbol is logged and left out
of the result instead of failing the whole batch.
"""

import logging
from decimal import Decimal
from typing import Any

import pandas as pd
import yfinance as yf

from argfolio.schemas.prices import PriceQuote
from argfolio.services.exceptions import (
    MarketDataError,
    ProviderUnavailableError,
    QuoteNotFoundError,
    RateLimitError,
)
from argfolio.services.market_data.base import MarketDataSource

logger = logging.getLogger(__name__)

PRICE_PRECISION = Decimal("0.00000001")


class YahooQuoteSource(MarketDataSource):
    """USD quotes for listed equities."""

    @property
    def name(self) -> str:
        return "yahoo"

    def fetch_quotes(self, symbols: list[str]) -> dict[str, PriceQuote]:
        """
        Fetch last close and 1-day change for each symbol.

        Args:
            symbols: Yahoo symbols (e.g. ["AAPL", "MELI"])

        Returns:
            Quotes for the symbols that resolved; missing ones are omitted

        Raises:
            ProviderUnavailableError: If every symbol failed for transport reasons
        """
        quotes: dict[str, PriceQuote] = {}
        transport_failures = 0

        for symbol in sorted({s.strip().upper() for s in symbols if s}):
            try:
                quotes[symbol] = self._execute_with_retry(self._fetch_one, symbol)
            except QuoteNotFoundError:
                logger.warning(f"No Yahoo quote for {symbol}")
            except MarketDataError as e:
                transport_failures += 1
                logger.warning(f"Yahoo fetch failed for {symbol}: {e}")

        if symbols and not quotes and transport_failures:
            raise ProviderUnavailableError(self.name, f"{transport_failures} symbol(s) failed")

        return quotes

    def _fetch_one(self, symbol: str) -> PriceQuote:
        try:
            df = yf.Ticker(symbol).history(period="5d", interval="1d", auto_adjust=False)
        except Exception as e:
            error_str = str(e).lower()
            if "rate limit" in error_str or "too many requests" in error_str:
                raise RateLimitError(provider=self.name)
            raise ProviderUnavailableError(provider=self.name, reason=str(e))

        if df is None or df.empty or "Close" not in df.columns:
            raise QuoteNotFoundError(symbol, self.name)

        closes = [c for c in (self._to_decimal(v) for v in df["Close"].tolist()) if c is not None]
        if not closes:
            raise QuoteNotFoundError(symbol, self.name)

        last = closes[-1]
        change = None
        if len(closes) >= 2 and closes[-2] > 0:
            change = ((last / closes[-2] - 1) * 100).quantize(Decimal("0.01"))

        logger.debug(f"Yahoo {symbol}: {last} ({change}%)")
        return PriceQuote(price_usd=last, change_pct_1d=change)

    @staticmethod
    def _to_decimal(value: Any) -> Decimal | None:
        """Convert a value to Decimal, returning None for NaN/None."""
        if value is None or pd.isna(value):
            return None
        try:
            return Decimal(str(value)).quantize(PRICE_PRECISION)
        except (TypeError, ValueError, ArithmeticError):
            return None
