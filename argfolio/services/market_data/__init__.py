# argfolio/services/market_data/__init__.py
"""
Live market data sources and the price resolution service.

Usage:
    from argfolio.services.market_data import (
        CoinGeckoQuoteSource,
        DolarApiFxSource,
        YahooQuoteSource,
        PriceService,
    )
"""

from argfolio.services.market_data.base import MarketDataSource
from argfolio.services.market_data.coingecko import CoinGeckoQuoteSource, COINGECKO_IDS
from argfolio.services.market_data.dolar_api import DolarApiFxSource
from argfolio.services.market_data.price_service import PriceService, PriceSnapshot, ResolvedPrice
from argfolio.services.market_data.yahoo import YahooQuoteSource

__all__ = [
    "MarketDataSource",
    "CoinGeckoQuoteSource",
    "COINGECKO_IDS",
    "DolarApiFxSource",
    "YahooQuoteSource",
    "PriceService",
    "PriceSnapshot",
    "ResolvedPrice",
]
