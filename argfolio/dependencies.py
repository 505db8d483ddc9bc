# argfolio/dependencies.py
"""
Dependency injection module for FastAPI services.

Market data sources are process-wide singletons (they hold HTTP clients
and their retry state). The document store is a singleton too; the
repository and the services on top of it are cheap and built per
request.

Usage in routers:
    from argfolio.dependencies import get_repository, get_valuation_service

    @router.get("/")
    def get_portfolio(service: ValuationService = Depends(get_valuation_service)):
        ...

Tests replace `get_document_store` (or any other provider) through
`app.dependency_overrides`.
"""

import logging
from functools import lru_cache

from fastapi import Depends

from argfolio.config import settings
from argfolio.database import SessionLocal
from argfolio.services.backup import BackupService
from argfolio.services.fixed_deposits.service import FixedDepositService
from argfolio.services.fx.rate_service import FxRateService
from argfolio.services.market_data.coingecko import CoinGeckoQuoteSource
from argfolio.services.market_data.dolar_api import DolarApiFxSource
from argfolio.services.market_data.price_service import PriceService
from argfolio.services.market_data.yahoo import YahooQuoteSource
from argfolio.services.protocols import DocumentStore, FxRateSource, QuoteSource
from argfolio.services.remote_sync import RemoteSyncClient, RemoteSyncService
from argfolio.services.snapshots import SnapshotService
from argfolio.services.storage.memory import InMemoryDocumentStore
from argfolio.services.storage.repository import PortfolioRepository
from argfolio.services.storage.sql import SqlDocumentStore
from argfolio.services.valuation.service import ValuationService
from argfolio.services.yield_accrual.service import YieldAccrualService

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETONS
# =============================================================================
# @lru_cache returns the same instance on every call (lazy singleton)

@lru_cache(maxsize=1)
def get_document_store() -> DocumentStore:
    """Document store selected by DOCUMENT_STORE."""
    if settings.document_store == "memory":
        logger.info("Using in-memory document store")
        return InMemoryDocumentStore()
    logger.info("Using SQL document store")
    return SqlDocumentStore(SessionLocal)


@lru_cache(maxsize=1)
def get_fx_source() -> FxRateSource:
    return DolarApiFxSource()


@lru_cache(maxsize=1)
def get_crypto_source() -> QuoteSource:
    return CoinGeckoQuoteSource()


@lru_cache(maxsize=1)
def get_equity_source() -> QuoteSource:
    return YahooQuoteSource()


@lru_cache(maxsize=1)
def get_remote_sync_client() -> RemoteSyncClient:
    return RemoteSyncClient()


# =============================================================================
# PER-REQUEST
# =============================================================================

def get_repository(store: DocumentStore = Depends(get_document_store)) -> PortfolioRepository:
    return PortfolioRepository(store)


def get_fx_rate_service(
        repository: PortfolioRepository = Depends(get_repository),
        source: FxRateSource = Depends(get_fx_source),
) -> FxRateService:
    return FxRateService(source, repository)


def get_price_service(
        repository: PortfolioRepository = Depends(get_repository),
        crypto_source: QuoteSource = Depends(get_crypto_source),
        equity_source: QuoteSource = Depends(get_equity_source),
) -> PriceService:
    return PriceService(repository, crypto_source, equity_source)


def get_valuation_service(
        repository: PortfolioRepository = Depends(get_repository),
        fx_service: FxRateService = Depends(get_fx_rate_service),
        price_service: PriceService = Depends(get_price_service),
) -> ValuationService:
    return ValuationService(repository, fx_service, price_service)


def get_yield_service(repository: PortfolioRepository = Depends(get_repository)) -> YieldAccrualService:
    return YieldAccrualService(repository)


def get_fixed_deposit_service(repository: PortfolioRepository = Depends(get_repository)) -> FixedDepositService:
    return FixedDepositService(repository)


def get_snapshot_service(repository: PortfolioRepository = Depends(get_repository)) -> SnapshotService:
    return SnapshotService(repository)


def get_backup_service(repository: PortfolioRepository = Depends(get_repository)) -> BackupService:
    return BackupService(repository)


def get_remote_sync_service(
        repository: PortfolioRepository = Depends(get_repository),
        client: RemoteSyncClient = Depends(get_remote_sync_client),
) -> RemoteSyncService:
    return RemoteSyncService(repository, client)
