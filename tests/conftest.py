# tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Document store fixtures (in-memory, and SQLite through SqlDocumentStore)
- Fake FX and quote sources
- Sample data factories for accounts, instruments and movements
- An API client wired to the in-memory store and fake sources
"""

import os

# Settings are read at import time; force the test profile first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DOCUMENT_STORE", "memory")

from datetime import date
from decimal import Decimal
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from argfolio.models import AccountKind, AssetCategory, Base, Currency
from argfolio.schemas.accounts import Account, CashYield
from argfolio.schemas.fx import FxPair, FxRates
from argfolio.schemas.instruments import Instrument
from argfolio.schemas.movements import (
    CashMovement,
    FixedDepositTerms,
    IncomeMovement,
    TradeMovement,
)
from argfolio.schemas.prices import PriceQuote
from argfolio.services.exceptions import ProviderUnavailableError
from argfolio.services.fx.resolver import FxResolver
from argfolio.services.storage.memory import InMemoryDocumentStore
from argfolio.services.storage.repository import PortfolioRepository
from argfolio.services.storage.sql import SqlDocumentStore
from argfolio.services.valuation_config import ValuationConfig
from argfolio.services.yield_accrual.service import AccrualGuard


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture(scope="function")
def repository(store) -> PortfolioRepository:
    return PortfolioRepository(store)


@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def sql_store(db_engine) -> SqlDocumentStore:
    return SqlDocumentStore(sessionmaker(autocommit=False, autoflush=False, bind=db_engine))


# =============================================================================
# FX FIXTURES
# =============================================================================

def create_fx_rates(
        oficial: tuple[str, str] = ("1000", "1050"),
        blue: tuple[str, str] = ("1200", "1220"),
        mep: tuple[str, str] = ("1180", "1200"),
        ccl: tuple[str, str] = ("1190", "1210"),
        cripto: tuple[str, str] = ("1220", "1240"),
) -> FxRates:
    """FxRates from (buy, sell) string pairs."""

    def pair(values: tuple[str, str]) -> FxPair:
        return FxPair(buy=Decimal(values[0]), sell=Decimal(values[1]))

    return FxRates(
        oficial=pair(oficial),
        blue=pair(blue),
        mep=pair(mep),
        ccl=pair(ccl),
        cripto=pair(cripto),
        updated_at_iso="2025-03-01T15:00:00+00:00",
        source="test",
    )


@pytest.fixture
def fx_rates() -> FxRates:
    return create_fx_rates()


@pytest.fixture
def resolver(fx_rates) -> FxResolver:
    return FxResolver(fx_rates, ValuationConfig())


# =============================================================================
# FAKE SOURCES
# =============================================================================

class FakeFxSource:
    """FxRateSource returning fixed rates, or failing on demand."""

    def __init__(self, rates: FxRates | None = None) -> None:
        self.rates = rates or create_fx_rates()
        self.fail = False
        self.calls = 0

    @property
    def name(self) -> str:
        return "fake-fx"

    def fetch_fx_rates(self) -> FxRates:
        self.calls += 1
        if self.fail:
            raise ProviderUnavailableError(self.name, "simulated outage")
        return self.rates


class FakeQuoteSource:
    """QuoteSource returning configured quotes; unknown symbols are omitted."""

    def __init__(self, name: str = "fake-quotes") -> None:
        self._name = name
        self.quotes: dict[str, PriceQuote] = {}
        self.fail = False
        self.requested: list[list[str]] = []

    @property
    def name(self) -> str:
        return self._name

    def add_quote(self, symbol: str, price_usd: str, change_pct: str | None = None) -> None:
        self.quotes[symbol.upper()] = PriceQuote(
            price_usd=Decimal(price_usd),
            change_pct_1d=Decimal(change_pct) if change_pct is not None else None,
        )

    def fetch_quotes(self, symbols: list[str]) -> dict[str, PriceQuote]:
        self.requested.append(list(symbols))
        if self.fail:
            raise ProviderUnavailableError(self.name, "simulated outage")
        return {s: self.quotes[s] for s in symbols if s in self.quotes}


@pytest.fixture
def fx_source() -> FakeFxSource:
    return FakeFxSource()


@pytest.fixture
def crypto_source() -> FakeQuoteSource:
    return FakeQuoteSource("fake-crypto")


@pytest.fixture
def equity_source() -> FakeQuoteSource:
    return FakeQuoteSource("fake-equity")


@pytest.fixture
def accrual_guard() -> AccrualGuard:
    return AccrualGuard()


# =============================================================================
# FACTORIES
# =============================================================================

def create_account(
        account_id: str = "acc-broker",
        name: str = "Broker",
        kind: AccountKind = AccountKind.BROKER,
        tna: str | None = None,
        last_accrued_date: date | None = None,
) -> Account:
    cash_yield = None
    if tna is not None:
        cash_yield = CashYield(enabled=True, tna=Decimal(tna), last_accrued_date=last_accrued_date)
    return Account(id=account_id, name=name, kind=kind, cash_yield=cash_yield)


def create_instrument(
        instrument_id: str = "cedear-aapl",
        symbol: str = "AAPL",
        category: AssetCategory = AssetCategory.CEDEAR,
        native_currency: Currency = Currency.ARS,
        cedear_ratio: str | None = None,
        **kwargs,
) -> Instrument:
    return Instrument(
        id=instrument_id,
        symbol=symbol,
        category=category,
        native_currency=native_currency,
        cedear_ratio=cedear_ratio,
        **kwargs,
    )


def create_trade(
        movement_id: str,
        side: str,
        quantity: str,
        unit_price: str,
        when: str = "2025-01-10T12:00:00",
        instrument_id: str = "cedear-aapl",
        account_id: str = "acc-broker",
        currency: Currency = Currency.ARS,
        fee: str | None = None,
        fx_at_trade: str | None = None,
) -> TradeMovement:
    return TradeMovement(
        id=movement_id,
        type=side,
        datetime_iso=when,
        account_id=account_id,
        instrument_id=instrument_id,
        quantity=Decimal(quantity),
        unit_price=Decimal(unit_price),
        trade_currency=currency,
        fee_amount=Decimal(fee) if fee is not None else None,
        fx_at_trade=Decimal(fx_at_trade) if fx_at_trade is not None else None,
    )


def create_cash(
        movement_id: str,
        amount: str,
        side: str = "DEPOSIT",
        when: str = "2025-01-01T10:00:00",
        account_id: str = "acc-broker",
        currency: Currency = Currency.ARS,
) -> CashMovement:
    return CashMovement(
        id=movement_id,
        type=side,
        datetime_iso=when,
        account_id=account_id,
        total_amount=Decimal(amount),
        trade_currency=currency,
    )


def create_interest(
        movement_id: str,
        amount: str,
        when: str = "2025-01-15T00:01:00",
        account_id: str = "acc-broker",
) -> IncomeMovement:
    return IncomeMovement(
        id=movement_id,
        type="INTEREST",
        datetime_iso=when,
        account_id=account_id,
        total_amount=Decimal(amount),
    )


def create_fixed_deposit(
        movement_id: str = "pf-1",
        principal: str = "1000000",
        tna: str = "36.5",
        term_days: int = 30,
        start: str = "2025-01-01",
        account_id: str = "acc-bank",
        bank: str = "Banco Nación",
) -> CashMovement:
    return CashMovement(
        id=movement_id,
        type="DEPOSIT",
        datetime_iso=f"{start}T11:00:00",
        account_id=account_id,
        total_amount=Decimal(principal),
        fixed_deposit=FixedDepositTerms(
            bank=bank,
            principal_ars=Decimal(principal),
            tna=Decimal(tna),
            term_days=term_days,
        ),
    )


# =============================================================================
# API CLIENT
# =============================================================================

@pytest.fixture(scope="function")
def client(store, fx_source, crypto_source, equity_source, accrual_guard, monkeypatch) -> Iterator[TestClient]:
    """
    TestClient on the in-memory store with fake market data sources.

    Every yield service built during the test shares `accrual_guard`
    instead of the process-wide one.
    """
    from argfolio import dependencies
    from argfolio.main import app
    from argfolio.services.yield_accrual import service as yield_service

    monkeypatch.setattr(yield_service, "accrual_guard", accrual_guard)

    app.dependency_overrides[dependencies.get_document_store] = lambda: store
    app.dependency_overrides[dependencies.get_fx_source] = lambda: fx_source
    app.dependency_overrides[dependencies.get_crypto_source] = lambda: crypto_source
    app.dependency_overrides[dependencies.get_equity_source] = lambda: equity_source

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
