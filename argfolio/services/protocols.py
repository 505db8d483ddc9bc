# argfolio/services/protocols.py
"""
Protocol interfaces for the engine's external collaborators.

Using typing.Protocol enables structural subtyping:
- Store and source implementations satisfy protocols without inheritance
- Test fakes work the same way
- The engine depends only on these shapes, never on a concrete backend
"""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from argfolio.schemas.fx import FxRates
    from argfolio.schemas.prices import PriceQuote


class DocumentStore(Protocol):
    """
    Key-value document store: collections of JSON records keyed by `id`.

    put() is an upsert; storing a record whose id already exists replaces
    it. This is the only consistency primitive the engine relies on.
    """

    def list(self, collection: str) -> list[dict]:
        ...

    def get(self, collection: str, record_id: str) -> dict | None:
        ...

    def put(self, collection: str, record: dict) -> None:
        ...

    def put_many(self, collection: str, records: list[dict]) -> int:
        ...

    def delete(self, collection: str, record_id: str) -> bool:
        ...


class QuoteSource(Protocol):
    """
    Live USD price source.

    Best effort: symbols the source does not know are simply absent from
    the result; a total failure raises a MarketDataError.
    """

    @property
    def name(self) -> str:
        ...

    def fetch_quotes(self, symbols: list[str]) -> dict[str, PriceQuote]:
        ...


class FxRateSource(Protocol):
    """Live ARS/USD rate source. Raises MarketDataError when unavailable."""

    @property
    def name(self) -> str:
        ...

    def fetch_fx_rates(self) -> FxRates:
        ...
