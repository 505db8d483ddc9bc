# argfolio/services/storage/repository.py
"""
Typed repository over a DocumentStore.

Converts between stored camelCase dicts and the pydantic schemas so the
rest of the services never touch raw documents. A stored record that no
longer validates is logged and skipped rather than failing every read
of its collection.
"""

import logging
from typing import Callable, TypeVar

from pydantic import ValidationError as PydanticValidationError

from argfolio.schemas.accounts import Account
from argfolio.schemas.debts import Debt
from argfolio.schemas.fx import FxRates
from argfolio.schemas.instruments import Instrument
from argfolio.schemas.movements import Movement, parse_movement
from argfolio.schemas.preferences import Preferences
from argfolio.schemas.prices import CachedPrice, ManualPrice
from argfolio.schemas.snapshots import Snapshot
from argfolio.services.constants import (
    COLLECTION_ACCOUNTS,
    COLLECTION_DEBTS,
    COLLECTION_FX_CACHE,
    COLLECTION_INSTRUMENTS,
    COLLECTION_MANUAL_PRICES,
    COLLECTION_MOVEMENTS,
    COLLECTION_PREFERENCES,
    COLLECTION_PRICE_CACHE,
    COLLECTION_SNAPSHOTS,
    SINGLETON_ID,
)
from argfolio.services.exceptions import (
    AccountNotFoundError,
    DebtNotFoundError,
    InstrumentNotFoundError,
    MovementNotFoundError,
)
from argfolio.services.protocols import DocumentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PortfolioRepository:
    """
    Typed access to every collection.

    Attributes:
        store: Underlying document store (exposed for bulk backup operations)
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _parse_all(self, collection: str, parse: Callable[[dict], T]) -> list[T]:
        items = []
        for raw in self.store.list(collection):
            try:
                items.append(parse(raw))
            except PydanticValidationError as e:
                logger.warning(
                    f"Skipping invalid {collection} record {raw.get('id')!r}: "
                    f"{e.error_count()} validation error(s)"
                )
        return items

    def _parse_one(self, collection: str, record_id: str, parse: Callable[[dict], T]) -> T | None:
        raw = self.store.get(collection, record_id)
        return parse(raw) if raw is not None else None

    # =========================================================================
    # ACCOUNTS
    # =========================================================================

    def list_accounts(self) -> list[Account]:
        return self._parse_all(COLLECTION_ACCOUNTS, Account.model_validate)

    def get_account(self, account_id: str) -> Account | None:
        return self._parse_one(COLLECTION_ACCOUNTS, account_id, Account.model_validate)

    def require_account(self, account_id: str) -> Account:
        account = self.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def put_account(self, account: Account) -> None:
        self.store.put(COLLECTION_ACCOUNTS, account.to_document())

    def delete_account(self, account_id: str) -> None:
        if not self.store.delete(COLLECTION_ACCOUNTS, account_id):
            raise AccountNotFoundError(account_id)

    # =========================================================================
    # INSTRUMENTS
    # =========================================================================

    def list_instruments(self) -> list[Instrument]:
        return self._parse_all(COLLECTION_INSTRUMENTS, Instrument.model_validate)

    def get_instrument(self, instrument_id: str) -> Instrument | None:
        return self._parse_one(COLLECTION_INSTRUMENTS, instrument_id, Instrument.model_validate)

    def require_instrument(self, instrument_id: str) -> Instrument:
        instrument = self.get_instrument(instrument_id)
        if instrument is None:
            raise InstrumentNotFoundError(instrument_id)
        return instrument

    def put_instrument(self, instrument: Instrument) -> None:
        self.store.put(COLLECTION_INSTRUMENTS, instrument.to_document())

    def delete_instrument(self, instrument_id: str) -> None:
        if not self.store.delete(COLLECTION_INSTRUMENTS, instrument_id):
            raise InstrumentNotFoundError(instrument_id)

    # =========================================================================
    # MOVEMENTS
    # =========================================================================

    def list_movements(self) -> list[Movement]:
        return self._parse_all(COLLECTION_MOVEMENTS, parse_movement)

    def get_movement(self, movement_id: str) -> Movement | None:
        return self._parse_one(COLLECTION_MOVEMENTS, movement_id, parse_movement)

    def require_movement(self, movement_id: str) -> Movement:
        movement = self.get_movement(movement_id)
        if movement is None:
            raise MovementNotFoundError(movement_id)
        return movement

    def put_movement(self, movement: Movement) -> None:
        self.store.put(COLLECTION_MOVEMENTS, movement.to_document())

    def put_movements(self, movements: list[Movement]) -> int:
        return self.store.put_many(COLLECTION_MOVEMENTS, [m.to_document() for m in movements])

    def delete_movement(self, movement_id: str) -> None:
        if not self.store.delete(COLLECTION_MOVEMENTS, movement_id):
            raise MovementNotFoundError(movement_id)

    # =========================================================================
    # MANUAL PRICES
    # =========================================================================

    def list_manual_prices(self) -> list[ManualPrice]:
        return self._parse_all(COLLECTION_MANUAL_PRICES, ManualPrice.model_validate)

    def put_manual_price(self, price: ManualPrice) -> None:
        self.store.put(COLLECTION_MANUAL_PRICES, price.to_document())

    def delete_manual_price(self, instrument_id: str) -> bool:
        return self.store.delete(COLLECTION_MANUAL_PRICES, instrument_id)

    # =========================================================================
    # DEBTS
    # =========================================================================

    def list_debts(self) -> list[Debt]:
        return self._parse_all(COLLECTION_DEBTS, Debt.model_validate)

    def require_debt(self, debt_id: str) -> Debt:
        debt = self._parse_one(COLLECTION_DEBTS, debt_id, Debt.model_validate)
        if debt is None:
            raise DebtNotFoundError(debt_id)
        return debt

    def put_debt(self, debt: Debt) -> None:
        self.store.put(COLLECTION_DEBTS, debt.to_document())

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def list_snapshots(self) -> list[Snapshot]:
        snapshots = self._parse_all(COLLECTION_SNAPSHOTS, Snapshot.model_validate)
        return sorted(snapshots, key=lambda s: s.date_local)

    def put_snapshot(self, snapshot: Snapshot) -> None:
        self.store.put(COLLECTION_SNAPSHOTS, snapshot.to_document())

    # =========================================================================
    # PREFERENCES
    # =========================================================================

    def get_preferences(self) -> Preferences:
        """Stored preferences, or defaults when none were saved."""
        raw = self.store.get(COLLECTION_PREFERENCES, SINGLETON_ID)
        if raw is None:
            return Preferences()
        raw = {k: v for k, v in raw.items() if k != "id"}
        return Preferences.model_validate(raw)

    def put_preferences(self, preferences: Preferences) -> None:
        self.store.put(COLLECTION_PREFERENCES, {"id": SINGLETON_ID, **preferences.to_document()})

    # =========================================================================
    # MARKET DATA CACHES
    # =========================================================================

    def get_cached_fx_rates(self) -> FxRates | None:
        raw = self.store.get(COLLECTION_FX_CACHE, SINGLETON_ID)
        if raw is None:
            return None
        raw = {k: v for k, v in raw.items() if k != "id"}
        return FxRates.model_validate(raw)

    def put_cached_fx_rates(self, rates: FxRates) -> None:
        self.store.put(COLLECTION_FX_CACHE, {"id": SINGLETON_ID, **rates.to_document()})

    def list_cached_prices(self) -> dict[str, CachedPrice]:
        return {p.id: p for p in self._parse_all(COLLECTION_PRICE_CACHE, CachedPrice.model_validate)}

    def put_cached_prices(self, prices: list[CachedPrice]) -> int:
        return self.store.put_many(COLLECTION_PRICE_CACHE, [p.to_document() for p in prices])
