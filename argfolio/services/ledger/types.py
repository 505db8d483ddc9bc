# argfolio/services/ledger/types.py
"""
Internal data types for the Average-Cost Ledger.

These dataclasses are NOT Pydantic schemas; API shapes live in
argfolio/schemas/portfolio.py.

Design Principles:
- Decimal for every amount, full precision (rounding only at the API edge)
- One running (quantity, cost) pair per key: no lot list
- Average cost is 0 when quantity is 0, never a division error
- Warnings accumulate instead of raising

Type Hierarchy:
    PositionKey      - (asset, account) identity of a running position
    LedgerPosition   - Running quantity, cost basis and realized PnL
    LedgerResult     - All positions plus data-quality findings
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from argfolio.models import AssetCategory, Currency
from argfolio.services.constants import CASH_KEY_PREFIX, QUANTITY_DUST

ZERO = Decimal("0")


# =============================================================================
# KEYS
# =============================================================================

@dataclass(frozen=True, order=True)
class PositionKey:
    """
    Identity of a running position.

    `asset` is an instrument id, or "cash:{CURRENCY}" for cash balances.
    """

    asset: str
    account_id: str

    @classmethod
    def for_instrument(cls, instrument_id: str, account_id: str) -> PositionKey:
        return cls(instrument_id, account_id)

    @classmethod
    def for_cash(cls, currency: Currency, account_id: str) -> PositionKey:
        return cls(f"{CASH_KEY_PREFIX}:{currency.value}", account_id)

    @property
    def is_cash(self) -> bool:
        return self.asset.startswith(f"{CASH_KEY_PREFIX}:")

    @property
    def cash_currency(self) -> Currency | None:
        if not self.is_cash:
            return None
        return Currency(self.asset.split(":", 1)[1])

    @property
    def instrument_id(self) -> str | None:
        return None if self.is_cash else self.asset

    def __str__(self) -> str:
        return f"{self.asset}@{self.account_id}"


# =============================================================================
# POSITION
# =============================================================================

@dataclass
class LedgerPosition:
    """
    Running state of one (asset, account) position.

    Attributes:
        key: Position identity
        category: Asset category (cash keys get a cash category)
        native_currency: Currency the native cost basis is kept in
        quantity: Units held (cash: amount held)
        cost_native / cost_ars / cost_usd: Cost basis of the units held
        realized_native / realized_ars / realized_usd: Realized PnL so far
        movement_ids: Movements that touched this position, in fold order
    """

    key: PositionKey
    category: AssetCategory
    native_currency: Currency
    quantity: Decimal = ZERO
    cost_native: Decimal = ZERO
    cost_ars: Decimal = ZERO
    cost_usd: Decimal = ZERO
    realized_native: Decimal = ZERO
    realized_ars: Decimal = ZERO
    realized_usd: Decimal = ZERO
    movement_ids: list[str] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.quantity > QUANTITY_DUST

    @property
    def avg_cost_native(self) -> Decimal:
        return self.cost_native / self.quantity if self.quantity > ZERO else ZERO

    @property
    def avg_cost_ars(self) -> Decimal:
        return self.cost_ars / self.quantity if self.quantity > ZERO else ZERO

    @property
    def avg_cost_usd(self) -> Decimal:
        return self.cost_usd / self.quantity if self.quantity > ZERO else ZERO


# =============================================================================
# RESULT
# =============================================================================

@dataclass
class LedgerResult:
    """
    Output of one ledger fold.

    Attributes:
        positions: Every position ever touched, including closed ones
        oversold_movement_ids: Disposals clamped to the held quantity
        fx_fallback_movement_ids: Movements converted at 1.0 for lack of a rate
        cash_tracked_accounts: Accounts whose BUY/SELL cash legs were applied
        warnings: Human-readable data-quality findings
    """

    positions: dict[PositionKey, LedgerPosition] = field(default_factory=dict)
    oversold_movement_ids: list[str] = field(default_factory=list)
    fx_fallback_movement_ids: list[str] = field(default_factory=list)
    cash_tracked_accounts: set[str] = field(default_factory=set)
    warnings: list[str] = field(default_factory=list)

    def get(self, key: PositionKey) -> LedgerPosition | None:
        return self.positions.get(key)

    def open_positions(self) -> list[LedgerPosition]:
        return [p for p in sorted(self.positions.values(), key=lambda p: p.key) if p.is_open]

    def cash_balance(self, account_id: str, currency: Currency = Currency.ARS) -> Decimal:
        """Cash held in one account and currency (0 when never touched)."""
        position = self.positions.get(PositionKey.for_cash(currency, account_id))
        return position.quantity if position is not None else ZERO

    @property
    def realized_ars(self) -> Decimal:
        return sum((p.realized_ars for p in self.positions.values()), ZERO)

    @property
    def realized_usd(self) -> Decimal:
        return sum((p.realized_usd for p in self.positions.values()), ZERO)
