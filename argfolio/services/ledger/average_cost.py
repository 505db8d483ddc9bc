# argfolio/services/ledger/average_cost.py
"""
Average-Cost Ledger.

Folds the full movement list into one running position per
(asset, account) key using the weighted-average cost method:

    acquire:  quantity += q          cost += converted cost
    dispose:  avg = cost / quantity  (taken BEFORE the disposal)
              realized += proceeds - q × avg
              cost     -= q × avg
              quantity -= q

Ordering:
    Movements are sorted by (datetimeISO, id) before folding, so ties
    between same-second synthetic movements resolve the same way on every
    rebuild.

Conversion:
    Every amount is kept in ARS and USD at the movement's trade-time rate
    (FxResolver.rate_at_trade). When no rate exists at all the ledger
    converts at 1.0 and records a warning; that is the only place a
    substitute rate is ever used.

Cash:
    Pure-cash events post to "cash:{CURRENCY}" keys. The settlement cash
    legs of BUY, SELL, capitalized FEEs and fixed-deposit constitution are
    posted only for accounts whose cash is tracked: explicitly through the
    trackCash preference, or, when it is unset, for accounts that record
    at least one pure-cash DEPOSIT or WITHDRAW.

Income:
    INTEREST and DIVIDEND add quantity without adding cost, so accrued
    yield shows up as unrealized gain on the receiving position.

Usage:
    ledger = AverageCostLedger()
    result = ledger.build(movements, instruments, resolver)
    result.cash_balance("acc-1")            # ARS cash held
"""

from __future__ import annotations

import logging
from decimal import Decimal

from argfolio.models import AssetCategory, Currency, MovementType
from argfolio.schemas.instruments import Instrument
from argfolio.schemas.movements import (
    CashMovement,
    DebtMovement,
    FeeMovement,
    IncomeMovement,
    Movement,
    TradeMovement,
    TransferMovement,
    sort_movements,
)
from argfolio.services.constants import QUANTITY_DUST
from argfolio.services.fx.resolver import FxResolver, category_for_cash
from argfolio.services.ledger.types import ZERO, LedgerPosition, LedgerResult, PositionKey

logger = logging.getLogger(__name__)

ONE = Decimal("1")


def detect_cash_tracked_accounts(movements: list[Movement]) -> set[str]:
    """
    Accounts that record their own cash.

    An account counts once it has a DEPOSIT or WITHDRAW that moves plain
    cash. Fixed-deposit constitutions and settlements are generated by
    the lifecycle and do not count.
    """
    tracked = set()
    for movement in movements:
        if not isinstance(movement, CashMovement):
            continue
        if movement.instrument_id is not None:
            continue
        if movement.fixed_deposit is not None or movement.fixed_deposit_id is not None:
            continue
        tracked.add(movement.account_id)
    return tracked


class AverageCostLedger:
    """
    Rebuilds every position from scratch on each call.

    The ledger holds no state between calls; `build` is a pure function of
    its arguments.
    """

    def build(
            self,
            movements: list[Movement],
            instruments: dict[str, Instrument],
            resolver: FxResolver,
    ) -> LedgerResult:
        """
        Fold movements into positions.

        Args:
            movements: Full movement list, any order
            instruments: Instruments keyed by id
            resolver: Rates and preferences for trade-time conversion

        Returns:
            LedgerResult with every touched position and all warnings
        """
        result = LedgerResult()

        track_cash = resolver.config.track_cash
        if track_cash is None:
            result.cash_tracked_accounts = detect_cash_tracked_accounts(movements)
        elif track_cash:
            result.cash_tracked_accounts = {m.account_id for m in movements}

        for movement in sort_movements(movements):
            self._apply(movement, instruments, resolver, result)

        for message in result.warnings:
            logger.warning(message)

        return result

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def _apply(
            self,
            movement: Movement,
            instruments: dict[str, Instrument],
            resolver: FxResolver,
            result: LedgerResult,
    ) -> None:
        if isinstance(movement, DebtMovement):
            # Debts are aggregated by DebtCalculator
            return

        instrument_id = getattr(movement, "instrument_id", None)
        instrument = None
        if instrument_id is not None:
            instrument = instruments.get(instrument_id)
            if instrument is None:
                result.warnings.append(
                    f"Movement {movement.id} references unknown instrument {instrument_id}, skipped"
                )
                return

        if isinstance(movement, TradeMovement):
            self._apply_trade(movement, instrument, resolver, result)
        elif isinstance(movement, CashMovement):
            self._apply_cash(movement, instrument, resolver, result)
        elif isinstance(movement, IncomeMovement):
            self._apply_income(movement, instrument, resolver, result)
        elif isinstance(movement, FeeMovement):
            self._apply_fee(movement, instrument, resolver, result)
        elif isinstance(movement, TransferMovement):
            self._apply_transfer(movement, instrument, resolver, result)

    # =========================================================================
    # MOVEMENT HANDLERS
    # =========================================================================

    def _apply_trade(
            self,
            movement: TradeMovement,
            instrument: Instrument,
            resolver: FxResolver,
            result: LedgerResult,
    ) -> None:
        """
        BUY capitalizes the fee into cost; SELL deducts it from proceeds.

        Cost calculation (BUY):
            cost = quantity × unitPrice + fee   (or totalAmount + fee)

        Proceeds calculation (SELL):
            proceeds = quantity × unitPrice - fee
        """
        position = self._instrument_position(instrument, movement.account_id, result)
        rate = self._rate(movement, instrument.category, resolver, result)
        currency = movement.trade_currency
        fee = movement.fee_amount or ZERO
        fee_currency = movement.fee_currency or currency
        notional = movement.notional

        # A fee charged in another currency is converted on its own
        fee_ars, fee_usd = self._convert(fee, fee_currency, rate)
        notional_ars, notional_usd = self._convert(notional, currency, rate)

        if movement.movement_type == MovementType.BUY:
            self._acquire(
                position,
                movement,
                movement.quantity,
                notional_ars + fee_ars,
                notional_usd + fee_usd,
            )
            self._post_cash(movement, currency, -notional, rate, result)
            self._post_cash(movement, fee_currency, -fee, rate, result)
        else:
            self._dispose(
                position,
                movement,
                movement.quantity,
                notional_ars - fee_ars,
                notional_usd - fee_usd,
                result,
            )
            self._post_cash(movement, currency, notional, rate, result)
            self._post_cash(movement, fee_currency, -fee, rate, result)

    def _apply_cash(
            self,
            movement: CashMovement,
            instrument: Instrument | None,
            resolver: FxResolver,
            result: LedgerResult,
    ) -> None:
        if movement.fixed_deposit is not None:
            # Principal leaves cash for the plazo fijo; the position itself
            # is derived by the fixed-deposit processor
            rate = self._rate(movement, AssetCategory.PF, resolver, result)
            self._post_cash(movement, Currency.ARS, -movement.fixed_deposit.principal_ars, rate, result)
            return

        if instrument is not None:
            position = self._instrument_position(instrument, movement.account_id, result)
            category = instrument.category
        else:
            position = self._cash_position(movement.trade_currency, movement.account_id, result)
            category = position.category

        rate = self._rate(movement, category, resolver, result)
        amount_ars, amount_usd = self._convert(movement.total_amount, movement.trade_currency, rate)

        if movement.movement_type == MovementType.DEPOSIT:
            self._acquire(position, movement, movement.units, amount_ars, amount_usd)
        else:
            self._dispose(position, movement, movement.units, amount_ars, amount_usd, result)

    def _apply_income(
            self,
            movement: IncomeMovement,
            instrument: Instrument | None,
            resolver: FxResolver,
            result: LedgerResult,
    ) -> None:
        """Quantity only; income never adds to cost basis."""
        if movement.in_kind:
            position = self._instrument_position(instrument, movement.account_id, result)
            units = movement.quantity
        else:
            position = self._cash_position(movement.trade_currency, movement.account_id, result)
            units = movement.total_amount

        self._acquire(position, movement, units, ZERO, ZERO)

    def _apply_fee(
            self,
            movement: FeeMovement,
            instrument: Instrument | None,
            resolver: FxResolver,
            result: LedgerResult,
    ) -> None:
        if instrument is not None:
            position = self._instrument_position(instrument, movement.account_id, result)
            rate = self._rate(movement, instrument.category, resolver, result)
            fee_ars, fee_usd = self._convert(movement.fee_amount, movement.fee_currency, rate)
            self._capitalize(position, movement, fee_ars, fee_usd)
            self._post_cash(movement, movement.fee_currency, -movement.fee_amount, rate, result)
            return

        # Expensed straight from cash: units leave at average cost, nothing realized
        position = self._cash_position(movement.fee_currency, movement.account_id, result)
        self._dispose(position, movement, movement.fee_amount, None, None, result)

    def _apply_transfer(
            self,
            movement: TransferMovement,
            instrument: Instrument | None,
            resolver: FxResolver,
            result: LedgerResult,
    ) -> None:
        """
        Transfers move cost, not value: TRANSFER_OUT realizes nothing and
        TRANSFER_IN carries `totalAmount` as the cost of the units received.
        """
        if instrument is not None:
            position = self._instrument_position(instrument, movement.account_id, result)
            category = instrument.category
        else:
            position = self._cash_position(movement.trade_currency, movement.account_id, result)
            category = position.category

        if movement.movement_type == MovementType.TRANSFER_OUT:
            self._dispose(position, movement, movement.units, None, None, result)
            return

        if movement.total_amount is None:
            result.warnings.append(
                f"Transfer {movement.id} carries no totalAmount; received units enter at zero cost"
            )
            self._acquire(position, movement, movement.units, ZERO, ZERO)
            return

        rate = self._rate(movement, category, resolver, result)
        cost_ars, cost_usd = self._convert(movement.total_amount, movement.trade_currency, rate)
        self._acquire(position, movement, movement.units, cost_ars, cost_usd)

    # =========================================================================
    # POSITION ARITHMETIC
    # =========================================================================

    def _acquire(
            self,
            position: LedgerPosition,
            movement: Movement,
            quantity: Decimal,
            cost_ars: Decimal,
            cost_usd: Decimal,
    ) -> None:
        position.quantity += quantity
        position.cost_ars += cost_ars
        position.cost_usd += cost_usd
        position.cost_native += self._native(position, cost_ars, cost_usd)
        position.movement_ids.append(movement.id)

    def _capitalize(
            self,
            position: LedgerPosition,
            movement: Movement,
            cost_ars: Decimal,
            cost_usd: Decimal,
    ) -> None:
        """Add cost without adding quantity."""
        self._acquire(position, movement, ZERO, cost_ars, cost_usd)

    def _dispose(
            self,
            position: LedgerPosition,
            movement: Movement,
            quantity: Decimal,
            proceeds_ars: Decimal | None,
            proceeds_usd: Decimal | None,
            result: LedgerResult,
    ) -> None:
        """
        Remove `quantity` at the average cost held just before.

        Proceeds of None mean "at cost" (transfers), realizing nothing.
        Disposing more than is held clamps to the held quantity, scales the
        proceeds by the same factor and flags the movement as oversold.
        """
        held = position.quantity

        if quantity > held + QUANTITY_DUST:
            result.oversold_movement_ids.append(movement.id)
            result.warnings.append(
                f"Movement {movement.id} disposes {quantity} of {position.key} "
                f"but only {held} is held; clamped"
            )
            if proceeds_ars is not None:
                scale = held / quantity if quantity > ZERO else ZERO
                proceeds_ars *= scale
                proceeds_usd *= scale
            quantity = held

        closes = quantity >= held - QUANTITY_DUST
        if closes:
            removed_ars = position.cost_ars
            removed_usd = position.cost_usd
            removed_native = position.cost_native
        else:
            removed_ars = quantity * position.avg_cost_ars
            removed_usd = quantity * position.avg_cost_usd
            removed_native = quantity * position.avg_cost_native

        if proceeds_ars is None:
            proceeds_ars, proceeds_usd = removed_ars, removed_usd
            proceeds_native = removed_native
        else:
            proceeds_native = self._native(position, proceeds_ars, proceeds_usd)

        position.realized_ars += proceeds_ars - removed_ars
        position.realized_usd += proceeds_usd - removed_usd
        position.realized_native += proceeds_native - removed_native

        if closes:
            position.quantity = ZERO
            position.cost_ars = ZERO
            position.cost_usd = ZERO
            position.cost_native = ZERO
        else:
            position.quantity -= quantity
            position.cost_ars -= removed_ars
            position.cost_usd -= removed_usd
            position.cost_native -= removed_native

        position.movement_ids.append(movement.id)

    def _post_cash(
            self,
            movement: Movement,
            currency: Currency,
            amount: Decimal,
            rate: Decimal,
            result: LedgerResult,
    ) -> None:
        """Settlement cash leg: positive credits, negative debits."""
        if amount == ZERO or movement.account_id not in result.cash_tracked_accounts:
            return

        position = self._cash_position(currency, movement.account_id, result)
        amount_ars, amount_usd = self._convert(abs(amount), currency, rate)
        if amount > ZERO:
            self._acquire(position, movement, amount, amount_ars, amount_usd)
        else:
            self._dispose(position, movement, -amount, amount_ars, amount_usd, result)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _instrument_position(
            self,
            instrument: Instrument,
            account_id: str,
            result: LedgerResult,
    ) -> LedgerPosition:
        key = PositionKey.for_instrument(instrument.id, account_id)
        position = result.positions.get(key)
        if position is None:
            position = LedgerPosition(
                key=key,
                category=instrument.category,
                native_currency=instrument.native_currency,
            )
            result.positions[key] = position
        return position

    def _cash_position(
            self,
            currency: Currency,
            account_id: str,
            result: LedgerResult,
    ) -> LedgerPosition:
        key = PositionKey.for_cash(currency, account_id)
        position = result.positions.get(key)
        if position is None:
            position = LedgerPosition(
                key=key,
                category=category_for_cash(currency),
                native_currency=currency,
            )
            result.positions[key] = position
        return position

    def _rate(
            self,
            movement: Movement,
            category: AssetCategory,
            resolver: FxResolver,
            result: LedgerResult,
    ) -> Decimal:
        rate = resolver.rate_at_trade(movement, category)
        if rate is None:
            result.fx_fallback_movement_ids.append(movement.id)
            result.warnings.append(f"No FX rate for movement {movement.id}; converted at 1.0")
            return ONE
        return rate

    @staticmethod
    def _convert(amount: Decimal, currency: Currency, rate: Decimal) -> tuple[Decimal, Decimal]:
        """(ars, usd) for an amount; every non-ARS currency is treated as USD."""
        if currency == Currency.ARS:
            return amount, amount / rate
        return amount * rate, amount

    @staticmethod
    def _native(position: LedgerPosition, ars: Decimal, usd: Decimal) -> Decimal:
        return ars if position.native_currency == Currency.ARS else usd
