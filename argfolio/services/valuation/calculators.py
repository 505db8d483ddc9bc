# argfolio/services/valuation/calculators.py
"""
Point-in-time valuation calculators.

Each calculator has one job:
- HoldingValueCalculator: Joins a ledger position with its price and FX
- PortfolioTotalsCalculator: Category subtotals, liquidity, PnL, net worth

Design Principles:
- Stateless apart from the injected FxResolver
- A missing price or rate yields None, never 0
- Uses Decimal for ALL financial calculations

Valuation rules:
    cash             value = quantity (in its own currency)
    manual ARS price value_ars = quantity × price
    CEDEAR (live)    value_ars = quantity × price_usd × fx / ratio
    everything else  value_usd = quantity × price_usd, value_ars = value_usd × fx

The rate family depends on the category (see FxResolver.fx_type_for).
"""

from __future__ import annotations

import logging
from decimal import Decimal

from argfolio.models import AssetCategory, Currency, DebtStatus
from argfolio.schemas.accounts import Account
from argfolio.schemas.debts import DebtSummary
from argfolio.schemas.instruments import Instrument
from argfolio.services.constants import CATEGORY_LABELS
from argfolio.services.fixed_deposits.processor import FixedDepositState
from argfolio.services.fx.resolver import FxResolver
from argfolio.services.ledger.types import LedgerPosition, LedgerResult
from argfolio.services.market_data.price_service import ResolvedPrice
from argfolio.services.valuation.types import (
    ZERO,
    CategoryTotal,
    HoldingValuation,
    PortfolioValuation,
)

logger = logging.getLogger(__name__)

ONE = Decimal("1")


# =============================================================================
# HOLDING VALUE CALCULATOR
# =============================================================================

class HoldingValueCalculator:
    """
    Values ledger positions at current prices.

    Attributes:
        resolver: Current rates under the user's preferences
    """

    def __init__(self, resolver: FxResolver) -> None:
        self.resolver = resolver

    def value_cash(self, position: LedgerPosition, account: Account | None) -> HoldingValuation:
        """Cash is worth its face value in its own currency."""
        currency = position.key.cash_currency
        holding = self._base(position, account, symbol=currency.value, name=None)
        holding.price = ONE
        holding.price_currency = currency
        holding.price_status = "ok"

        self._apply_value(holding, position, position.quantity, currency)
        return holding

    def value_instrument(
            self,
            position: LedgerPosition,
            instrument: Instrument,
            account: Account | None,
            price: ResolvedPrice | None,
    ) -> HoldingValuation:
        """
        Value one instrument position.

        Returns:
            HoldingValuation; value and unrealized fields stay None when no
            price exists, but quantity and cost are always filled
        """
        holding = self._base(position, account, symbol=instrument.symbol, name=instrument.name)

        if price is None or price.price is None:
            holding.price_status = "missing"
            return holding

        holding.price = price.price
        holding.price_currency = price.currency
        holding.price_status = price.status
        holding.change_pct_1d = price.change_pct_1d

        amount = position.quantity * price.price
        # Live CEDEAR quotes are per underlying share; manual prices are per receipt
        if instrument.category == AssetCategory.CEDEAR and price.status != "manual":
            amount = amount / instrument.effective_ratio

        self._apply_value(holding, position, amount, price.currency)
        return holding

    # =========================================================================
    # PRIVATE
    # =========================================================================

    def _base(
            self,
            position: LedgerPosition,
            account: Account | None,
            symbol: str,
            name: str | None,
    ) -> HoldingValuation:
        return HoldingValuation(
            asset=position.key.asset,
            instrument_id=position.key.instrument_id,
            account_id=position.key.account_id,
            account_name=account.name if account is not None else position.key.account_id,
            symbol=symbol,
            name=name,
            category=position.category,
            native_currency=position.native_currency,
            quantity=position.quantity,
            cost_native=position.cost_native,
            cost_ars=position.cost_ars,
            cost_usd=position.cost_usd,
            avg_cost_native=position.avg_cost_native,
            avg_cost_ars=position.avg_cost_ars,
            avg_cost_usd=position.avg_cost_usd,
            realized_ars=position.realized_ars,
            realized_usd=position.realized_usd,
            price=None,
            price_currency=position.native_currency,
            price_status="missing",
            fx_rate=self.resolver.rate_now(position.category),
        )

    def _apply_value(
            self,
            holding: HoldingValuation,
            position: LedgerPosition,
            amount: Decimal,
            currency: Currency,
    ) -> None:
        """Set value and unrealized fields from an amount in `currency`."""
        rate = holding.fx_rate
        if currency == Currency.ARS:
            holding.value_ars = amount
            holding.value_usd = amount / rate if rate else None
        else:
            holding.value_usd = amount
            holding.value_ars = amount * rate if rate else None

        if position.native_currency == Currency.ARS:
            holding.value_native = holding.value_ars
        else:
            holding.value_native = holding.value_usd

        if holding.value_ars is not None:
            holding.unrealized_ars = holding.value_ars - position.cost_ars
        if holding.value_usd is not None:
            holding.unrealized_usd = holding.value_usd - position.cost_usd
        if holding.value_native is not None:
            holding.unrealized_native = holding.value_native - position.cost_native


# =============================================================================
# PORTFOLIO TOTALS CALCULATOR
# =============================================================================

class PortfolioTotalsCalculator:
    """
    Aggregates valued holdings into portfolio totals.

    Fixed deposits that are not yet paid out count in the PF category at
    their expected total; once settled they live on as cash. Matured but
    unpaid deposits also count as liquidity.
    """

    def __init__(self, resolver: FxResolver) -> None:
        self.resolver = resolver

    def calculate(
            self,
            valuation: PortfolioValuation,
            ledger: LedgerResult,
            fixed_deposits: FixedDepositState,
            debts: list[DebtSummary],
            top_n: int,
    ) -> PortfolioValuation:
        """
        Fill the totals of `valuation` in place and return it.

        Args:
            valuation: Valuation with `holdings` already set
            ledger: Ledger result (realized PnL includes closed positions)
            fixed_deposits: Derived plazo fijo state
            debts: Debt summaries
            top_n: Size of the top positions list
        """
        usd_rate = self.resolver.rate_now(AssetCategory.USD_CASH)
        pf_rate = self.resolver.rate_now(AssetCategory.PF)

        categories: dict[AssetCategory, CategoryTotal] = {}
        total_usd = ZERO
        usd_complete = True
        unrealized_usd = ZERO

        for holding in valuation.holdings:
            subtotal = self._category(categories, holding.category)
            subtotal.positions += 1
            subtotal.cost_ars += holding.cost_ars

            if holding.value_ars is None:
                subtotal.missing_values += 1
            else:
                subtotal.value_ars += holding.value_ars
                subtotal.unrealized_ars += holding.unrealized_ars
                valuation.total_value_ars += holding.value_ars
                valuation.unrealized_ars += holding.unrealized_ars
                if holding.is_liquid:
                    valuation.liquidity_ars += holding.value_ars

            if holding.value_usd is None:
                usd_complete = False
            else:
                subtotal.value_usd += holding.value_usd
                total_usd += holding.value_usd
                if holding.unrealized_usd is not None:
                    unrealized_usd += holding.unrealized_usd

        self._add_fixed_deposits(valuation, categories, fixed_deposits)
        pf_total_ars = fixed_deposits.totals.outstanding_total_ars
        pf_interest = sum((p.expected_interest_ars for p in fixed_deposits.unsettled), ZERO)
        if pf_total_ars:
            if pf_rate:
                total_usd += pf_total_ars / pf_rate
                unrealized_usd += pf_interest / pf_rate
            else:
                usd_complete = False

        valuation.total_value_usd = total_usd if usd_complete else None
        valuation.unrealized_usd = unrealized_usd if usd_complete else None
        valuation.liquidity_usd = self._to_usd(valuation.liquidity_ars, usd_rate)

        valuation.realized_ars = ledger.realized_ars
        valuation.realized_usd = ledger.realized_usd

        valuation.debts = debts
        valuation.debts_ars = self._debts_ars(debts, usd_rate)
        valuation.debts_usd = self._to_usd(valuation.debts_ars, usd_rate)
        valuation.net_worth_ars = valuation.total_value_ars - valuation.debts_ars
        if valuation.total_value_usd is not None and valuation.debts_usd is not None:
            valuation.net_worth_usd = valuation.total_value_usd - valuation.debts_usd

        for subtotal in categories.values():
            if valuation.total_value_ars > ZERO:
                subtotal.share_pct = subtotal.value_ars / valuation.total_value_ars * 100
        valuation.categories = sorted(categories.values(), key=lambda c: c.value_ars, reverse=True)

        ranked = [h for h in valuation.holdings if not h.is_cash and h.value_ars is not None]
        ranked.sort(key=lambda h: h.value_ars, reverse=True)
        valuation.top_positions = ranked[:top_n]

        return valuation

    # =========================================================================
    # PRIVATE
    # =========================================================================

    @staticmethod
    def _category(categories: dict[AssetCategory, CategoryTotal], category: AssetCategory) -> CategoryTotal:
        subtotal = categories.get(category)
        if subtotal is None:
            subtotal = CategoryTotal(category=category, label=CATEGORY_LABELS.get(category.value, category.value))
            categories[category] = subtotal
        return subtotal

    def _add_fixed_deposits(
            self,
            valuation: PortfolioValuation,
            categories: dict[AssetCategory, CategoryTotal],
            fixed_deposits: FixedDepositState,
    ) -> None:
        if not fixed_deposits.unsettled:
            return

        pf_rate = self.resolver.rate_now(AssetCategory.PF)
        subtotal = self._category(categories, AssetCategory.PF)
        for position in fixed_deposits.unsettled:
            subtotal.positions += 1
            subtotal.cost_ars += position.principal_ars
            subtotal.value_ars += position.expected_total_ars
            subtotal.unrealized_ars += position.expected_interest_ars
            if pf_rate:
                subtotal.value_usd += position.expected_total_ars / pf_rate

        valuation.total_value_ars += fixed_deposits.totals.outstanding_total_ars
        valuation.unrealized_ars += sum((p.expected_interest_ars for p in fixed_deposits.unsettled), ZERO)
        valuation.liquidity_ars += fixed_deposits.totals.matured_total_ars

    @staticmethod
    def _debts_ars(debts: list[DebtSummary], usd_rate: Decimal | None) -> Decimal:
        total = ZERO
        for debt in debts:
            if debt.status == DebtStatus.CANCELLED:
                continue
            if debt.currency == Currency.ARS:
                total += debt.balance
            elif usd_rate:
                total += debt.balance * usd_rate
            else:
                logger.warning(f"No FX rate to convert debt {debt.id} ({debt.currency.value}); left out")
        return total

    @staticmethod
    def _to_usd(amount_ars: Decimal, rate: Decimal | None) -> Decimal | None:
        return amount_ars / rate if rate else None
