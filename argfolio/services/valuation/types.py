# argfolio/services/valuation/types.py
"""
Internal data types for the Valuation Service.

These dataclasses are used internally by the valuation calculators.
They are NOT Pydantic schemas - those are defined in
argfolio/schemas/portfolio.py for API serialization.

Design Principles:
- Use Decimal for ALL financial values (never float)
- A value that cannot be computed is None, never 0
- Warnings accumulate for data quality tracking

Type Hierarchy:
    HoldingValuation    - Ledger position joined with price and FX
    CategoryTotal       - Subtotal for one asset category
    PortfolioValuation  - Holdings, subtotals, liquidity, PnL, net worth
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from argfolio.models import AssetCategory, Currency
from argfolio.schemas.debts import DebtSummary
from argfolio.schemas.fx import FxRates
from argfolio.schemas.prices import PriceStatus
from argfolio.services.fixed_deposits.processor import FixedDepositState

ZERO = Decimal("0")

LIQUID_CATEGORIES = frozenset({
    AssetCategory.ARS_CASH,
    AssetCategory.USD_CASH,
    AssetCategory.WALLET,
    AssetCategory.STABLE,
})


# =============================================================================
# HOLDING
# =============================================================================

@dataclass
class HoldingValuation:
    """
    Complete valuation for one (asset, account) position.

    Attributes:
        asset: Instrument id, or "cash:{CURRENCY}"
        instrument_id: None for cash positions
        quantity: Units held
        cost_* / avg_cost_*: From the average-cost ledger
        realized_*: Realized PnL accumulated by this position
        price: Unit price used (None when missing)
        price_currency: Currency of `price`
        price_status: Where the price came from
        fx_rate: ARS per USD used for the cross value (None when unavailable)
        value_* / unrealized_*: None when the price or the rate is missing

    Note:
        CEDEAR live quotes are the underlying's USD price, so the receipt
        value is divided by the CEDEAR ratio.
    """

    asset: str
    instrument_id: str | None
    account_id: str
    account_name: str
    symbol: str
    name: str | None
    category: AssetCategory
    native_currency: Currency
    quantity: Decimal
    cost_native: Decimal
    cost_ars: Decimal
    cost_usd: Decimal
    avg_cost_native: Decimal
    avg_cost_ars: Decimal
    avg_cost_usd: Decimal
    realized_ars: Decimal
    realized_usd: Decimal
    price: Decimal | None
    price_currency: Currency
    price_status: PriceStatus
    change_pct_1d: Decimal | None = None
    fx_rate: Decimal | None = None
    value_native: Decimal | None = None
    value_ars: Decimal | None = None
    value_usd: Decimal | None = None
    unrealized_native: Decimal | None = None
    unrealized_ars: Decimal | None = None
    unrealized_usd: Decimal | None = None

    @property
    def is_cash(self) -> bool:
        return self.instrument_id is None

    @property
    def is_liquid(self) -> bool:
        return self.category in LIQUID_CATEGORIES

    @property
    def has_value(self) -> bool:
        return self.value_ars is not None

    @property
    def unrealized_pct(self) -> Decimal | None:
        """Unrealized PnL over cost in percent (None when undefined)."""
        if self.unrealized_ars is None or self.cost_ars == ZERO:
            return None
        return self.unrealized_ars / self.cost_ars * 100


# =============================================================================
# SUBTOTALS
# =============================================================================

@dataclass
class CategoryTotal:
    """
    Subtotal for one asset category.

    Values sum only the holdings that could be valued; `missing_values`
    counts those that could not.
    """

    category: AssetCategory
    label: str
    value_ars: Decimal = ZERO
    value_usd: Decimal = ZERO
    cost_ars: Decimal = ZERO
    unrealized_ars: Decimal = ZERO
    positions: int = 0
    missing_values: int = 0
    share_pct: Decimal | None = None


# =============================================================================
# PORTFOLIO
# =============================================================================

@dataclass
class PortfolioValuation:
    """
    Whole-portfolio valuation.

    Attributes:
        as_of: Local date of the valuation
        holdings: Open positions (cash included)
        categories: Subtotals ordered by value, largest first
        fixed_deposits: Plazo fijo state (counted in PF subtotal and totals)
        debts: Debt summaries (subtracted for net worth)
        total_value_ars / total_value_usd: Sum of everything valued
        liquidity_ars / liquidity_usd: Cash, wallets, stablecoins and
            matured-but-unpaid plazos fijos
        realized_*: Summed from the ledger (closed positions included)
        unrealized_*: Summed over valued holdings and pending PF interest
        debts_ars / debts_usd: Outstanding debt balances
        net_worth_ars / net_worth_usd: Totals minus debts
        top_positions: Largest non-cash holdings by ARS value
        fx_rates / fx_is_fallback: Rates used and whether they were cached
        oversold_movement_ids: Disposals the ledger had to clamp
        warnings: Data quality findings (missing prices, FX fallbacks, ...)
    """

    as_of: date
    holdings: list[HoldingValuation] = field(default_factory=list)
    categories: list[CategoryTotal] = field(default_factory=list)
    fixed_deposits: FixedDepositState = field(default_factory=FixedDepositState)
    debts: list[DebtSummary] = field(default_factory=list)
    total_value_ars: Decimal = ZERO
    total_value_usd: Decimal | None = None
    liquidity_ars: Decimal = ZERO
    liquidity_usd: Decimal | None = None
    realized_ars: Decimal = ZERO
    realized_usd: Decimal = ZERO
    unrealized_ars: Decimal = ZERO
    unrealized_usd: Decimal | None = None
    debts_ars: Decimal = ZERO
    debts_usd: Decimal | None = None
    net_worth_ars: Decimal = ZERO
    net_worth_usd: Decimal | None = None
    top_positions: list[HoldingValuation] = field(default_factory=list)
    fx_rates: FxRates | None = None
    fx_is_fallback: bool = False
    oversold_movement_ids: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_complete_data(self) -> bool:
        """True when every holding could be valued in both currencies."""
        return all(h.value_ars is not None and h.value_usd is not None for h in self.holdings)

    @property
    def total_pnl_ars(self) -> Decimal:
        return self.realized_ars + self.unrealized_ars
