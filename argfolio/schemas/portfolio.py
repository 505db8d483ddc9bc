# argfolio/schemas/portfolio.py
"""
Pydantic schemas for portfolio valuation responses.

Values that could not be computed (missing price or FX rate) are null,
never zero, so clients can tell "worth nothing" from "unknown".
"""

from datetime import date
from decimal import Decimal

from pydantic import Field

from argfolio.models import AssetCategory, Currency
from argfolio.schemas.common import CamelModel
from argfolio.schemas.debts import DebtSummary
from argfolio.schemas.fx import FxRates
from argfolio.schemas.prices import PriceStatus


# =============================================================================
# HOLDINGS
# =============================================================================

class HoldingResponse(CamelModel):
    """One valued (asset, account) position."""

    asset: str = Field(..., description="Instrument id or cash:{CURRENCY}")
    instrument_id: str | None
    account_id: str
    account_name: str
    symbol: str
    name: str | None = None
    category: AssetCategory
    native_currency: Currency
    quantity: Decimal

    cost_native: Decimal
    cost_ars: Decimal
    cost_usd: Decimal
    avg_cost_native: Decimal
    avg_cost_ars: Decimal
    avg_cost_usd: Decimal

    price: Decimal | None
    price_currency: Currency
    price_status: PriceStatus
    change_pct_1d: Decimal | None = None
    fx_rate: Decimal | None = None

    value_native: Decimal | None
    value_ars: Decimal | None
    value_usd: Decimal | None
    unrealized_native: Decimal | None
    unrealized_ars: Decimal | None
    unrealized_usd: Decimal | None
    unrealized_pct: Decimal | None = None
    realized_ars: Decimal
    realized_usd: Decimal


class HoldingsResponse(CamelModel):
    holdings: list[HoldingResponse]
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# TOTALS
# =============================================================================

class CategoryTotalResponse(CamelModel):
    """Subtotal of one category with its Spanish display label."""

    category: AssetCategory
    label: str
    value_ars: Decimal
    value_usd: Decimal
    cost_ars: Decimal
    unrealized_ars: Decimal
    positions: int
    missing_values: int = 0
    share_pct: Decimal | None = None


class FixedDepositTotalsResponse(CamelModel):
    active_principal_ars: Decimal
    active_interest_ars: Decimal
    active_total_ars: Decimal
    matured_total_ars: Decimal
    active_total_usd: Decimal | None = None
    matured_total_usd: Decimal | None = None


class PortfolioValuationResponse(CamelModel):
    """Whole-portfolio valuation."""

    as_of: date
    total_value_ars: Decimal
    total_value_usd: Decimal | None
    liquidity_ars: Decimal
    liquidity_usd: Decimal | None
    realized_ars: Decimal
    realized_usd: Decimal
    unrealized_ars: Decimal
    unrealized_usd: Decimal | None
    debts_ars: Decimal
    debts_usd: Decimal | None
    net_worth_ars: Decimal
    net_worth_usd: Decimal | None

    categories: list[CategoryTotalResponse]
    top_positions: list[HoldingResponse]
    holdings: list[HoldingResponse]
    fixed_deposits: FixedDepositTotalsResponse
    debts: list[DebtSummary]

    fx_rates: FxRates | None = None
    fx_is_fallback: bool = False
    oversold_movement_ids: list[str] = Field(default_factory=list)
    automations: list[str] = Field(default_factory=list)
    has_complete_data: bool
    warnings: list[str] = Field(default_factory=list)
