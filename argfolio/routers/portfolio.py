# argfolio/routers/portfolio.py
"""
Portfolio valuation endpoints.

The valuation is recomputed from the movement log on every request.
Before valuing, the enabled daily automations run (wallet interest
catch-up and plazo fijo payouts) so the numbers include them.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, status

from argfolio.dependencies import get_snapshot_service, get_valuation_service
from argfolio.middleware.rate_limit import limiter
from argfolio.schemas.portfolio import (
    CategoryTotalResponse,
    FixedDepositTotalsResponse,
    HoldingResponse,
    HoldingsResponse,
    PortfolioValuationResponse,
)
from argfolio.schemas.snapshots import Snapshot
from argfolio.services.constants import RATE_LIMIT_MARKET
from argfolio.services.fixed_deposits.processor import FixedDepositTotals
from argfolio.services.snapshots import SnapshotService
from argfolio.services.valuation.service import ValuationService
from argfolio.services.valuation.types import CategoryTotal, HoldingValuation, PortfolioValuation

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/portfolio",
    tags=["Portfolio"],
)


# =============================================================================
# MAPPER FUNCTIONS (Internal Types -> Pydantic Schemas)
# =============================================================================

def _map_holding(holding: HoldingValuation) -> HoldingResponse:
    return HoldingResponse(
        asset=holding.asset,
        instrument_id=holding.instrument_id,
        account_id=holding.account_id,
        account_name=holding.account_name,
        symbol=holding.symbol,
        name=holding.name,
        category=holding.category,
        native_currency=holding.native_currency,
        quantity=holding.quantity,
        cost_native=holding.cost_native,
        cost_ars=holding.cost_ars,
        cost_usd=holding.cost_usd,
        avg_cost_native=holding.avg_cost_native,
        avg_cost_ars=holding.avg_cost_ars,
        avg_cost_usd=holding.avg_cost_usd,
        price=holding.price,
        price_currency=holding.price_currency,
        price_status=holding.price_status,
        change_pct_1d=holding.change_pct_1d,
        fx_rate=holding.fx_rate,
        value_native=holding.value_native,
        value_ars=holding.value_ars,
        value_usd=holding.value_usd,
        unrealized_native=holding.unrealized_native,
        unrealized_ars=holding.unrealized_ars,
        unrealized_usd=holding.unrealized_usd,
        unrealized_pct=holding.unrealized_pct,
        realized_ars=holding.realized_ars,
        realized_usd=holding.realized_usd,
    )


def _map_category(subtotal: CategoryTotal) -> CategoryTotalResponse:
    return CategoryTotalResponse(
        category=subtotal.category,
        label=subtotal.label,
        value_ars=subtotal.value_ars,
        value_usd=subtotal.value_usd,
        cost_ars=subtotal.cost_ars,
        unrealized_ars=subtotal.unrealized_ars,
        positions=subtotal.positions,
        missing_values=subtotal.missing_values,
        share_pct=subtotal.share_pct,
    )


def map_fixed_deposit_totals(totals: FixedDepositTotals) -> FixedDepositTotalsResponse:
    return FixedDepositTotalsResponse(
        active_principal_ars=totals.active_principal_ars,
        active_interest_ars=totals.active_interest_ars,
        active_total_ars=totals.active_total_ars,
        matured_total_ars=totals.matured_total_ars,
        active_total_usd=totals.active_total_usd,
        matured_total_usd=totals.matured_total_usd,
    )


def _map_valuation(valuation: PortfolioValuation, automations: list[str]) -> PortfolioValuationResponse:
    return PortfolioValuationResponse(
        as_of=valuation.as_of,
        total_value_ars=valuation.total_value_ars,
        total_value_usd=valuation.total_value_usd,
        liquidity_ars=valuation.liquidity_ars,
        liquidity_usd=valuation.liquidity_usd,
        realized_ars=valuation.realized_ars,
        realized_usd=valuation.realized_usd,
        unrealized_ars=valuation.unrealized_ars,
        unrealized_usd=valuation.unrealized_usd,
        debts_ars=valuation.debts_ars,
        debts_usd=valuation.debts_usd,
        net_worth_ars=valuation.net_worth_ars,
        net_worth_usd=valuation.net_worth_usd,
        categories=[_map_category(c) for c in valuation.categories],
        top_positions=[_map_holding(h) for h in valuation.top_positions],
        holdings=[_map_holding(h) for h in valuation.holdings],
        fixed_deposits=map_fixed_deposit_totals(valuation.fixed_deposits.totals),
        debts=valuation.debts,
        fx_rates=valuation.fx_rates,
        fx_is_fallback=valuation.fx_is_fallback,
        oversold_movement_ids=valuation.oversold_movement_ids,
        automations=automations,
        has_complete_data=valuation.has_complete_data,
        warnings=valuation.warnings,
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "",
    response_model=PortfolioValuationResponse,
    summary="Value the portfolio",
    response_description="Holdings, category subtotals, liquidity, PnL and net worth",
)
@limiter.limit(RATE_LIMIT_MARKET)
def get_portfolio(
        request: Request,  # Required for rate limiting
        live: bool = Query(default=True, description="False to skip live quotes and use cached prices"),
        automations: bool = Query(default=True, description="False to skip accrual and settlement"),
        service: ValuationService = Depends(get_valuation_service),
) -> PortfolioValuationResponse:
    """
    Complete portfolio valuation as of today.

    Returns:
    - **holdings**: every open position, cash included
    - **categories**: subtotals ordered by value
    - **liquidity**: cash, wallets, stablecoins and matured plazos fijos
    - **netWorth**: total value minus outstanding debts
    - **warnings**: missing prices, FX fallbacks, oversold movements

    A missing price leaves that holding's value null; it never fails the
    request.
    """
    notes = service.run_automations() if automations else []
    valuation = service.get_valuation(fetch_live=live)
    return _map_valuation(valuation, notes)


@router.get(
    "/holdings",
    response_model=HoldingsResponse,
    summary="List valued holdings",
)
@limiter.limit(RATE_LIMIT_MARKET)
def get_holdings(
        request: Request,  # Required for rate limiting
        account_id: str | None = Query(default=None, alias="accountId"),
        live: bool = Query(default=True),
        service: ValuationService = Depends(get_valuation_service),
) -> HoldingsResponse:
    """Open positions, optionally for one account. Raises **404** for an unknown account."""
    holdings, warnings = service.get_holdings(account_id, fetch_live=live)
    return HoldingsResponse(holdings=[_map_holding(h) for h in holdings], warnings=warnings)


@router.post(
    "/snapshots",
    response_model=Snapshot,
    status_code=status.HTTP_201_CREATED,
    summary="Capture today's snapshot",
)
@limiter.limit(RATE_LIMIT_MARKET)
def capture_snapshot(
        request: Request,  # Required for rate limiting
        service: ValuationService = Depends(get_valuation_service),
        snapshots: SnapshotService = Depends(get_snapshot_service),
) -> Snapshot:
    """Value the portfolio and store its totals under today's date (replacing any earlier one)."""
    return snapshots.capture(service.get_valuation())


@router.get("/snapshots", response_model=list[Snapshot], summary="List snapshots")
def list_snapshots(snapshots: SnapshotService = Depends(get_snapshot_service)) -> list[Snapshot]:
    return snapshots.list()
