# argfolio/routers/yields.py
"""
Wallet yield endpoints.

Remunerated accounts accrue daily compound interest on their ARS cash.
POST /yield/run catches up every missed day; it is debounced per account
per day, so calling it repeatedly is harmless.
"""

from fastapi import APIRouter, Depends, Query

from argfolio.dependencies import get_repository, get_yield_service
from argfolio.schemas.yields import AccountAccrualResponse, AccrualRunResponse, YieldMetricsResponse
from argfolio.services.storage.repository import PortfolioRepository
from argfolio.services.yield_accrual.service import AccrualRunReport, YieldAccrualService

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/yield",
    tags=["Wallet Yield"],
)


# =============================================================================
# MAPPER FUNCTIONS (Internal Types -> Pydantic Schemas)
# =============================================================================

def _map_report(report: AccrualRunReport) -> AccrualRunResponse:
    return AccrualRunResponse(
        run_date=report.run_date,
        movements_created=report.movements_created,
        accounts=[
            AccountAccrualResponse(
                account_id=a.account_id,
                status=a.status,
                created=a.created,
                interest_ars=a.interest_ars,
                last_accrued_date=a.last_accrued_date,
            )
            for a in report.accounts
        ],
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post("/run", response_model=AccrualRunResponse, summary="Accrue missed days of interest")
def run_accrual(
        force: bool = Query(default=False, description="Ignore the once-per-day debounce"),
        service: YieldAccrualService = Depends(get_yield_service),
) -> AccrualRunResponse:
    """
    Generate one INTEREST movement per missed day for each enabled account.

    Days with no positive ARS balance are skipped. Movement ids are
    deterministic (`yield-{accountId}-{date}`), so a rerun never
    duplicates interest.
    """
    return _map_report(service.run(force=force))


@router.get("/metrics", response_model=list[YieldMetricsResponse], summary="Yield projections")
def get_metrics(
        service: YieldAccrualService = Depends(get_yield_service),
        repository: PortfolioRepository = Depends(get_repository),
) -> list[YieldMetricsResponse]:
    """Daily rate, TEA and projected interest for every remunerated account."""
    accounts = {a.id: a for a in repository.list_accounts()}
    responses = []
    for account_id, metrics in sorted(service.get_metrics().items()):
        account = accounts[account_id]
        responses.append(
            YieldMetricsResponse(
                account_id=account_id,
                account_name=account.name,
                balance_ars=metrics.balance_ars,
                tna=metrics.tna,
                daily_rate=metrics.daily_rate,
                tea=metrics.tea,
                interest_tomorrow=metrics.interest_tomorrow,
                projected_30d=metrics.projected_30d,
                projected_1y=metrics.projected_1y,
                last_accrued_date=account.cash_yield.last_accrued_date,
            )
        )
    return responses
