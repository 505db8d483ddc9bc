# argfolio/routers/debts.py
"""
Debt endpoints.

A debt record holds only its name, currency and an optional CANCELLED
status. Amounts come from DEBT_ADD / DEBT_PAY movements and are summed on
every read.
"""

from fastapi import APIRouter, Depends

from argfolio.dependencies import get_repository
from argfolio.schemas.debts import Debt, DebtSummary
from argfolio.services.exceptions import ValidationError
from argfolio.services.ledger.debts import DebtCalculator
from argfolio.services.storage.repository import PortfolioRepository
from argfolio.utils.date_utils import now_iso

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/debts",
    tags=["Debts"],
)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", response_model=list[DebtSummary], summary="List debts with balances")
def list_debts(repository: PortfolioRepository = Depends(get_repository)) -> list[DebtSummary]:
    return DebtCalculator().calculate(repository.list_debts(), repository.list_movements())


@router.get("/{debt_id}", response_model=DebtSummary, summary="Get one debt with its balance")
def get_debt(debt_id: str, repository: PortfolioRepository = Depends(get_repository)) -> DebtSummary:
    debt = repository.require_debt(debt_id)
    movements = [m for m in repository.list_movements() if getattr(m, "debt_id", None) == debt_id]
    return DebtCalculator().calculate([debt], movements)[0]


@router.put("/{debt_id}", response_model=Debt, summary="Create or replace a debt")
def put_debt(debt_id: str, debt: Debt, repository: PortfolioRepository = Depends(get_repository)) -> Debt:
    """Set `status` to CANCELLED to exclude the debt from net worth; other statuses are derived."""
    if debt.id != debt_id:
        raise ValidationError(f"Body id '{debt.id}' does not match path id '{debt_id}'", field="id")
    stored = debt.model_copy(update={"created_at_iso": debt.created_at_iso or now_iso()})
    repository.put_debt(stored)
    return stored
