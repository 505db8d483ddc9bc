# argfolio/routers/accounts.py
"""
Account endpoints.

Accounts are upserted by id: PUT creates or replaces. Deleting an account
does not delete its movements; they stay in the ledger until removed
explicitly.
"""

from fastapi import APIRouter, Depends, Response, status

from argfolio.dependencies import get_repository
from argfolio.schemas.accounts import Account
from argfolio.services.exceptions import ValidationError
from argfolio.services.storage.repository import PortfolioRepository

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/accounts",
    tags=["Accounts"],
)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get(
    "",
    response_model=list[Account],
    response_model_by_alias=True,
    summary="List accounts",
)
def list_accounts(repository: PortfolioRepository = Depends(get_repository)) -> list[Account]:
    return sorted(repository.list_accounts(), key=lambda a: a.name.lower())


@router.get(
    "/{account_id}",
    response_model=Account,
    summary="Get an account",
)
def get_account(account_id: str, repository: PortfolioRepository = Depends(get_repository)) -> Account:
    return repository.require_account(account_id)


@router.put(
    "/{account_id}",
    response_model=Account,
    summary="Create or replace an account",
)
def put_account(
        account_id: str,
        account: Account,
        repository: PortfolioRepository = Depends(get_repository),
) -> Account:
    """
    Upsert an account.

    - **cashYield**: set `enabled`, `tna` and `lastAccruedDate` to accrue
      daily interest on the account's ARS cash. Accrual starts the day
      after `lastAccruedDate`.
    """
    if account.id != account_id:
        raise ValidationError(f"Body id '{account.id}' does not match path id '{account_id}'", field="id")
    repository.put_account(account)
    return account


@router.delete(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an account",
)
def delete_account(account_id: str, repository: PortfolioRepository = Depends(get_repository)) -> Response:
    repository.delete_account(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
