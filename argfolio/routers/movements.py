# argfolio/routers/movements.py
"""
Movement endpoints.

Movements are upserted by id, so replaying the same payload is
idempotent. Bodies are validated against the movement union by `type`;
a bad body is a 400 with the first offending field.
"""

import logging
from datetime import date

from fastapi import APIRouter, Body, Depends, Query, Response, status
from pydantic import ValidationError as PydanticValidationError

from argfolio.dependencies import get_repository
from argfolio.models import MovementType
from argfolio.schemas.movements import Movement, MovementBatchResponse, parse_movement, sort_movements
from argfolio.services.exceptions import ValidationError
from argfolio.services.storage.repository import PortfolioRepository

logger = logging.getLogger(__name__)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/movements",
    tags=["Movements"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _parse_body(raw: dict) -> Movement:
    """Validate a raw body into its movement variant."""
    try:
        return parse_movement(raw)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"Invalid movement at {location}: {first['msg']}", field=location)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", response_model=list[Movement], summary="List movements")
def list_movements(
        account_id: str | None = Query(default=None, alias="accountId"),
        instrument_id: str | None = Query(default=None, alias="instrumentId"),
        movement_type: MovementType | None = Query(default=None, alias="type"),
        date_from: date | None = Query(default=None, alias="from"),
        date_to: date | None = Query(default=None, alias="to"),
        repository: PortfolioRepository = Depends(get_repository),
) -> list[Movement]:
    """
    Movements in chronological order.

    - **from** / **to**: inclusive local dates
    - **type**: one movement type (BUY, SELL, DEPOSIT, ...)
    """
    movements = repository.list_movements()
    if account_id is not None:
        movements = [m for m in movements if m.account_id == account_id]
    if instrument_id is not None:
        movements = [m for m in movements if getattr(m, "instrument_id", None) == instrument_id]
    if movement_type is not None:
        movements = [m for m in movements if m.type == movement_type.value]
    if date_from is not None:
        movements = [m for m in movements if m.on_date >= date_from]
    if date_to is not None:
        movements = [m for m in movements if m.on_date <= date_to]
    return sort_movements(movements)


@router.get("/{movement_id}", response_model=Movement, summary="Get a movement")
def get_movement(movement_id: str, repository: PortfolioRepository = Depends(get_repository)) -> Movement:
    return repository.require_movement(movement_id)


@router.put("/{movement_id}", response_model=Movement, summary="Create or replace a movement")
def put_movement(
        movement_id: str,
        body: dict = Body(...),
        repository: PortfolioRepository = Depends(get_repository),
) -> Movement:
    """
    Upsert one movement.

    The account must exist. Instruments are not required to exist: an
    unknown instrument is reported as a valuation warning instead.
    """
    movement = _parse_body(body)
    if movement.id != movement_id:
        raise ValidationError(f"Body id '{movement.id}' does not match path id '{movement_id}'", field="id")
    repository.require_account(movement.account_id)

    repository.put_movement(movement)
    return movement


@router.post(
    "/batch",
    response_model=MovementBatchResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upsert many movements",
)
def put_movements(
        body: list[dict] = Body(...),
        repository: PortfolioRepository = Depends(get_repository),
) -> MovementBatchResponse:
    """All movements are validated first; nothing is stored if any is invalid."""
    movements = [_parse_body(raw) for raw in body]
    for account_id in sorted({m.account_id for m in movements}):
        repository.require_account(account_id)

    stored = repository.put_movements(movements)
    logger.info(f"Stored {stored} movement(s) in batch")
    return MovementBatchResponse(stored=stored, ids=[m.id for m in movements])


@router.delete("/{movement_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a movement")
def delete_movement(movement_id: str, repository: PortfolioRepository = Depends(get_repository)) -> Response:
    repository.delete_movement(movement_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
