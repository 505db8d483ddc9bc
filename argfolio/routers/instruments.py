# argfolio/routers/instruments.py
"""
Instrument endpoints, including manual price overrides.

A manual price replaces any live quote for its instrument until it is
deleted. Prices entered in ARS are used as-is; prices in USD are
converted with the instrument's rate family.
"""

from fastapi import APIRouter, Depends, Response, status

from argfolio.dependencies import get_repository
from argfolio.schemas.instruments import Instrument
from argfolio.schemas.prices import ManualPrice
from argfolio.services.exceptions import NotFoundError, ValidationError
from argfolio.services.storage.repository import PortfolioRepository
from argfolio.utils.date_utils import now_iso

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/instruments",
    tags=["Instruments"],
)


# =============================================================================
# INSTRUMENT ENDPOINTS
# =============================================================================

@router.get("", response_model=list[Instrument], summary="List instruments")
def list_instruments(repository: PortfolioRepository = Depends(get_repository)) -> list[Instrument]:
    return sorted(repository.list_instruments(), key=lambda i: (i.category.value, i.symbol))


@router.get("/{instrument_id}", response_model=Instrument, summary="Get an instrument")
def get_instrument(instrument_id: str, repository: PortfolioRepository = Depends(get_repository)) -> Instrument:
    return repository.require_instrument(instrument_id)


@router.put("/{instrument_id}", response_model=Instrument, summary="Create or replace an instrument")
def put_instrument(
        instrument_id: str,
        instrument: Instrument,
        repository: PortfolioRepository = Depends(get_repository),
) -> Instrument:
    """
    Upsert an instrument.

    - **cedearRatio**: "A:B" (A receipts per B underlying shares) or a number;
      stored normalised as A/B
    - **underlyingSymbol**: ticker quoted for CEDEARs (e.g. "AAPL")
    - **coingeckoId**: CoinGecko id when the symbol is ambiguous
    """
    if instrument.id != instrument_id:
        raise ValidationError(
            f"Body id '{instrument.id}' does not match path id '{instrument_id}'",
            field="id",
        )
    repository.put_instrument(instrument)
    return instrument


@router.delete("/{instrument_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete an instrument")
def delete_instrument(instrument_id: str, repository: PortfolioRepository = Depends(get_repository)) -> Response:
    repository.delete_instrument(instrument_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =============================================================================
# MANUAL PRICE ENDPOINTS
# =============================================================================

@router.get("/prices/manual", response_model=list[ManualPrice], summary="List manual prices")
def list_manual_prices(repository: PortfolioRepository = Depends(get_repository)) -> list[ManualPrice]:
    return repository.list_manual_prices()


@router.put("/{instrument_id}/manual-price", response_model=ManualPrice, summary="Set a manual price")
def put_manual_price(
        instrument_id: str,
        price: ManualPrice,
        repository: PortfolioRepository = Depends(get_repository),
) -> ManualPrice:
    repository.require_instrument(instrument_id)
    if price.id != instrument_id:
        raise ValidationError(f"Manual price id must be the instrument id '{instrument_id}'", field="id")

    stored = price.model_copy(update={"updated_at_iso": price.updated_at_iso or now_iso()})
    repository.put_manual_price(stored)
    return stored


@router.delete(
    "/{instrument_id}/manual-price",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a manual price",
)
def delete_manual_price(instrument_id: str, repository: PortfolioRepository = Depends(get_repository)) -> Response:
    if not repository.delete_manual_price(instrument_id):
        raise NotFoundError(
            f"No manual price for instrument '{instrument_id}'",
            resource_type="ManualPrice",
            resource_id=instrument_id,
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
