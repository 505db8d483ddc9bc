# argfolio/routers/preferences.py
"""User preferences endpoints."""

from fastapi import APIRouter, Depends

from argfolio.dependencies import get_repository
from argfolio.schemas.preferences import Preferences
from argfolio.services.storage.repository import PortfolioRepository

router = APIRouter(
    prefix="/preferences",
    tags=["Preferences"],
)


@router.get("", response_model=Preferences, summary="Get preferences")
def get_preferences(repository: PortfolioRepository = Depends(get_repository)) -> Preferences:
    """Stored preferences, or the defaults when none were saved."""
    return repository.get_preferences()


@router.put("", response_model=Preferences, summary="Replace preferences")
def put_preferences(
        preferences: Preferences,
        repository: PortfolioRepository = Depends(get_repository),
) -> Preferences:
    """
    Replace all preferences.

    - **baseFxForUSD**: rate family for USD assets (default MEP)
    - **stablecoinFx**: rate family for stablecoins (default CRIPTO)
    - **trackCash**: apply trade cash legs; null detects per account
    """
    repository.put_preferences(preferences)
    return preferences
