# argfolio/routers/__init__.py
"""
API routers for argfolio.

Each router handles a specific domain:
- accounts, instruments, movements, debts, preferences: stored documents
- portfolio: valuation, holdings and snapshots
- fx: current ARS/USD rates
- yields: wallet interest accrual and projections
- fixed_deposits: plazo fijo positions and payouts
- backup: export/import
- sync: remote sync push and bootstrap
"""

from argfolio.routers.accounts import router as accounts_router
from argfolio.routers.backup import router as backup_router
from argfolio.routers.debts import router as debts_router
from argfolio.routers.fixed_deposits import router as fixed_deposits_router
from argfolio.routers.fx import router as fx_router
from argfolio.routers.instruments import router as instruments_router
from argfolio.routers.movements import router as movements_router
from argfolio.routers.portfolio import router as portfolio_router
from argfolio.routers.preferences import router as preferences_router
from argfolio.routers.sync import router as sync_router
from argfolio.routers.yields import router as yields_router

__all__ = [
    "accounts_router",
    "backup_router",
    "debts_router",
    "fixed_deposits_router",
    "fx_router",
    "instruments_router",
    "movements_router",
    "portfolio_router",
    "preferences_router",
    "sync_router",
    "yields_router",
]
