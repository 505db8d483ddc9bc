# argfolio/services/constants.py
"""
Centralized constants for the Argfolio services.

Single place for business constants (day-count basis, dust thresholds,
deterministic id prefixes, collection names) so the ledger, accrual and
fixed-deposit code cannot drift apart.

Usage:
    from argfolio.services.constants import DAYS_PER_YEAR, YIELD_ID_PREFIX
"""

from decimal import Decimal


# =============================================================================
# RATE CONVENTIONS
# =============================================================================

# Argentine TNA is quoted on a 365-day basis for both wallets and plazos fijos
DAYS_PER_YEAR: int = 365

# Days used for the short-horizon yield projection
PROJECTION_DAYS_SHORT: int = 30

# Default term of a plazo fijo when the movement does not carry one
DEFAULT_FIXED_DEPOSIT_TERM_DAYS: int = 30


# =============================================================================
# PRECISION
# =============================================================================

# Remaining quantity below this is treated as a closed position
QUANTITY_DUST: Decimal = Decimal("0.00000001")

# Money presentation precision (ledger keeps full precision internally)
MONEY_PRECISION: Decimal = Decimal("0.01")

# Rates and percentages
RATE_PRECISION: Decimal = Decimal("0.000001")


# =============================================================================
# DETERMINISTIC IDS
# =============================================================================

# yield-{accountId}-{YYYY-MM-DD}
YIELD_ID_PREFIX: str = "yield"

# ftd-settle-{originating movement id}
FIXED_DEPOSIT_SETTLEMENT_PREFIX: str = "ftd-settle"

# Ledger key prefix for cash positions: cash:{currency}
CASH_KEY_PREFIX: str = "cash"

# Time of day stamped on synthesized movements (right after midnight)
SYNTHETIC_MOVEMENT_TIME: str = "T00:01:00"


# =============================================================================
# DOCUMENT STORE COLLECTIONS
# =============================================================================

COLLECTION_ACCOUNTS: str = "accounts"
COLLECTION_INSTRUMENTS: str = "instruments"
COLLECTION_MOVEMENTS: str = "movements"
COLLECTION_MANUAL_PRICES: str = "manualPrices"
COLLECTION_SNAPSHOTS: str = "snapshots"
COLLECTION_DEBTS: str = "debts"
COLLECTION_PREFERENCES: str = "preferences"
COLLECTION_FX_CACHE: str = "fxCache"
COLLECTION_PRICE_CACHE: str = "priceCache"

# Single-document collections use this id
SINGLETON_ID: str = "default"


# =============================================================================
# BACKUP / SYNC
# =============================================================================

BACKUP_VERSION: int = 1


# =============================================================================
# PORTFOLIO PRESENTATION
# =============================================================================

DEFAULT_TOP_N: int = 5

# Spanish labels shown by the dashboard, keyed by AssetCategory value
CATEGORY_LABELS: dict[str, str] = {
    "CEDEAR": "Cedears",
    "CRYPTO": "Criptomonedas",
    "STABLE": "Stablecoins",
    "USD_CASH": "Dólares",
    "ARS_CASH": "Pesos",
    "FCI": "Fondos Comunes",
    "PF": "Plazos Fijos",
    "WALLET": "Wallets",
    "DEBT": "Deudas",
}


# =============================================================================
# RATE LIMITING
# =============================================================================

# Default limit for all endpoints
RATE_LIMIT_DEFAULT: str = "200/minute"

# Endpoints that trigger live FX/price fetches
RATE_LIMIT_MARKET: str = "20/minute"

# Remote sync push/bootstrap
RATE_LIMIT_SYNC: str = "10/minute"

# Health checks
RATE_LIMIT_HEALTH: str = "300/minute"
