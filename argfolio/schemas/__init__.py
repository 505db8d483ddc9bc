# argfolio/schemas/__init__.py
"""
Pydantic schemas, organized by domain:
- common: camelCase base model
- movements: Movement tagged union (BUY, SELL, DEPOSIT, ...)
- accounts, instruments, debts, snapshots, preferences: stored documents
- fx, prices: market data shapes
- backup: export/import and sync envelopes
- portfolio, yields, fixed_deposits: API responses
- errors: Error response formats

Usage:
    from argfolio.schemas import Account, Instrument, Movement
"""

from argfolio.schemas.accounts import Account, CashYield
from argfolio.schemas.backup import BackupData, BackupPayload, BootstrapPayload, ImportCounts
from argfolio.schemas.debts import Debt, DebtSummary
from argfolio.schemas.errors import ErrorDetail, ValidationErrorDetail
from argfolio.schemas.fx import FxPair, FxRates, FxRatesResponse
from argfolio.schemas.instruments import Instrument, parse_ratio
from argfolio.schemas.movements import (
    CashMovement,
    DebtMovement,
    FeeMovement,
    FixedDepositTerms,
    IncomeMovement,
    Movement,
    MovementAdapter,
    MovementBatchResponse,
    TradeMovement,
    TransferMovement,
    parse_movement,
    sort_movements,
)
from argfolio.schemas.fixed_deposits import FixedDepositListResponse, FixedDepositResponse, SettlementResponse
from argfolio.schemas.portfolio import (
    CategoryTotalResponse,
    FixedDepositTotalsResponse,
    HoldingResponse,
    HoldingsResponse,
    PortfolioValuationResponse,
)
from argfolio.schemas.preferences import Preferences
from argfolio.schemas.prices import CachedPrice, ManualPrice, PriceQuote
from argfolio.schemas.snapshots import Snapshot
from argfolio.schemas.sync import SyncBootstrapResponse, SyncPushResponse, SyncStatusResponse
from argfolio.schemas.yields import AccountAccrualResponse, AccrualRunResponse, YieldMetricsResponse

__all__ = [
    "Account",
    "CashYield",
    "BackupData",
    "BackupPayload",
    "BootstrapPayload",
    "ImportCounts",
    "Debt",
    "DebtSummary",
    "ErrorDetail",
    "ValidationErrorDetail",
    "FxPair",
    "FxRates",
    "FxRatesResponse",
    "Instrument",
    "parse_ratio",
    "CashMovement",
    "DebtMovement",
    "FeeMovement",
    "FixedDepositTerms",
    "IncomeMovement",
    "Movement",
    "MovementAdapter",
    "MovementBatchResponse",
    "TradeMovement",
    "TransferMovement",
    "parse_movement",
    "sort_movements",
    "Preferences",
    "CachedPrice",
    "ManualPrice",
    "PriceQuote",
    "Snapshot",
    "FixedDepositListResponse",
    "FixedDepositResponse",
    "SettlementResponse",
    "CategoryTotalResponse",
    "FixedDepositTotalsResponse",
    "HoldingResponse",
    "HoldingsResponse",
    "PortfolioValuationResponse",
    "SyncBootstrapResponse",
    "SyncPushResponse",
    "SyncStatusResponse",
    "AccountAccrualResponse",
    "AccrualRunResponse",
    "YieldMetricsResponse",
]
