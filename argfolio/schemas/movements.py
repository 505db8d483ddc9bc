# argfolio/schemas/movements.py
"""
Pydantic schemas for movements.

A movement is one dated financial event. Its shape depends on its type,
so it is modelled as a discriminated union keyed by `type`:

    BUY / SELL              -> TradeMovement
    DEPOSIT / WITHDRAW      -> CashMovement
    INTEREST / DIVIDEND     -> IncomeMovement
    FEE                     -> FeeMovement
    TRANSFER_IN / _OUT      -> TransferMovement
    DEBT_ADD / DEBT_PAY     -> DebtMovement

`id` is the idempotency key: storing a movement with an existing id
replaces it. Synthesized movements use deterministic ids
(yield-{accountId}-{date}, ftd-settle-{movementId}).

IMPORTANT: All financial values use Decimal for precision.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import Field, TypeAdapter, field_validator, model_validator

from argfolio.models import Currency, MovementType
from argfolio.schemas.common import CamelModel, NonNegativeDecimal, PositiveDecimal
from argfolio.services.constants import DEFAULT_FIXED_DEPOSIT_TERM_DAYS
from argfolio.utils.date_utils import date_of


# =============================================================================
# FIXED-TERM DEPOSIT TERMS
# =============================================================================

class FixedDepositTerms(CamelModel):
    """
    Terms of a plazo fijo, carried by the DEPOSIT that constitutes it.

    `start_date` defaults to the movement's date when omitted.
    """

    bank: str = Field(..., min_length=1, max_length=100, examples=["Banco Nación"])
    alias: str | None = Field(default=None, max_length=100)
    principal_ars: PositiveDecimal = Field(..., alias="principalARS", examples=["1000000"])
    tna: PositiveDecimal = Field(..., description="Nominal annual rate, percent", examples=["36.5"])
    term_days: int = Field(default=DEFAULT_FIXED_DEPOSIT_TERM_DAYS, ge=1, le=3650)
    start_date: date | None = None


# =============================================================================
# BASE SCHEMA
# =============================================================================

class MovementBase(CamelModel):
    """Fields shared by every movement variant."""

    id: str = Field(..., min_length=1, max_length=255, examples=["mv-2025-03-01-001"])
    datetime_iso: str = Field(
        ...,
        alias="datetimeISO",
        description="Local ISO datetime of the event",
        examples=["2025-03-01T14:30:00"],
    )
    account_id: str = Field(..., min_length=1, max_length=255)
    note: str | None = Field(default=None, max_length=500)

    @field_validator("datetime_iso")
    @classmethod
    def validate_datetime_iso(cls, v: str) -> str:
        """Require an ISO date prefix; the rest is kept verbatim for sorting."""
        v = v.strip()
        try:
            date_of(v)
        except ValueError:
            raise ValueError(f"datetimeISO must start with YYYY-MM-DD, got '{v}'")
        return v

    @property
    def movement_type(self) -> MovementType:
        return MovementType(self.type)

    @property
    def on_date(self) -> date:
        """Calendar date of the movement."""
        return date_of(self.datetime_iso)

    @property
    def sort_key(self) -> tuple[str, str]:
        """Chronological order with id as tie-breaker."""
        return self.datetime_iso, self.id


# =============================================================================
# VARIANTS
# =============================================================================

class TradeMovement(MovementBase):
    """
    BUY or SELL of an instrument.

    Notional is `quantity * unitPrice` when a unit price is given,
    otherwise `totalAmount`. Fees on a BUY are capitalized into the cost,
    fees on a SELL reduce the proceeds.
    """

    type: Literal["BUY", "SELL"]
    instrument_id: str = Field(..., min_length=1)
    quantity: PositiveDecimal
    unit_price: NonNegativeDecimal | None = None
    total_amount: NonNegativeDecimal | None = None
    trade_currency: Currency = Currency.ARS
    fx_at_trade: PositiveDecimal | None = Field(
        default=None,
        description="ARS per USD at trade time",
    )
    fee_amount: NonNegativeDecimal | None = None
    fee_currency: Currency | None = None

    @model_validator(mode="after")
    def require_price_or_total(self) -> "TradeMovement":
        if self.unit_price is None and self.total_amount is None:
            raise ValueError("Trade requires unitPrice or totalAmount")
        return self

    @property
    def notional(self) -> Decimal:
        if self.unit_price is not None:
            return self.quantity * self.unit_price
        return self.total_amount


class CashMovement(MovementBase):
    """
    DEPOSIT or WITHDRAW.

    Without an instrument this moves cash in `tradeCurrency`. With an
    instrument (e.g. crypto sent to an exchange) it moves `quantity` units
    of that instrument valued at `totalAmount`.

    A DEPOSIT carrying `fixedDeposit` terms constitutes a plazo fijo; a
    DEPOSIT carrying `fixedDepositId` is that plazo fijo's payout.
    """

    type: Literal["DEPOSIT", "WITHDRAW"]
    total_amount: NonNegativeDecimal
    trade_currency: Currency = Currency.ARS
    instrument_id: str | None = None
    quantity: PositiveDecimal | None = None
    fx_at_trade: PositiveDecimal | None = None
    fixed_deposit: FixedDepositTerms | None = None
    fixed_deposit_id: str | None = None

    @model_validator(mode="after")
    def validate_fixed_deposit_fields(self) -> "CashMovement":
        if self.fixed_deposit is not None:
            if self.type != "DEPOSIT":
                raise ValueError("fixedDeposit terms are only valid on a DEPOSIT")
            if self.instrument_id is not None:
                raise ValueError("A fixed deposit cannot reference an instrument")
        if self.fixed_deposit is not None and self.fixed_deposit_id is not None:
            raise ValueError("A movement cannot both open and settle a fixed deposit")
        return self

    @property
    def units(self) -> Decimal:
        """Units moved: instrument quantity, or the cash amount itself."""
        if self.instrument_id is not None and self.quantity is not None:
            return self.quantity
        return self.total_amount


class IncomeMovement(MovementBase):
    """
    INTEREST or DIVIDEND.

    Credits `totalAmount` to the account's cash in `tradeCurrency`. When
    both `instrumentId` and `quantity` are set the income is paid in kind
    (e.g. staking rewards) and credits instrument units instead.
    """

    type: Literal["INTEREST", "DIVIDEND"]
    total_amount: NonNegativeDecimal
    trade_currency: Currency = Currency.ARS
    instrument_id: str | None = None
    quantity: PositiveDecimal | None = None
    fx_at_trade: PositiveDecimal | None = None

    @property
    def in_kind(self) -> bool:
        return self.instrument_id is not None and self.quantity is not None


class FeeMovement(MovementBase):
    """FEE, capitalized into an instrument's cost or charged to cash."""

    type: Literal["FEE"]
    fee_amount: PositiveDecimal
    fee_currency: Currency = Currency.ARS
    instrument_id: str | None = None
    fx_at_trade: PositiveDecimal | None = None


class TransferMovement(MovementBase):
    """
    TRANSFER_IN or TRANSFER_OUT between own accounts.

    Cash transfers use `totalAmount`; instrument transfers use `quantity`
    and may carry `totalAmount` as the carried cost.
    """

    type: Literal["TRANSFER_IN", "TRANSFER_OUT"]
    trade_currency: Currency = Currency.ARS
    instrument_id: str | None = None
    quantity: PositiveDecimal | None = None
    total_amount: NonNegativeDecimal | None = None
    to_account_id: str | None = None
    fx_at_trade: PositiveDecimal | None = None

    @model_validator(mode="after")
    def require_quantity_or_amount(self) -> "TransferMovement":
        if self.instrument_id is not None and self.quantity is None:
            raise ValueError("Instrument transfer requires quantity")
        if self.instrument_id is None and self.total_amount is None:
            raise ValueError("Cash transfer requires totalAmount")
        return self

    @property
    def units(self) -> Decimal:
        if self.instrument_id is not None:
            return self.quantity
        return self.total_amount


class DebtMovement(MovementBase):
    """DEBT_ADD or DEBT_PAY against the debt aggregate `debtId`."""

    type: Literal["DEBT_ADD", "DEBT_PAY"]
    debt_id: str = Field(..., min_length=1)
    total_amount: PositiveDecimal
    trade_currency: Currency = Currency.ARS


Movement = Annotated[
    Union[
        TradeMovement,
        CashMovement,
        IncomeMovement,
        FeeMovement,
        TransferMovement,
        DebtMovement,
    ],
    Field(discriminator="type"),
]

MovementAdapter: TypeAdapter[Movement] = TypeAdapter(Movement)
MovementListAdapter: TypeAdapter[list[Movement]] = TypeAdapter(list[Movement])


def parse_movement(data: dict) -> Movement:
    """Validate a stored/wire dict into the matching movement variant."""
    return MovementAdapter.validate_python(data)


def sort_movements(movements: list[Movement]) -> list[Movement]:
    """Ascending by datetimeISO, ties broken by id."""
    return sorted(movements, key=lambda m: m.sort_key)


class MovementBatchResponse(CamelModel):
    """Result of a batch upsert."""

    stored: int
    ids: list[str] = Field(default_factory=list)
