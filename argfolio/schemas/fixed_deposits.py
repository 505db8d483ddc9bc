# argfolio/schemas/fixed_deposits.py
"""Pydantic schemas for plazo fijo positions and settlement."""

from datetime import date
from decimal import Decimal
from typing import Literal

from argfolio.schemas.common import CamelModel
from argfolio.schemas.movements import CashMovement
from argfolio.schemas.portfolio import FixedDepositTotalsResponse


class FixedDepositResponse(CamelModel):
    id: str
    movement_id: str
    account_id: str
    bank: str
    alias: str | None = None
    principal_ars: Decimal
    tna: Decimal
    tea: Decimal
    term_days: int
    start_date: date
    maturity_date: date
    expected_interest_ars: Decimal
    expected_total_ars: Decimal
    status: Literal["active", "matured"]
    settled: bool
    settlement_movement_id: str


class FixedDepositListResponse(CamelModel):
    active: list[FixedDepositResponse]
    matured: list[FixedDepositResponse]
    settled: list[FixedDepositResponse]
    totals: FixedDepositTotalsResponse


class SettlementResponse(CamelModel):
    settled: int
    movements: list[CashMovement]
