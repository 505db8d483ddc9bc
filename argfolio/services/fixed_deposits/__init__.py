# argfolio/services/fixed_deposits/__init__.py
"""Plazo fijo lifecycle: derivation, totals and settlement."""

from argfolio.services.fixed_deposits.processor import (
    STATUS_ACTIVE,
    STATUS_MATURED,
    FixedDepositPosition,
    FixedDepositProcessor,
    FixedDepositState,
    FixedDepositTotals,
    settlement_movement_id,
)
from argfolio.services.fixed_deposits.service import FixedDepositService

__all__ = [
    "STATUS_ACTIVE",
    "STATUS_MATURED",
    "FixedDepositPosition",
    "FixedDepositProcessor",
    "FixedDepositState",
    "FixedDepositTotals",
    "settlement_movement_id",
    "FixedDepositService",
]
