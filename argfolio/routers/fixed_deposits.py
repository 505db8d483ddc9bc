# argfolio/routers/fixed_deposits.py
"""Plazo fijo endpoints: derived positions and payout of matured deposits."""

from fastapi import APIRouter, Depends

from argfolio.dependencies import get_fixed_deposit_service
from argfolio.routers.portfolio import map_fixed_deposit_totals
from argfolio.schemas.fixed_deposits import FixedDepositListResponse, FixedDepositResponse, SettlementResponse
from argfolio.services.fixed_deposits.processor import FixedDepositPosition
from argfolio.services.fixed_deposits.service import FixedDepositService

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/fixed-deposits",
    tags=["Fixed Deposits"],
)


# =============================================================================
# MAPPER FUNCTIONS (Internal Types -> Pydantic Schemas)
# =============================================================================

def _map_position(position: FixedDepositPosition) -> FixedDepositResponse:
    return FixedDepositResponse(
        id=position.id,
        movement_id=position.movement_id,
        account_id=position.account_id,
        bank=position.bank,
        alias=position.alias,
        principal_ars=position.principal_ars,
        tna=position.tna,
        tea=position.tea,
        term_days=position.term_days,
        start_date=position.start_date,
        maturity_date=position.maturity_date,
        expected_interest_ars=position.expected_interest_ars,
        expected_total_ars=position.expected_total_ars,
        status=position.status,
        settled=position.settled,
        settlement_movement_id=position.settlement_movement_id,
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", response_model=FixedDepositListResponse, summary="List fixed deposits")
def list_fixed_deposits(service: FixedDepositService = Depends(get_fixed_deposit_service)) -> FixedDepositListResponse:
    """
    Positions derived from DEPOSIT movements that carry plazo fijo terms.

    - **active**: before maturity
    - **matured**: maturity reached, payout not yet recorded
    - **settled**: payout movement exists
    """
    state = service.get_state()
    return FixedDepositListResponse(
        active=[_map_position(p) for p in state.active],
        matured=[_map_position(p) for p in state.matured],
        settled=[_map_position(p) for p in state.settled],
        totals=map_fixed_deposit_totals(state.totals),
    )


@router.post("/settle", response_model=SettlementResponse, summary="Pay out matured deposits")
def settle_fixed_deposits(service: FixedDepositService = Depends(get_fixed_deposit_service)) -> SettlementResponse:
    """Record the payout DEPOSIT for every matured, unpaid plazo fijo. Idempotent."""
    payouts = service.settle_matured()
    return SettlementResponse(settled=len(payouts), movements=payouts)
