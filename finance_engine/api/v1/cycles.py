"""Cycle simulation endpoints: card/loan lifecycles, cycle counting, catch-up, cadence"""

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Request

from finance_engine.api.dependencies import run_operation
from finance_engine.api.v1.schemas import (
    CardCycleRequest,
    CatchUpRequest,
    CatchUpResponse,
    CycleCountRequest,
    CycleCountResponse,
    LoanCycleRequest,
    MonthlyAmountRequest,
    MonthlyAmountResponse,
)
from finance_engine.domain.cadence import to_monthly_amount
from finance_engine.domain.catch_up import plan_card_catch_up, plan_loan_catch_up
from finance_engine.domain.cycles import count_completed_monthly_cycles, to_cycle_key
from finance_engine.domain.lifecycle import apply_card_monthly_lifecycle, apply_loan_monthly_lifecycle
from finance_engine.domain.models import AccountType, CardCycleResult, LoanCycleResult
from finance_engine.infrastructure.observability.metrics import record_cycles

router = APIRouter()


@router.post("/cycles/card", response_model=CardCycleResult)
def simulate_card_cycles(request_body: CardCycleRequest, request: Request):
    """Advance a credit card snapshot by N monthly cycles (read-only, nothing persisted)"""
    card = request_body.card.to_domain()
    result = run_operation(
        request,
        "card_cycle",
        lambda: apply_card_monthly_lifecycle(card, request_body.cycles),
        cycles=request_body.cycles,
    )
    record_cycles(AccountType.CARD, request_body.cycles)
    return result


@router.post("/cycles/loan", response_model=LoanCycleResult)
def simulate_loan_cycles(request_body: LoanCycleRequest, request: Request):
    """Advance a loan snapshot by N monthly cycles"""
    loan = request_body.loan.to_domain()
    result = run_operation(
        request,
        "loan_cycle",
        lambda: apply_loan_monthly_lifecycle(loan, request_body.cycles),
        cycles=request_body.cycles,
    )
    record_cycles(AccountType.LOAN, request_body.cycles)
    return result


@router.post("/cycles/count", response_model=CycleCountResponse)
def count_cycles(request_body: CycleCountRequest, request: Request):
    """
    Count completed monthly cycles since a timestamp.

    Callers use this before invoking the batch simulators.
    """
    cycles = run_operation(
        request,
        "cycle_count",
        lambda: count_completed_monthly_cycles(request_body.from_timestamp_ms, request_body.now),
    )
    return CycleCountResponse(cycles=cycles, cycle_key=to_cycle_key(request_body.now))


@router.post("/cycles/catch-up", response_model=CatchUpResponse)
def catch_up(request_body: CatchUpRequest, request: Request):
    """
    Plan a multi-cycle catch-up for one account.

    Returns the idempotency key the cycle job must record before persisting
    the result; this endpoint itself writes nothing.
    """
    if (request_body.card is None) == (request_body.loan is None):
        raise HTTPException(status_code=422, detail="Provide exactly one of card or loan")

    if request_body.card is not None:
        card = request_body.card.to_domain()
        plan = run_operation(
            request,
            "card_catch_up",
            lambda: plan_card_catch_up(request_body.account_id, card, request_body.last_cycle_at_ms, request_body.now),
            account_id=request_body.account_id,
        )
    else:
        loan = request_body.loan.to_domain()
        plan = run_operation(
            request,
            "loan_catch_up",
            lambda: plan_loan_catch_up(request_body.account_id, loan, request_body.last_cycle_at_ms, request_body.now),
            account_id=request_body.account_id,
        )

    record_cycles(plan.account_type, plan.cycles)
    return CatchUpResponse(
        account_id=plan.account_id,
        account_type=plan.account_type.value,
        cycles=plan.cycles,
        cycle_key=plan.cycle_key,
        idempotency_key=plan.idempotency_key,
        result=asdict(plan.result),
    )


@router.post("/cadence/monthly-amount", response_model=MonthlyAmountResponse)
def monthly_amount(request_body: MonthlyAmountRequest, request: Request):
    """Convert an amount paid once per cadence into its monthly equivalent (unrounded)"""
    value = run_operation(
        request,
        "monthly_amount",
        lambda: to_monthly_amount(
            request_body.amount,
            request_body.cadence,
            request_body.custom_interval,
            request_body.custom_unit,
        ),
    )
    return MonthlyAmountResponse(monthly_amount=value)
