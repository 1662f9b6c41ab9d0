"""Catch-up planning for the monthly cycle job"""

from datetime import date, datetime
from typing import Any, Union

from finance_engine.domain.cycles import count_completed_monthly_cycles, to_cycle_key
from finance_engine.domain.lifecycle import apply_card_monthly_lifecycle, apply_loan_monthly_lifecycle
from finance_engine.domain.models import AccountType, CardCycleInput, CatchUpPlan, LoanCycleInput


def idempotency_key(account_type: AccountType, account_id: str, cycle_key: str) -> str:
    """At most one successful application is allowed per (account, cycle key)"""
    return f"{account_type.value}:{account_id}:{cycle_key}"


def plan_card_catch_up(
    account_id: str,
    card: CardCycleInput,
    last_cycle_at_ms: Any,
    now: Union[date, datetime],
) -> CatchUpPlan:
    """
    Advance a card through every cycle completed since ``last_cycle_at_ms``.

    Nothing is persisted here; the caller records ``idempotency_key`` before
    writing the result back.
    """
    cycles = count_completed_monthly_cycles(last_cycle_at_ms, now)
    cycle_key = to_cycle_key(now)
    return CatchUpPlan(
        account_id=str(account_id),
        account_type=AccountType.CARD,
        cycles=cycles,
        cycle_key=cycle_key,
        idempotency_key=idempotency_key(AccountType.CARD, str(account_id), cycle_key),
        result=apply_card_monthly_lifecycle(card, cycles),
    )


def plan_loan_catch_up(
    account_id: str,
    loan: LoanCycleInput,
    last_cycle_at_ms: Any,
    now: Union[date, datetime],
) -> CatchUpPlan:
    """Loan counterpart of plan_card_catch_up"""
    cycles = count_completed_monthly_cycles(last_cycle_at_ms, now)
    cycle_key = to_cycle_key(now)
    return CatchUpPlan(
        account_id=str(account_id),
        account_type=AccountType.LOAN,
        cycles=cycles,
        cycle_key=cycle_key,
        idempotency_key=idempotency_key(AccountType.LOAN, str(account_id), cycle_key),
        result=apply_loan_monthly_lifecycle(loan, cycles),
    )
