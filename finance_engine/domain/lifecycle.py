"""
Card and loan monthly lifecycle simulators.

Each account type has a single per-cycle transition function. Batch
simulation is a fold of that transition over N cycles, and the portfolio
projector calls the same fold one cycle at a time, so both paths produce
identical numbers. State is currency-rounded at the end of every cycle.
"""

from dataclasses import dataclass
from typing import Any, Callable, Tuple, TypeVar

from finance_engine.domain.cadence import to_monthly_amount
from finance_engine.domain.models import (
    CardCycleInput,
    CardCycleResult,
    LoanCycleInput,
    LoanCycleResult,
    MinimumPaymentType,
)
from finance_engine.utils.money import finite_or_zero, monthly_rate, non_negative_currency, round_currency

State = TypeVar("State")


@dataclass(frozen=True)
class CycleTotals:
    """Per-cycle (or summed) flows"""

    interest: float = 0.0
    payments: float = 0.0
    spend: float = 0.0

    def __add__(self, other: "CycleTotals") -> "CycleTotals":
        return CycleTotals(
            interest=round_currency(self.interest + other.interest),
            payments=round_currency(self.payments + other.payments),
            spend=round_currency(self.spend + other.spend),
        )


@dataclass(frozen=True)
class CardState:
    statement_balance: float
    pending_charges: float
    due_balance: float


@dataclass(frozen=True)
class LoanState:
    balance: float


def normalize_cycles(cycles: Any) -> int:
    """Cycle counts are non-negative integers; anything else truncates or becomes 0"""
    return max(int(finite_or_zero(cycles)), 0)


def run_cycles(
    step: Callable[[State], Tuple[State, CycleTotals]],
    state: State,
    cycles: int,
) -> Tuple[State, CycleTotals]:
    """Fold ``step`` over ``cycles`` repetitions, threading state and summing totals"""
    totals = CycleTotals()
    for _ in range(cycles):
        state, cycle_totals = step(state)
        totals = totals + cycle_totals
    return state, totals


def card_cycle_step(card: CardCycleInput) -> Callable[[CardState], Tuple[CardState, CycleTotals]]:
    """
    Build the one-cycle transition for ``card``.

    Order within a cycle:
    1. Interest accrues on the statement balance
    2. Due balance = statement + interest
    3. Minimum due (fixed, or percent of statement + interest), clamped to [0, due]
    4. Payment = min(due, minimum + extra)
    5. Remainder carries forward
    6. This cycle's spend joins pending charges, which fold into the next statement
    """
    rate = monthly_rate(card.interest_rate)
    spend = max(card.spend_per_month, 0.0)
    extra = max(card.extra_payment, 0.0)
    percent_minimum = card.minimum_payment_type is MinimumPaymentType.PERCENT_PLUS_INTEREST

    def step(state: CardState) -> Tuple[CardState, CycleTotals]:
        statement = state.statement_balance
        interest = round_currency(statement * rate)
        due_balance = round_currency(statement + interest)

        if percent_minimum:
            minimum_due_raw = statement * (card.minimum_payment_percent / 100) + interest
        else:
            minimum_due_raw = card.minimum_payment
        minimum_due = round_currency(min(due_balance, max(minimum_due_raw, 0.0)))

        payment = round_currency(min(due_balance, minimum_due + extra))
        carried_after_due = non_negative_currency(due_balance - payment)
        pending = round_currency(state.pending_charges + spend)

        next_state = CardState(
            statement_balance=non_negative_currency(carried_after_due + pending),
            pending_charges=0.0,
            due_balance=due_balance,
        )
        return next_state, CycleTotals(interest=interest, payments=payment, spend=spend)

    return step


def initial_card_state(card: CardCycleInput) -> CardState:
    statement = non_negative_currency(card.statement_balance)
    return CardState(
        statement_balance=statement,
        pending_charges=non_negative_currency(card.pending_charges),
        due_balance=statement,
    )


def apply_card_monthly_lifecycle(card: CardCycleInput, cycles: Any) -> CardCycleResult:
    """
    Advance a credit card by ``cycles`` monthly billing cycles.

    Never raises: malformed numerics were already coerced to 0 by
    CardCycleInput. With zero cycles the normalized input comes back with
    zero aggregates; ``balance`` is then the card's used limit.

    Example:
        used_limit=1000, spend 100, minimum 50, APR 24%, 1 cycle
        -> interest 20, due 1020, paid 50, balance 1070
    """
    count = normalize_cycles(cycles)
    state, totals = run_cycles(card_cycle_step(card), initial_card_state(card), count)
    balance = state.statement_balance if count > 0 else card.used_limit

    return CardCycleResult(
        balance=non_negative_currency(balance),
        statement_balance=non_negative_currency(state.statement_balance),
        pending_charges=non_negative_currency(state.pending_charges),
        due_balance=non_negative_currency(state.due_balance),
        interest_accrued=non_negative_currency(totals.interest),
        payments_applied=non_negative_currency(totals.payments),
        spend_added=non_negative_currency(totals.spend),
    )


def loan_monthly_payment(loan: LoanCycleInput) -> float:
    """Monthly-equivalent payment for the loan's stated minimum and cadence"""
    return max(to_monthly_amount(loan.minimum_payment, loan.cadence), 0.0)


def loan_cycle_step(loan: LoanCycleInput) -> Callable[[LoanState], Tuple[LoanState, CycleTotals]]:
    """Build the one-cycle transition for ``loan``: accrue, then pay up to the balance"""
    rate = monthly_rate(loan.interest_rate)
    payment_amount = loan_monthly_payment(loan)

    def step(state: LoanState) -> Tuple[LoanState, CycleTotals]:
        interest = round_currency(state.balance * rate)
        balance = round_currency(state.balance + interest)
        payment = round_currency(min(balance, payment_amount))
        balance = non_negative_currency(balance - payment)
        return LoanState(balance=balance), CycleTotals(interest=interest, payments=payment)

    return step


def apply_loan_monthly_lifecycle(loan: LoanCycleInput, cycles: Any) -> LoanCycleResult:
    """
    Advance a loan by ``cycles`` monthly cycles.

    The stated payment is converted to a monthly equivalent once, up front.
    Payments below the accrued interest grow the balance; it never goes
    below zero.

    Example:
        balance 1000, payment 200 monthly, APR 12%, 1 cycle
        -> interest 10, paid 200, balance 810
    """
    count = normalize_cycles(cycles)
    start = LoanState(balance=non_negative_currency(loan.balance))
    state, totals = run_cycles(loan_cycle_step(loan), start, count)

    return LoanCycleResult(
        balance=non_negative_currency(state.balance),
        interest_accrued=non_negative_currency(totals.interest),
        payments_applied=non_negative_currency(totals.payments),
    )
