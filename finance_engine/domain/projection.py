"""Multi-month loan portfolio projections and payment consistency scoring"""

import math
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from finance_engine.domain.cadence import to_monthly_amount
from finance_engine.domain.lifecycle import apply_loan_monthly_lifecycle, normalize_cycles
from finance_engine.domain.models import (
    Cadence,
    CadenceKind,
    ConsistencyPoint,
    LoanCycleInput,
    LoanEntry,
    LoanEvent,
    LoanPortfolioProjection,
    LoanProjectionModel,
    LoanProjectionOverrides,
    LoanProjectionRow,
    LoanProjectionSummary,
    clamp_day,
)
from finance_engine.utils.date_utils import add_months_on_day, month_key, month_key_offset, start_of_day
from finance_engine.utils.money import non_negative_currency, round_currency

HORIZONS = (12, 24, 36)
MIN_PROJECTION_MONTHS = 36
PAYOFF_SEARCH_MONTHS = 360
CONSISTENCY_WINDOW_MONTHS = 12
DEFAULT_SUBSCRIPTION_PAYMENTS = 12
PAYMENT_EVENT = "payment"

_EPSILON = 0.000001

AsOf = Optional[Union[date, datetime]]


def resolve_loan_balances(entry: LoanEntry) -> Tuple[float, float, float]:
    """
    Current (principal, accrued interest, loan balance) read from the stored record.

    An explicit principal/interest breakdown wins over the flat balance.
    """
    if entry.principal_balance is not None or entry.accrued_interest is not None:
        principal = non_negative_currency(entry.principal_balance or 0.0)
        accrued_interest = non_negative_currency(entry.accrued_interest or 0.0)
        return principal, accrued_interest, round_currency(principal + accrued_interest)

    balance = non_negative_currency(entry.balance)
    return balance, 0.0, balance


def resolve_subscription_outstanding(entry: LoanEntry) -> float:
    """
    Subscription fees still owed on the loan.

    A stored outstanding no larger than one payment, with no payment count,
    is read as a fresh 12-payment plan.
    """
    cost = non_negative_currency(entry.subscription_cost)
    if cost <= 0:
        return 0.0

    if entry.subscription_outstanding is not None:
        outstanding = non_negative_currency(entry.subscription_outstanding)
        if entry.subscription_payment_count is None and outstanding <= cost + _EPSILON:
            return round_currency(cost * DEFAULT_SUBSCRIPTION_PAYMENTS)
        return outstanding

    count = entry.subscription_payment_count or DEFAULT_SUBSCRIPTION_PAYMENTS
    return round_currency(cost * count)


def resolve_subscription_payments_remaining(cost: float, outstanding: float) -> int:
    if cost <= 0 or outstanding <= 0:
        return 0
    return max(1, math.ceil(outstanding / cost - _EPSILON))


def projection_monthly_payment(entry: LoanEntry, overrides: Optional[LoanProjectionOverrides] = None) -> float:
    """Monthly-equivalent loan payment (minimum + extra, plus any scenario delta), floored at 0"""
    overrides = overrides or LoanProjectionOverrides()
    per_occurrence = max(entry.minimum_payment, 0.0) + max(entry.extra_payment, 0.0)
    monthly = to_monthly_amount(per_occurrence, entry.cadence) + overrides.extra_payment_delta
    return max(monthly, 0.0)


def projection_cycle_input(entry: LoanEntry, overrides: Optional[LoanProjectionOverrides] = None) -> LoanCycleInput:
    """
    Loan simulator input equivalent to ``entry`` under ``overrides``.

    The batch simulator run on this input for N cycles matches the first N
    projection rows exactly.
    """
    overrides = overrides or LoanProjectionOverrides()
    _, _, loan_balance = resolve_loan_balances(entry)
    return LoanCycleInput(
        balance=loan_balance,
        minimum_payment=projection_monthly_payment(entry, overrides),
        interest_rate=max(entry.interest_rate + overrides.apr_delta, 0.0),
        cadence=Cadence(CadenceKind.MONTHLY),
    )


def project_loan_rows(
    entry: LoanEntry,
    months: int,
    overrides: Optional[LoanProjectionOverrides] = None,
) -> Tuple[List[LoanProjectionRow], Optional[int]]:
    """
    Project ``entry`` month by month, one simulator cycle per row.

    Returns the first ``months`` rows and the payoff month (first month with
    nothing outstanding), searched up to PAYOFF_SEARCH_MONTHS.
    """
    overrides = overrides or LoanProjectionOverrides()
    cycle_input = projection_cycle_input(entry, overrides)
    subscription_cost = non_negative_currency(entry.subscription_cost + overrides.subscription_delta)

    principal, accrued_interest, _ = resolve_loan_balances(entry)
    loan_balance = cycle_input.balance
    minimum_monthly = max(to_monthly_amount(max(entry.minimum_payment, 0.0), entry.cadence), 0.0)
    subscription = resolve_subscription_outstanding(entry)
    rows: List[LoanProjectionRow] = []
    payoff_month: Optional[int] = None

    for month_index in range(1, max(months, PAYOFF_SEARCH_MONTHS) + 1):
        if month_index > months and payoff_month is not None:
            break

        opening_principal = principal
        opening_interest = accrued_interest
        opening_loan_balance = loan_balance
        opening_subscription = subscription

        cycle = apply_loan_monthly_lifecycle(replace(cycle_input, balance=loan_balance), 1)
        loan_balance = cycle.balance
        amount_due = round_currency(opening_loan_balance + cycle.interest_accrued)
        minimum_due = round_currency(min(amount_due, minimum_monthly))

        # Payments settle accrued interest before principal
        accrued_interest = round_currency(accrued_interest + cycle.interest_accrued)
        payment_to_interest = round_currency(min(accrued_interest, cycle.payments_applied))
        accrued_interest = non_negative_currency(accrued_interest - payment_to_interest)
        payment_to_principal = round_currency(min(principal, max(cycle.payments_applied - payment_to_interest, 0.0)))
        principal = non_negative_currency(principal - payment_to_principal)

        # Subscription amortizes on its own schedule, one payment per month
        per_payment = subscription_cost if subscription_cost > 0 else subscription
        subscription_due = round_currency(min(subscription, per_payment))
        subscription = non_negative_currency(subscription - subscription_due)

        ending_outstanding = round_currency(loan_balance + subscription)
        if payoff_month is None and ending_outstanding <= _EPSILON:
            payoff_month = month_index

        if month_index <= months:
            rows.append(
                LoanProjectionRow(
                    month_index=month_index,
                    opening_principal=opening_principal,
                    opening_interest=opening_interest,
                    opening_loan_balance=opening_loan_balance,
                    opening_subscription=opening_subscription,
                    opening_outstanding=round_currency(opening_loan_balance + opening_subscription),
                    interest_accrued=cycle.interest_accrued,
                    minimum_due=minimum_due,
                    planned_loan_payment=cycle.payments_applied,
                    payment_to_interest=payment_to_interest,
                    payment_to_principal=payment_to_principal,
                    subscription_due=subscription_due,
                    total_payment=round_currency(cycle.payments_applied + subscription_due),
                    ending_principal=principal,
                    ending_interest=accrued_interest,
                    ending_loan_balance=loan_balance,
                    ending_subscription=subscription,
                    ending_outstanding=ending_outstanding,
                )
            )

    return rows, payoff_month


def summarise_rows(rows: List[LoanProjectionRow], months: int) -> LoanProjectionSummary:
    bounded = rows[:months]
    return LoanProjectionSummary(
        months=months,
        ending_outstanding=bounded[-1].ending_outstanding if bounded else 0.0,
        total_interest=round_currency(sum(row.interest_accrued for row in bounded)),
        total_loan_payment=round_currency(sum(row.planned_loan_payment for row in bounded)),
        total_principal_paid=round_currency(sum(row.payment_to_principal for row in bounded)),
        total_subscription_paid=round_currency(sum(row.subscription_due for row in bounded)),
        total_payment=round_currency(sum(row.total_payment for row in bounded)),
    )


def build_payment_consistency(
    loan_id: str,
    loan_events: Iterable[LoanEvent],
    expected_monthly_payment: float,
    as_of: AsOf = None,
    window_months: int = CONSISTENCY_WINDOW_MONTHS,
) -> Tuple[Optional[float], List[ConsistencyPoint]]:
    """
    Score how consistently the planned payment was actually made (0-100).

    Requirements:
    - Only positive "payment" events for this loan count
    - Payments are bucketed into calendar months over a trailing window
    - Each month's paid/expected ratio is capped at 1.0 before averaging
    - No payment history gives (None, []) rather than a computed zero

    The window ends at the month of ``as_of``, or at the month of the latest
    payment when ``as_of`` is omitted, so the result depends only on inputs.
    """
    payments = [
        event
        for event in loan_events
        if event.loan_id == loan_id and event.event_type == PAYMENT_EVENT and event.amount > 0
    ]
    if not payments:
        return None, []

    anchor = start_of_day(as_of) if as_of is not None else max(start_of_day(e.occurred_at) for e in payments)

    paid_by_month: Dict[str, float] = {}
    for event in payments:
        key = month_key(start_of_day(event.occurred_at))
        paid_by_month[key] = round_currency(paid_by_month.get(key, 0.0) + event.amount)

    expected = non_negative_currency(expected_monthly_payment)
    window = max(window_months, 1)
    trend: List[ConsistencyPoint] = []
    for offset in range(1 - window, 1):
        key = month_key_offset(anchor, offset)
        paid = paid_by_month.get(key, 0.0)
        ratio = min(paid / expected, 1.0) if expected > 0 else 1.0
        trend.append(ConsistencyPoint(month_key=key, paid=paid, expected=expected, ratio=ratio))

    score = sum(point.ratio for point in trend) / len(trend) * 100
    return round_currency(min(max(score, 0.0), 100.0)), trend


def build_loan_projection_model(
    entry: LoanEntry,
    max_months: int = MIN_PROJECTION_MONTHS,
    loan_events: Iterable[LoanEvent] = (),
    overrides: Optional[LoanProjectionOverrides] = None,
    as_of: AsOf = None,
) -> LoanProjectionModel:
    """
    Build the projection model for a single loan.

    At least 36 rows are always produced so every reporting horizon is
    covered. Current balances come straight from the stored record; only
    the future is simulated.
    """
    overrides = overrides or LoanProjectionOverrides()
    months = max(normalize_cycles(max_months), MIN_PROJECTION_MONTHS)
    rows, payoff_month = project_loan_rows(entry, months, overrides)

    principal, accrued_interest, loan_balance = resolve_loan_balances(entry)
    subscription_cost = non_negative_currency(entry.subscription_cost + overrides.subscription_delta)
    subscription_outstanding = resolve_subscription_outstanding(entry)
    due_day = clamp_day(entry.due_day + overrides.due_day_shift)

    horizons = {horizon: summarise_rows(rows, horizon) for horizon in HORIZONS}
    expected_payment = rows[0].total_payment if rows else 0.0
    score, trend = build_payment_consistency(entry.loan_id, loan_events, expected_payment, as_of)

    payoff_date = None
    if as_of is not None and payoff_month is not None:
        payoff_date = add_months_on_day(start_of_day(as_of), payoff_month, due_day)

    return LoanProjectionModel(
        loan_id=entry.loan_id,
        name=entry.name,
        apr=round_currency(max(entry.interest_rate + overrides.apr_delta, 0.0)),
        cadence=entry.cadence,
        due_day=due_day,
        monthly_payment=round_currency(projection_monthly_payment(entry, overrides)),
        subscription_cost=subscription_cost,
        subscription_payments_remaining=resolve_subscription_payments_remaining(
            subscription_cost, subscription_outstanding
        ),
        current_principal=principal,
        current_interest=accrued_interest,
        current_loan_balance=loan_balance,
        current_subscription_outstanding=subscription_outstanding,
        current_outstanding=round_currency(loan_balance + subscription_outstanding),
        projected_next_month_interest=rows[0].interest_accrued if rows else 0.0,
        projected_annual_interest=horizons[12].total_interest,
        projected_24_month_interest=horizons[24].total_interest,
        projected_36_month_interest=horizons[36].total_interest,
        projected_payoff_months=payoff_month,
        projected_payoff_date=payoff_date,
        payment_consistency_score=score,
        payment_consistency_trend=trend,
        rows=rows,
        horizons=horizons,
    )


def build_loan_portfolio_projection(
    loans: Iterable[LoanEntry],
    max_months: int = MIN_PROJECTION_MONTHS,
    loan_events: Iterable[LoanEvent] = (),
    per_loan_overrides: Optional[Mapping[str, LoanProjectionOverrides]] = None,
    as_of: AsOf = None,
) -> LoanPortfolioProjection:
    """
    Project every loan and aggregate the portfolio windows.

    Next-month and 12/24/36-month interest are sums of each loan's row
    prefixes. The average consistency score ignores loans without history
    and is None when no loan has any.
    """
    events = list(loan_events)
    overrides = per_loan_overrides or {}
    models = [
        build_loan_projection_model(
            loan,
            max_months=max_months,
            loan_events=events,
            overrides=overrides.get(loan.loan_id),
            as_of=as_of,
        )
        for loan in loans
    ]

    scores = [model.payment_consistency_score for model in models if model.payment_consistency_score is not None]
    average_score = round_currency(sum(scores) / len(scores)) if scores else None

    return LoanPortfolioProjection(
        total_outstanding=round_currency(sum(m.current_outstanding for m in models)),
        projected_next_month_interest=round_currency(sum(m.projected_next_month_interest for m in models)),
        projected_annual_interest=round_currency(sum(m.horizons[12].total_interest for m in models)),
        projected_24_month_interest=round_currency(sum(m.horizons[24].total_interest for m in models)),
        projected_36_month_interest=round_currency(sum(m.horizons[36].total_interest for m in models)),
        projected_annual_payments=round_currency(sum(m.horizons[12].total_payment for m in models)),
        average_payment_consistency_score=average_score,
        models=models,
    )
