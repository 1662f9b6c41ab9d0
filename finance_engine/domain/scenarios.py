"""What-if scenario comparison and refinance analysis"""

from typing import Dict, Iterable, List, Optional

from finance_engine.domain.models import (
    ALL_LOANS,
    LoanEntry,
    LoanEvent,
    LoanProjectionModel,
    LoanProjectionOverrides,
    RefinanceOffer,
    RefinanceResult,
    WhatIfDelta,
    WhatIfInput,
    WhatIfResult,
)
from finance_engine.domain.projection import AsOf, build_loan_portfolio_projection
from finance_engine.utils.money import monthly_rate, non_negative_currency, round_currency


def resolve_scope(loans: List[LoanEntry], loan_id: str) -> str:
    """A scope naming a loan that doesn't exist widens to all loans"""
    if loan_id != ALL_LOANS and any(loan.loan_id == loan_id for loan in loans):
        return loan_id
    return ALL_LOANS


def build_scenario_overrides(loans: List[LoanEntry], what_if: WhatIfInput) -> Dict[str, LoanProjectionOverrides]:
    overrides = LoanProjectionOverrides(
        extra_payment_delta=what_if.extra_payment_delta,
        apr_delta=what_if.apr_delta,
        subscription_delta=what_if.subscription_delta,
        due_day_shift=what_if.due_day_shift,
    )
    return {
        loan.loan_id: overrides
        for loan in loans
        if what_if.loan_id == ALL_LOANS or what_if.loan_id == loan.loan_id
    }


def run_loan_what_if(
    loans: Iterable[LoanEntry],
    loan_events: Iterable[LoanEvent],
    what_if: WhatIfInput,
    as_of: AsOf = None,
) -> WhatIfResult:
    """
    Compare the unmodified portfolio against one with scenario deltas applied.

    The due-day shift only moves the displayed due day; interest timing is
    unchanged in this model. The returned ``input`` carries the effective
    scope after unknown loan ids fall back to all loans.
    """
    loans = list(loans)
    loan_events = list(loan_events)
    effective = WhatIfInput(
        loan_id=resolve_scope(loans, what_if.loan_id),
        extra_payment_delta=what_if.extra_payment_delta,
        apr_delta=what_if.apr_delta,
        subscription_delta=what_if.subscription_delta,
        due_day_shift=what_if.due_day_shift,
    )

    baseline = build_loan_portfolio_projection(loans, loan_events=loan_events, as_of=as_of)
    scenario = build_loan_portfolio_projection(
        loans,
        loan_events=loan_events,
        per_loan_overrides=build_scenario_overrides(loans, effective),
        as_of=as_of,
    )

    return WhatIfResult(
        input=effective,
        baseline=baseline,
        scenario=scenario,
        delta=WhatIfDelta(
            next_month_interest=round_currency(
                scenario.projected_next_month_interest - baseline.projected_next_month_interest
            ),
            annual_interest=round_currency(scenario.projected_annual_interest - baseline.projected_annual_interest),
            annual_payments=round_currency(scenario.projected_annual_payments - baseline.projected_annual_payments),
            total_outstanding=round_currency(scenario.total_outstanding - baseline.total_outstanding),
        ),
    )


def amortized_payment(principal: float, apr: float, term_months: int) -> float:
    """
    Fixed payment that retires ``principal`` over ``term_months``.

    payment = P * r / (1 - (1 + r)^-n), or P / n when the rate is zero.
    """
    principal = max(principal, 0.0)
    term = max(int(term_months), 1)
    rate = monthly_rate(apr)
    if rate <= 0:
        return principal / term

    denominator = 1 - (1 + rate) ** -term
    if denominator <= 0:
        return principal / term
    return principal * rate / denominator


def analyze_loan_refinance(model: LoanProjectionModel, offer: RefinanceOffer) -> RefinanceResult:
    """
    Compare refinancing ``model``'s loan against staying on its current path.

    Requirements:
    - The interest-bearing balance is refinanced; subscription fees keep
      their own schedule and are charged on both paths
    - Fees are paid up front (month 0) on the refinance path
    - Break-even is the first month the cumulative current-path cost exceeds
      the cumulative refinance cost, or None within the term
    - Costs compare payments through the term plus whatever is still owed

    Build ``model`` with at least ``term_months`` rows; months past the
    projection contribute no current-path payments.
    """
    term = offer.term_months
    rate = monthly_rate(offer.apr)
    principal = non_negative_currency(model.current_loan_balance)
    monthly_payment = round_currency(amortized_payment(principal, offer.apr, term))

    current_rows = model.rows[:term]
    remaining_current = current_rows[-1].ending_outstanding if current_rows else model.current_outstanding

    refinance_balance = principal
    refinance_interest = 0.0
    refinance_payments = 0.0
    subscription_paid = 0.0
    cumulative_current = 0.0
    cumulative_refinance = offer.fees
    break_even_month: Optional[int] = None

    for month in range(1, term + 1):
        interest = round_currency(refinance_balance * rate)
        due = round_currency(refinance_balance + interest)
        payment = round_currency(min(due, monthly_payment))
        refinance_balance = non_negative_currency(due - payment)
        refinance_interest = round_currency(refinance_interest + interest)
        refinance_payments = round_currency(refinance_payments + payment)

        current_row = current_rows[month - 1] if month <= len(current_rows) else None
        current_month_cost = current_row.total_payment if current_row else 0.0
        subscription_due = current_row.subscription_due if current_row else 0.0
        subscription_paid = round_currency(subscription_paid + subscription_due)

        cumulative_current = round_currency(cumulative_current + current_month_cost)
        cumulative_refinance = round_currency(cumulative_refinance + payment + subscription_due)

        if break_even_month is None and cumulative_current > cumulative_refinance:
            break_even_month = month

    # A rounded payment can leave a few cents owed at term; count them as cost
    total_refinance_cost = round_currency(offer.fees + refinance_payments + subscription_paid + refinance_balance)
    total_current_cost = round_currency(sum(row.total_payment for row in current_rows) + remaining_current)

    return RefinanceResult(
        monthly_payment=monthly_payment,
        total_refinance_interest=refinance_interest,
        total_refinance_cost=total_refinance_cost,
        total_current_cost=total_current_cost,
        total_cost_delta=round_currency(total_refinance_cost - total_current_cost),
        break_even_month=break_even_month,
        remaining_current_outstanding_at_term=round_currency(remaining_current),
    )
