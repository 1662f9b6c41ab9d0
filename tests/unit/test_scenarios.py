"""Unit tests for what-if scenarios and refinance analysis"""

import math
import pytest
from finance_engine.domain.models import LoanEntry, RefinanceOffer, WhatIfInput
from finance_engine.domain.projection import build_loan_projection_model
from finance_engine.domain.scenarios import amortized_payment, analyze_loan_refinance, run_loan_what_if


def test_empty_scenario_has_zero_delta(car_loan, personal_loan):
    """Test no adjustments leave the portfolio unchanged"""
    result = run_loan_what_if([car_loan, personal_loan], [], WhatIfInput())

    assert result.input.loan_id == "all"
    assert result.scenario == result.baseline
    assert result.delta.annual_interest == 0
    assert result.delta.annual_payments == 0
    assert result.delta.next_month_interest == 0
    assert result.delta.total_outstanding == 0


def test_extra_payment_lowers_interest(personal_loan):
    """Test a monthly extra payment cuts interest and raises payments"""
    result = run_loan_what_if([personal_loan], [], WhatIfInput(loan_id="loan_personal", extra_payment_delta=100))

    assert result.delta.annual_interest < 0
    assert result.delta.annual_payments == 1200
    assert result.delta.next_month_interest == 0
    assert result.scenario.models[0].monthly_payment == 250


def test_apr_delta(personal_loan):
    """Test APR deltas raise interest and floor at zero"""
    higher = run_loan_what_if([personal_loan], [], WhatIfInput(apr_delta=5))
    assert higher.delta.annual_interest > 0
    assert higher.scenario.models[0].apr == 29

    floored = run_loan_what_if([personal_loan], [], WhatIfInput(apr_delta=-100))
    assert floored.scenario.models[0].apr == 0
    assert floored.scenario.projected_annual_interest == 0
    assert floored.delta.annual_interest == -floored.baseline.projected_annual_interest


def test_unknown_loan_falls_back_to_all(car_loan, personal_loan):
    """Test a scope naming a missing loan applies to every loan"""
    result = run_loan_what_if([car_loan, personal_loan], [], WhatIfInput(loan_id="missing", apr_delta=2))

    assert result.input.loan_id == "all"
    assert result.scenario.models[0].apr == 14
    assert result.scenario.models[1].apr == 26


def test_scoped_scenario_leaves_other_loans(car_loan, personal_loan):
    """Test a scoped scenario only changes its loan"""
    result = run_loan_what_if([car_loan, personal_loan], [], WhatIfInput(loan_id="loan_car", extra_payment_delta=50))

    assert result.input.loan_id == "loan_car"
    assert result.scenario.models[0] != result.baseline.models[0]
    assert result.scenario.models[1] == result.baseline.models[1]


def test_due_day_shift_is_display_only(car_loan):
    """Test shifting the due day changes nothing but the due day"""
    result = run_loan_what_if([car_loan], [], WhatIfInput(due_day_shift=20))

    assert result.scenario.models[0].due_day == 31
    assert result.scenario.models[0].rows == result.baseline.models[0].rows
    assert result.delta.annual_interest == 0


def test_subscription_delta_raises_payments():
    """Test a subscription price change flows into payments"""
    loan = LoanEntry(
        loan_id="sub", name="Plan", balance=500, minimum_payment=50, subscription_cost=10, subscription_payment_count=24
    )
    result = run_loan_what_if([loan], [], WhatIfInput(subscription_delta=5))

    assert result.scenario.models[0].subscription_cost == 15
    assert result.delta.annual_payments == 60


def test_amortized_payment():
    """Test standard amortization and the zero-rate case"""
    assert amortized_payment(5000, 10, 24) == pytest.approx(230.72, abs=0.01)
    assert amortized_payment(5000, 0, 24) == pytest.approx(208.333333)
    assert amortized_payment(-100, 10, 12) == 0


@pytest.fixture
def refinance_model():
    loan = LoanEntry(loan_id="loan_ref", name="Refi", balance=5000, minimum_payment=240, interest_rate=24)
    return build_loan_projection_model(loan, max_months=36)


def test_refinance_break_even(refinance_model):
    """Test fees are recovered once cumulative current cost overtakes refinance cost"""
    result = analyze_loan_refinance(refinance_model, RefinanceOffer(apr=10, fees=100, term_months=24))

    assert result.monthly_payment == pytest.approx(230.72, abs=0.01)
    assert result.break_even_month == 11
    assert result.total_refinance_cost == pytest.approx(100 + 24 * result.monthly_payment, abs=0.5)
    assert result.total_cost_delta < 0
    assert result.total_cost_delta == pytest.approx(result.total_refinance_cost - result.total_current_cost)
    assert result.remaining_current_outstanding_at_term == refinance_model.rows[23].ending_outstanding


def test_refinance_without_break_even(refinance_model):
    """Test an expensive offer never breaks even"""
    result = analyze_loan_refinance(refinance_model, RefinanceOffer(apr=30, fees=500, term_months=24))

    assert result.break_even_month is None
    assert result.total_cost_delta > 0


def test_refinance_outputs_are_finite(refinance_model):
    """Test zero-rate and degenerate offers stay finite"""
    for offer in (
        RefinanceOffer(apr=0, fees=0, term_months=24),
        RefinanceOffer(apr=float("nan"), fees=-5, term_months=0),
    ):
        result = analyze_loan_refinance(refinance_model, offer)
        assert all(math.isfinite(value) for value in vars(result).values() if isinstance(value, float))

    zero_rate = analyze_loan_refinance(refinance_model, RefinanceOffer(apr=0, fees=0, term_months=24))
    assert zero_rate.monthly_payment == 208.33
    assert zero_rate.total_refinance_interest == 0


def test_refinance_paid_off_loan():
    """Test refinancing nothing costs nothing"""
    model = build_loan_projection_model(LoanEntry(loan_id="z", name="Zero"))
    result = analyze_loan_refinance(model, RefinanceOffer(apr=10, fees=0, term_months=12))

    assert result.monthly_payment == 0
    assert result.total_refinance_cost == 0
    assert result.break_even_month is None
