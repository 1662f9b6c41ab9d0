"""Unit tests for cycle catch-up planning"""

from datetime import datetime
from finance_engine.domain.catch_up import plan_card_catch_up, plan_loan_catch_up
from finance_engine.domain.lifecycle import apply_card_monthly_lifecycle, apply_loan_monthly_lifecycle
from finance_engine.domain.models import AccountType, LoanCycleInput

LAST_CYCLE_MS = datetime(2026, 1, 15, 10, 0).timestamp() * 1000


def test_card_catch_up_applies_missed_cycles(revolving_card):
    """Test every completed cycle is applied in one plan"""
    plan = plan_card_catch_up("card_1", revolving_card, LAST_CYCLE_MS, datetime(2026, 4, 20, 8, 0))

    assert plan.account_type is AccountType.CARD
    assert plan.cycles == 3
    assert plan.cycle_key == "2026-04"
    assert plan.idempotency_key == "card:card_1:2026-04"
    assert plan.result == apply_card_monthly_lifecycle(revolving_card, 3)


def test_card_catch_up_nothing_due(revolving_card):
    """Test a plan before the first boundary applies zero cycles"""
    plan = plan_card_catch_up("card_1", revolving_card, LAST_CYCLE_MS, datetime(2026, 2, 14, 23, 0))

    assert plan.cycles == 0
    assert plan.result.balance == revolving_card.used_limit
    assert plan.result.interest_accrued == 0


def test_loan_catch_up():
    """Test loan plans use their own key namespace"""
    loan = LoanCycleInput(balance=1000, minimum_payment=200, interest_rate=12)
    plan = plan_loan_catch_up(42, loan, LAST_CYCLE_MS, datetime(2026, 3, 15))

    assert plan.account_id == "42"
    assert plan.account_type is AccountType.LOAN
    assert plan.cycles == 2
    assert plan.idempotency_key == "loan:42:2026-03"
    assert plan.result == apply_loan_monthly_lifecycle(loan, 2)


def test_same_month_reuses_key(revolving_card):
    """Test reruns within a month produce the same idempotency key"""
    first = plan_card_catch_up("card_1", revolving_card, LAST_CYCLE_MS, datetime(2026, 4, 1))
    second = plan_card_catch_up("card_1", revolving_card, LAST_CYCLE_MS, datetime(2026, 4, 30, 23, 0))

    assert first.idempotency_key == second.idempotency_key
