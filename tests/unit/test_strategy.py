"""Unit tests for avalanche / snowball strategy selection"""

from finance_engine.domain.models import AccountType, CardCycleInput, CardEntry, LoanEntry, StrategyCandidate, StrategyMode
from finance_engine.domain.strategy import avalanche_order, build_loan_strategy, card_outstanding, snowball_order


def _candidate(name, balance, apr, next_month_interest=0.0):
    return StrategyCandidate(
        account_id=name,
        account_type=AccountType.LOAN,
        name=name,
        balance=balance,
        apr=apr,
        next_month_interest=next_month_interest,
        annual_interest=0.0,
        annual_interest_savings=0.0,
    )


def test_avalanche_recommended_for_high_apr_debt(personal_loan):
    """Test the high-APR target saves more and wins"""
    small = LoanEntry(loan_id="small", name="Small", balance=800, minimum_payment=50, interest_rate=10)
    result = build_loan_strategy([personal_loan, small], [], 200)

    assert result.avalanche_target.account_id == "loan_personal"
    assert result.snowball_target.account_id == "small"
    assert result.avalanche_target.annual_interest_savings > result.snowball_target.annual_interest_savings > 0
    assert result.recommended_mode is StrategyMode.AVALANCHE
    assert result.recommended_target == result.avalanche_target
    assert result.portfolio_annual_interest_with_avalanche < result.portfolio_annual_interest_baseline


def test_snowball_recommended_when_avalanche_target_already_clears():
    """Test snowball wins when the high-APR loan's minimum already clears it"""
    clearing = LoanEntry(loan_id="a", name="Clearing", balance=1000, minimum_payment=1000, interest_rate=30)
    idle = LoanEntry(loan_id="b", name="Idle", balance=500, minimum_payment=0, interest_rate=20)
    result = build_loan_strategy([clearing, idle], [], 600)

    assert result.avalanche_target.account_id == "a"
    assert result.snowball_target.account_id == "b"
    assert result.recommended_mode is StrategyMode.SNOWBALL
    assert result.recommended_target.account_id == "b"


def test_same_target_ties_to_avalanche():
    """Test equal savings go to avalanche"""
    only = LoanEntry(loan_id="only", name="Only", balance=2000, minimum_payment=100, interest_rate=18)
    result = build_loan_strategy([only], [], 150)

    assert result.avalanche_target.annual_interest_savings == result.snowball_target.annual_interest_savings
    assert result.recommended_mode is StrategyMode.AVALANCHE


def test_non_positive_budget_gives_no_recommendation(personal_loan):
    """Test a zero, negative or junk budget returns no targets"""
    for budget in (0, -50, float("nan")):
        result = build_loan_strategy([personal_loan], [], budget)

        assert result.monthly_overpay_budget == 0
        assert result.recommended_mode is None
        assert result.recommended_target is None
        assert result.avalanche_target is None
        assert result.snowball_target is None
        assert result.portfolio_annual_interest_with_avalanche == result.portfolio_annual_interest_baseline


def test_no_eligible_balances():
    """Test paid-off accounts are never targets"""
    paid = LoanEntry(loan_id="paid", name="Paid", balance=0, minimum_payment=100, interest_rate=20)
    result = build_loan_strategy([paid], [], 100)

    assert result.recommended_mode is None
    assert result.portfolio_annual_interest_baseline == 0


def test_cards_are_candidates(personal_loan):
    """Test a high-APR card becomes the avalanche target"""
    card = CardEntry(
        card_id="card_1",
        name="Rewards",
        card=CardCycleInput(used_limit=2000, minimum_payment=50, interest_rate=29.99),
    )
    result = build_loan_strategy([personal_loan], [], 300, cards=[card])

    assert result.avalanche_target.account_type is AccountType.CARD
    assert result.avalanche_target.account_id == "card_1"
    assert result.avalanche_target.balance == 2000
    assert result.avalanche_target.annual_interest_savings > 0
    assert result.snowball_target.account_id == "card_1"


def test_statement_only_card_is_a_candidate():
    """Test a card carrying only a statement balance still gets the budget"""
    card = CardEntry(
        card_id="card_2",
        name="Store",
        card=CardCycleInput(statement_balance=500, interest_rate=20, minimum_payment=25),
    )
    result = build_loan_strategy([], [], 100, cards=[card])

    assert result.avalanche_target is not None
    assert result.avalanche_target.account_id == "card_2"
    assert result.avalanche_target.balance == 500
    assert result.avalanche_target.annual_interest_savings > 0
    assert result.recommended_mode is StrategyMode.AVALANCHE


def test_card_outstanding_takes_larger_figure():
    """Test outstanding is the used limit or statement plus pending, whichever is larger"""
    assert card_outstanding(CardCycleInput(used_limit=2000, statement_balance=300)) == 2000
    assert card_outstanding(CardCycleInput(statement_balance=300, pending_charges=120.5)) == 420.5
    assert card_outstanding(CardCycleInput()) == 0


def test_avalanche_order_tie_breaks():
    """Test APR, then monthly interest, then balance, then name"""
    ordered = avalanche_order(
        [
            _candidate("Beta", 1000, 20, 16.67),
            _candidate("alpha", 1000, 20, 16.67),
            _candidate("Gamma", 3000, 20, 50),
            _candidate("Delta", 500, 25, 10.42),
        ]
    )
    assert [c.name for c in ordered] == ["Delta", "Gamma", "alpha", "Beta"]


def test_snowball_order_tie_breaks():
    """Test balance, then APR, then monthly interest, then name"""
    ordered = snowball_order(
        [
            _candidate("Beta", 500, 10, 4.17),
            _candidate("alpha", 500, 10, 4.17),
            _candidate("Gamma", 500, 15, 6.25),
            _candidate("Delta", 2000, 30, 50),
        ]
    )
    assert [c.name for c in ordered] == ["Gamma", "alpha", "Beta", "Delta"]
