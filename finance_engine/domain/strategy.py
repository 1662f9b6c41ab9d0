"""Avalanche / snowball debt strategy selection"""

from dataclasses import replace
from typing import Iterable, List, Optional, Sequence

from finance_engine.domain.lifecycle import apply_card_monthly_lifecycle
from finance_engine.domain.models import (
    AccountType,
    CardCycleInput,
    CardEntry,
    LoanEntry,
    LoanEvent,
    LoanProjectionOverrides,
    LoanStrategyResult,
    StrategyCandidate,
    StrategyMode,
)
from finance_engine.domain.projection import AsOf, build_loan_portfolio_projection
from finance_engine.utils.money import finite_or_zero, non_negative_currency, round_currency

ANNUAL_CYCLES = 12
_MIN_OUTSTANDING = 0.005


def card_annual_interest(entry: CardEntry, extra_budget: float = 0.0) -> float:
    """12-cycle interest for a card, optionally with ``extra_budget`` added to its extra payment"""
    card = entry.card
    if extra_budget > 0:
        card = replace(card, extra_payment=card.extra_payment + extra_budget)
    return apply_card_monthly_lifecycle(card, ANNUAL_CYCLES).interest_accrued


def card_outstanding(card: CardCycleInput) -> float:
    """What the card owes now: the used limit, or the statement plus pending charges when larger"""
    return non_negative_currency(max(card.used_limit, card.statement_balance + card.pending_charges))


def _card_candidate(entry: CardEntry) -> StrategyCandidate:
    return StrategyCandidate(
        account_id=entry.card_id,
        account_type=AccountType.CARD,
        name=entry.name,
        balance=card_outstanding(entry.card),
        apr=round_currency(max(entry.card.interest_rate, 0.0)),
        next_month_interest=apply_card_monthly_lifecycle(entry.card, 1).interest_accrued,
        annual_interest=card_annual_interest(entry),
        annual_interest_savings=0.0,
    )


def avalanche_order(candidates: Iterable[StrategyCandidate]) -> List[StrategyCandidate]:
    """Highest APR first; then larger monthly interest, larger balance, name"""
    return sorted(
        candidates,
        key=lambda c: (-c.apr, -c.next_month_interest, -c.balance, c.name.casefold()),
    )


def snowball_order(candidates: Iterable[StrategyCandidate]) -> List[StrategyCandidate]:
    """Smallest balance first; then higher APR, larger monthly interest, name"""
    return sorted(
        candidates,
        key=lambda c: (c.balance, -c.apr, -c.next_month_interest, c.name.casefold()),
    )


def _portfolio_annual_interest(
    loans: Sequence[LoanEntry],
    loan_events: Sequence[LoanEvent],
    cards: Sequence[CardEntry],
    as_of: AsOf,
    target: Optional[StrategyCandidate] = None,
    budget: float = 0.0,
) -> float:
    """Portfolio 12-month interest, with ``budget`` redirected to ``target`` when given"""
    overrides = {}
    if target is not None and target.account_type is AccountType.LOAN:
        overrides[target.account_id] = LoanProjectionOverrides(extra_payment_delta=budget)

    loan_interest = build_loan_portfolio_projection(
        loans, loan_events=loan_events, per_loan_overrides=overrides, as_of=as_of
    ).projected_annual_interest

    card_interest = 0.0
    for entry in cards:
        focused = target is not None and target.account_type is AccountType.CARD and target.account_id == entry.card_id
        card_interest += card_annual_interest(entry, budget if focused else 0.0)

    return round_currency(loan_interest + card_interest)


def build_loan_strategy(
    loans: Iterable[LoanEntry],
    loan_events: Iterable[LoanEvent],
    overpay_budget: float,
    cards: Iterable[CardEntry] = (),
    as_of: AsOf = None,
) -> LoanStrategyResult:
    """
    Pick avalanche and snowball targets for a monthly overpay budget.

    Requirements:
    - Eligible targets are loans and cards with an outstanding balance
    - Savings = baseline 12-month interest minus 12-month interest with the
      budget applied as extra payment to the target
    - Recommend the strategy with larger savings; ties go to avalanche
    - Non-positive budget or no eligible balance: no targets, no recommendation
    """
    loans = list(loans)
    loan_events = list(loan_events)
    cards = list(cards)
    budget = non_negative_currency(finite_or_zero(overpay_budget))

    baseline = build_loan_portfolio_projection(loans, loan_events=loan_events, as_of=as_of)
    card_candidates = [_card_candidate(entry) for entry in cards]
    baseline_interest = round_currency(
        baseline.projected_annual_interest + sum(c.annual_interest for c in card_candidates)
    )

    candidates = [
        StrategyCandidate(
            account_id=model.loan_id,
            account_type=AccountType.LOAN,
            name=model.name,
            balance=model.current_outstanding,
            apr=model.apr,
            next_month_interest=model.projected_next_month_interest,
            annual_interest=model.projected_annual_interest,
            annual_interest_savings=0.0,
        )
        for model in baseline.models
    ] + card_candidates
    candidates = [c for c in candidates if c.balance > _MIN_OUTSTANDING]

    if budget <= 0 or not candidates:
        return LoanStrategyResult(
            monthly_overpay_budget=budget,
            portfolio_annual_interest_baseline=baseline_interest,
            portfolio_annual_interest_with_avalanche=baseline_interest,
            portfolio_annual_interest_with_snowball=baseline_interest,
            recommended_mode=None,
            recommended_target=None,
            avalanche_target=None,
            snowball_target=None,
        )

    avalanche = avalanche_order(candidates)[0]
    snowball = snowball_order(candidates)[0]

    with_avalanche = _portfolio_annual_interest(loans, loan_events, cards, as_of, avalanche, budget)
    with_snowball = _portfolio_annual_interest(loans, loan_events, cards, as_of, snowball, budget)

    avalanche = replace(avalanche, annual_interest_savings=non_negative_currency(baseline_interest - with_avalanche))
    snowball = replace(snowball, annual_interest_savings=non_negative_currency(baseline_interest - with_snowball))

    if avalanche.annual_interest_savings >= snowball.annual_interest_savings:
        mode, recommended = StrategyMode.AVALANCHE, avalanche
    else:
        mode, recommended = StrategyMode.SNOWBALL, snowball

    return LoanStrategyResult(
        monthly_overpay_budget=budget,
        portfolio_annual_interest_baseline=baseline_interest,
        portfolio_annual_interest_with_avalanche=with_avalanche,
        portfolio_annual_interest_with_snowball=with_snowball,
        recommended_mode=mode,
        recommended_target=recommended,
        avalanche_target=avalanche,
        snowball_target=snowball,
    )
