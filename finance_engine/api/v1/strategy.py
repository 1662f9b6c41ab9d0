"""POST /v1/strategy - Avalanche vs snowball recommendation"""

from fastapi import APIRouter, Request

from finance_engine.api.dependencies import run_operation
from finance_engine.api.v1.schemas import StrategyRequest
from finance_engine.domain.models import LoanStrategyResult
from finance_engine.domain.strategy import build_loan_strategy
from finance_engine.infrastructure.observability.metrics import record_recommendation

router = APIRouter()


@router.post("/strategy", response_model=LoanStrategyResult)
def recommend_strategy(request_body: StrategyRequest, request: Request):
    """
    Recommend where to direct a monthly overpay budget.

    A non-positive budget or a portfolio with nothing owed returns no targets.
    """
    loans = request_body.domain_loans()
    events = request_body.domain_events()
    cards = [card.to_domain() for card in request_body.cards]

    result = run_operation(
        request,
        "strategy",
        lambda: build_loan_strategy(
            loans,
            events,
            request_body.overpay_budget,
            cards=cards,
            as_of=request_body.as_of,
        ),
        loan_count=len(loans),
        card_count=len(cards),
    )
    record_recommendation(result.recommended_mode)
    return result
