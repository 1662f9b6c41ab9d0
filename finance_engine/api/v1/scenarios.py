"""What-if and refinance endpoints"""

from fastapi import APIRouter, Request

from finance_engine.api.dependencies import run_operation
from finance_engine.api.v1.schemas import RefinanceRequest, WhatIfRequest
from finance_engine.config import settings
from finance_engine.domain.models import RefinanceResult, WhatIfResult
from finance_engine.domain.projection import build_loan_projection_model
from finance_engine.domain.scenarios import analyze_loan_refinance, run_loan_what_if

router = APIRouter()


@router.post("/what-if", response_model=WhatIfResult)
def what_if(request_body: WhatIfRequest, request: Request):
    """
    Diff a baseline projection against one with scenario deltas applied.

    Unknown loan ids widen the scenario to all loans.
    """
    loans = request_body.domain_loans()
    events = request_body.domain_events()
    scenario = request_body.scenario.to_domain()

    return run_operation(
        request,
        "what_if",
        lambda: run_loan_what_if(loans, events, scenario, as_of=request_body.as_of),
        loan_count=len(loans),
        scope=scenario.loan_id,
    )


@router.post("/refinance", response_model=RefinanceResult)
def refinance(request_body: RefinanceRequest, request: Request):
    """
    Compare a refinance offer against the loan's current path.

    The loan is projected at least as far as the offer's term.
    """
    loan = request_body.loan.to_domain()
    events = [event.to_domain() for event in request_body.loan_events]
    offer = request_body.offer.to_domain()
    months = max(settings.projection_max_months, offer.term_months)

    def compute() -> RefinanceResult:
        model = build_loan_projection_model(loan, max_months=months, loan_events=events, as_of=request_body.as_of)
        return analyze_loan_refinance(model, offer)

    return run_operation(request, "refinance", compute, loan_id=loan.loan_id, term_months=offer.term_months)
