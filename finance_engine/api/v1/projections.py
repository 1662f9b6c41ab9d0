"""POST /v1/projections/loans - Multi-month loan portfolio projection"""

from fastapi import APIRouter, Request

from finance_engine.api.dependencies import run_operation
from finance_engine.api.v1.schemas import ProjectionRequest
from finance_engine.config import settings
from finance_engine.domain.models import LoanPortfolioProjection
from finance_engine.domain.projection import build_loan_portfolio_projection

router = APIRouter()


@router.post("/projections/loans", response_model=LoanPortfolioProjection)
def project_loans(request_body: ProjectionRequest, request: Request):
    """
    Project every loan month by month and aggregate interest windows.

    Returns:
        Per-loan models (rows, 12/24/36-month horizons, consistency score)
        plus portfolio totals
    """
    loans = request_body.domain_loans()
    events = request_body.domain_events()
    max_months = request_body.max_months or settings.projection_max_months

    return run_operation(
        request,
        "projection",
        lambda: build_loan_portfolio_projection(
            loans,
            max_months=max_months,
            loan_events=events,
            as_of=request_body.as_of,
        ),
        loan_count=len(loans),
        max_months=max_months,
    )
