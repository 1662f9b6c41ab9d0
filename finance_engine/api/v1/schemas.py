"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from finance_engine.domain.cycles import MAX_CYCLE_ITERATIONS
from finance_engine.domain.models import (
    ALL_LOANS,
    CardCycleInput,
    CardEntry,
    LoanCycleInput,
    LoanEntry,
    LoanEvent,
    RefinanceOffer,
    WhatIfInput,
)


class CardSchema(BaseModel):
    """Credit card snapshot; missing numbers are treated as zero"""

    used_limit: Optional[float] = None
    statement_balance: Optional[float] = None
    pending_charges: Optional[float] = None
    spend_per_month: Optional[float] = None
    minimum_payment: Optional[float] = None
    minimum_payment_type: Optional[str] = Field(None, description="fixed | percent_plus_interest")
    minimum_payment_percent: Optional[float] = None
    extra_payment: Optional[float] = None
    interest_rate: Optional[float] = Field(None, description="APR in percent")

    def to_domain(self) -> CardCycleInput:
        return CardCycleInput(**self.model_dump())


class LoanSchema(BaseModel):
    """Loan snapshot for cycle simulation"""

    balance: Optional[float] = None
    minimum_payment: Optional[float] = None
    interest_rate: Optional[float] = None
    cadence: str = "monthly"
    custom_interval: Optional[int] = None
    custom_unit: Optional[str] = None

    def to_domain(self) -> LoanCycleInput:
        return LoanCycleInput(**self.model_dump())


class CardCycleRequest(BaseModel):
    """Request body for POST /v1/cycles/card"""

    card: CardSchema
    cycles: int = Field(1, ge=0, le=MAX_CYCLE_ITERATIONS, description="Monthly cycles to simulate")


class LoanCycleRequest(BaseModel):
    """Request body for POST /v1/cycles/loan"""

    loan: LoanSchema
    cycles: int = Field(1, ge=0, le=MAX_CYCLE_ITERATIONS, description="Monthly cycles to simulate")


class CycleCountRequest(BaseModel):
    """Request body for POST /v1/cycles/count"""

    from_timestamp_ms: float = Field(..., description="Start of the first cycle, epoch milliseconds")
    now: datetime


class CycleCountResponse(BaseModel):
    cycles: int
    cycle_key: str


class CatchUpRequest(BaseModel):
    """Request body for POST /v1/cycles/catch-up; exactly one of card/loan"""

    account_id: str = Field(..., min_length=1)
    card: Optional[CardSchema] = None
    loan: Optional[LoanSchema] = None
    last_cycle_at_ms: float
    now: datetime


class CatchUpResponse(BaseModel):
    account_id: str
    account_type: str
    cycles: int
    cycle_key: str
    idempotency_key: str
    result: Dict[str, float]


class MonthlyAmountRequest(BaseModel):
    """Request body for POST /v1/cadence/monthly-amount"""

    amount: float
    cadence: str
    custom_interval: Optional[int] = None
    custom_unit: Optional[str] = None


class MonthlyAmountResponse(BaseModel):
    monthly_amount: float


class LoanEntrySchema(BaseModel):
    """Stored loan record"""

    loan_id: str = Field(..., min_length=1)
    name: str
    balance: Optional[float] = None
    principal_balance: Optional[float] = None
    accrued_interest: Optional[float] = None
    minimum_payment: Optional[float] = None
    extra_payment: Optional[float] = None
    interest_rate: Optional[float] = None
    cadence: str = "monthly"
    custom_interval: Optional[int] = None
    custom_unit: Optional[str] = None
    due_day: int = 1
    subscription_cost: Optional[float] = None
    subscription_payment_count: Optional[int] = None
    subscription_outstanding: Optional[float] = None

    def to_domain(self) -> LoanEntry:
        return LoanEntry(**self.model_dump())


class LoanEventSchema(BaseModel):
    loan_id: str
    event_type: str
    amount: float = 0.0
    occurred_at: datetime

    def to_domain(self) -> LoanEvent:
        return LoanEvent(**self.model_dump())


class CardEntrySchema(BaseModel):
    card_id: str = Field(..., min_length=1)
    name: str
    card: CardSchema

    def to_domain(self) -> CardEntry:
        return CardEntry(card_id=self.card_id, name=self.name, card=self.card.to_domain())


class PortfolioRequest(BaseModel):
    """Loans and their event history, shared by the portfolio endpoints"""

    loans: List[LoanEntrySchema] = Field(default_factory=list)
    loan_events: List[LoanEventSchema] = Field(default_factory=list)
    as_of: Optional[date] = None

    def domain_loans(self) -> List[LoanEntry]:
        return [loan.to_domain() for loan in self.loans]

    def domain_events(self) -> List[LoanEvent]:
        return [event.to_domain() for event in self.loan_events]


class ProjectionRequest(PortfolioRequest):
    """Request body for POST /v1/projections/loans"""

    max_months: Optional[int] = Field(None, ge=1, le=360)


class StrategyRequest(PortfolioRequest):
    """Request body for POST /v1/strategy"""

    overpay_budget: float = Field(..., description="Monthly amount available on top of minimums")
    cards: List[CardEntrySchema] = Field(default_factory=list)


class WhatIfSchema(BaseModel):
    loan_id: str = ALL_LOANS
    extra_payment_delta: float = 0.0
    apr_delta: float = 0.0
    subscription_delta: float = 0.0
    due_day_shift: int = 0

    def to_domain(self) -> WhatIfInput:
        return WhatIfInput(**self.model_dump())


class WhatIfRequest(PortfolioRequest):
    """Request body for POST /v1/what-if"""

    scenario: WhatIfSchema = Field(default_factory=WhatIfSchema)


class RefinanceOfferSchema(BaseModel):
    apr: float = Field(..., ge=0)
    fees: float = Field(0.0, ge=0)
    term_months: int = Field(..., gt=0, le=360)

    def to_domain(self) -> RefinanceOffer:
        return RefinanceOffer(**self.model_dump())


class RefinanceRequest(BaseModel):
    """Request body for POST /v1/refinance"""

    loan: LoanEntrySchema
    offer: RefinanceOfferSchema
    loan_events: List[LoanEventSchema] = Field(default_factory=list)
    as_of: Optional[date] = None
