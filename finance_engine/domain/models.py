"""Domain models - immutable dataclasses for account snapshots and engine results"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from finance_engine.utils.money import clamp_percent, finite_or_zero

ALL_LOANS = "all"


class CadenceKind(str, Enum):
    """How often a recurring payment nominally occurs"""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    CUSTOM = "custom"
    ONE_TIME = "one_time"


class CustomUnit(str, Enum):
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"
    YEARS = "years"


class MinimumPaymentType(str, Enum):
    FIXED = "fixed"
    PERCENT_PLUS_INTEREST = "percent_plus_interest"

    @classmethod
    def normalize(cls, value: Any) -> "MinimumPaymentType":
        """Anything other than the literal percent_plus_interest is a fixed minimum"""
        if value == cls.PERCENT_PLUS_INTEREST.value:
            return cls.PERCENT_PLUS_INTEREST
        return cls.FIXED


class AccountType(str, Enum):
    CARD = "card"
    LOAN = "loan"


class StrategyMode(str, Enum):
    AVALANCHE = "avalanche"  # highest APR first
    SNOWBALL = "snowball"  # smallest balance first


@dataclass(frozen=True)
class Cadence:
    """
    Tagged cadence value.

    ``interval`` and ``unit`` only carry meaning for ``CadenceKind.CUSTOM``.
    """

    kind: CadenceKind = CadenceKind.MONTHLY
    interval: Optional[int] = None
    unit: Optional[CustomUnit] = None

    @classmethod
    def parse(cls, value: Any, interval: Any = None, unit: Any = None) -> "Cadence":
        """
        Build a cadence from loosely typed input.

        Unrecognized cadence names become monthly, which converts amounts
        unchanged. Unrecognized custom units become None.
        """
        if isinstance(value, Cadence):
            return value

        try:
            kind = CadenceKind(value)
        except ValueError:
            return cls(CadenceKind.MONTHLY)

        if kind is not CadenceKind.CUSTOM:
            return cls(kind)

        try:
            parsed_unit = CustomUnit(unit) if unit is not None else None
        except ValueError:
            parsed_unit = None

        parsed_interval = int(finite_or_zero(interval)) if interval is not None else None
        return cls(kind, parsed_interval, parsed_unit)


@dataclass(frozen=True)
class CardCycleInput:
    """Credit card snapshot at the start of a cycle; numerics are coerced finite-or-zero"""

    used_limit: Optional[float] = None
    statement_balance: Optional[float] = None  # defaults to used_limit
    pending_charges: Optional[float] = None
    spend_per_month: Optional[float] = None
    minimum_payment: Optional[float] = None
    minimum_payment_type: Union[MinimumPaymentType, str, None] = MinimumPaymentType.FIXED
    minimum_payment_percent: Optional[float] = None  # 0-100
    extra_payment: Optional[float] = None
    interest_rate: Optional[float] = None  # APR, percent

    def __post_init__(self) -> None:
        statement = self.used_limit if self.statement_balance is None else self.statement_balance
        object.__setattr__(self, "statement_balance", finite_or_zero(statement))
        for name in (
            "used_limit",
            "pending_charges",
            "spend_per_month",
            "minimum_payment",
            "extra_payment",
            "interest_rate",
        ):
            object.__setattr__(self, name, finite_or_zero(getattr(self, name)))
        object.__setattr__(self, "minimum_payment_type", MinimumPaymentType.normalize(self.minimum_payment_type))
        object.__setattr__(
            self, "minimum_payment_percent", clamp_percent(finite_or_zero(self.minimum_payment_percent))
        )


@dataclass(frozen=True)
class LoanCycleInput:
    """Loan snapshot; ``minimum_payment`` is due once per ``cadence`` occurrence"""

    balance: Optional[float] = None
    minimum_payment: Optional[float] = None
    interest_rate: Optional[float] = None  # APR, percent
    cadence: Union[Cadence, CadenceKind, str] = Cadence()
    custom_interval: Optional[int] = None
    custom_unit: Union[CustomUnit, str, None] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "cadence", Cadence.parse(self.cadence, self.custom_interval, self.custom_unit))
        for name in ("balance", "minimum_payment", "interest_rate"):
            object.__setattr__(self, name, finite_or_zero(getattr(self, name)))


@dataclass(frozen=True)
class CardCycleResult:
    """Card state after N cycles; due_balance is from the last cycle, the rest are sums"""

    balance: float
    statement_balance: float
    pending_charges: float
    due_balance: float
    interest_accrued: float
    payments_applied: float
    spend_added: float


@dataclass(frozen=True)
class LoanCycleResult:
    balance: float
    interest_accrued: float
    payments_applied: float


def _optional_amount(value: Any) -> Optional[float]:
    return None if value is None else finite_or_zero(value)


def clamp_day(value: Any) -> int:
    return min(max(int(finite_or_zero(value)), 1), 31)


@dataclass(frozen=True)
class LoanEntry:
    """Stored loan record as supplied by the persistence layer"""

    loan_id: str
    name: str
    balance: Optional[float] = None
    principal_balance: Optional[float] = None
    accrued_interest: Optional[float] = None
    minimum_payment: Optional[float] = None  # per cadence occurrence
    extra_payment: Optional[float] = None  # per cadence occurrence
    interest_rate: Optional[float] = None
    cadence: Union[Cadence, CadenceKind, str] = Cadence()
    custom_interval: Optional[int] = None
    custom_unit: Union[CustomUnit, str, None] = None
    due_day: int = 1
    subscription_cost: Optional[float] = None
    subscription_payment_count: Optional[int] = None
    subscription_outstanding: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "loan_id", str(self.loan_id))
        object.__setattr__(self, "cadence", Cadence.parse(self.cadence, self.custom_interval, self.custom_unit))
        for name in ("balance", "minimum_payment", "extra_payment", "interest_rate", "subscription_cost"):
            object.__setattr__(self, name, finite_or_zero(getattr(self, name)))
        for name in ("principal_balance", "accrued_interest", "subscription_outstanding"):
            object.__setattr__(self, name, _optional_amount(getattr(self, name)))

        count = self.subscription_payment_count
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            count = None
        object.__setattr__(self, "subscription_payment_count", count)
        object.__setattr__(self, "due_day", clamp_day(self.due_day))


@dataclass(frozen=True)
class LoanEvent:
    """Historical loan event, read-only input for consistency scoring"""

    loan_id: str
    event_type: str  # "payment", "charge", ...
    amount: float
    occurred_at: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "loan_id", str(self.loan_id))
        object.__setattr__(self, "amount", finite_or_zero(self.amount))


@dataclass(frozen=True)
class LoanProjectionOverrides:
    """Scenario adjustments applied to one loan before simulation"""

    extra_payment_delta: float = 0.0  # monthly amount added to the simulated payment
    apr_delta: float = 0.0
    subscription_delta: float = 0.0
    due_day_shift: int = 0  # display only

    def __post_init__(self) -> None:
        for name in ("extra_payment_delta", "apr_delta", "subscription_delta"):
            object.__setattr__(self, name, finite_or_zero(getattr(self, name)))
        object.__setattr__(self, "due_day_shift", int(finite_or_zero(self.due_day_shift)))


@dataclass(frozen=True)
class LoanProjectionRow:
    """
    One projected month for a single loan.

    Payments settle accrued interest before principal, so
    ending_principal + ending_interest == ending_loan_balance.
    """

    month_index: int
    opening_principal: float
    opening_interest: float
    opening_loan_balance: float
    opening_subscription: float
    opening_outstanding: float
    interest_accrued: float
    minimum_due: float
    planned_loan_payment: float
    payment_to_interest: float
    payment_to_principal: float
    subscription_due: float
    total_payment: float
    ending_principal: float
    ending_interest: float
    ending_loan_balance: float
    ending_subscription: float
    ending_outstanding: float


@dataclass(frozen=True)
class LoanProjectionSummary:
    months: int
    ending_outstanding: float
    total_interest: float
    total_loan_payment: float
    total_principal_paid: float
    total_subscription_paid: float
    total_payment: float


@dataclass(frozen=True)
class ConsistencyPoint:
    month_key: str
    paid: float
    expected: float
    ratio: float  # capped at 1.0


@dataclass(frozen=True)
class LoanProjectionModel:
    """Projection of one loan plus its current balances and consistency score"""

    loan_id: str
    name: str
    apr: float
    cadence: Cadence
    due_day: int
    monthly_payment: float
    subscription_cost: float
    subscription_payments_remaining: int
    current_principal: float
    current_interest: float
    current_loan_balance: float
    current_subscription_outstanding: float
    current_outstanding: float
    projected_next_month_interest: float
    projected_annual_interest: float
    projected_24_month_interest: float
    projected_36_month_interest: float
    projected_payoff_months: Optional[int]
    projected_payoff_date: Optional[date]
    payment_consistency_score: Optional[float]  # None without payment history
    payment_consistency_trend: List[ConsistencyPoint] = field(default_factory=list)
    rows: List[LoanProjectionRow] = field(default_factory=list)
    horizons: Dict[int, LoanProjectionSummary] = field(default_factory=dict)


@dataclass(frozen=True)
class LoanPortfolioProjection:
    total_outstanding: float
    projected_next_month_interest: float
    projected_annual_interest: float
    projected_24_month_interest: float
    projected_36_month_interest: float
    projected_annual_payments: float
    average_payment_consistency_score: Optional[float]
    models: List[LoanProjectionModel] = field(default_factory=list)


@dataclass(frozen=True)
class CardEntry:
    """Named card snapshot for portfolio-level analysis"""

    card_id: str
    name: str
    card: CardCycleInput = CardCycleInput()


@dataclass(frozen=True)
class StrategyCandidate:
    account_id: str
    account_type: AccountType
    name: str
    balance: float
    apr: float
    next_month_interest: float
    annual_interest: float
    annual_interest_savings: float


@dataclass(frozen=True)
class LoanStrategyResult:
    monthly_overpay_budget: float
    portfolio_annual_interest_baseline: float
    portfolio_annual_interest_with_avalanche: float
    portfolio_annual_interest_with_snowball: float
    recommended_mode: Optional[StrategyMode]
    recommended_target: Optional[StrategyCandidate]
    avalanche_target: Optional[StrategyCandidate]
    snowball_target: Optional[StrategyCandidate]


@dataclass(frozen=True)
class WhatIfInput:
    """Scenario parameters; ``loan_id`` may be ALL_LOANS"""

    loan_id: str = ALL_LOANS
    extra_payment_delta: float = 0.0
    apr_delta: float = 0.0
    subscription_delta: float = 0.0
    due_day_shift: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "loan_id", str(self.loan_id))
        for name in ("extra_payment_delta", "apr_delta", "subscription_delta"):
            object.__setattr__(self, name, finite_or_zero(getattr(self, name)))
        object.__setattr__(self, "due_day_shift", int(finite_or_zero(self.due_day_shift)))


@dataclass(frozen=True)
class WhatIfDelta:
    """Scenario minus baseline; positive means the scenario costs or pays more"""

    next_month_interest: float
    annual_interest: float
    annual_payments: float
    total_outstanding: float


@dataclass(frozen=True)
class WhatIfResult:
    input: WhatIfInput
    baseline: LoanPortfolioProjection
    scenario: LoanPortfolioProjection
    delta: WhatIfDelta


@dataclass(frozen=True)
class RefinanceOffer:
    apr: float
    fees: float
    term_months: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "apr", max(finite_or_zero(self.apr), 0.0))
        object.__setattr__(self, "fees", max(finite_or_zero(self.fees), 0.0))
        object.__setattr__(self, "term_months", max(int(finite_or_zero(self.term_months)), 1))


@dataclass(frozen=True)
class RefinanceResult:
    monthly_payment: float
    total_refinance_interest: float
    total_refinance_cost: float
    total_current_cost: float
    total_cost_delta: float  # negative means refinancing wins
    break_even_month: Optional[int]
    remaining_current_outstanding_at_term: float


@dataclass(frozen=True)
class CatchUpPlan:
    """Result of catching an account up to ``now``, keyed for at-most-once persistence"""

    account_id: str
    account_type: AccountType
    cycles: int
    cycle_key: str  # YYYY-MM
    idempotency_key: str
    result: Union[CardCycleResult, LoanCycleResult]
