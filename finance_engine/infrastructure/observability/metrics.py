"""Prometheus metrics for engine usage, cycle application and recommendations"""

from typing import Optional

from prometheus_client import Counter, Histogram

from finance_engine.domain.models import AccountType, StrategyMode

# Engine metrics
operation_counter = Counter(
    "finance_engine_operation_total",
    "Engine operations computed",
    ["operation"],  # card_cycle | loan_cycle | projection | strategy | what_if | refinance | ...
)

operation_duration_histogram = Histogram(
    "finance_engine_operation_duration_seconds",
    "Engine computation time",
    ["operation"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0],
)

cycles_applied_counter = Counter(
    "finance_engine_cycles_applied_total",
    "Monthly cycles simulated",
    ["account_type"],  # card | loan
)

strategy_recommendation_counter = Counter(
    "finance_engine_strategy_recommendation_total",
    "Strategy recommendations by mode",
    ["mode"],  # avalanche | snowball | none
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_operation(operation: str, duration_seconds: float) -> None:
    operation_counter.labels(operation=operation).inc()
    operation_duration_histogram.labels(operation=operation).observe(duration_seconds)


def record_cycles(account_type: AccountType, cycles: int) -> None:
    """Count simulated cycles; zero-cycle calls are not recorded"""
    if cycles > 0:
        cycles_applied_counter.labels(account_type=account_type.value).inc(cycles)


def record_recommendation(mode: Optional[StrategyMode]) -> None:
    strategy_recommendation_counter.labels(mode=mode.value if mode else "none").inc()
