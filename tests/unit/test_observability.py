"""Unit tests for structured logging and metrics helpers"""

import logging
from prometheus_client import REGISTRY
from finance_engine.domain.models import AccountType, StrategyMode
from finance_engine.infrastructure.observability.logging import log_operation
from finance_engine.infrastructure.observability.metrics import record_cycles, record_recommendation


def _sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


def test_log_operation_fields(caplog):
    """Test operation logs carry request and operation fields"""
    with caplog.at_level(logging.INFO, logger="finance_engine"):
        log_operation("req-1", "projection", 1.23456, loan_count=2)

    record = caplog.records[-1]
    assert record.levelno == logging.INFO
    assert record.request_id == "req-1"
    assert record.operation == "projection"
    assert record.duration_ms == 1.235
    assert record.loan_count == 2


def test_slow_operation_logged_as_warning(caplog):
    """Test slow computations are raised to WARNING"""
    with caplog.at_level(logging.INFO, logger="finance_engine"):
        log_operation("req-2", "strategy", 60_000)

    assert caplog.records[-1].levelno == logging.WARNING


def test_record_cycles_skips_zero():
    """Test zero-cycle calls leave the counter untouched"""
    before = _sample("finance_engine_cycles_applied_total", account_type="card")

    record_cycles(AccountType.CARD, 0)
    assert _sample("finance_engine_cycles_applied_total", account_type="card") == before

    record_cycles(AccountType.CARD, 3)
    assert _sample("finance_engine_cycles_applied_total", account_type="card") == before + 3


def test_record_recommendation_none_label():
    """Test no recommendation is counted under 'none'"""
    before = _sample("finance_engine_strategy_recommendation_total", mode="none")
    record_recommendation(None)
    assert _sample("finance_engine_strategy_recommendation_total", mode="none") == before + 1

    before = _sample("finance_engine_strategy_recommendation_total", mode="snowball")
    record_recommendation(StrategyMode.SNOWBALL)
    assert _sample("finance_engine_strategy_recommendation_total", mode="snowball") == before + 1
