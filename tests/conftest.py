"""Pytest fixtures for testing"""

import pytest
from datetime import datetime
from fastapi.testclient import TestClient
from finance_engine.api.main import create_app
from finance_engine.domain.models import CardCycleInput, LoanEntry, LoanEvent


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    return TestClient(create_app())


@pytest.fixture
def revolving_card() -> CardCycleInput:
    """Card carrying a balance with recurring spend and a fixed minimum"""
    return CardCycleInput(
        used_limit=1000,
        spend_per_month=100,
        minimum_payment=50,
        interest_rate=24,
    )


@pytest.fixture
def car_loan() -> LoanEntry:
    """Short loan that pays off within six months"""
    return LoanEntry(
        loan_id="loan_car",
        name="Car",
        balance=1000,
        minimum_payment=200,
        interest_rate=12,
        due_day=15,
    )


@pytest.fixture
def personal_loan() -> LoanEntry:
    """High APR loan that stays open past three years"""
    return LoanEntry(
        loan_id="loan_personal",
        name="Personal",
        balance=5000,
        minimum_payment=150,
        interest_rate=24,
        due_day=3,
    )


@pytest.fixture
def monthly_payments() -> list[LoanEvent]:
    """Twelve months of on-time 200.00 payments on the car loan, Jul 2025 - Jun 2026"""
    events = []
    for offset in range(12):
        year = 2025 + (6 + offset) // 12
        month = (6 + offset) % 12 + 1
        events.append(
            LoanEvent(
                loan_id="loan_car",
                event_type="payment",
                amount=200,
                occurred_at=datetime(year, month, 15, 12, 0),
            )
        )
    return events
