"""Canonical test fixtures used across all engine tests.

Fixture: 100,000 car, 10,000 down, 10 months at 12% (1% a month), first
payment 2025-01-15. Reference "today" sits before the first payment so every
generated entry is upcoming unless a test says otherwise.
"""

import pytest
from datetime import date
from decimal import Decimal

from installment_engine.engine.schedule import generate
from installment_engine.models.deferral import DeferralLedger
from installment_engine.models.schedule import (
    FinancingInput,
    FinancingMode,
    PaymentEntry,
    PaymentStatus,
    ScheduleInterval,
)

START = date(2025, 1, 15)


@pytest.fixture
def today() -> date:
    return date(2024, 12, 1)


@pytest.fixture
def dynamic_financing() -> FinancingInput:
    """Declining-ownership rent, monthly."""
    return FinancingInput(
        car_value=Decimal("100000"),
        down_payment=Decimal("10000"),
        term_months=10,
        annual_rate=Decimal("0.12"),
        start_date=START,
    )


@pytest.fixture
def daily_financing(dynamic_financing) -> FinancingInput:
    return FinancingInput(
        car_value=dynamic_financing.car_value,
        down_payment=dynamic_financing.down_payment,
        term_months=dynamic_financing.term_months,
        annual_rate=dynamic_financing.annual_rate,
        start_date=dynamic_financing.start_date,
        interval=ScheduleInterval.DAILY,
    )


@pytest.fixture
def interest_free_financing() -> FinancingInput:
    """80,000 financed over 12 months at 0%, amortized."""
    return FinancingInput(
        car_value=Decimal("100000"),
        down_payment=Decimal("20000"),
        term_months=12,
        annual_rate=Decimal("0"),
        start_date=START,
        mode=FinancingMode.AMORTIZED_FIXED,
    )


@pytest.fixture
def dynamic_schedule(dynamic_financing, today) -> list[PaymentEntry]:
    return generate(dynamic_financing, today)


@pytest.fixture
def manual_schedule() -> list[PaymentEntry]:
    """Three hand-authored monthly payments of 1,000."""
    return [
        PaymentEntry(date(2025, 1, 15), Decimal("1000"), PaymentStatus.UPCOMING),
        PaymentEntry(date(2025, 2, 15), Decimal("1000"), PaymentStatus.UPCOMING),
        PaymentEntry(date(2025, 3, 15), Decimal("1000"), PaymentStatus.UPCOMING),
    ]


@pytest.fixture
def ledger() -> DeferralLedger:
    return DeferralLedger(annual_quota=3)
