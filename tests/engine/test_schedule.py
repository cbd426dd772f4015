import pytest
from collections import defaultdict
from dataclasses import replace
from datetime import date
from decimal import Decimal

from installment_engine.engine.schedule import generate, schedule_summary
from installment_engine.models.schedule import (
    FinancingInput,
    FinancingInputError,
    FinancingMode,
    PaymentStatus,
    PaymentType,
    ScheduleInterval,
)


class TestDynamicRentMonthly:
    def test_entry_count(self, dynamic_schedule):
        assert len(dynamic_schedule) == 10

    def test_first_and_last_period(self, dynamic_schedule):
        # 9,000 principal + 1% rent on 90,000, then on 9,000
        assert dynamic_schedule[0].amount == Decimal("9900")
        assert dynamic_schedule[9].amount == Decimal("9090")

    def test_components_sum_to_amount(self, dynamic_schedule):
        for e in dynamic_schedule:
            assert e.principal + e.rent == e.amount

    def test_principal_conserved(self, dynamic_schedule):
        assert sum(e.principal for e in dynamic_schedule) == Decimal("90000")

    def test_principal_conserved_with_uneven_split(self, today):
        financing = FinancingInput(
            car_value=Decimal("100000"),
            down_payment=Decimal("0"),
            term_months=7,
            annual_rate=Decimal("0.12"),
            start_date=date(2025, 1, 15),
        )
        entries = generate(financing, today)
        assert sum(e.principal for e in entries) == Decimal("100000")
        assert entries[-1].principal == Decimal("14290")

    def test_due_dates_keep_day_of_month(self, dynamic_schedule):
        assert dynamic_schedule[0].due_date == date(2025, 1, 15)
        assert dynamic_schedule[9].due_date == date(2025, 10, 15)

    def test_dates_strictly_increase(self, dynamic_schedule):
        for i in range(1, len(dynamic_schedule)):
            assert dynamic_schedule[i].due_date > dynamic_schedule[i - 1].due_date

    def test_future_schedule_is_upcoming(self, dynamic_schedule):
        assert all(e.status == PaymentStatus.UPCOMING for e in dynamic_schedule)

    def test_deterministic(self, dynamic_financing, today):
        assert generate(dynamic_financing, today) == generate(dynamic_financing, today)


class TestDynamicRentDaily:
    def test_covers_calendar_months(self, daily_financing, today):
        entries = generate(daily_financing, today)
        # January through October 2025
        assert len(entries) == 304
        assert entries[0].due_date == date(2025, 1, 1)
        assert entries[-1].due_date == date(2025, 10, 31)

    def test_daily_sums_match_monthly(self, dynamic_financing, daily_financing, today):
        monthly = generate(dynamic_financing, today)
        daily = generate(daily_financing, today)

        by_month = defaultdict(Decimal)
        for e in daily:
            by_month[(e.due_date.year, e.due_date.month)] += e.amount

        for e in monthly:
            assert by_month[(e.due_date.year, e.due_date.month)] == e.amount

    def test_principal_conserved(self, daily_financing, today):
        entries = generate(daily_financing, today)
        assert sum(e.principal for e in entries) == Decimal("90000")

    def test_dates_strictly_increase(self, daily_financing, today):
        entries = generate(daily_financing, today)
        for i in range(1, len(entries)):
            assert entries[i].due_date > entries[i - 1].due_date

    def test_status_by_day(self, daily_financing):
        entries = generate(daily_financing, date(2025, 1, 10))
        assert entries[8].status == PaymentStatus.PAID
        assert entries[9].status == PaymentStatus.ACTIVE
        assert entries[10].status == PaymentStatus.UPCOMING

    def test_every_day_has_a_payment(self, today):
        financing = FinancingInput(
            car_value=Decimal("400"),
            down_payment=Decimal("0"),
            term_months=12,
            annual_rate=Decimal("0"),
            start_date=date(2025, 1, 15),
            interval=ScheduleInterval.DAILY,
        )
        entries = generate(financing, today)
        assert len(entries) == 365
        assert all(e.amount > 0 for e in entries)
        assert sum(e.principal for e in entries) == Decimal("400")

    def test_too_small_for_daily_rejected(self, today):
        financing = FinancingInput(
            car_value=Decimal("300"),
            down_payment=Decimal("0"),
            term_months=12,
            annual_rate=Decimal("0"),
            start_date=date(2025, 1, 15),
            interval=ScheduleInterval.DAILY,
        )
        with pytest.raises(FinancingInputError, match="daily schedules need at least 31"):
            generate(financing, today)


class TestAmortizedFixed:
    def test_interest_free_flooring_loss(self, interest_free_financing, today):
        """80,000 / 12 floors to 6,666; the 8 lost to flooring is not recovered."""
        entries = generate(interest_free_financing, today)
        assert len(entries) == 12
        assert all(e.amount == Decimal("6666") for e in entries)
        total = sum(e.amount for e in entries)
        assert total == Decimal("79992")
        assert Decimal("80000") - total == Decimal("8")

    def test_fixed_payment_with_interest(self, today):
        financing = FinancingInput(
            car_value=Decimal("100000"),
            down_payment=Decimal("0"),
            term_months=12,
            annual_rate=Decimal("0.12"),
            start_date=date(2025, 1, 15),
            mode=FinancingMode.AMORTIZED_FIXED,
        )
        entries = generate(financing, today)
        assert all(e.amount == Decimal("8884") for e in entries)
        assert entries[0].rent == Decimal("1000")
        assert entries[0].principal == Decimal("7884")

    def test_interest_declines(self, today):
        financing = FinancingInput(
            car_value=Decimal("100000"),
            down_payment=Decimal("0"),
            term_months=12,
            annual_rate=Decimal("0.12"),
            start_date=date(2025, 1, 15),
            mode=FinancingMode.AMORTIZED_FIXED,
        )
        entries = generate(financing, today)
        for i in range(1, len(entries)):
            assert entries[i].rent <= entries[i - 1].rent

    def test_daily_interval_ignored(self, interest_free_financing, today):
        daily = replace(interest_free_financing, interval=ScheduleInterval.DAILY)
        assert generate(daily, today) == generate(interest_free_financing, today)


class TestBalloonPayment:
    @pytest.fixture
    def balloon_financing(self) -> FinancingInput:
        return FinancingInput(
            car_value=Decimal("100000"),
            down_payment=Decimal("10000"),
            term_months=12,
            annual_rate=Decimal("0.12"),
            start_date=date(2025, 1, 15),
            mode=FinancingMode.BALLOON_PAYMENT,
            balloon_amount=Decimal("30000"),
        )

    def test_layout(self, balloon_financing, today):
        entries = generate(balloon_financing, today)
        assert len(entries) == 14
        assert entries[0].payment_type == PaymentType.DOWN_PAYMENT
        assert entries[0].amount == Decimal("10000")
        assert entries[0].due_date == date(2025, 1, 15)
        assert entries[-1].payment_type == PaymentType.BALLOON
        assert entries[-1].due_date == date(2026, 2, 15)

    def test_rent_includes_balloon_stake(self, balloon_financing, today):
        entries = generate(balloon_financing, today)
        # 5,000 principal + 1% of 90,000 still owned by the financier
        assert entries[1].amount == Decimal("5900")
        assert entries[12].amount == Decimal("5350")

    def test_balloon_carries_final_rent(self, balloon_financing, today):
        entries = generate(balloon_financing, today)
        assert entries[-1].principal == Decimal("30000")
        assert entries[-1].amount == Decimal("30300")

    def test_principal_conserved(self, balloon_financing, today):
        entries = generate(balloon_financing, today)
        financed = [e for e in entries if e.payment_type != PaymentType.DOWN_PAYMENT]
        assert sum(e.principal for e in financed) == Decimal("90000")

    def test_balloon_larger_than_loan_rejected(self, balloon_financing, today):
        with pytest.raises(FinancingInputError, match="cannot exceed"):
            generate(replace(balloon_financing, balloon_amount=Decimal("95000")), today)

    def test_missing_balloon_rejected(self, balloon_financing, today):
        with pytest.raises(FinancingInputError):
            generate(replace(balloon_financing, balloon_amount=None), today)

    def test_daily_rejected(self, balloon_financing, today):
        with pytest.raises(FinancingInputError, match="monthly only"):
            generate(replace(balloon_financing, interval=ScheduleInterval.DAILY), today)


class TestStatusAssignment:
    def test_elapsed_periods_are_paid(self, dynamic_financing):
        entries = generate(dynamic_financing, date(2025, 3, 20))
        assert entries[0].status == PaymentStatus.PAID
        assert entries[0].paid_date == entries[0].due_date
        assert entries[1].status == PaymentStatus.PAID
        assert entries[2].status == PaymentStatus.ACTIVE
        assert entries[2].paid_date is None
        assert entries[3].status == PaymentStatus.UPCOMING


class TestInputErrors:
    def test_down_payment_exceeds_car_value(self, dynamic_financing, today):
        with pytest.raises(FinancingInputError, match="down payment cannot exceed"):
            generate(replace(dynamic_financing, down_payment=Decimal("150000")), today)

    def test_zero_term(self, dynamic_financing, today):
        with pytest.raises(FinancingInputError):
            generate(replace(dynamic_financing, term_months=0), today)

    def test_negative_rate(self, dynamic_financing, today):
        with pytest.raises(FinancingInputError):
            generate(replace(dynamic_financing, annual_rate=Decimal("-0.01")), today)

    def test_all_problems_reported(self, dynamic_financing, today):
        bad = replace(dynamic_financing, car_value=Decimal("-1"), term_months=0)
        with pytest.raises(FinancingInputError) as exc:
            generate(bad, today)
        assert "car value cannot be negative" in str(exc.value)
        assert "term must be at least one month" in str(exc.value)

    def test_manual_mode_not_generated(self, dynamic_financing, today):
        with pytest.raises(FinancingInputError, match="Manual"):
            generate(replace(dynamic_financing, mode=FinancingMode.MANUAL), today)


class TestScheduleSummary:
    def test_totals(self, dynamic_schedule):
        summary = schedule_summary(dynamic_schedule)
        assert summary.payment_count == 10
        assert summary.paid_count == 0
        assert summary.total_principal == Decimal("90000")
        assert summary.total_rent == Decimal("4950")
        assert summary.total_amount == Decimal("94950")
        assert summary.first_due_date == date(2025, 1, 15)
        assert summary.last_due_date == date(2025, 10, 15)

    def test_empty(self):
        summary = schedule_summary([])
        assert summary.payment_count == 0
        assert summary.total_amount == Decimal("0")
        assert summary.first_due_date is None
