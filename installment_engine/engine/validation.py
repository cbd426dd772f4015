"""Schedule validation against structural and financial invariants.

Never raises: every rule runs independently and contributes human-readable
messages to one report. Structural problems (incomplete rows, duplicate or
regressing due dates) are blocking; the rest are advisory warnings a caller
may choose to save through.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from installment_engine.config import settings
from installment_engine.engine.dates import add_months, months_between, whole_months_between
from installment_engine.models.schedule import FinancingMode, PaymentEntry, PaymentStatus

logger = logging.getLogger(__name__)

# Modes whose totals include more than the financed principal
_TOTAL_CHECK_EXEMPT = {FinancingMode.AMORTIZED_FIXED, FinancingMode.BALLOON_PAYMENT}


@dataclass(frozen=True)
class ValidationContext:
    today: date
    mode: FinancingMode | None = None
    car_value: Decimal | None = None
    down_payment: Decimal | None = None
    expected_term_months: int | None = None


@dataclass(frozen=True)
class ValidationReport:
    blocking_errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def errors(self) -> list[str]:
        return self.blocking_errors + self.warnings

    @property
    def is_valid(self) -> bool:
        return not self.blocking_errors and not self.warnings

    @property
    def can_save(self) -> bool:
        """Advisory warnings still allow persisting the schedule."""
        return not self.blocking_errors


def _fmt_month(day: date) -> str:
    return day.strftime("%b %Y")


def _check_required_fields(entries: list[PaymentEntry]) -> list[str]:
    errors = []
    for i, p in enumerate(entries, start=1):
        if p.due_date is None:
            errors.append(f"Payment #{i}: Due date is required")
        if p.amount is None or p.amount <= 0:
            errors.append(f"Payment #{i}: Amount must be greater than 0")
        if p.status is None:
            errors.append(f"Payment #{i}: Status is required")
        if p.status == PaymentStatus.PAID and p.paid_date is None:
            errors.append(f"Payment #{i}: Paid date is required for paid payments")
    return errors


def _check_duplicates(dates: list[date]) -> list[str]:
    if len(set(dates)) < len(dates):
        return ["Duplicate payment dates found. Each payment must have a unique due date."]
    return []


def _check_order(dates: list[date]) -> list[str]:
    errors = []
    for prev, current in zip(dates, dates[1:]):
        if current < prev:
            errors.append(
                f"Payment dates are out of order. {current.isoformat()} comes after "
                f"{prev.isoformat()} in the schedule"
            )
    return errors


def _check_gaps(sorted_dates: list[date]) -> list[str]:
    errors = []
    for prev, current in zip(sorted_dates, sorted_dates[1:]):
        if months_between(prev, current) > settings.max_gap_months:
            errors.append(
                "Gap detected: Payment dates should be sequential. Found gap between "
                f"{_fmt_month(prev)} and {_fmt_month(current)}"
            )
    return errors


def _check_total(entries: list[PaymentEntry], context: ValidationContext) -> list[str]:
    if context.mode in _TOTAL_CHECK_EXEMPT:
        return []
    if context.car_value is None or context.down_payment is None:
        return []
    expected = context.car_value - context.down_payment
    if expected <= 0:
        return []

    total = sum((p.amount for p in entries if p.amount is not None), Decimal("0"))
    difference = abs(total - expected)
    if difference > expected * settings.total_tolerance_pct:
        return [
            f"Payment total ({total:,.0f}) doesn't match expected loan amount "
            f"({expected:,.0f}). Difference: {difference:,.0f}"
        ]
    return []


def _check_paid_dates(entries: list[PaymentEntry], today: date) -> list[str]:
    errors = []
    lookback = 12 * settings.paid_date_lookback_years
    for i, p in enumerate(entries, start=1):
        if p.status != PaymentStatus.PAID or p.paid_date is None:
            continue
        if p.paid_date > today:
            errors.append(f"Payment #{i}: Paid date cannot be in the future")
        elif p.due_date is not None and p.paid_date < add_months(p.due_date, -lookback):
            errors.append(
                f"Payment #{i}: Paid date seems too early "
                f"(more than {settings.paid_date_lookback_years} year before due date)"
            )
    return errors


def _check_term(sorted_dates: list[date], expected_months: int | None) -> list[str]:
    if not expected_months or expected_months <= 0 or not sorted_dates:
        return []
    schedule_months = whole_months_between(sorted_dates[0], sorted_dates[-1]) + 1
    if abs(schedule_months - expected_months) > settings.term_drift_months:
        return [
            f"Schedule duration ({schedule_months} months) doesn't match specified "
            f"loan duration ({expected_months} months)"
        ]
    return []


def validate(entries: list[PaymentEntry], context: ValidationContext) -> ValidationReport:
    """Check a schedule against every rule and collect all findings.

    An empty schedule is valid (nothing generated yet).
    """
    if not entries:
        return ValidationReport()

    dates = [p.due_date for p in entries if p.due_date is not None]
    sorted_dates = sorted(dates)

    blocking = (
        _check_required_fields(entries)
        + _check_duplicates(dates)
        + _check_order(dates)
    )
    warnings = (
        _check_gaps(sorted_dates)
        + _check_total(entries, context)
        + _check_paid_dates(entries, context.today)
        + _check_term(sorted_dates, context.expected_term_months)
    )

    report = ValidationReport(blocking_errors=blocking, warnings=warnings)
    if not report.is_valid:
        logger.info(
            "Schedule validation found %d blocking error(s) and %d warning(s)",
            len(blocking), len(warnings),
        )
    return report
