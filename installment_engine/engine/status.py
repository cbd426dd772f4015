"""Payment status assignment and payment recording.

Pure functions: "today" is always passed in, never read from the clock.
"""

from dataclasses import replace
from datetime import date

from installment_engine.models.schedule import (
    PaymentEntry,
    PaymentStatus,
    ScheduleEditError,
    ScheduleInterval,
)


def _period_key(day: date, interval: ScheduleInterval) -> tuple[int, ...]:
    if interval == ScheduleInterval.DAILY:
        return (day.year, day.month, day.day)
    return (day.year, day.month)


def assign_status(due_date: date, today: date, interval: ScheduleInterval) -> PaymentStatus:
    """Generation-time status.

    Monthly entries compare calendar months, daily entries compare days:
    earlier = paid, same = active, later = upcoming.
    """
    due, now = _period_key(due_date, interval), _period_key(today, interval)
    if due < now:
        return PaymentStatus.PAID
    if due == now:
        return PaymentStatus.ACTIVE
    return PaymentStatus.UPCOMING


def refresh_statuses(
    schedule: list[PaymentEntry], today: date, interval: ScheduleInterval
) -> list[PaymentEntry]:
    """Recompute active/upcoming for unpaid entries.

    Paid entries are left alone. An unpaid entry whose period has passed is
    still owed, so it stays active rather than becoming paid.
    """
    refreshed = []
    for entry in schedule:
        if entry.is_paid or entry.due_date is None:
            refreshed.append(entry)
            continue
        status = assign_status(entry.due_date, today, interval)
        if status == PaymentStatus.PAID:
            status = PaymentStatus.ACTIVE
        refreshed.append(entry if status == entry.status else replace(entry, status=status))
    return refreshed


def record_payment(
    schedule: list[PaymentEntry], due_date: date, paid_date: date
) -> list[PaymentEntry]:
    """Mark the unpaid entry due on ``due_date`` as paid."""
    for i, entry in enumerate(schedule):
        if entry.due_date == due_date and not entry.is_paid:
            updated = list(schedule)
            updated[i] = replace(entry, status=PaymentStatus.PAID, paid_date=paid_date)
            return updated
    if any(e.due_date == due_date for e in schedule):
        raise ScheduleEditError(f"Payment due {due_date.isoformat()} is already paid")
    raise ScheduleEditError(f"No payment due on {due_date.isoformat()}")
