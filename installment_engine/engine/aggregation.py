"""Roll daily schedules up into one entry per calendar month."""

from collections import defaultdict
from decimal import Decimal

from installment_engine.models.schedule import PaymentEntry, PaymentStatus


def is_schedule_likely_daily(schedule: list[PaymentEntry]) -> bool:
    """True if any calendar month holds more than one entry."""
    seen: set[tuple[int, int]] = set()
    for entry in schedule:
        if entry.due_date is None:
            continue
        key = (entry.due_date.year, entry.due_date.month)
        if key in seen:
            return True
        seen.add(key)
    return False


def _month_status(items: list[PaymentEntry]) -> PaymentStatus:
    statuses = [e.status for e in items if e.status is not None]
    if statuses and all(s == PaymentStatus.PAID for s in statuses):
        return PaymentStatus.PAID
    if PaymentStatus.ACTIVE in statuses:
        return PaymentStatus.ACTIVE
    return PaymentStatus.UPCOMING


def _component_sum(items: list[PaymentEntry], name: str) -> Decimal | None:
    values = [getattr(e, name) for e in items]
    if any(v is None for v in values):
        return None
    return sum(values, Decimal("0"))


def aggregate_daily_to_monthly(schedule: list[PaymentEntry]) -> list[PaymentEntry]:
    """One entry per month, due on the month's last due date.

    Amounts and components are summed; the month is paid only if every day is
    paid (paid date = latest paid date), otherwise active if any day is active.
    Months that sum to zero are dropped.
    """
    groups: dict[tuple[int, int], list[PaymentEntry]] = defaultdict(list)
    for entry in schedule:
        if entry.due_date is not None:
            groups[(entry.due_date.year, entry.due_date.month)].append(entry)

    monthly = []
    for key in sorted(groups):
        items = sorted(groups[key], key=lambda e: e.due_date)
        amount = sum((e.amount or Decimal("0") for e in items), Decimal("0"))
        if amount <= 0:
            continue
        status = _month_status(items)
        paid_dates = [e.paid_date for e in items if e.paid_date is not None]
        monthly.append(PaymentEntry(
            due_date=items[-1].due_date,
            amount=amount,
            status=status,
            paid_date=max(paid_dates) if status == PaymentStatus.PAID and paid_dates else None,
            is_deferred=any(e.is_deferred for e in items),
            is_partially_deferred=any(e.is_partially_deferred for e in items),
            principal=_component_sum(items, "principal"),
            rent=_component_sum(items, "rent"),
        ))
    return monthly
