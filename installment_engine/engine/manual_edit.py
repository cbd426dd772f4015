"""Manual schedule edits for hand-authored (manual mode) schedules.

Each edit is a function from the old schedule to a new one. A row that is
itself incomplete is rejected with ScheduleEditError and nothing changes;
problems that only show up across the whole schedule are reported on the
result but the edit is kept.
"""

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from installment_engine.engine.dates import add_months
from installment_engine.engine.validation import ValidationContext, ValidationReport, validate
from installment_engine.models.schedule import (
    PaymentEntry,
    PaymentStatus,
    ScheduleEditError,
)


@dataclass(frozen=True)
class UpdateEntry:
    index: int
    due_date: date | None = None
    amount: Decimal | None = None
    status: PaymentStatus | None = None
    paid_date: date | None = None


@dataclass(frozen=True)
class RemoveEntry:
    index: int


@dataclass(frozen=True)
class AppendEntry:
    amount: Decimal
    due_date: date | None = None  # Defaults to one month after the last entry


ScheduleEdit = UpdateEntry | RemoveEntry | AppendEntry


@dataclass(frozen=True)
class ManualEditResult:
    schedule: list[PaymentEntry]
    validation: ValidationReport


def _check_index(schedule: list[PaymentEntry], index: int) -> None:
    if not 0 <= index < len(schedule):
        raise ScheduleEditError(f"No payment at position {index + 1}")


def _check_row(entry: PaymentEntry) -> None:
    if entry.due_date is None:
        raise ScheduleEditError("Due date is required")
    if entry.amount is None or entry.amount <= 0:
        raise ScheduleEditError("Amount must be greater than 0")
    if entry.status is None:
        raise ScheduleEditError("Status is required")
    if entry.status == PaymentStatus.PAID and entry.paid_date is None:
        raise ScheduleEditError("Paid date is required for paid payments")


def _updated_row(entry: PaymentEntry, edit: UpdateEntry) -> PaymentEntry:
    changes = {
        name: value
        for name, value in (
            ("due_date", edit.due_date),
            ("amount", edit.amount),
            ("status", edit.status),
            ("paid_date", edit.paid_date),
        )
        if value is not None
    }
    # A hand-set amount no longer matches the generated split
    if "amount" in changes:
        changes["principal"] = None
        changes["rent"] = None
    if changes.get("status", entry.status) != PaymentStatus.PAID:
        changes["paid_date"] = None
    return replace(entry, **changes)


def _next_due_date(schedule: list[PaymentEntry], context: ValidationContext) -> date:
    dates = [e.due_date for e in schedule if e.due_date is not None]
    if dates:
        return add_months(dates[-1], 1)
    return context.today


def apply_manual_edit(
    schedule: list[PaymentEntry],
    edit: ScheduleEdit,
    *,
    context: ValidationContext,
) -> ManualEditResult:
    """Apply one edit and re-validate the resulting schedule."""
    updated = list(schedule)

    if isinstance(edit, UpdateEntry):
        _check_index(schedule, edit.index)
        row = _updated_row(schedule[edit.index], edit)
        _check_row(row)
        updated[edit.index] = row
    elif isinstance(edit, RemoveEntry):
        _check_index(schedule, edit.index)
        del updated[edit.index]
    elif isinstance(edit, AppendEntry):
        row = PaymentEntry(
            due_date=edit.due_date or _next_due_date(schedule, context),
            amount=edit.amount,
            status=PaymentStatus.UPCOMING,
        )
        _check_row(row)
        updated.append(row)
    else:
        raise ScheduleEditError(f"Unsupported edit: {type(edit).__name__}")

    return ManualEditResult(schedule=updated, validation=validate(updated, context))
