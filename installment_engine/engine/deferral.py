"""Payment deferral: full or partial, with a cascading shift of later entries.

Pure functions: schedule and ledger in, new schedule and ledger out. The input
schedule is never edited in place.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum

from installment_engine.engine.dates import add_months
from installment_engine.engine.rates import floor_money
from installment_engine.engine.validation import ValidationContext, ValidationReport, validate
from installment_engine.models.deferral import DeferralLedger, DeferralRecord
from installment_engine.models.schedule import PaymentEntry

logger = logging.getLogger(__name__)


class DeferralRejection(Enum):
    QUOTA_EXHAUSTED = "quota_exhausted"
    ENTRY_NOT_FOUND = "entry_not_found"
    ENTRY_ALREADY_PAID = "entry_already_paid"


@dataclass(frozen=True)
class DeferralResult:
    updated: bool
    schedule: list[PaymentEntry]
    ledger: DeferralLedger
    validation: ValidationReport | None = None
    rejection: DeferralRejection | None = None
    deferred_to: date | None = None


def _shift(entry: PaymentEntry) -> PaymentEntry:
    if entry.is_paid or entry.due_date is None:
        return entry
    return replace(entry, due_date=add_months(entry.due_date, 1))


def _split_components(
    entry: PaymentEntry, deferred: Decimal
) -> tuple[tuple[Decimal | None, Decimal | None], tuple[Decimal | None, Decimal | None]]:
    """Split principal/rent between the kept and deferred parts of an entry.

    The deferred part takes a floored proportional share of principal; the
    kept part keeps the remainders so both halves still sum exactly.
    """
    if entry.principal is None or entry.rent is None or not entry.amount:
        return (entry.principal, entry.rent), (None, None)
    deferred_principal = min(floor_money(entry.principal * deferred / entry.amount), deferred)
    deferred_rent = deferred - deferred_principal
    kept = (entry.principal - deferred_principal, entry.rent - deferred_rent)
    return kept, (deferred_principal, deferred_rent)


def _full_deferral(schedule: list[PaymentEntry], index: int) -> list[PaymentEntry]:
    target = schedule[index]
    moved = replace(
        target,
        due_date=add_months(target.due_date, 1),
        is_deferred=True,
        original_due_date=target.due_date,
    )
    return schedule[:index] + [moved] + [_shift(e) for e in schedule[index + 1:]]


def _partial_deferral(
    schedule: list[PaymentEntry], index: int, amount_to_defer: Decimal
) -> list[PaymentEntry]:
    target = schedule[index]
    (kept_principal, kept_rent), (deferred_principal, deferred_rent) = _split_components(
        target, amount_to_defer
    )
    kept = replace(
        target,
        amount=target.amount - amount_to_defer,
        is_partially_deferred=True,
        deferred_amount=amount_to_defer,
        principal=kept_principal,
        rent=kept_rent,
    )
    deferred = replace(
        target,
        due_date=add_months(target.due_date, 1),
        amount=amount_to_defer,
        is_deferred=True,
        is_partially_deferred=False,
        original_due_date=target.due_date,
        original_amount=target.amount,
        deferred_amount=amount_to_defer,
        principal=deferred_principal,
        rent=deferred_rent,
    )
    return schedule[:index] + [kept, deferred] + [_shift(e) for e in schedule[index + 1:]]


def defer(
    schedule: list[PaymentEntry],
    target_due_date: date,
    amount_to_defer: Decimal | None = None,
    *,
    ledger: DeferralLedger,
    subject_id: str,
    today: date,
    context: ValidationContext | None = None,
) -> DeferralResult:
    """Defer the unpaid payment due on ``target_due_date`` by one month.

    Full deferral when ``amount_to_defer`` is None or covers the whole amount;
    otherwise the entry is split and the deferred part is inserted right after
    it. Either way every later unpaid entry slides one month, extending the
    term. Quota is counted per subject per calendar year of ``today``.

    Rejections (quota exhausted, no such unpaid entry) are normal outcomes:
    ``updated`` is False and the schedule and ledger come back unchanged.
    A deferral that leaves the schedule with validation findings still stands;
    the findings are reported on the result.

    Not idempotent: a second deferral must target the entry's current due date.
    """
    if amount_to_defer is not None:
        if amount_to_defer <= 0:
            raise ValueError("Amount to defer must be positive")
        if amount_to_defer != floor_money(amount_to_defer):
            raise ValueError("Amount to defer must be a whole number of currency units")

    year = today.year
    if not ledger.can_defer(subject_id, year):
        logger.info(
            "Deferral quota exhausted for %s in %d (%d used)",
            subject_id, year, ledger.used(subject_id, year),
        )
        return DeferralResult(
            updated=False,
            schedule=list(schedule),
            ledger=ledger,
            rejection=DeferralRejection.QUOTA_EXHAUSTED,
        )

    index = next(
        (i for i, e in enumerate(schedule) if e.due_date == target_due_date and not e.is_paid),
        None,
    )
    if index is None:
        already_paid = any(e.due_date == target_due_date for e in schedule)
        rejection = (
            DeferralRejection.ENTRY_ALREADY_PAID if already_paid
            else DeferralRejection.ENTRY_NOT_FOUND
        )
        logger.info("Deferral of %s rejected: %s", target_due_date, rejection.value)
        return DeferralResult(
            updated=False, schedule=list(schedule), ledger=ledger, rejection=rejection
        )

    target = schedule[index]
    is_partial = amount_to_defer is not None and amount_to_defer < target.amount
    if is_partial:
        new_schedule = _partial_deferral(list(schedule), index, amount_to_defer)
    else:
        new_schedule = _full_deferral(list(schedule), index)

    deferred_to = add_months(target_due_date, 1)
    new_ledger = ledger.record(DeferralRecord(
        subject_id=subject_id,
        year=year,
        original_due_date=target_due_date,
        deferred_to_date=deferred_to,
        requested_on=today,
        original_amount=target.amount,
        deferred_amount=amount_to_defer if is_partial else None,
    ))

    report = validate(new_schedule, context or ValidationContext(today=today))
    if not report.is_valid:
        logger.warning(
            "Deferral of %s for %s saved with %d validation finding(s)",
            target_due_date, subject_id, len(report.errors),
        )

    return DeferralResult(
        updated=True,
        schedule=new_schedule,
        ledger=new_ledger,
        validation=report,
        deferred_to=deferred_to,
    )
