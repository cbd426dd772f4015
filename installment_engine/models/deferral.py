"""Deferral quota tracking.

The ledger is an immutable value object owned by the caller: recording a
deferral returns a new ledger instead of touching shared state.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal

from installment_engine.config import settings


@dataclass(frozen=True)
class DeferralRecord:
    subject_id: str
    year: int  # Calendar year the quota is counted against
    original_due_date: date
    deferred_to_date: date
    requested_on: date
    original_amount: Decimal
    deferred_amount: Decimal | None = None  # None = full amount deferred

    @property
    def is_partial(self) -> bool:
        return self.deferred_amount is not None


@dataclass(frozen=True)
class DeferralLedger:
    records: tuple[DeferralRecord, ...] = ()
    annual_quota: int = field(default_factory=lambda: settings.deferrals_per_year)

    def used(self, subject_id: str, year: int) -> int:
        return sum(1 for r in self.records if r.subject_id == subject_id and r.year == year)

    def remaining(self, subject_id: str, year: int) -> int:
        return max(0, self.annual_quota - self.used(subject_id, year))

    def can_defer(self, subject_id: str, year: int) -> bool:
        return self.remaining(subject_id, year) > 0

    def record(self, entry: DeferralRecord) -> "DeferralLedger":
        return replace(self, records=self.records + (entry,))
