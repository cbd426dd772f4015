"""Ownership timeline: how much of the asset the customer owns after each payment."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

from installment_engine.engine.rates import customer_ownership, principal_per_period
from installment_engine.models.schedule import FinancingInput, PaymentEntry

TWO_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")


class Milestone(Enum):
    FIRST_PAYMENT = "first_payment"
    QUARTER = "quarter"
    HALFWAY = "halfway"
    THREE_QUARTERS = "three_quarters"
    ALMOST_THERE = "almost_there"
    FULL_OWNER = "full_owner"


_LABELS = {
    Milestone.FIRST_PAYMENT: "First Payment",
    Milestone.QUARTER: "25% Ownership",
    Milestone.HALFWAY: "50% Ownership - Halfway!",
    Milestone.THREE_QUARTERS: "75% Ownership",
    Milestone.ALMOST_THERE: "95% Ownership - Almost There!",
    Milestone.FULL_OWNER: "100% Ownership - Full Owner!",
}


@dataclass(frozen=True)
class OwnershipMilestone:
    due_date: date | None
    payment_index: int
    ownership_amount: Decimal
    ownership_pct: Decimal
    payment_status: str  # "paid", "missed" or "upcoming"
    milestone: Milestone | None
    label: str


@dataclass(frozen=True)
class OwnershipTimeline:
    milestones: list[OwnershipMilestone] = field(default_factory=list)
    current_ownership_pct: Decimal = Decimal("0")
    total_payments: int = 0
    completed_payments: int = 0

    @property
    def progress_pct(self) -> Decimal:
        return self.current_ownership_pct


def _milestone_for(index: int, pct: Decimal) -> Milestone | None:
    if index == 0:
        return Milestone.FIRST_PAYMENT
    if pct >= 100:
        return Milestone.FULL_OWNER
    if pct >= 95:
        return Milestone.ALMOST_THERE
    if pct >= 75:
        return Milestone.THREE_QUARTERS
    if pct >= 50:
        return Milestone.HALFWAY
    if pct >= 25:
        return Milestone.QUARTER
    return None


def milestone_label(pct: Decimal) -> str:
    if pct >= 100:
        return "Full Owner"
    if pct >= 95:
        return "Almost There"
    if pct >= 75:
        return "Three Quarters"
    if pct >= 50:
        return "Halfway"
    if pct >= 25:
        return "Quarter"
    return "Getting Started"


def _pct(amount: Decimal, car_value: Decimal) -> Decimal:
    if car_value <= 0:
        return Decimal("0")
    return (amount / car_value * HUNDRED).quantize(TWO_PLACES, ROUND_HALF_UP)


def ownership_timeline(
    financing: FinancingInput,
    schedule: list[PaymentEntry],
    today: date,
) -> OwnershipTimeline:
    """Ownership after each payment in a monthly schedule.

    Ownership after payment ``i`` is down payment + principal per period *
    (i + 1), capped at the car value. An unpaid entry due before ``today`` is
    reported as missed.
    """
    if not schedule:
        return OwnershipTimeline(current_ownership_pct=_pct(financing.down_payment, financing.car_value))

    per_period = principal_per_period(financing.loan_amount, financing.term_months)
    milestones = []
    last_paid_pct = None
    completed = 0

    for i, entry in enumerate(schedule):
        owned = min(customer_ownership(financing.down_payment, per_period, i + 1), financing.car_value)
        pct = _pct(owned, financing.car_value)
        if entry.is_paid:
            status = "paid"
            completed += 1
            last_paid_pct = pct
        elif entry.due_date is not None and entry.due_date < today:
            status = "missed"
        else:
            status = "upcoming"

        milestone = _milestone_for(i, pct)
        milestones.append(OwnershipMilestone(
            due_date=entry.due_date,
            payment_index=i,
            ownership_amount=owned.quantize(TWO_PLACES, ROUND_HALF_UP),
            ownership_pct=pct,
            payment_status=status,
            milestone=milestone,
            label=_LABELS[milestone] if milestone else f"Payment {i + 1}",
        ))

    current = last_paid_pct if last_paid_pct is not None else _pct(
        financing.down_payment, financing.car_value
    )
    return OwnershipTimeline(
        milestones=milestones,
        current_ownership_pct=current,
        total_payments=len(schedule),
        completed_payments=completed,
    )
