"""Schedule data types: financing inputs and payment entries."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class FinancingInputError(ValueError):
    """Raised when a FinancingInput cannot seed a schedule."""


class ScheduleEditError(ValueError):
    """Raised when an edit cannot be applied to a schedule row."""


class PaymentStatus(Enum):
    PAID = "paid"
    ACTIVE = "active"
    UPCOMING = "upcoming"


class PaymentType(Enum):
    INSTALLMENT = "installment"
    DOWN_PAYMENT = "down_payment"
    BALLOON = "balloon"


class ScheduleInterval(Enum):
    MONTHLY = "monthly"
    DAILY = "daily"


class FinancingMode(Enum):
    DYNAMIC_RENT = "dynamic_rent"        # Declining-ownership rent, fixed principal per period
    AMORTIZED_FIXED = "amortized_fixed"  # Classic amortized installment
    BALLOON_PAYMENT = "balloon_payment"  # Installments plus a lump sum at the end
    MANUAL = "manual"                    # Authored by a human, never generated


@dataclass(frozen=True)
class FinancingInput:
    car_value: Decimal
    down_payment: Decimal
    term_months: int
    annual_rate: Decimal  # Fraction, e.g. 0.12 for 12%
    start_date: date
    interval: ScheduleInterval = ScheduleInterval.MONTHLY
    mode: FinancingMode = FinancingMode.DYNAMIC_RENT
    balloon_amount: Decimal | None = None  # Only for BALLOON_PAYMENT

    @property
    def loan_amount(self) -> Decimal:
        return self.car_value - self.down_payment


@dataclass(frozen=True)
class PaymentEntry:
    """One obligation in a schedule.

    Generated entries are always complete. Hand-authored rows may arrive with
    ``due_date``, ``amount`` or ``status`` missing; the validator reports them.
    """
    due_date: date | None
    amount: Decimal | None
    status: PaymentStatus | None
    paid_date: date | None = None

    # Deferral provenance
    is_deferred: bool = False
    is_partially_deferred: bool = False
    original_due_date: date | None = None
    original_amount: Decimal | None = None
    deferred_amount: Decimal | None = None

    # Components of amount (principal + rent == amount) when known
    principal: Decimal | None = None
    rent: Decimal | None = None

    payment_type: PaymentType = PaymentType.INSTALLMENT

    @property
    def is_paid(self) -> bool:
        return self.status == PaymentStatus.PAID
