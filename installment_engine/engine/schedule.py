"""Schedule generation: FinancingInput in, ordered PaymentEntry list out.

Pure functions. No I/O. ``today`` is injected so that identical inputs always
produce identical schedules.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from installment_engine.engine.dates import add_months, days_in_month, month_start
from installment_engine.engine.rates import (
    amortized_payment,
    customer_ownership,
    floor_money,
    principal_per_period,
    rent,
    split_evenly,
    spread_evenly,
)
from installment_engine.engine.status import assign_status
from installment_engine.models.schedule import (
    FinancingInput,
    FinancingInputError,
    FinancingMode,
    PaymentEntry,
    PaymentStatus,
    PaymentType,
    ScheduleInterval,
)

logger = logging.getLogger(__name__)

MAX_DAYS_IN_MONTH = 31


@dataclass(frozen=True)
class ScheduleSummary:
    payment_count: int
    paid_count: int
    total_amount: Decimal
    total_principal: Decimal
    total_rent: Decimal
    first_due_date: date | None
    last_due_date: date | None


def validate_financing_input(financing: FinancingInput) -> None:
    """Fail fast on inputs that cannot seed a schedule. Nothing is clamped."""
    errors = []
    if financing.car_value < 0:
        errors.append("car value cannot be negative")
    if financing.down_payment < 0:
        errors.append("down payment cannot be negative")
    if financing.down_payment > financing.car_value:
        errors.append("down payment cannot exceed car value")
    if financing.term_months <= 0:
        errors.append("term must be at least one month")
    if financing.annual_rate < 0:
        errors.append("annual rate cannot be negative")

    if (
        financing.mode == FinancingMode.DYNAMIC_RENT
        and financing.interval == ScheduleInterval.DAILY
        and financing.term_months > 0
        and financing.loan_amount < MAX_DAYS_IN_MONTH * financing.term_months
    ):
        errors.append(
            f"daily schedules need at least {MAX_DAYS_IN_MONTH} of principal per month "
            "so that every day has a payment"
        )

    if financing.mode == FinancingMode.BALLOON_PAYMENT:
        balloon = financing.balloon_amount
        if balloon is None or balloon <= 0:
            errors.append("balloon payment plans need a positive balloon amount")
        elif balloon > financing.loan_amount:
            errors.append("balloon amount cannot exceed the financed amount")
        if financing.interval == ScheduleInterval.DAILY:
            errors.append("balloon payment plans are monthly only")

    if errors:
        raise FinancingInputError("Invalid financing input: " + "; ".join(errors))


def _entry(
    due_date: date,
    principal: Decimal,
    rent_amount: Decimal,
    today: date,
    interval: ScheduleInterval,
    payment_type: PaymentType = PaymentType.INSTALLMENT,
) -> PaymentEntry:
    status = assign_status(due_date, today, interval)
    return PaymentEntry(
        due_date=due_date,
        amount=principal + rent_amount,
        status=status,
        paid_date=due_date if status == PaymentStatus.PAID else None,
        principal=principal,
        rent=rent_amount,
        payment_type=payment_type,
    )


def _monthly_rents(financing: FinancingInput, financed: Decimal) -> list[Decimal]:
    """Floored rent per month on the financier's declining stake."""
    per_period = principal_per_period(financed, financing.term_months)
    return [
        floor_money(rent(
            financing.car_value,
            customer_ownership(financing.down_payment, per_period, m),
            financing.annual_rate,
        ))
        for m in range(financing.term_months)
    ]


def _dynamic_rent_monthly(financing: FinancingInput, today: date) -> list[PaymentEntry]:
    principals = split_evenly(financing.loan_amount, financing.term_months)
    rents = _monthly_rents(financing, financing.loan_amount)
    return [
        _entry(
            add_months(financing.start_date, m),
            principals[m],
            rents[m],
            today,
            ScheduleInterval.MONTHLY,
        )
        for m in range(financing.term_months)
    ]


def _dynamic_rent_daily(financing: FinancingInput, today: date) -> list[PaymentEntry]:
    """One entry per calendar day.

    Each month's principal share and rent are split over that month's actual
    day count; ownership only moves once per month.
    """
    principals = split_evenly(financing.loan_amount, financing.term_months)
    rents = _monthly_rents(financing, financing.loan_amount)
    first_month = month_start(financing.start_date)

    entries: list[PaymentEntry] = []
    for m in range(financing.term_months):
        start = add_months(first_month, m)
        days = days_in_month(start.year, start.month)
        daily_principal = spread_evenly(principals[m], days)
        daily_rent = spread_evenly(rents[m], days)
        for d in range(days):
            entries.append(_entry(
                start + timedelta(days=d),
                daily_principal[d],
                daily_rent[d],
                today,
                ScheduleInterval.DAILY,
            ))
    return entries


def _amortized_fixed(financing: FinancingInput, today: date) -> list[PaymentEntry]:
    if financing.interval == ScheduleInterval.DAILY:
        logger.warning("Amortized schedules are monthly; ignoring daily interval")

    pmt = floor_money(amortized_payment(
        financing.loan_amount, financing.annual_rate * 100, financing.term_months
    ))
    r = financing.annual_rate / 12
    balance = financing.loan_amount

    entries: list[PaymentEntry] = []
    for m in range(financing.term_months):
        interest = min(floor_money(balance * r), pmt)
        principal_paid = pmt - interest
        balance -= principal_paid
        entries.append(_entry(
            add_months(financing.start_date, m),
            principal_paid,
            interest,
            today,
            ScheduleInterval.MONTHLY,
        ))
    return entries


def _balloon_payment(financing: FinancingInput, today: date) -> list[PaymentEntry]:
    """Down payment, then installments, then the balloon.

    Installments amortize only the non-balloon part of the loan, but rent is
    charged on everything the financier still owns, balloon included.
    """
    balloon = financing.balloon_amount
    installment_principal = financing.loan_amount - balloon
    principals = split_evenly(installment_principal, financing.term_months)
    rents = _monthly_rents(financing, installment_principal)
    monthly = ScheduleInterval.MONTHLY

    entries: list[PaymentEntry] = []
    if financing.down_payment > 0:
        entries.append(_entry(
            financing.start_date, financing.down_payment, Decimal("0"), today, monthly,
            PaymentType.DOWN_PAYMENT,
        ))
    for m in range(financing.term_months):
        entries.append(_entry(
            add_months(financing.start_date, m + 1), principals[m], rents[m], today, monthly,
        ))

    # Final period's rent is on the balloon alone
    final_rent = floor_money(rent(balloon, Decimal("0"), financing.annual_rate))
    entries.append(_entry(
        add_months(financing.start_date, financing.term_months + 1),
        balloon,
        final_rent,
        today,
        monthly,
        PaymentType.BALLOON,
    ))
    return entries


def generate(financing: FinancingInput, today: date) -> list[PaymentEntry]:
    """Generate the full payment schedule for a financing.

    Args:
        financing: Principal inputs and financing mode
        today: Reference date for status assignment (elapsed periods come out paid)

    Raises:
        FinancingInputError: invalid input, or a manual financing (manual
            schedules are authored by the caller, never generated)
    """
    validate_financing_input(financing)

    mode = financing.mode
    if mode == FinancingMode.DYNAMIC_RENT:
        if financing.interval == ScheduleInterval.DAILY:
            entries = _dynamic_rent_daily(financing, today)
        else:
            entries = _dynamic_rent_monthly(financing, today)
    elif mode == FinancingMode.AMORTIZED_FIXED:
        entries = _amortized_fixed(financing, today)
    elif mode == FinancingMode.BALLOON_PAYMENT:
        entries = _balloon_payment(financing, today)
    elif mode == FinancingMode.MANUAL:
        raise FinancingInputError("Manual schedules are supplied by the caller, not generated")
    else:
        raise FinancingInputError(f"Unsupported financing mode: {mode}")

    logger.debug(
        "Generated %d %s entries (%s) starting %s",
        len(entries), mode.value, financing.interval.value, financing.start_date,
    )
    return entries


def schedule_summary(schedule: list[PaymentEntry]) -> ScheduleSummary:
    """Totals and bounds for a schedule. Missing components count as zero."""
    dates = [e.due_date for e in schedule if e.due_date is not None]
    return ScheduleSummary(
        payment_count=len(schedule),
        paid_count=sum(1 for e in schedule if e.is_paid),
        total_amount=sum((e.amount or Decimal("0") for e in schedule), Decimal("0")),
        total_principal=sum((e.principal or Decimal("0") for e in schedule), Decimal("0")),
        total_rent=sum((e.rent or Decimal("0") for e in schedule), Decimal("0")),
        first_due_date=min(dates) if dates else None,
        last_due_date=max(dates) if dates else None,
    )
