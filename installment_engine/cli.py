"""CLI for generating and inspecting payment schedules.

Usage:
    python -m installment_engine.cli --car-value 100000 --down 10000 --term 10 --rate 0.12
    python -m installment_engine.cli ... --mode amortized_fixed --start 2025-01-15
    python -m installment_engine.cli ... --settle-on 2025-06-01 --principal-discount 10
"""

import argparse
import logging
from datetime import date
from decimal import Decimal

from installment_engine.config import settings
from installment_engine.engine.apr import implied_annual_rate
from installment_engine.engine.ownership import milestone_label, ownership_timeline
from installment_engine.engine.schedule import generate, schedule_summary
from installment_engine.engine.settlement import quote
from installment_engine.engine.validation import ValidationContext, ValidationReport, validate
from installment_engine.models.discount import DiscountComponent, DiscountPolicy
from installment_engine.models.schedule import (
    FinancingInput,
    FinancingInputError,
    FinancingMode,
    PaymentEntry,
    ScheduleInterval,
)

GENERATED_MODES = [m.value for m in FinancingMode if m != FinancingMode.MANUAL]


def print_schedule(entries: list[PaymentEntry], financing: FinancingInput, today: date) -> None:
    summary = schedule_summary(entries)
    timeline = ownership_timeline(financing, entries, today)
    print(f"\n{'=' * 60}")
    print(f"  {financing.mode.value} schedule ({financing.interval.value})")
    print(f"{'=' * 60}")
    print(f"  Financed:         {financing.loan_amount:,.0f}")
    print(f"  Payments:         {summary.payment_count} ({summary.paid_count} paid)")
    print(f"  Total:            {summary.total_amount:,.0f}")
    print(f"  Principal / rent: {summary.total_principal:,.0f} / {summary.total_rent:,.0f}")
    print(f"  Implied rate:     {implied_annual_rate(financing.loan_amount, entries):.2%}")
    print(f"  Ownership:        {timeline.current_ownership_pct}% "
          f"({milestone_label(timeline.current_ownership_pct)})")
    print()

    for i, e in enumerate(entries, start=1):
        print(f"  {i:>4}  {e.due_date.isoformat()}  {e.amount:>12,.0f}  "
              f"{e.payment_type.value:<12}  {e.status.value}")
    print()


def print_report(report: ValidationReport) -> None:
    if report.is_valid:
        print("  Validation: OK\n")
        return
    for msg in report.blocking_errors:
        print(f"  [ERROR]  {msg}")
    for msg in report.warnings:
        print(f"  [WARN]   {msg}")
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Installment schedule CLI")
    parser.add_argument("--car-value", type=Decimal, required=True, help="Asset price")
    parser.add_argument("--down", type=Decimal, default=Decimal("0"), help="Down payment (default: 0)")
    parser.add_argument("--term", type=int, required=True, help="Term in months")
    parser.add_argument("--rate", type=Decimal, required=True, help="Annual rate as a fraction, e.g. 0.12")
    parser.add_argument("--mode", choices=GENERATED_MODES, default=FinancingMode.DYNAMIC_RENT.value)
    parser.add_argument("--interval", choices=[i.value for i in ScheduleInterval],
                        default=ScheduleInterval.MONTHLY.value)
    parser.add_argument("--balloon", type=Decimal, help="Balloon amount (balloon_payment mode)")
    parser.add_argument("--start", type=date.fromisoformat, default=None,
                        help="First due date, YYYY-MM-DD (default: today)")
    parser.add_argument("--today", type=date.fromisoformat, default=None,
                        help="Reference date for statuses (default: today)")
    parser.add_argument("--settle-on", type=date.fromisoformat, default=None,
                        help="Also quote an early settlement on this date")
    parser.add_argument("--principal-discount", type=Decimal, default=Decimal("0"),
                        help="Flat principal discount in percent for the quote")
    parser.add_argument("--interest-discount", type=Decimal, default=Decimal("0"),
                        help="Flat rent/interest discount in percent for the quote")

    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level)

    today = args.today or date.today()
    financing = FinancingInput(
        car_value=args.car_value,
        down_payment=args.down,
        term_months=args.term,
        annual_rate=args.rate,
        start_date=args.start or today,
        interval=ScheduleInterval(args.interval),
        mode=FinancingMode(args.mode),
        balloon_amount=args.balloon,
    )

    try:
        entries = generate(financing, today)
    except FinancingInputError as e:
        parser.error(str(e))

    print_schedule(entries, financing, today)
    print_report(validate(entries, ValidationContext(
        today=today,
        mode=financing.mode,
        car_value=financing.car_value,
        down_payment=financing.down_payment,
        expected_term_months=financing.term_months,
    )))

    if args.settle_on:
        policy = DiscountPolicy(
            principal_discount=DiscountComponent(
                enabled=args.principal_discount > 0, value=args.principal_discount
            ),
            interest_discount=DiscountComponent(
                enabled=args.interest_discount > 0, value=args.interest_discount
            ),
        )
        q = quote(entries, policy, args.settle_on)
        print(f"  Settlement on {args.settle_on.isoformat()}")
        print(f"    Months early:   {q.months_early}")
        print(f"    Outstanding:    {q.original_total:,.0f}")
        print(f"    Discount:       {q.total_discount:,.0f}")
        print(f"    Pay off:        {q.final_amount:,.0f}")
        if q.ineligible_reason:
            print(f"    ({q.ineligible_reason})")
        print()


if __name__ == "__main__":
    main()
