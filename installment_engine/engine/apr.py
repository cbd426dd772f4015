"""Implied annual rate of a payment schedule using scipy.

Pure functions. No I/O.
"""

from decimal import Decimal, ROUND_HALF_UP

from scipy.optimize import brentq

from installment_engine.engine.aggregation import aggregate_daily_to_monthly, is_schedule_likely_daily
from installment_engine.models.schedule import PaymentEntry

FOUR_PLACES = Decimal("0.0001")


def implied_annual_rate(loan_amount: Decimal, schedule: list[PaymentEntry]) -> Decimal:
    """Nominal annual rate that discounts the payments back to ``loan_amount``.

    Payments are taken one month apart in schedule order (daily schedules are
    rolled up per month first). Solves the monthly rate with Brent's method and
    returns it * 12.
    """
    if is_schedule_likely_daily(schedule):
        schedule = aggregate_daily_to_monthly(schedule)

    payments = [float(e.amount) for e in schedule if e.amount]
    if loan_amount <= 0 or not payments:
        return Decimal("0")

    principal = float(loan_amount)

    def npv(rate: float) -> float:
        return -principal + sum(p / (1 + rate) ** t for t, p in enumerate(payments, start=1))

    # Search between -50% and 100% per month
    try:
        monthly = brentq(npv, -0.5, 1.0, xtol=1e-10, maxiter=1000)
    except ValueError:
        # No sign change in range (e.g. payments nowhere near the loan amount)
        return Decimal("0")
    return Decimal(str(monthly * 12)).quantize(FOUR_PLACES, ROUND_HALF_UP)
