"""Rate model: per-period principal and rent/interest.

Pure functions: Decimal in, Decimal out. No I/O.

Rent follows the calendar-aware convention everywhere: monthly rent is
(car value - customer ownership) * annual rate / 12, and daily amounts are the
monthly figures split over the actual number of days in that month
(``spread_evenly``), never an annual rate / 365 split.
"""

from decimal import Decimal, ROUND_FLOOR

WHOLE_UNITS = Decimal("1")  # Reference currency has no minor units
PERIODS_PER_YEAR = 12


def floor_money(value: Decimal) -> Decimal:
    """Floor to whole currency units. Amounts are never rounded up."""
    return value.quantize(WHOLE_UNITS, ROUND_FLOOR)


def principal_per_period(loan_amount: Decimal, periods: int) -> Decimal:
    if periods <= 0:
        raise ValueError("Number of periods must be positive")
    return loan_amount / Decimal(periods)


def customer_ownership(
    down_payment: Decimal, principal_per_period: Decimal, period_index: int
) -> Decimal:
    """Customer's stake before paying period ``period_index`` (0-based, in months)."""
    return down_payment + principal_per_period * period_index


def rent(
    car_value: Decimal,
    ownership: Decimal,
    annual_rate: Decimal,
    periods_per_year: int = PERIODS_PER_YEAR,
) -> Decimal:
    """Rent on the financier's remaining stake for one period."""
    financier_stake = max(car_value - ownership, Decimal("0"))
    return financier_stake * (annual_rate / periods_per_year)


def amortized_payment(principal: Decimal, annual_rate_percent: Decimal, months: int) -> Decimal:
    """Fixed installment for a fully amortizing loan.

    M = P * [r(1+r)^n] / [(1+r)^n - 1], r = annual_rate_percent / 100 / 12.
    A zero (or negative) rate degrades to P / n.
    """
    if months <= 0:
        raise ValueError("Term must be positive")
    if principal <= 0:
        return Decimal("0")
    r = annual_rate_percent / 100 / 12
    if r <= 0:
        return principal / months
    factor = (1 + r) ** months
    return principal * (r * factor) / (factor - 1)


def split_evenly(total: Decimal, parts: int) -> list[Decimal]:
    """Split ``total`` into ``parts`` floored whole-unit shares.

    The last share absorbs the flooring remainder, so the shares always sum
    to ``total`` exactly.
    """
    if parts <= 0:
        raise ValueError("Number of parts must be positive")
    share = floor_money(total / parts)
    shares = [share] * (parts - 1)
    shares.append(total - share * (parts - 1))
    return shares


def spread_evenly(total: Decimal, parts: int) -> list[Decimal]:
    """Split ``total`` into whole-unit shares that differ by at most one unit.

    The flooring remainder is handed out one unit at a time from the first
    share on; any fractional leftover lands on the last share.
    """
    if parts <= 0:
        raise ValueError("Number of parts must be positive")
    share = floor_money(total / parts)
    extra = int(floor_money(total - share * parts))
    shares = [share + 1 if i < extra else share for i in range(parts)]
    shares[-1] += total - sum(shares, Decimal("0"))
    return shares
