"""Calendar arithmetic for due dates.

Month shifts clamp to the last day of the target month (Jan 31 + 1 month =
Feb 28/29). Fractional month differences follow the anchor convention: whole
months first, then the leftover days as a share of the surrounding month.
"""

import calendar
from datetime import date

from dateutil.relativedelta import relativedelta


def add_months(day: date, months: int) -> date:
    return day + relativedelta(months=months)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_start(day: date) -> date:
    return day.replace(day=1)


def same_month(a: date, b: date) -> bool:
    return (a.year, a.month) == (b.year, b.month)


def months_between(start: date, end: date) -> float:
    """Fractional months from ``start`` to ``end`` (negative if end is earlier)."""
    whole = (end.year - start.year) * 12 + (end.month - start.month)
    anchor = add_months(start, whole)
    if end < anchor:
        previous = add_months(start, whole - 1)
        adjust = (end - anchor).days / (anchor - previous).days
    else:
        following = add_months(start, whole + 1)
        adjust = (end - anchor).days / (following - anchor).days
    return whole + adjust


def whole_months_between(start: date, end: date) -> int:
    """Whole months from ``start`` to ``end``, truncated toward zero."""
    return int(months_between(start, end))
