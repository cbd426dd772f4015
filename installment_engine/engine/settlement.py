"""Early settlement quotes with tiered or flat discounts.

Pure functions: entries and policy in, SettlementQuote out. No I/O.

Months early is measured against the remaining entries: the loan is taken to
start one month before the first remaining due date, so months early is how
far ``as_of`` sits ahead of the last remaining due date. A customer has to be
at least one full month ahead to get any discount at all.
"""

import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from installment_engine.engine.dates import add_months, months_between
from installment_engine.engine.rates import floor_money
from installment_engine.models.discount import (
    DiscountComponent,
    DiscountPolicy,
    DiscountType,
    SettlementQuote,
    TieredDiscount,
)
from installment_engine.models.schedule import PaymentEntry

logger = logging.getLogger(__name__)

ONE_PLACE = Decimal("0.1")
MIN_MONTHS_EARLY = Decimal("1")


def _round_months(value: float) -> Decimal:
    return Decimal(str(value)).quantize(ONE_PLACE, ROUND_HALF_UP)


def settlement_timing(remaining: list[PaymentEntry], as_of: date) -> tuple[Decimal, Decimal]:
    """Return (months_into_loan, months_early) for a settlement on ``as_of``."""
    dates = sorted(e.due_date for e in remaining if e.due_date is not None)
    if not dates:
        return Decimal("0"), Decimal("0")
    loan_start = add_months(dates[0], -1)
    total_months = months_between(loan_start, dates[-1])
    months_into = max(0.0, months_between(loan_start, as_of))
    months_early = max(0.0, total_months - months_into)
    return _round_months(months_into), _round_months(months_early)


def select_tier(tiers: tuple[TieredDiscount, ...], months_early: Decimal) -> TieredDiscount | None:
    """Tier with the largest minimum that still brackets ``months_early``."""
    matching = [t for t in tiers if t.contains(months_early)]
    if not matching:
        return None
    return max(matching, key=lambda t: t.min_months_early)


def _apply(base: Decimal, discount_type: DiscountType, value: Decimal) -> Decimal:
    if base <= 0 or value <= 0:
        return Decimal("0")
    if discount_type == DiscountType.PERCENTAGE:
        amount = base * value / 100
    else:
        amount = value
    return min(amount, base)


def _apply_component(base: Decimal, component: DiscountComponent) -> Decimal:
    if not component.enabled or base < component.min_amount:
        return Decimal("0")
    return _apply(base, component.type, component.value)


def _discount_cap(policy: DiscountPolicy, original_total: Decimal) -> Decimal | None:
    caps = []
    if policy.max_discount_amount > 0:
        caps.append(policy.max_discount_amount)
    if policy.max_discount_percentage > 0:
        caps.append(original_total * policy.max_discount_percentage / 100)
    if policy.min_settlement_amount > 0:
        caps.append(original_total - policy.min_settlement_amount)
    return min(caps) if caps else None


def _ineligible_reason(
    policy: DiscountPolicy,
    remaining: list[PaymentEntry],
    original_total: Decimal,
    months_early: Decimal,
    as_of: date,
) -> str | None:
    if months_early < MIN_MONTHS_EARLY:
        return "Settlement must be at least one month ahead of schedule"
    if not policy.is_active:
        return "Settlement discount policy is inactive"
    if not policy.is_valid_on(as_of):
        return "Settlement date is outside the discount validity window"
    if original_total < policy.min_settlement_amount:
        return "Remaining balance is below the minimum settlement amount"
    if len(remaining) < policy.min_remaining_payments:
        return "Not enough remaining payments to qualify"
    return None


def quote(
    remaining_entries: list[PaymentEntry],
    policy: DiscountPolicy,
    as_of: date,
) -> SettlementQuote:
    """Quote an early payoff of the remaining entries on ``as_of``.

    Discounts apply separately to the remaining principal and the remaining
    rent/interest; entries without a component split count fully as principal.
    The tightest cap (fixed amount, percentage of total, or keeping the payoff
    at the minimum settlement amount) scales both components down together.
    """
    remaining = [e for e in remaining_entries if not e.is_paid]

    original_principal = Decimal("0")
    original_interest = Decimal("0")
    for e in remaining:
        amount = e.amount or Decimal("0")
        if e.principal is not None and e.rent is not None:
            original_principal += e.principal
            original_interest += e.rent
        else:
            original_principal += amount
    original_total = original_principal + original_interest

    months_into, months_early = settlement_timing(remaining, as_of)
    base = dict(
        original_principal=original_principal,
        original_interest=original_interest,
        original_total=original_total,
        final_amount=original_total,
        months_early=months_early,
        months_into_loan=months_into,
        remaining_payments=len(remaining),
    )

    reason = _ineligible_reason(policy, remaining, original_total, months_early, as_of)
    if reason is not None:
        logger.debug("No settlement discount on %s: %s", as_of, reason)
        return SettlementQuote(**base, ineligible_reason=reason)

    # A tier miss falls back to the flat components
    tier = select_tier(policy.tiered_discounts, months_early)
    if tier is not None:
        principal_discount = _apply(
            original_principal, tier.principal_discount_type, tier.principal_discount
        )
        interest_discount = _apply(
            original_interest, tier.interest_discount_type, tier.interest_discount
        )
    else:
        principal_discount = _apply_component(original_principal, policy.principal_discount)
        interest_discount = _apply_component(original_interest, policy.interest_discount)

    total = principal_discount + interest_discount
    cap = _discount_cap(policy, original_total)
    if cap is not None and total > cap:
        cap = max(cap, Decimal("0"))
        principal_discount = principal_discount * cap / total
        interest_discount = interest_discount * cap / total

    principal_discount = floor_money(principal_discount)
    interest_discount = floor_money(interest_discount)
    total_discount = principal_discount + interest_discount

    return SettlementQuote(
        **{**base, "final_amount": max(original_total - total_discount, Decimal("0"))},
        principal_discount=principal_discount,
        interest_discount=interest_discount,
        total_discount=total_discount,
        applied_tier=tier,
    )
