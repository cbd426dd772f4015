"""Early settlement quote routes."""

from datetime import date

from fastapi import APIRouter, Depends

from installment_engine.api.convert import to_entries
from installment_engine.api.deps import get_today
from installment_engine.api.schemas import (
    DiscountPolicySchema,
    SettlementQuoteRequest,
    SettlementQuoteResponse,
    TieredDiscountSchema,
)
from installment_engine.engine.settlement import quote
from installment_engine.models.discount import DiscountComponent, DiscountPolicy, TieredDiscount

router = APIRouter(prefix="/api/v1/settlements", tags=["settlements"])


def _build_policy(schema: DiscountPolicySchema) -> DiscountPolicy:
    return DiscountPolicy(
        principal_discount=DiscountComponent(**schema.principal_discount.model_dump()),
        interest_discount=DiscountComponent(**schema.interest_discount.model_dump()),
        tiered_discounts=tuple(TieredDiscount(**t.model_dump()) for t in schema.tiered_discounts),
        max_discount_amount=schema.max_discount_amount,
        max_discount_percentage=schema.max_discount_percentage,
        min_settlement_amount=schema.min_settlement_amount,
        min_remaining_payments=schema.min_remaining_payments,
        is_active=schema.is_active,
        valid_from=schema.valid_from,
        valid_until=schema.valid_until,
    )


@router.post("/quote", response_model=SettlementQuoteResponse)
async def quote_settlement(req: SettlementQuoteRequest, today: date = Depends(get_today)):
    """Quote an early payoff. The quote is read-only; nothing is settled."""
    q = quote(to_entries(req.entries), _build_policy(req.policy), req.as_of or today)
    tier = q.applied_tier
    return SettlementQuoteResponse(
        original_principal=q.original_principal,
        original_interest=q.original_interest,
        original_total=q.original_total,
        principal_discount=q.principal_discount,
        interest_discount=q.interest_discount,
        total_discount=q.total_discount,
        discounted_principal=q.discounted_principal,
        discounted_interest=q.discounted_interest,
        final_amount=q.final_amount,
        months_early=q.months_early,
        months_into_loan=q.months_into_loan,
        remaining_payments=q.remaining_payments,
        applied_tier=TieredDiscountSchema(**vars(tier)) if tier else None,
        ineligible_reason=q.ineligible_reason,
    )
