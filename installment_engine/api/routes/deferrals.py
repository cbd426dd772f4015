"""Payment deferral routes."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from installment_engine.api.convert import (
    from_entries,
    from_records,
    report_response,
    to_context,
    to_entries,
    to_records,
)
from installment_engine.api.deps import get_settings, get_today
from installment_engine.api.schemas import DeferralRequest, DeferralResponse
from installment_engine.config import Settings
from installment_engine.engine.deferral import defer
from installment_engine.models.deferral import DeferralLedger

router = APIRouter(prefix="/api/v1/deferrals", tags=["deferrals"])


@router.post("", response_model=DeferralResponse)
async def defer_payment(
    req: DeferralRequest,
    today: date = Depends(get_today),
    cfg: Settings = Depends(get_settings),
):
    """Defer one payment by a month, fully or partially.

    The caller supplies its deferral history and persists the returned one;
    an exhausted quota comes back as ``updated: false``, not as an error.
    """
    ledger = DeferralLedger(records=to_records(req.history), annual_quota=cfg.deferrals_per_year)
    try:
        result = defer(
            to_entries(req.entries),
            req.target_due_date,
            req.amount_to_defer,
            ledger=ledger,
            subject_id=req.subject_id,
            today=today,
            context=to_context(req.context, today),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return DeferralResponse(
        updated=result.updated,
        rejection=result.rejection.value if result.rejection else None,
        deferred_to=result.deferred_to,
        remaining_deferrals=result.ledger.remaining(req.subject_id, today.year),
        entries=from_entries(result.schedule),
        history=from_records(result.ledger.records),
        validation=report_response(result.validation) if result.validation else None,
    )
