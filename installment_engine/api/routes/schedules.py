"""Schedule routes: generate, validate, edit, record payments."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from installment_engine.api.convert import from_entries, report_response, to_context, to_entries
from installment_engine.api.deps import get_today
from installment_engine.api.schemas import (
    AggregateRequest,
    EditRequest,
    EditSchema,
    FinancingRequest,
    GenerateResponse,
    RecordPaymentRequest,
    ScheduleResponse,
    ScheduleSummaryResponse,
    ValidateRequest,
    ValidationReportResponse,
)
from installment_engine.engine.aggregation import aggregate_daily_to_monthly
from installment_engine.engine.apr import implied_annual_rate
from installment_engine.engine.manual_edit import (
    AppendEntry,
    RemoveEntry,
    ScheduleEdit,
    UpdateEntry,
    apply_manual_edit,
)
from installment_engine.engine.schedule import generate, schedule_summary
from installment_engine.engine.status import record_payment
from installment_engine.engine.validation import ValidationContext, validate
from installment_engine.models.schedule import FinancingInput, FinancingInputError, ScheduleEditError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/schedules", tags=["schedules"])


def _to_edit(edit: EditSchema) -> ScheduleEdit:
    if edit.action == "append":
        if edit.amount is None:
            raise ScheduleEditError("Amount is required to add a payment")
        return AppendEntry(amount=edit.amount, due_date=edit.due_date)
    if edit.index is None:
        raise ScheduleEditError("Row index is required")
    if edit.action == "remove":
        return RemoveEntry(index=edit.index)
    return UpdateEntry(
        index=edit.index,
        due_date=edit.due_date,
        amount=edit.amount,
        status=edit.status,
        paid_date=edit.paid_date,
    )


@router.post("/generate", response_model=GenerateResponse)
async def generate_schedule(req: FinancingRequest, today: date = Depends(get_today)):
    """Generate a schedule and validate it against its own financing input."""
    financing = FinancingInput(**req.model_dump())
    try:
        entries = generate(financing, today)
    except FinancingInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    report = validate(entries, ValidationContext(
        today=today,
        mode=financing.mode,
        car_value=financing.car_value,
        down_payment=financing.down_payment,
        expected_term_months=financing.term_months,
    ))
    summary = schedule_summary(entries)
    return GenerateResponse(
        entries=from_entries(entries),
        summary=ScheduleSummaryResponse(
            payment_count=summary.payment_count,
            paid_count=summary.paid_count,
            total_amount=summary.total_amount,
            total_principal=summary.total_principal,
            total_rent=summary.total_rent,
            first_due_date=summary.first_due_date,
            last_due_date=summary.last_due_date,
            implied_annual_rate=implied_annual_rate(financing.loan_amount, entries),
        ),
        validation=report_response(report),
    )


@router.post("/validate", response_model=ValidationReportResponse)
async def validate_schedule(req: ValidateRequest, today: date = Depends(get_today)):
    """Validate a generated or hand-authored schedule."""
    report = validate(to_entries(req.entries), to_context(req.context, today))
    return report_response(report)


@router.post("/edit", response_model=ScheduleResponse)
async def edit_schedule(req: EditRequest, today: date = Depends(get_today)):
    """Apply one manual edit. Whole-schedule findings are returned, not enforced."""
    try:
        result = apply_manual_edit(
            to_entries(req.entries), _to_edit(req.edit), context=to_context(req.context, today)
        )
    except ScheduleEditError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return ScheduleResponse(
        entries=from_entries(result.schedule),
        validation=report_response(result.validation),
    )


@router.post("/record-payment", response_model=ScheduleResponse)
async def record_schedule_payment(req: RecordPaymentRequest):
    """Mark the payment due on a date as paid."""
    try:
        updated = record_payment(to_entries(req.entries), req.due_date, req.paid_date)
    except ScheduleEditError as e:
        raise HTTPException(status_code=409, detail=str(e))
    logger.info("Recorded payment due %s, paid %s", req.due_date, req.paid_date)
    return ScheduleResponse(entries=from_entries(updated))


@router.post("/aggregate", response_model=ScheduleResponse)
async def aggregate_schedule(req: AggregateRequest):
    """Roll a daily schedule up to one entry per month."""
    return ScheduleResponse(entries=from_entries(aggregate_daily_to_monthly(to_entries(req.entries))))
