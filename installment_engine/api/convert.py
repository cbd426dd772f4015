"""Conversions between API schemas and engine dataclasses."""

from dataclasses import asdict
from datetime import date

from installment_engine.api.schemas import (
    DeferralRecordSchema,
    PaymentEntrySchema,
    ValidationContextSchema,
    ValidationReportResponse,
)
from installment_engine.engine.validation import ValidationContext, ValidationReport
from installment_engine.models.deferral import DeferralRecord
from installment_engine.models.schedule import PaymentEntry


def to_entries(entries: list[PaymentEntrySchema]) -> list[PaymentEntry]:
    return [PaymentEntry(**e.model_dump()) for e in entries]


def from_entries(entries: list[PaymentEntry]) -> list[PaymentEntrySchema]:
    return [PaymentEntrySchema(**asdict(e)) for e in entries]


def to_context(ctx: ValidationContextSchema, today: date) -> ValidationContext:
    return ValidationContext(today=today, **ctx.model_dump())


def to_records(history: list[DeferralRecordSchema]) -> tuple[DeferralRecord, ...]:
    return tuple(DeferralRecord(**r.model_dump()) for r in history)


def from_records(records: tuple[DeferralRecord, ...]) -> list[DeferralRecordSchema]:
    return [DeferralRecordSchema(**asdict(r)) for r in records]


def report_response(report: ValidationReport) -> ValidationReportResponse:
    return ValidationReportResponse(
        is_valid=report.is_valid,
        can_save=report.can_save,
        errors=report.errors,
        blocking_errors=report.blocking_errors,
        warnings=report.warnings,
    )
