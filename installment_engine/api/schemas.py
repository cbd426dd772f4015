"""Pydantic schemas for API request/response models."""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from installment_engine.models.discount import DiscountType
from installment_engine.models.schedule import (
    FinancingMode,
    PaymentStatus,
    PaymentType,
    ScheduleInterval,
)


# ---- Shared ----

class PaymentEntrySchema(BaseModel):
    due_date: date | None = None
    amount: Decimal | None = None
    status: PaymentStatus | None = None
    paid_date: date | None = None
    is_deferred: bool = False
    is_partially_deferred: bool = False
    original_due_date: date | None = None
    original_amount: Decimal | None = None
    deferred_amount: Decimal | None = None
    principal: Decimal | None = None
    rent: Decimal | None = None
    payment_type: PaymentType = PaymentType.INSTALLMENT


class ValidationContextSchema(BaseModel):
    mode: FinancingMode | None = None
    car_value: Decimal | None = None
    down_payment: Decimal | None = None
    expected_term_months: int | None = None


class ValidationReportResponse(BaseModel):
    is_valid: bool
    can_save: bool
    errors: list[str]
    blocking_errors: list[str]
    warnings: list[str]


# ---- Request schemas ----

class FinancingRequest(BaseModel):
    car_value: Decimal = Field(..., description="Asset price in whole currency units")
    down_payment: Decimal = Field(Decimal("0"), description="Paid up front, reduces the financed amount")
    term_months: int = Field(..., description="Number of monthly periods")
    annual_rate: Decimal = Field(..., description="Annual rent/interest rate as a fraction, e.g. 0.12")
    start_date: date
    interval: ScheduleInterval = ScheduleInterval.MONTHLY
    mode: FinancingMode = FinancingMode.DYNAMIC_RENT
    balloon_amount: Decimal | None = Field(None, description="Lump sum due at the end (balloon plans only)")


class ValidateRequest(BaseModel):
    entries: list[PaymentEntrySchema]
    context: ValidationContextSchema = Field(default_factory=ValidationContextSchema)


class EditSchema(BaseModel):
    action: Literal["update", "remove", "append"]
    index: int | None = Field(None, description="0-based row position (update/remove)")
    due_date: date | None = None
    amount: Decimal | None = None
    status: PaymentStatus | None = None
    paid_date: date | None = None


class EditRequest(BaseModel):
    entries: list[PaymentEntrySchema]
    edit: EditSchema
    context: ValidationContextSchema = Field(default_factory=ValidationContextSchema)


class RecordPaymentRequest(BaseModel):
    entries: list[PaymentEntrySchema]
    due_date: date
    paid_date: date


class AggregateRequest(BaseModel):
    entries: list[PaymentEntrySchema]


class DeferralRecordSchema(BaseModel):
    subject_id: str
    year: int
    original_due_date: date
    deferred_to_date: date
    requested_on: date
    original_amount: Decimal
    deferred_amount: Decimal | None = None


class DeferralRequest(BaseModel):
    subject_id: str = Field(..., description="Financing subject the yearly quota is counted for")
    entries: list[PaymentEntrySchema]
    target_due_date: date
    amount_to_defer: Decimal | None = Field(None, description="Omit to defer the whole payment")
    history: list[DeferralRecordSchema] = Field(default_factory=list)
    context: ValidationContextSchema = Field(default_factory=ValidationContextSchema)


class DiscountComponentSchema(BaseModel):
    enabled: bool = False
    type: DiscountType = DiscountType.PERCENTAGE
    value: Decimal = Decimal("0")
    min_amount: Decimal = Decimal("0")


class TieredDiscountSchema(BaseModel):
    min_months_early: Decimal
    max_months_early: Decimal | None = None
    principal_discount: Decimal = Decimal("0")
    interest_discount: Decimal = Decimal("0")
    installment_discount: Decimal = Decimal("0")
    principal_discount_type: DiscountType = DiscountType.PERCENTAGE
    interest_discount_type: DiscountType = DiscountType.PERCENTAGE
    installment_discount_type: DiscountType = DiscountType.PERCENTAGE


class DiscountPolicySchema(BaseModel):
    principal_discount: DiscountComponentSchema = Field(default_factory=DiscountComponentSchema)
    interest_discount: DiscountComponentSchema = Field(default_factory=DiscountComponentSchema)
    tiered_discounts: list[TieredDiscountSchema] = Field(default_factory=list)
    max_discount_amount: Decimal = Decimal("0")
    max_discount_percentage: Decimal = Decimal("0")
    min_settlement_amount: Decimal = Decimal("0")
    min_remaining_payments: int = 0
    is_active: bool = True
    valid_from: date | None = None
    valid_until: date | None = None


class SettlementQuoteRequest(BaseModel):
    entries: list[PaymentEntrySchema]
    policy: DiscountPolicySchema
    as_of: date | None = Field(None, description="Settlement date (defaults to today)")


# ---- Response schemas ----

class ScheduleSummaryResponse(BaseModel):
    payment_count: int
    paid_count: int
    total_amount: Decimal
    total_principal: Decimal
    total_rent: Decimal
    first_due_date: date | None = None
    last_due_date: date | None = None
    implied_annual_rate: Decimal | None = None


class GenerateResponse(BaseModel):
    entries: list[PaymentEntrySchema]
    summary: ScheduleSummaryResponse
    validation: ValidationReportResponse


class ScheduleResponse(BaseModel):
    entries: list[PaymentEntrySchema]
    validation: ValidationReportResponse | None = None


class DeferralResponse(BaseModel):
    updated: bool
    rejection: str | None = None
    deferred_to: date | None = None
    remaining_deferrals: int
    entries: list[PaymentEntrySchema]
    history: list[DeferralRecordSchema]
    validation: ValidationReportResponse | None = None


class SettlementQuoteResponse(BaseModel):
    original_principal: Decimal
    original_interest: Decimal
    original_total: Decimal
    principal_discount: Decimal
    interest_discount: Decimal
    total_discount: Decimal
    discounted_principal: Decimal
    discounted_interest: Decimal
    final_amount: Decimal
    months_early: Decimal
    months_into_loan: Decimal
    remaining_payments: int
    applied_tier: TieredDiscountSchema | None = None
    ineligible_reason: str | None = None
