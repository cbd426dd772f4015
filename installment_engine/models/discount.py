"""Settlement discount configuration and quote data types."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class DiscountComponent:
    enabled: bool = False
    type: DiscountType = DiscountType.PERCENTAGE
    value: Decimal = Decimal("0")  # Percent (e.g. 10 = 10%) or fixed amount
    min_amount: Decimal = Decimal("0")  # Component base must reach this to qualify


@dataclass(frozen=True)
class TieredDiscount:
    min_months_early: Decimal
    max_months_early: Decimal | None = None  # None = unlimited
    principal_discount: Decimal = Decimal("0")
    interest_discount: Decimal = Decimal("0")
    installment_discount: Decimal = Decimal("0")
    principal_discount_type: DiscountType = DiscountType.PERCENTAGE
    interest_discount_type: DiscountType = DiscountType.PERCENTAGE
    installment_discount_type: DiscountType = DiscountType.PERCENTAGE

    def contains(self, months_early: Decimal) -> bool:
        if months_early < self.min_months_early:
            return False
        return self.max_months_early is None or months_early <= self.max_months_early


@dataclass(frozen=True)
class DiscountPolicy:
    principal_discount: DiscountComponent = field(default_factory=DiscountComponent)
    interest_discount: DiscountComponent = field(default_factory=DiscountComponent)
    tiered_discounts: tuple[TieredDiscount, ...] = ()

    # Caps (0 = uncapped)
    max_discount_amount: Decimal = Decimal("0")
    max_discount_percentage: Decimal = Decimal("0")
    min_settlement_amount: Decimal = Decimal("0")
    min_remaining_payments: int = 0

    is_active: bool = True
    valid_from: date | None = None
    valid_until: date | None = None

    def is_valid_on(self, day: date) -> bool:
        if self.valid_from is not None and day < self.valid_from:
            return False
        if self.valid_until is not None and day > self.valid_until:
            return False
        return True


@dataclass(frozen=True)
class SettlementQuote:
    original_principal: Decimal = Decimal("0")
    original_interest: Decimal = Decimal("0")
    original_total: Decimal = Decimal("0")

    principal_discount: Decimal = Decimal("0")
    interest_discount: Decimal = Decimal("0")
    total_discount: Decimal = Decimal("0")
    final_amount: Decimal = Decimal("0")

    months_early: Decimal = Decimal("0")
    months_into_loan: Decimal = Decimal("0")
    remaining_payments: int = 0

    applied_tier: TieredDiscount | None = None
    ineligible_reason: str | None = None  # Set when no discount applies

    @property
    def discounted_principal(self) -> Decimal:
        return self.original_principal - self.principal_discount

    @property
    def discounted_interest(self) -> Decimal:
        return self.original_interest - self.interest_discount
