"""Quote request and pricing result schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from rental.pricing.rules import ensure_aware

BreakdownType = Literal["base", "rule", "extra", "discount", "tax"]


class StayDates(BaseModel):
    """Check-in/check-out pair; check-out is exclusive and must follow check-in.

    Values without a timezone are read as UTC.
    """

    check_in: datetime
    check_out: datetime

    @model_validator(mode="after")
    def _check_out_after_check_in(self):
        if ensure_aware(self.check_out) <= ensure_aware(self.check_in):
            raise ValueError("Çıkış tarihi giriş tarihinden sonra olmalıdır")
        return self


class ExtraItem(BaseModel):
    code: str
    qty: int = Field(ge=1)


class QuoteRequest(StayDates):
    bungalow_id: uuid.UUID
    guests: int = Field(ge=1)
    extras: list[ExtraItem] = []


class PricingBreakdown(BaseModel):
    """One named contribution to the total, in the order it was computed."""

    description: str
    amount: Decimal
    type: BreakdownType


class PricingResult(BaseModel):
    """Result from pricing engine.

    ``base_amount`` is the nightly total after rule adjustments; the
    unadjusted figure is the first ``base`` line of ``breakdown``.
    """

    breakdown: list[PricingBreakdown] = []
    base_amount: Decimal
    extras_amount: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    total_amount: Decimal
