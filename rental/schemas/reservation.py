"""Reservation schemas for API."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from rental.models.reservation import PaymentStatus, ReservationStatus
from rental.schemas.quote import StayDates


class ReservationCreate(StayDates):
    bungalow_id: uuid.UUID
    guests: int = Field(ge=1)
    customer_name: str = Field(min_length=2)
    customer_email: str
    customer_phone: str
    notes: Optional[str] = None
    manual_price: Optional[Decimal] = Field(default=None, ge=0)
    deposit_amount: Decimal = Field(default=Decimal("0"), ge=0)


class RescheduleRequest(StayDates):
    pass


class ReservationResponse(BaseModel):
    id: uuid.UUID
    code: str
    bungalow_id: uuid.UUID
    customer_name: str
    check_in: datetime
    check_out: datetime
    nights: int
    guests: int
    base_amount: Decimal
    discount_amount: Decimal
    extras_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    deposit_amount: Decimal
    remaining_amount: Decimal
    payment_status: PaymentStatus
    status: ReservationStatus

    model_config = {"from_attributes": True}


class PriceDifference(BaseModel):
    amount: Decimal
    is_increase: bool
    is_decrease: bool
    old_total_amount: Decimal
    new_total_amount: Decimal
