"""Reservations API — quotes, availability and the booking flows."""

import uuid
from datetime import datetime

import structlog
from fastapi import APIRouter, Depends, Query

from rental.api.dependencies import (
    get_pricing_engine,
    get_reservation_repository,
    get_reservation_service,
)
from rental.exceptions import BungalowUnavailable
from rental.pricing.availability import blocked_dates
from rental.pricing.engine import PricingEngine
from rental.repositories.reservation import ReservationRepository
from rental.reservations.service import ReservationService
from rental.schemas.quote import PricingResult, QuoteRequest
from rental.schemas.reservation import (
    RescheduleRequest,
    ReservationCreate,
    ReservationResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/reservations", tags=["reservations"])


def _quote_to_json(pricing: PricingResult) -> dict:
    return {
        "breakdown": [
            {
                "description": line.description,
                "amount": float(line.amount),
                "type": line.type,
            }
            for line in pricing.breakdown
        ],
        "base_amount": float(pricing.base_amount),
        "extras_amount": float(pricing.extras_amount),
        "discount_amount": float(pricing.discount_amount),
        "tax_amount": float(pricing.tax_amount),
        "total_amount": float(pricing.total_amount),
    }


@router.post("/quote")
async def quote(
    request: QuoteRequest,
    engine: PricingEngine = Depends(get_pricing_engine),
) -> dict:
    """Price a prospective stay after confirming the dates are free.

    Returns:
        Breakdown lines and totals, amounts as numbers
    """
    if not await engine.check_availability(
        request.bungalow_id, request.check_in, request.check_out
    ):
        raise BungalowUnavailable()

    pricing = await engine.calculate_pricing(request)
    return _quote_to_json(pricing)


@router.get("/availability")
async def reservation_calendar(
    bungalow_id: uuid.UUID,
    reservations: ReservationRepository = Depends(get_reservation_repository),
) -> dict:
    """Every date blocked by an active reservation of the bungalow."""
    blocking = await reservations.list_blocking(bungalow_id)
    return {"blocked_dates": [d.isoformat() for d in blocked_dates(blocking)]}


@router.get("/availability/check")
async def check_availability(
    bungalow_id: uuid.UUID,
    check_in: datetime = Query(...),
    check_out: datetime = Query(...),
    engine: PricingEngine = Depends(get_pricing_engine),
) -> dict:
    available = await engine.check_availability(bungalow_id, check_in, check_out)
    return {"available": available}


@router.post("", response_model=ReservationResponse, status_code=201)
async def create_reservation(
    data: ReservationCreate,
    service: ReservationService = Depends(get_reservation_service),
) -> ReservationResponse:
    reservation = await service.create_reservation(data)
    return ReservationResponse.model_validate(reservation)


@router.patch("/{reservation_id}/reschedule")
async def reschedule_reservation(
    reservation_id: uuid.UUID,
    dates: RescheduleRequest,
    service: ReservationService = Depends(get_reservation_service),
) -> dict:
    """Move a reservation to new dates and report the price change."""
    reservation, difference = await service.reschedule(reservation_id, dates)
    return {
        "reservation": ReservationResponse.model_validate(reservation).model_dump(mode="json"),
        "price_difference": difference.model_dump(mode="json"),
    }
