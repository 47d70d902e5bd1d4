"""Bungalows API — per-bungalow availability calendar."""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query

from rental.api.dependencies import get_reservation_repository
from rental.pricing.availability import blocked_dates
from rental.pricing.rules import ensure_aware
from rental.repositories.reservation import ReservationRepository

router = APIRouter(prefix="/api/v1/bungalows", tags=["bungalows"])


@router.get("/{bungalow_id}/availability")
async def bungalow_availability(
    bungalow_id: uuid.UUID,
    start: datetime = Query(..., description="Window start"),
    end: datetime = Query(..., description="Window end"),
    reservations: ReservationRepository = Depends(get_reservation_repository),
) -> dict:
    """Dates inside the window that are occupied by active reservations.

    Returns:
        {"unavailable_dates": ["YYYY-MM-DD", ...]}
    """
    blocking = await reservations.list_blocking(
        bungalow_id, start=ensure_aware(start), end=ensure_aware(end)
    )
    return {"unavailable_dates": [d.isoformat() for d in blocked_dates(blocking)]}
