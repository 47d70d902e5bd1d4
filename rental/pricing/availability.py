"""Booking-conflict predicate and blocked-date calendar."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from rental.models.reservation import Reservation, ReservationStatus
from rental.pricing.rules import ONE_DAY

# CHECKED_OUT and CANCELLED stays never block the calendar
BLOCKING_STATUSES = (
    ReservationStatus.PENDING,
    ReservationStatus.CONFIRMED,
    ReservationStatus.CHECKED_IN,
)


def overlaps(
    existing_check_in: datetime,
    existing_check_out: datetime,
    check_in: datetime,
    check_out: datetime,
) -> bool:
    """Half-open interval intersection; touching endpoints do not overlap."""
    return existing_check_in < check_out and existing_check_out > check_in


def blocks(reservation: Reservation, check_in: datetime, check_out: datetime) -> bool:
    return ReservationStatus(reservation.status) in BLOCKING_STATUSES and overlaps(
        reservation.check_in, reservation.check_out, check_in, check_out
    )


def blocked_dates(reservations: Iterable[Reservation]) -> list[date]:
    """Every calendar day occupied by the reservations; check-out days stay free."""
    days: set[date] = set()
    for reservation in reservations:
        current = reservation.check_in
        while current < reservation.check_out:
            days.add(current.date())
            current += ONE_DAY
    return sorted(days)
