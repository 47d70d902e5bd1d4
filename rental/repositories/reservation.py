"""Reservation repository — overlap queries and reservation persistence."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Iterable, Optional, Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rental.models.reservation import Reservation, ReservationStatus
from rental.pricing.availability import BLOCKING_STATUSES
from rental.pricing.stores import ReservationStore

logger = structlog.get_logger()


class ReservationRepository(ReservationStore):
    """Reads and writes reservations.

    Writes are only flushed; ``commit`` is called by the reservation flows
    while they still hold the booking lock.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, reservation_id: uuid.UUID) -> Optional[Reservation]:
        result = await self.db.execute(
            select(Reservation).where(Reservation.id == reservation_id)
        )
        return result.scalar_one_or_none()

    async def find_overlapping(
        self,
        bungalow_id: uuid.UUID,
        check_in: datetime,
        check_out: datetime,
        statuses: Iterable[ReservationStatus],
        exclude_reservation_id: Optional[uuid.UUID] = None,
    ) -> Optional[Reservation]:
        stmt = select(Reservation).where(
            Reservation.bungalow_id == bungalow_id,
            Reservation.status.in_(list(statuses)),
            Reservation.check_in < check_out,
            Reservation.check_out > check_in,
        )
        if exclude_reservation_id is not None:
            stmt = stmt.where(Reservation.id != exclude_reservation_id)

        result = await self.db.execute(stmt.limit(1))
        return result.scalars().first()

    async def list_blocking(
        self,
        bungalow_id: uuid.UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[Reservation]:
        """Active reservations for the bungalow, optionally only those touching a window."""
        stmt = select(Reservation).where(
            Reservation.bungalow_id == bungalow_id,
            Reservation.status.in_(BLOCKING_STATUSES),
        )
        if end is not None:
            stmt = stmt.where(Reservation.check_in <= end)
        if start is not None:
            stmt = stmt.where(Reservation.check_out >= start)

        result = await self.db.execute(stmt.order_by(Reservation.check_in))
        return result.scalars().all()

    async def add(self, reservation: Reservation) -> Reservation:
        self.db.add(reservation)
        await self.db.flush()

        logger.info(
            "reservation_created",
            reservation_id=str(reservation.id),
            code=reservation.code,
            bungalow_id=str(reservation.bungalow_id),
            nights=reservation.nights,
            total=str(reservation.total_amount),
        )
        return reservation

    async def save(self, reservation: Reservation) -> Reservation:
        await self.db.flush()
        return reservation

    async def commit(self) -> None:
        await self.db.commit()
