"""Reservation flows — create and reschedule priced reservations."""

from __future__ import annotations

import secrets
import uuid
from decimal import ROUND_HALF_UP, Decimal

import redis.asyncio as redis
import structlog
from redis.exceptions import LockError

from rental.config import settings
from rental.exceptions import BookingInProgress, BungalowUnavailable, NotFoundError
from rental.models.reservation import PaymentStatus, Reservation, ReservationStatus
from rental.pricing.engine import PricingEngine
from rental.pricing.rules import count_nights, ensure_aware
from rental.redis_client import booking_lock
from rental.repositories.reservation import ReservationRepository
from rental.schemas.quote import PricingResult, QuoteRequest
from rental.schemas.reservation import PriceDifference, RescheduleRequest, ReservationCreate

logger = structlog.get_logger()

MONEY_PLACES = Decimal("0.01")
ZERO = Decimal("0")


def to_money(value: Decimal) -> Decimal:
    return value.quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def generate_reservation_code() -> str:
    return f"{settings.reservation_code_prefix}-{secrets.randbelow(10**6):06d}"


def payment_status_for(deposit: Decimal, remaining: Decimal) -> PaymentStatus:
    if deposit <= 0:
        return PaymentStatus.NONE
    if remaining > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.COMPLETED


class ReservationService:
    """Prices and persists reservations under the bungalow's booking lock.

    The availability check, the write and the commit all happen while the
    lock is held, so a second request for overlapping dates only checks
    availability once the first reservation is visible to other sessions.
    """

    def __init__(
        self,
        reservations: ReservationRepository,
        engine: PricingEngine,
        redis_client: redis.Redis,
    ):
        self.reservations = reservations
        self.engine = engine
        self.redis = redis_client

    async def create_reservation(self, data: ReservationCreate) -> Reservation:
        """Create a PENDING reservation priced by the engine or a manual price.

        Raises:
            NotFoundError: bungalow does not exist
            BungalowUnavailable: dates overlap an active reservation
            MinimumStayViolation: stay shorter than a MIN_NIGHTS rule
            BookingInProgress: booking lock not acquired in time
        """
        try:
            async with booking_lock(self.redis, data.bungalow_id):
                return await self._create_locked(data)
        except LockError as e:
            raise BookingInProgress() from e

    async def _create_locked(self, data: ReservationCreate) -> Reservation:
        if not await self.engine.check_availability(
            data.bungalow_id, data.check_in, data.check_out
        ):
            raise BungalowUnavailable()

        if data.manual_price is None:
            pricing = await self.engine.calculate_pricing(
                QuoteRequest(
                    bungalow_id=data.bungalow_id,
                    check_in=data.check_in,
                    check_out=data.check_out,
                    guests=data.guests,
                )
            )
        else:
            if await self.engine.bungalows.find_by_id(data.bungalow_id) is None:
                raise NotFoundError("Bungalow", data.bungalow_id)
            pricing = PricingResult(
                base_amount=data.manual_price,
                total_amount=data.manual_price,
            )

        total = to_money(pricing.total_amount)
        deposit = to_money(data.deposit_amount)
        remaining = max(ZERO, total - deposit)

        reservation = Reservation(
            code=generate_reservation_code(),
            bungalow_id=data.bungalow_id,
            customer_name=data.customer_name.strip(),
            customer_email=data.customer_email.strip(),
            customer_phone=data.customer_phone.strip(),
            check_in=ensure_aware(data.check_in),
            check_out=ensure_aware(data.check_out),
            nights=count_nights(data.check_in, data.check_out),
            guests=data.guests,
            base_amount=to_money(pricing.base_amount),
            discount_amount=to_money(pricing.discount_amount),
            extras_amount=to_money(pricing.extras_amount),
            tax_amount=to_money(pricing.tax_amount),
            total_amount=total,
            deposit_amount=deposit,
            remaining_amount=remaining,
            payment_status=payment_status_for(deposit, remaining),
            status=ReservationStatus.PENDING,
            notes=data.notes,
        )
        await self.reservations.add(reservation)
        await self.reservations.commit()
        return reservation

    async def reschedule(
        self,
        reservation_id: uuid.UUID,
        dates: RescheduleRequest,
    ) -> tuple[Reservation, PriceDifference]:
        """Move a reservation to new dates and re-price it.

        The outstanding balance absorbs the price difference and never
        drops below zero.
        """
        reservation = await self.reservations.get(reservation_id)
        if reservation is None:
            raise NotFoundError("Reservation", reservation_id)

        try:
            async with booking_lock(self.redis, reservation.bungalow_id):
                return await self._reschedule_locked(reservation, dates)
        except LockError as e:
            raise BookingInProgress() from e

    async def _reschedule_locked(
        self,
        reservation: Reservation,
        dates: RescheduleRequest,
    ) -> tuple[Reservation, PriceDifference]:
        if not await self.engine.check_availability(
            reservation.bungalow_id,
            dates.check_in,
            dates.check_out,
            exclude_reservation_id=reservation.id,
        ):
            raise BungalowUnavailable()

        pricing = await self.engine.calculate_pricing(
            QuoteRequest(
                bungalow_id=reservation.bungalow_id,
                check_in=dates.check_in,
                check_out=dates.check_out,
                guests=reservation.guests,
            )
        )

        old_total = Decimal(reservation.total_amount)
        new_total = to_money(pricing.total_amount)
        difference = new_total - old_total
        remaining = max(ZERO, Decimal(reservation.remaining_amount or 0) + difference)

        old_check_in, old_check_out = reservation.check_in, reservation.check_out

        reservation.check_in = ensure_aware(dates.check_in)
        reservation.check_out = ensure_aware(dates.check_out)
        reservation.nights = count_nights(dates.check_in, dates.check_out)
        reservation.base_amount = to_money(pricing.base_amount)
        reservation.discount_amount = to_money(pricing.discount_amount)
        reservation.extras_amount = to_money(pricing.extras_amount)
        reservation.tax_amount = to_money(pricing.tax_amount)
        reservation.total_amount = new_total
        reservation.remaining_amount = remaining
        reservation.payment_status = (
            PaymentStatus.COMPLETED if remaining <= 0 else PaymentStatus.PARTIAL
        )
        await self.reservations.save(reservation)
        await self.reservations.commit()

        logger.info(
            "reservation_rescheduled",
            reservation_id=str(reservation.id),
            old_check_in=old_check_in.isoformat(),
            old_check_out=old_check_out.isoformat(),
            new_check_in=reservation.check_in.isoformat(),
            new_check_out=reservation.check_out.isoformat(),
            old_total=str(old_total),
            new_total=str(new_total),
        )

        return reservation, PriceDifference(
            amount=difference,
            is_increase=difference > 0,
            is_decrease=difference < 0,
            old_total_amount=old_total,
            new_total_amount=new_total,
        )
