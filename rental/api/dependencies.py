"""FastAPI dependencies wiring repositories into the pricing engine."""

import redis.asyncio as redis
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rental.database import get_db
from rental.pricing.engine import PricingEngine
from rental.redis_client import get_redis
from rental.repositories.bungalow import BungalowRepository
from rental.repositories.price_rule import PriceRuleRepository
from rental.repositories.reservation import ReservationRepository
from rental.repositories.setting import SettingsRepository
from rental.reservations.service import ReservationService


def build_pricing_engine(db: AsyncSession) -> PricingEngine:
    return PricingEngine(
        bungalows=BungalowRepository(db),
        price_rules=PriceRuleRepository(db),
        settings=SettingsRepository(db),
        reservations=ReservationRepository(db),
    )


async def get_pricing_engine(db: AsyncSession = Depends(get_db)) -> PricingEngine:
    return build_pricing_engine(db)


async def get_reservation_repository(
    db: AsyncSession = Depends(get_db),
) -> ReservationRepository:
    return ReservationRepository(db)


async def get_reservation_service(
    reservations: ReservationRepository = Depends(get_reservation_repository),
    engine: PricingEngine = Depends(get_pricing_engine),
    redis_client: redis.Redis = Depends(get_redis),
) -> ReservationService:
    return ReservationService(reservations, engine, redis_client)
