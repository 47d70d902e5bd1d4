"""Seed database with bungalows, default price rules and the VAT setting."""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rental.config import settings
from rental.models import (
    AmountType,
    AppliesTo,
    Base,
    Bungalow,
    PriceRule,
    PriceRuleType,
    SystemSetting,
)


BUNGALOWS = [
    {
        "slug": "bungalov-a",
        "name": "Bungalov A",
        "description": "Deniz manzaralı, 2 kişilik bungalov. WiFi, klima ve minibar dahil.",
        "capacity": 2,
        "base_price": Decimal("500"),
        "features": {"wifi": True, "airConditioning": True, "minibar": True, "seaView": True},
    },
    {
        "slug": "bungalov-b",
        "name": "Bungalov B",
        "description": "Bahçe manzaralı, 4 kişilik bungalov. WiFi, klima ve minibar dahil.",
        "capacity": 4,
        "base_price": Decimal("750"),
        "features": {"wifi": True, "airConditioning": True, "gardenView": True, "kitchenette": True},
    },
    {
        "slug": "bungalov-c",
        "name": "Bungalov C",
        "description": "Orman manzaralı, 6 kişilik bungalov. WiFi, klima ve tam mutfak dahil.",
        "capacity": 6,
        "base_price": Decimal("1000"),
        "price_includes_vat": True,
        "features": {"wifi": True, "forestView": True, "fullKitchen": True, "jacuzzi": True},
    },
]

PRICE_RULES = [
    {
        "name": "Hafta Sonu Fiyatlandırması",
        "type": PriceRuleType.WEEKEND,
        "weekday_mask": [False, False, False, False, False, True, True],
        "amount_type": AmountType.PERCENT,
        "amount_value": Decimal("20"),
    },
    {
        "name": "Yaz Sezonu Fiyatlandırması",
        "type": PriceRuleType.SEASON,
        "date_start": datetime(2024, 6, 1, tzinfo=timezone.utc),
        "date_end": datetime(2024, 9, 30, tzinfo=timezone.utc),
        "amount_type": AmountType.PERCENT,
        "amount_value": Decimal("30"),
    },
    {
        "name": "Minimum 3 Gece Kalış",
        "type": PriceRuleType.MIN_NIGHTS,
        "amount_type": AmountType.FIXED,
        "amount_value": Decimal("3"),
    },
    {
        "name": "Kişi Başı Ek Ücret",
        "type": PriceRuleType.PER_PERSON,
        "amount_type": AmountType.FIXED,
        "amount_value": Decimal("100"),
    },
]

SYSTEM_SETTINGS = {"vatRate": "20"}


async def seed():
    """Seed the database with reference data."""
    engine = create_async_engine(settings.database_url)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession)

    async with session_factory() as session:
        for data in BUNGALOWS:
            exists = await session.execute(select(Bungalow.id).where(Bungalow.slug == data["slug"]))
            if exists.scalar_one_or_none():
                print(f"  = Bungalow: {data['name']} (exists)")
                continue
            session.add(Bungalow(**data))
            print(f"  + Bungalow: {data['name']}")

        for data in PRICE_RULES:
            exists = await session.execute(select(PriceRule.id).where(PriceRule.name == data["name"]))
            if exists.scalar_one_or_none():
                print(f"  = Rule: {data['name']} (exists)")
                continue
            session.add(PriceRule(applies_to=AppliesTo.GLOBAL, **data))
            print(f"  + Rule: {data['name']}")

        for key, value in SYSTEM_SETTINGS.items():
            exists = await session.execute(select(SystemSetting.id).where(SystemSetting.key == key))
            if exists.scalar_one_or_none():
                continue
            session.add(SystemSetting(key=key, value=value))
            print(f"  + Setting: {key}={value}")

        await session.commit()

    await engine.dispose()
    print("\nSeed completed!")


if __name__ == "__main__":
    asyncio.run(seed())
