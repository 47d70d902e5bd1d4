"""Print stored price rules in the order the pricing engine evaluates them."""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from rental.config import settings
from rental.repositories.price_rule import PriceRuleRepository


async def check_price_rules():
    engine = create_async_engine(settings.database_url)
    session_factory = async_sessionmaker(engine, class_=AsyncSession)

    async with session_factory() as session:
        rules = await PriceRuleRepository(session).list_in_evaluation_order()

    await engine.dispose()

    if not rules:
        print("No price rules found")
        return

    for index, rule in enumerate(rules, start=1):
        print(f"\n{index}. {rule.name}")
        print(f"   ID: {rule.id}")
        print(f"   Type: {rule.type.value}")
        print(f"   Amount: {rule.amount_value} ({rule.amount_type.value})")
        print(f"   Applies To: {rule.applies_to.value}")
        if rule.bungalow_id:
            print(f"   Bungalow ID: {rule.bungalow_id}")
        if rule.date_start or rule.date_end:
            print(f"   Date Range: {rule.date_start or 'No start'} - {rule.date_end or 'No end'}")
        print(f"   Created: {rule.created_at}")


if __name__ == "__main__":
    asyncio.run(check_price_rules())
