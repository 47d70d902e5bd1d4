"""Price rule repository — narrows rules to a bungalow and stay window."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Sequence

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rental.models.pricing import AppliesTo, PriceRule
from rental.pricing.rules import rule_sort_key
from rental.pricing.stores import PriceRuleStore


class PriceRuleRepository(PriceRuleStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_applicable(
        self,
        bungalow_id: uuid.UUID,
        check_in: datetime,
        check_out: datetime,
    ) -> Sequence[PriceRule]:
        """Global rules plus this bungalow's rules whose window touches the stay.

        The window test is inclusive on both ends: a rule ending on the
        check-in instant still qualifies.
        """
        stmt = (
            select(PriceRule)
            .where(
                or_(
                    PriceRule.applies_to == AppliesTo.GLOBAL,
                    and_(
                        PriceRule.applies_to == AppliesTo.BUNGALOW,
                        PriceRule.bungalow_id == bungalow_id,
                    ),
                ),
                or_(PriceRule.date_start.is_(None), PriceRule.date_start <= check_out),
                or_(PriceRule.date_end.is_(None), PriceRule.date_end >= check_in),
            )
            .order_by(PriceRule.type, PriceRule.created_at)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_in_evaluation_order(self) -> list[PriceRule]:
        """All stored rules, ordered the way the engine evaluates them."""
        result = await self.db.execute(select(PriceRule))
        return sorted(result.scalars().all(), key=rule_sort_key)
