"""Bungalow repository."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rental.models.bungalow import Bungalow
from rental.pricing.stores import BungalowStore


class BungalowRepository(BungalowStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, bungalow_id: uuid.UUID) -> Optional[Bungalow]:
        result = await self.db.execute(select(Bungalow).where(Bungalow.id == bungalow_id))
        return result.scalar_one_or_none()
