"""System settings repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rental.models.setting import SystemSetting
from rental.pricing.stores import SettingsStore


class SettingsRepository(SettingsStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_setting(self, key: str) -> Optional[str]:
        result = await self.db.execute(
            select(SystemSetting.value).where(SystemSetting.key == key)
        )
        return result.scalar_one_or_none()
