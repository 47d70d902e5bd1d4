"""Data-access collaborators consumed by the pricing engine.

The engine depends only on these interfaces; ``rental.repositories`` holds
the SQLAlchemy implementations and tests plug in in-memory fakes.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional, Sequence

from rental.models.bungalow import Bungalow
from rental.models.pricing import PriceRule
from rental.models.reservation import Reservation, ReservationStatus


class BungalowStore(ABC):
    @abstractmethod
    async def find_by_id(self, bungalow_id: uuid.UUID) -> Optional[Bungalow]:
        ...


class PriceRuleStore(ABC):
    @abstractmethod
    async def find_applicable(
        self,
        bungalow_id: uuid.UUID,
        check_in: datetime,
        check_out: datetime,
    ) -> Sequence[PriceRule]:
        """Rules scoped to the bungalow (or global) whose window touches the stay."""


class SettingsStore(ABC):
    @abstractmethod
    async def get_setting(self, key: str) -> Optional[str]:
        ...


class ReservationStore(ABC):
    @abstractmethod
    async def find_overlapping(
        self,
        bungalow_id: uuid.UUID,
        check_in: datetime,
        check_out: datetime,
        statuses: Iterable[ReservationStatus],
        exclude_reservation_id: Optional[uuid.UUID] = None,
    ) -> Optional[Reservation]:
        """First reservation in one of ``statuses`` overlapping ``[check_in, check_out)``."""


class HolidayCalendar(ABC):
    @abstractmethod
    async def is_holiday(self, check_in: datetime, check_out: datetime) -> bool:
        ...


class NoHolidayCalendar(HolidayCalendar):
    """Placeholder calendar: no date is a holiday, so HOLIDAY rules never apply.

    TODO: back this with a holiday table or public-holiday API.
    """

    async def is_holiday(self, check_in: datetime, check_out: datetime) -> bool:
        return False
