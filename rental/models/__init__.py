"""SQLAlchemy ORM models."""

from rental.models.base import Base
from rental.models.bungalow import Bungalow, BungalowStatus
from rental.models.pricing import AmountType, AppliesTo, PriceRule, PriceRuleType
from rental.models.reservation import PaymentStatus, Reservation, ReservationStatus
from rental.models.setting import SystemSetting

__all__ = [
    "Base",
    "Bungalow",
    "BungalowStatus",
    "PriceRule",
    "PriceRuleType",
    "AmountType",
    "AppliesTo",
    "Reservation",
    "ReservationStatus",
    "PaymentStatus",
    "SystemSetting",
]
