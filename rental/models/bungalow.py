"""Bungalow model — the rentable unit priced per night."""

from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rental.models.base import Base, TimestampMixin, UUIDMixin


class BungalowStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    MAINTENANCE = "MAINTENANCE"


class Bungalow(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "bungalows"

    # Identity
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    capacity: Mapped[int] = mapped_column(Integer, default=2)
    features: Mapped[Dict] = mapped_column(JSONB, default=dict)

    # Pricing
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    price_includes_vat: Mapped[bool] = mapped_column(Boolean, default=False)

    status: Mapped[BungalowStatus] = mapped_column(
        SAEnum(BungalowStatus, name="bungalow_status", native_enum=False, length=20),
        default=BungalowStatus.ACTIVE,
    )

    # Relationships
    price_rules = relationship("PriceRule", back_populates="bungalow")
    reservations = relationship("Reservation", back_populates="bungalow")
