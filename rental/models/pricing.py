"""Price rules — declarative adjustments applied on top of the nightly base price."""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rental.models.base import Base, TimestampMixin, UUIDMixin


class PriceRuleType(str, Enum):
    SEASON = "SEASON"
    WEEKEND = "WEEKEND"
    HOLIDAY = "HOLIDAY"
    MIN_NIGHTS = "MIN_NIGHTS"
    PER_PERSON = "PER_PERSON"
    CUSTOM = "CUSTOM"


class AmountType(str, Enum):
    """How ``amount_value`` is interpreted."""

    FIXED = "FIXED"
    PERCENT = "PERCENT"
    PER_PERSON = "PER_PERSON"
    NIGHTLY = "NIGHTLY"


class AppliesTo(str, Enum):
    GLOBAL = "GLOBAL"
    BUNGALOW = "BUNGALOW"


class PriceRule(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "price_rules"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[PriceRuleType] = mapped_column(
        SAEnum(PriceRuleType, name="price_rule_type", native_enum=False, length=20),
        nullable=False,
    )

    # Amount
    amount_type: Mapped[AmountType] = mapped_column(
        SAEnum(AmountType, name="amount_type", native_enum=False, length=20),
        nullable=False,
    )
    amount_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Scope (bungalow_id is set only for BUNGALOW rules)
    applies_to: Mapped[AppliesTo] = mapped_column(
        SAEnum(AppliesTo, name="applies_to", native_enum=False, length=20),
        default=AppliesTo.GLOBAL,
    )
    bungalow_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("bungalows.id", ondelete="CASCADE"), nullable=True
    )

    # Activity window (NULL = open-ended)
    date_start: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    date_end: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Mon..Sun flags shown in the admin rule editor. Display only: WEEKEND
    # rules always match Saturday and Sunday (see includes_weekend).
    weekday_mask: Mapped[Optional[List[bool]]] = mapped_column(JSONB, nullable=True)

    # Relationships
    bungalow = relationship("Bungalow", back_populates="price_rules")
