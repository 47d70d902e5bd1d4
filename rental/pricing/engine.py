"""Pricing Engine — quotes a stay and checks bungalow availability."""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

import structlog

from rental.exceptions import MinimumStayViolation, NotFoundError
from rental.models.pricing import AmountType, PriceRule, PriceRuleType
from rental.pricing.availability import BLOCKING_STATUSES
from rental.pricing.rules import (
    count_nights,
    ensure_aware,
    includes_weekend,
    is_in_season,
    select_applicable_rules,
)
from rental.pricing.stores import (
    BungalowStore,
    HolidayCalendar,
    NoHolidayCalendar,
    PriceRuleStore,
    ReservationStore,
    SettingsStore,
)
from rental.schemas.quote import ExtraItem, PricingBreakdown, PricingResult, QuoteRequest

logger = structlog.get_logger()

# Guests covered by base_price. Not configurable yet; a per-bungalow
# occupancy column would be the place for it.
BASE_OCCUPANCY = 2

VAT_RATE_KEY = "vatRate"
DEFAULT_VAT_RATE = Decimal("20")

# Leading number of a stored setting: "18", "18.5", "18.5%", " -5"
LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_number(value: Decimal) -> str:
    """Render 3.00 as "3" and 18.50 as "18.5" for user-facing labels."""
    if value == value.to_integral_value():
        return str(value.quantize(Decimal(1)))
    return str(value.normalize())


class PricingEngine:
    """Computes quotes from a bungalow's base price, its price rules and VAT.

    Stateless: every call reads from the injected stores and nothing is
    cached between calls.
    """

    def __init__(
        self,
        bungalows: BungalowStore,
        price_rules: PriceRuleStore,
        settings: SettingsStore,
        reservations: ReservationStore,
        holidays: Optional[HolidayCalendar] = None,
    ):
        self.bungalows = bungalows
        self.price_rules = price_rules
        self.settings = settings
        self.reservations = reservations
        self.holidays = holidays or NoHolidayCalendar()

    async def calculate_pricing(self, request: QuoteRequest) -> PricingResult:
        """Price a stay.

        Args:
            request: Bungalow, dates and guest count. Date ordering is
                validated by ``QuoteRequest`` and not re-checked here.

        Returns:
            PricingResult with the ordered breakdown and totals

        Raises:
            NotFoundError: the bungalow does not exist
            MinimumStayViolation: a MIN_NIGHTS rule rejects the stay length
        """
        bungalow = await self.bungalows.find_by_id(request.bungalow_id)
        if bungalow is None:
            raise NotFoundError("Bungalow", request.bungalow_id)

        check_in = ensure_aware(request.check_in)
        check_out = ensure_aware(request.check_out)
        nights = count_nights(check_in, check_out)

        base_amount = _to_decimal(bungalow.base_price) * nights

        rules = await self._applicable_rules(request.bungalow_id, check_in, check_out)

        adjusted_amount, breakdown = await self._apply_price_rules(
            base_amount, rules, check_in, check_out, request.guests, nights
        )

        extras_amount, extras_breakdown = self._calculate_extras(request.extras)
        breakdown.extend(extras_breakdown)

        discount_amount = self._calculate_discount()

        tax_amount = ZERO
        taxable_amount = adjusted_amount + extras_amount
        if not bungalow.price_includes_vat:
            vat_rate = await self._vat_rate()
            tax_amount = taxable_amount * (vat_rate / HUNDRED)
            breakdown.append(
                PricingBreakdown(
                    description=f"KDV (%{format_number(vat_rate)})",
                    amount=tax_amount,
                    type="tax",
                )
            )

        total_amount = taxable_amount + tax_amount - discount_amount

        logger.info(
            "pricing_calculated",
            bungalow_id=str(request.bungalow_id),
            nights=nights,
            guests=request.guests,
            rules=len(rules),
            total=str(total_amount),
        )

        return PricingResult(
            breakdown=breakdown,
            base_amount=adjusted_amount,
            extras_amount=extras_amount,
            discount_amount=discount_amount,
            tax_amount=tax_amount,
            total_amount=total_amount,
        )

    async def check_availability(
        self,
        bungalow_id: uuid.UUID,
        check_in: datetime,
        check_out: datetime,
        exclude_reservation_id: Optional[uuid.UUID] = None,
    ) -> bool:
        """True if no active reservation overlaps ``[check_in, check_out)``.

        Only answers the question; callers that go on to book must hold the
        booking lock so two requests cannot both pass this check.
        """
        conflict = await self.reservations.find_overlapping(
            bungalow_id,
            ensure_aware(check_in),
            ensure_aware(check_out),
            BLOCKING_STATUSES,
            exclude_reservation_id=exclude_reservation_id,
        )
        available = conflict is None

        logger.debug(
            "availability_checked",
            bungalow_id=str(bungalow_id),
            check_in=check_in.isoformat(),
            check_out=check_out.isoformat(),
            available=available,
        )
        return available

    async def _applicable_rules(
        self,
        bungalow_id: uuid.UUID,
        check_in: datetime,
        check_out: datetime,
    ) -> list[PriceRule]:
        rules = await self.price_rules.find_applicable(bungalow_id, check_in, check_out)
        return select_applicable_rules(rules, bungalow_id, check_in, check_out)

    async def _apply_price_rules(
        self,
        base_amount: Decimal,
        rules: Sequence[PriceRule],
        check_in: datetime,
        check_out: datetime,
        guests: int,
        nights: int,
    ) -> tuple[Decimal, list[PricingBreakdown]]:
        adjusted_amount = base_amount
        breakdown = [
            PricingBreakdown(description="Temel fiyat", amount=base_amount, type="base"),
        ]

        for rule in rules:
            rule_type = PriceRuleType(rule.type)
            amount_value = _to_decimal(rule.amount_value)

            if rule_type == PriceRuleType.MIN_NIGHTS:
                if nights < amount_value:
                    logger.info(
                        "minimum_stay_violation",
                        rule=rule.name,
                        nights=nights,
                        minimum=str(amount_value),
                    )
                    raise MinimumStayViolation(format_number(amount_value), nights)
                continue

            if rule_type == PriceRuleType.WEEKEND:
                if not includes_weekend(check_in, check_out):
                    continue

            if rule_type == PriceRuleType.HOLIDAY:
                if not await self.holidays.is_holiday(check_in, check_out):
                    continue

            if rule_type == PriceRuleType.SEASON:
                if not is_in_season(check_in, check_out, rule.date_start, rule.date_end):
                    continue

            if rule_type == PriceRuleType.PER_PERSON:
                extra_guests = max(0, guests - BASE_OCCUPANCY)
                if extra_guests > 0:
                    surcharge = amount_value * extra_guests * nights
                    adjusted_amount += surcharge
                    breakdown.append(
                        PricingBreakdown(
                            description=f"Kişi başı ek ücret ({extra_guests} kişi)",
                            amount=surcharge,
                            type="rule",
                        )
                    )
                continue

            adjustment = self._rule_adjustment(rule, amount_value, adjusted_amount, nights)
            if adjustment > 0:
                adjusted_amount += adjustment
                breakdown.append(
                    PricingBreakdown(description=rule.name, amount=adjustment, type="rule")
                )

        return adjusted_amount, breakdown

    def _rule_adjustment(
        self,
        rule: PriceRule,
        amount_value: Decimal,
        adjusted_amount: Decimal,
        nights: int,
    ) -> Decimal:
        amount_type = AmountType(rule.amount_type)
        if amount_type == AmountType.PERCENT:
            return adjusted_amount * amount_value / HUNDRED
        if amount_type == AmountType.FIXED:
            return amount_value
        if amount_type == AmountType.NIGHTLY:
            return amount_value * nights
        # PER_PERSON amounts only mean something on PER_PERSON rules
        return ZERO

    def _calculate_extras(
        self, extras: Sequence[ExtraItem]
    ) -> tuple[Decimal, list[PricingBreakdown]]:
        """Extras are accepted on the request but not priced yet."""
        return ZERO, []

    def _calculate_discount(self) -> Decimal:
        """No discount logic exists yet; quotes always carry a zero discount."""
        return ZERO

    async def _vat_rate(self) -> Decimal:
        """VAT percentage from system settings.

        Only the leading number of the stored value is read, so "18.5%" gives
        18.5 and "-5" gives -5. A missing, unparseable or zero value falls
        back to 20.
        """
        try:
            raw = await self.settings.get_setting(VAT_RATE_KEY)
        except Exception as e:
            logger.warning("vat_rate_fallback", reason="settings_unavailable", error=str(e))
            return DEFAULT_VAT_RATE

        if not raw:
            return DEFAULT_VAT_RATE

        match = LEADING_NUMBER.match(raw)
        if match is None:
            logger.warning("vat_rate_fallback", reason="unparseable", value=raw)
            return DEFAULT_VAT_RATE

        rate = Decimal(match.group(1))
        if rate == 0:
            logger.warning("vat_rate_fallback", reason="zero", value=raw)
            return DEFAULT_VAT_RATE

        return rate
