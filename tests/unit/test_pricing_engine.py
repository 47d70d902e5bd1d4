"""Tests for the pricing engine quote computation."""
from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from rental.exceptions import MinimumStayViolation, NotFoundError
from rental.models.pricing import AmountType, AppliesTo, PriceRuleType
from rental.pricing.engine import PricingEngine
from rental.schemas.quote import ExtraItem, QuoteRequest
from tests.fakes import (
    FakeBungalowStore,
    FakePriceRuleStore,
    FakeReservationStore,
    FakeSettingsStore,
    SpyHolidayCalendar,
    at,
    make_rule,
)


def _quote(bungalow, check_in, check_out, guests=2, **kwargs) -> QuoteRequest:
    return QuoteRequest(
        bungalow_id=bungalow.id,
        check_in=check_in,
        check_out=check_out,
        guests=guests,
        **kwargs,
    )


# 2024-01-08 is a Monday, 2024-01-12 a Friday.
MON = at(2024, 1, 8)
WED = at(2024, 1, 10)
THU = at(2024, 1, 11)
FRI = at(2024, 1, 12)
NEXT_MON = at(2024, 1, 15)


class TestBaseAmount:

    @pytest.mark.asyncio
    async def test_partial_day_counts_as_full_night(self, pricing_engine, bungalow):
        result = await pricing_engine.calculate_pricing(
            _quote(bungalow, at(2024, 1, 1, 20), at(2024, 1, 2, 4))
        )
        assert result.base_amount == Decimal("500")
        assert result.breakdown[0].amount == Decimal("500")

    @pytest.mark.asyncio
    async def test_three_nights_no_rules_vat_included(self, pricing_engine, bungalow):
        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.base_amount == Decimal("1500")
        assert result.tax_amount == Decimal("0")
        assert result.total_amount == Decimal("1500")
        assert [line.type for line in result.breakdown] == ["base"]
        assert result.breakdown[0].description == "Temel fiyat"

    @pytest.mark.asyncio
    async def test_missing_bungalow_raises_not_found(self, pricing_engine):
        request = QuoteRequest(bungalow_id=uuid.uuid4(), check_in=MON, check_out=THU, guests=2)
        with pytest.raises(NotFoundError):
            await pricing_engine.calculate_pricing(request)

    @pytest.mark.asyncio
    async def test_naive_dates_are_treated_as_utc(self, pricing_engine, bungalow):
        request = _quote(bungalow, MON.replace(tzinfo=None), THU.replace(tzinfo=None))
        result = await pricing_engine.calculate_pricing(request)
        assert result.total_amount == Decimal("1500")


class TestVat:

    @pytest.mark.asyncio
    async def test_vat_added_when_price_excludes_it(self, pricing_engine, bungalow):
        bungalow.price_includes_vat = False

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.tax_amount == Decimal("300")
        assert result.total_amount == Decimal("1800")
        tax_line = result.breakdown[-1]
        assert tax_line.type == "tax"
        assert tax_line.description == "KDV (%20)"
        assert tax_line.amount == Decimal("300")

    @pytest.mark.asyncio
    async def test_configured_vat_rate_is_used(self, pricing_engine, bungalow, settings_store):
        bungalow.price_includes_vat = False
        settings_store.values["vatRate"] = "18"

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.tax_amount == Decimal("270")
        assert result.breakdown[-1].description == "KDV (%18)"

    @pytest.mark.parametrize("raw", [None, "", "abc", "0", "0.0", "NaN", "%18"])
    @pytest.mark.asyncio
    async def test_unusable_vat_setting_falls_back_to_default(
        self, pricing_engine, bungalow, settings_store, raw
    ):
        bungalow.price_includes_vat = False
        settings_store.values["vatRate"] = raw

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.tax_amount == Decimal("300")

    @pytest.mark.parametrize(
        "raw, tax, label",
        [
            ("18.5%", Decimal("277.5"), "KDV (%18.5)"),
            (" 8 ", Decimal("120"), "KDV (%8)"),
            ("-5", Decimal("-75"), "KDV (%-5)"),
        ],
    )
    @pytest.mark.asyncio
    async def test_leading_number_of_setting_is_used(
        self, pricing_engine, bungalow, settings_store, raw, tax, label
    ):
        bungalow.price_includes_vat = False
        settings_store.values["vatRate"] = raw

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.tax_amount == tax
        assert result.total_amount == Decimal("1500") + tax
        assert result.breakdown[-1].description == label

    @pytest.mark.asyncio
    async def test_settings_failure_falls_back_to_default(self, bungalow, rule_store):
        bungalow.price_includes_vat = False
        engine = PricingEngine(
            bungalows=FakeBungalowStore(bungalow),
            price_rules=rule_store,
            settings=FakeSettingsStore(error=RuntimeError("db down")),
            reservations=FakeReservationStore(),
        )

        result = await engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.tax_amount == Decimal("300")

    @pytest.mark.asyncio
    async def test_vat_applies_to_adjusted_amount(self, pricing_engine, bungalow, rule_store):
        bungalow.price_includes_vat = False
        rule_store.rules.append(
            make_rule(PriceRuleType.CUSTOM, "100", AmountType.FIXED, name="Temizlik")
        )

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.base_amount == Decimal("1600")
        assert result.tax_amount == Decimal("320")
        assert result.total_amount == Decimal("1920")


class TestMinimumNights:

    @pytest.mark.asyncio
    async def test_short_stay_is_rejected(self, pricing_engine, bungalow, rule_store):
        rule_store.rules.append(make_rule(PriceRuleType.MIN_NIGHTS, "3.00"))

        with pytest.raises(MinimumStayViolation) as exc_info:
            await pricing_engine.calculate_pricing(_quote(bungalow, MON, WED))

        assert exc_info.value.message == "Minimum 3 gece kalınması gerekiyor"
        assert exc_info.value.minimum_nights == "3"
        assert exc_info.value.nights == 2

    @pytest.mark.asyncio
    async def test_exact_minimum_passes_without_breakdown_line(
        self, pricing_engine, bungalow, rule_store
    ):
        rule_store.rules.append(make_rule(PriceRuleType.MIN_NIGHTS, "3"))

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.total_amount == Decimal("1500")
        assert len(result.breakdown) == 1

    @pytest.mark.asyncio
    async def test_minimum_checked_before_other_rules(self, bungalow, settings_store):
        """HOLIDAY sorts before MIN_NIGHTS by name, yet the gate runs first."""
        holidays = SpyHolidayCalendar(result=True)
        rules = [
            make_rule(PriceRuleType.HOLIDAY, "50", AmountType.PERCENT),
            make_rule(PriceRuleType.CUSTOM, "10", AmountType.PERCENT),
            make_rule(PriceRuleType.MIN_NIGHTS, "3"),
        ]

        engine = PricingEngine(
            bungalows=FakeBungalowStore(bungalow),
            price_rules=FakePriceRuleStore(rules),
            settings=settings_store,
            reservations=FakeReservationStore(),
            holidays=holidays,
        )

        with pytest.raises(MinimumStayViolation):
            await engine.calculate_pricing(_quote(bungalow, MON, WED))

        assert holidays.calls == 0


class TestWeekendRule:

    @pytest.mark.asyncio
    async def test_weekday_stay_gets_no_uplift(self, pricing_engine, bungalow, rule_store):
        rule_store.rules.append(
            make_rule(PriceRuleType.WEEKEND, "20", AmountType.PERCENT, name="Hafta sonu")
        )

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, WED))

        assert result.total_amount == Decimal("1000")
        assert len(result.breakdown) == 1

    @pytest.mark.asyncio
    async def test_stay_over_weekend_gets_uplift(self, pricing_engine, bungalow, rule_store):
        rule_store.rules.append(
            make_rule(PriceRuleType.WEEKEND, "20", AmountType.PERCENT, name="Hafta sonu")
        )

        result = await pricing_engine.calculate_pricing(_quote(bungalow, FRI, NEXT_MON))

        assert result.base_amount == Decimal("1800")
        assert result.breakdown[1].description == "Hafta sonu"
        assert result.breakdown[1].amount == Decimal("300")
        assert result.breakdown[1].type == "rule"

    @pytest.mark.asyncio
    async def test_saturday_checkout_is_not_a_weekend_night(
        self, pricing_engine, bungalow, rule_store
    ):
        rule_store.rules.append(make_rule(PriceRuleType.WEEKEND, "20", AmountType.PERCENT))

        result = await pricing_engine.calculate_pricing(_quote(bungalow, FRI, at(2024, 1, 13)))

        assert result.total_amount == Decimal("500")

    @pytest.mark.asyncio
    async def test_weekday_mask_does_not_change_matching(
        self, pricing_engine, bungalow, rule_store
    ):
        rule = make_rule(PriceRuleType.WEEKEND, "20", AmountType.PERCENT)
        rule.weekday_mask = [True, True, True, False, False, False, False]
        rule_store.rules.append(rule)

        weekday = await pricing_engine.calculate_pricing(_quote(bungalow, MON, WED))
        weekend = await pricing_engine.calculate_pricing(_quote(bungalow, FRI, NEXT_MON))

        assert weekday.total_amount == Decimal("1000")
        assert weekend.total_amount == Decimal("1800")

    @pytest.mark.asyncio
    async def test_percent_rules_compound_in_type_order(
        self, pricing_engine, bungalow, rule_store
    ):
        # Inserted out of order: CUSTOM still runs before WEEKEND.
        rule_store.rules.extend([
            make_rule(PriceRuleType.WEEKEND, "20", AmountType.PERCENT),
            make_rule(PriceRuleType.CUSTOM, "10", AmountType.PERCENT),
        ])

        result = await pricing_engine.calculate_pricing(_quote(bungalow, FRI, NEXT_MON))

        assert [line.amount for line in result.breakdown] == [
            Decimal("1500"), Decimal("150"), Decimal("330"),
        ]
        assert result.base_amount == Decimal("1980")


class TestSeasonAndHoliday:

    @pytest.mark.asyncio
    async def test_stay_inside_season_is_adjusted(self, pricing_engine, bungalow, rule_store):
        rule_store.rules.append(make_rule(
            PriceRuleType.SEASON, "30", AmountType.PERCENT,
            date_start=at(2024, 6, 1), date_end=at(2024, 9, 30),
        ))

        result = await pricing_engine.calculate_pricing(
            _quote(bungalow, at(2024, 7, 1), at(2024, 7, 4))
        )

        assert result.base_amount == Decimal("1950")

    @pytest.mark.asyncio
    async def test_stay_crossing_season_end_is_not_adjusted(
        self, pricing_engine, bungalow, rule_store
    ):
        rule_store.rules.append(make_rule(
            PriceRuleType.SEASON, "30", AmountType.PERCENT,
            date_start=at(2024, 6, 1), date_end=at(2024, 9, 30),
        ))

        result = await pricing_engine.calculate_pricing(
            _quote(bungalow, at(2024, 9, 29), at(2024, 10, 2))
        )

        assert result.base_amount == Decimal("1500")

    @pytest.mark.asyncio
    async def test_open_ended_season_never_matches(self, pricing_engine, bungalow, rule_store):
        rule_store.rules.append(make_rule(
            PriceRuleType.SEASON, "30", AmountType.PERCENT, date_start=at(2024, 1, 1),
        ))

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.base_amount == Decimal("1500")

    @pytest.mark.asyncio
    async def test_holiday_rule_skipped_by_default_calendar(
        self, pricing_engine, bungalow, rule_store
    ):
        rule_store.rules.append(make_rule(PriceRuleType.HOLIDAY, "50", AmountType.PERCENT))

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.base_amount == Decimal("1500")

    @pytest.mark.asyncio
    async def test_holiday_rule_applies_when_calendar_reports_holiday(
        self, bungalow, settings_store
    ):
        engine = PricingEngine(
            bungalows=FakeBungalowStore(bungalow),
            price_rules=FakePriceRuleStore(
                [make_rule(PriceRuleType.HOLIDAY, "50", AmountType.NIGHTLY)]
            ),
            settings=settings_store,
            reservations=FakeReservationStore(),
            holidays=SpyHolidayCalendar(result=True),
        )

        result = await engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.base_amount == Decimal("1650")


class TestPerPersonAndAdjustments:

    @pytest.mark.asyncio
    async def test_surcharge_for_guests_above_base_occupancy(
        self, pricing_engine, bungalow, rule_store
    ):
        rule_store.rules.append(make_rule(PriceRuleType.PER_PERSON, "100"))

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU, guests=4))

        assert result.breakdown[1].description == "Kişi başı ek ücret (2 kişi)"
        assert result.breakdown[1].amount == Decimal("600")
        assert result.base_amount == Decimal("2100")

    @pytest.mark.asyncio
    async def test_no_surcharge_at_base_occupancy(self, pricing_engine, bungalow, rule_store):
        rule_store.rules.append(make_rule(PriceRuleType.PER_PERSON, "100"))

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU, guests=2))

        assert result.base_amount == Decimal("1500")
        assert len(result.breakdown) == 1

    @pytest.mark.asyncio
    async def test_fixed_and_nightly_adjustments(self, pricing_engine, bungalow, rule_store):
        rule_store.rules.extend([
            make_rule(PriceRuleType.CUSTOM, "75", AmountType.FIXED, name="Temizlik"),
            make_rule(PriceRuleType.CUSTOM, "40", AmountType.NIGHTLY, name="Otopark"),
        ])

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert [(line.description, line.amount) for line in result.breakdown[1:]] == [
            ("Temizlik", Decimal("75")),
            ("Otopark", Decimal("120")),
        ]
        assert result.base_amount == Decimal("1695")

    @pytest.mark.asyncio
    async def test_zero_adjustment_is_dropped(self, pricing_engine, bungalow, rule_store):
        rule_store.rules.extend([
            make_rule(PriceRuleType.CUSTOM, "0", AmountType.FIXED),
            make_rule(PriceRuleType.CUSTOM, "100", AmountType.PER_PERSON),
        ])

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert result.base_amount == Decimal("1500")
        assert len(result.breakdown) == 1

    @pytest.mark.asyncio
    async def test_rules_of_other_bungalows_and_past_windows_ignored(
        self, pricing_engine, bungalow, rule_store
    ):
        rule_store.rules.extend([
            make_rule(
                PriceRuleType.CUSTOM, "100",
                applies_to=AppliesTo.BUNGALOW, bungalow_id=uuid.uuid4(),
            ),
            make_rule(PriceRuleType.CUSTOM, "100", date_end=at(2023, 12, 31)),
            make_rule(
                PriceRuleType.CUSTOM, "25", name="Own rule",
                applies_to=AppliesTo.BUNGALOW, bungalow_id=bungalow.id,
            ),
        ])

        result = await pricing_engine.calculate_pricing(_quote(bungalow, MON, THU))

        assert [line.description for line in result.breakdown] == ["Temel fiyat", "Own rule"]
        assert result.base_amount == Decimal("1525")

    @pytest.mark.asyncio
    async def test_extras_are_not_priced(self, pricing_engine, bungalow):
        result = await pricing_engine.calculate_pricing(
            _quote(bungalow, MON, THU, extras=[ExtraItem(code="BREAKFAST", qty=2)])
        )

        assert result.extras_amount == Decimal("0")
        assert result.discount_amount == Decimal("0")
        assert all(line.type != "extra" for line in result.breakdown)


class TestResultConsistency:

    @pytest.mark.parametrize("includes_vat", [True, False])
    @pytest.mark.parametrize("guests", [1, 2, 5])
    @pytest.mark.asyncio
    async def test_total_matches_components(
        self, pricing_engine, bungalow, rule_store, includes_vat, guests
    ):
        bungalow.price_includes_vat = includes_vat
        rule_store.rules.extend([
            make_rule(PriceRuleType.WEEKEND, "15", AmountType.PERCENT),
            make_rule(PriceRuleType.PER_PERSON, "80"),
            make_rule(PriceRuleType.CUSTOM, "33.33", AmountType.NIGHTLY),
        ])

        result = await pricing_engine.calculate_pricing(
            _quote(bungalow, FRI, NEXT_MON, guests=guests)
        )

        assert result.total_amount == (
            result.base_amount + result.extras_amount + result.tax_amount
            - result.discount_amount
        )
        non_tax = sum(
            (line.amount for line in result.breakdown if line.type != "tax"), Decimal("0")
        )
        assert non_tax == result.base_amount

    @pytest.mark.asyncio
    async def test_repeated_quotes_are_identical(self, pricing_engine, bungalow, rule_store):
        bungalow.price_includes_vat = False
        rule_store.rules.extend([
            make_rule(PriceRuleType.WEEKEND, "20", AmountType.PERCENT),
            make_rule(PriceRuleType.PER_PERSON, "100"),
        ])
        request = _quote(bungalow, FRI, NEXT_MON, guests=3)

        first = await pricing_engine.calculate_pricing(request)
        second = await pricing_engine.calculate_pricing(request)

        assert first == second
        assert first.model_dump() == second.model_dump()
