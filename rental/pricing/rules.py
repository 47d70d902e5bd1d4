"""Price rule selection, ordering and date gates."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

from rental.models.pricing import AppliesTo, PriceRule, PriceRuleType

ONE_DAY = timedelta(days=1)

SATURDAY = 5
SUNDAY = 6


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with stored timestamps."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def count_nights(check_in: datetime, check_out: datetime) -> int:
    """Whole nights in the stay; any partial day counts as a full night."""
    days, remainder = divmod(ensure_aware(check_out) - ensure_aware(check_in), ONE_DAY)
    return days + 1 if remainder else days


def is_rule_in_scope(
    rule: PriceRule,
    bungalow_id: uuid.UUID,
    check_in: datetime,
    check_out: datetime,
) -> bool:
    """Global or bungalow-scoped rule whose activity window intersects the stay."""
    applies_to = AppliesTo(rule.applies_to)
    if applies_to == AppliesTo.BUNGALOW and rule.bungalow_id != bungalow_id:
        return False

    check_in = ensure_aware(check_in)
    check_out = ensure_aware(check_out)
    if rule.date_start is not None and ensure_aware(rule.date_start) > check_out:
        return False
    if rule.date_end is not None and ensure_aware(rule.date_end) < check_in:
        return False
    return True


def rule_sort_key(rule: PriceRule) -> tuple:
    """MIN_NIGHTS first, then by type name, then oldest rule first."""
    rule_type = PriceRuleType(rule.type)
    return (
        rule_type != PriceRuleType.MIN_NIGHTS,
        rule_type.value,
        ensure_aware(rule.created_at),
        str(rule.id),
    )


def select_applicable_rules(
    rules: Iterable[PriceRule],
    bungalow_id: uuid.UUID,
    check_in: datetime,
    check_out: datetime,
) -> list[PriceRule]:
    matched = [r for r in rules if is_rule_in_scope(r, bungalow_id, check_in, check_out)]
    matched.sort(key=rule_sort_key)
    return matched


def includes_weekend(check_in: datetime, check_out: datetime) -> bool:
    """True if any day in ``[check_in, check_out)`` is a Saturday or Sunday."""
    current = check_in
    while current < check_out:
        if current.weekday() in (SATURDAY, SUNDAY):
            return True
        current += ONE_DAY
    return False


def is_in_season(
    check_in: datetime,
    check_out: datetime,
    season_start: Optional[datetime],
    season_end: Optional[datetime],
) -> bool:
    """Stay lies entirely inside the season; open-ended seasons never match."""
    if season_start is None or season_end is None:
        return False
    return (
        ensure_aware(check_in) >= ensure_aware(season_start)
        and ensure_aware(check_out) <= ensure_aware(season_end)
    )
