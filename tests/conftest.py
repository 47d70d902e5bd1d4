"""Test fixtures and configuration."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from rental.pricing.engine import PricingEngine
from tests.fakes import (
    FakeBungalowStore,
    FakeLock,
    FakePriceRuleStore,
    FakeReservationStore,
    FakeSettingsStore,
    make_bungalow,
)


@pytest.fixture
def bungalow():
    """VAT-inclusive bungalow at 500 per night."""
    return make_bungalow()


@pytest.fixture
def rule_store():
    return FakePriceRuleStore()


@pytest.fixture
def settings_store():
    return FakeSettingsStore({"vatRate": "20"})


@pytest.fixture
def reservation_store():
    return FakeReservationStore()


@pytest.fixture
def pricing_engine(bungalow, rule_store, settings_store, reservation_store):
    return PricingEngine(
        bungalows=FakeBungalowStore(bungalow),
        price_rules=rule_store,
        settings=settings_store,
        reservations=reservation_store,
    )


@pytest.fixture
def booking_lock_handle(reservation_store):
    """Lock sharing its event log with the reservation store."""
    return FakeLock(events=reservation_store.events)


@pytest.fixture
def mock_redis(booking_lock_handle):
    """Mock Redis client whose lock() hands out the fake booking lock."""
    redis = AsyncMock()
    redis.lock = MagicMock(return_value=booking_lock_handle)
    return redis
