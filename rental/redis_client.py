"""Redis async client and the per-bungalow booking lock."""

import uuid
from typing import Optional

import redis.asyncio as redis
from redis.asyncio.lock import Lock

from rental.config import settings

BOOKING_LOCK_PREFIX = "booking_lock:"

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Get or create Redis client (lazy init)."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
        )
    return _redis_client


async def get_redis() -> redis.Redis:
    """FastAPI dependency for Redis client."""
    return get_redis_client()


def booking_lock(client: redis.Redis, bungalow_id: uuid.UUID) -> Lock:
    """Lock serializing availability-check-then-write for one bungalow.

    Entering the lock raises ``redis.exceptions.LockError`` if it is not
    acquired within ``booking_lock_wait_seconds``.
    """
    return client.lock(
        f"{BOOKING_LOCK_PREFIX}{bungalow_id}",
        timeout=settings.booking_lock_timeout_seconds,
        blocking_timeout=settings.booking_lock_wait_seconds,
    )
