"""Redis client for the rate limiter.

Balances never touch Redis; PostgreSQL is the single source of truth. Short
socket timeouts keep a slow Redis from stalling requests, since the limiter
lets traffic through when Redis errors.
"""

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings

logger = logging.getLogger(__name__)

SOCKET_TIMEOUT_SECONDS = 0.5

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Return the shared client, creating it on first use."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=SOCKET_TIMEOUT_SECONDS,
        )
    return _client


async def ping_redis() -> bool:
    """True when Redis answers PING. Failures are logged, not raised."""
    try:
        client = await get_redis()
        return bool(await client.ping())
    except RedisError as exc:
        logger.warning("Redis unreachable at startup, rate limiting will fail open: %s", exc)
        return False


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
