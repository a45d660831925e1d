"""Redis client for the two outbound collaborators: offer events and payment hand-off.

Redis holds no offer state; the offers table is the single source of truth.
An unreachable Redis therefore degrades notifications and payment hand-off
(both logged for reconciliation) but never blocks a negotiation, which is why
startup only warns instead of failing.
"""
import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


def _build_client() -> aioredis.Redis:
    return aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT_SECONDS,
        health_check_interval=30,
    )


async def get_redis() -> aioredis.Redis:
    """Lazily create the shared client; the connection pool lives inside it."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = _build_client()
    return _client


async def check_redis() -> bool:
    """Ping once. Returns False (and warns) instead of raising."""
    try:
        client = await get_redis()
        await client.ping()
    except (RedisError, OSError) as exc:
        logger.warning("Redis unreachable at startup (%s); offer events will be dropped", exc)
        return False
    logger.info("Redis reachable")
    return True


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
