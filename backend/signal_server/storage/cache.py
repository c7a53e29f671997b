"""Redis cache layer for recent signals.

Keeps a capped list of the most recently emitted signals so clients
can catch up after connecting. Uses orjson for serialization.
"""

from __future__ import annotations

import logging
from typing import Any

import orjson
import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from signal_server.config import get_settings

logger = logging.getLogger(__name__)

# Global connection pool
_pool: ConnectionPool | None = None
_client: redis.Redis | None = None


# =============================================================================
# Keys
# =============================================================================

KEY_RECENT_SIGNALS = "signals:recent"      # Newest first


# =============================================================================
# Connection management
# =============================================================================

async def init_cache(redis_url: str | None = None) -> None:
    """Initialize Redis connection pool."""
    global _pool, _client

    if _client is not None:
        return

    url = redis_url or get_settings().redis_url
    if not url:
        logger.info("Redis URL not configured, cache disabled")
        return

    _pool = ConnectionPool.from_url(
        url,
        max_connections=10,
        decode_responses=False,  # We handle encoding ourselves with orjson
    )
    _client = redis.Redis(connection_pool=_pool)

    # Test connection
    try:
        await _client.ping()
        logger.info(f"Redis connected: {url}")
    except redis.RedisError as e:
        logger.warning(f"Redis connection failed: {e}. Cache will be disabled.")
        await _pool.disconnect()
        _client = None
        _pool = None


async def close_cache() -> None:
    """Close Redis connection pool."""
    global _pool, _client

    if _client is not None:
        await _client.aclose()
        _client = None

    if _pool is not None:
        await _pool.disconnect()
        _pool = None

    logger.info("Redis connection closed")


def is_cache_available() -> bool:
    """Check if cache is available."""
    return _client is not None


# =============================================================================
# Recent signals
# =============================================================================

async def push_recent_signal(payload: dict[str, Any], max_len: int = 200) -> None:
    """Prepend a signal to the recent list and trim it to *max_len*.

    Raises:
        redis.RedisError: On Redis failures (the caller decides how to contain them).
    """
    if _client is None:
        return

    async with _client.pipeline(transaction=True) as pipe:
        pipe.lpush(KEY_RECENT_SIGNALS, orjson.dumps(payload))
        pipe.ltrim(KEY_RECENT_SIGNALS, 0, max_len - 1)
        await pipe.execute()


async def get_recent_signals(limit: int = 50) -> list[dict[str, Any]]:
    """Get up to *limit* recent signals, newest first."""
    if _client is None:
        return []

    try:
        raw = await _client.lrange(KEY_RECENT_SIGNALS, 0, limit - 1)
    except redis.RedisError as e:
        logger.warning(f"Redis LRANGE error: {e}")
        return []

    signals = []
    for item in raw:
        try:
            signals.append(orjson.loads(item))
        except orjson.JSONDecodeError:
            logger.warning("Skipping undecodable cached signal")
    return signals

