"""
Redis caching for per-event registration summaries.

CACHING STRATEGY
================

What we cache:
  - The registration summary of one event (seat, waitlist and invite counts)
  - Cache key pattern: "events:{event_id}:summary"

Why:
  - Event pages poll the summary far more often than anyone registers
  - Each summary costs three COUNT queries against the registrations table

Invalidation strategy:
  - Every successful register / cancel / invite / check-in / promotion
    deletes the key of the event it touched
  - Short TTL as a safety net for writes made outside this service

The cache is advisory only. Admission decisions always count rows in the
database under the event lock and never read from Redis. Any Redis error is
logged and treated as a miss.
"""

import json
from typing import Optional

import redis.asyncio as redis
from eventgate.core.config import get_settings
from eventgate.core.metrics import record_cache_operation
from eventgate.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis connection. Returns None if Redis is disabled or down."""
    global _redis_client

    if not settings.REDIS_ENABLED:
        return None

    if _redis_client is None:
        try:
            _redis_client = redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
            )
            await _redis_client.ping()
            logger.info("redis_connected", url=settings.REDIS_URL)
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            _redis_client = None
            return None

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def _make_summary_key(event_id: int) -> str:
    return f"events:{event_id}:summary"


async def get_cached_summary(event_id: int) -> Optional[dict]:
    client = await get_redis()
    if not client:
        return None

    key = _make_summary_key(event_id)
    try:
        data = await client.get(key)
        record_cache_operation("get", hit=data is not None)
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_summary(event_id: int, data: dict) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_summary_key(event_id)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_summary(event_id: int) -> None:
    client = await get_redis()
    if not client:
        return

    key = _make_summary_key(event_id)
    try:
        await client.delete(key)
        logger.debug("cache_invalidated", key=key)
    except Exception as e:
        logger.error("cache_invalidation_error", key=key, error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for the health endpoint."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
