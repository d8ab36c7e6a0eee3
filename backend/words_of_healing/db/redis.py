"""Shared Redis client for the level unlock push channel."""

import logging
from typing import Optional

import redis.asyncio as redis

from words_of_healing.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Lazily create the process-wide client.

    Pub/sub connections are long lived, so the pool pings idle
    connections before reuse.
    """
    global _client

    if _client is None:
        _client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            health_check_interval=30,
        )
        logger.info("Redis client created")

    return _client


async def close_redis() -> None:
    """Close the client and its connection pool."""
    global _client

    if _client is not None:
        await _client.aclose()
        _client = None
        logger.info("Redis client closed")
