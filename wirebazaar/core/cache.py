"""
Shared Redis connection for guest carts and rate limiting.

Redis is optional: when it cannot be reached the callers fall back to
in-process storage.
"""

import logging
from typing import Optional

import redis.asyncio as redis

from wirebazaar.core.config import settings

logger = logging.getLogger(__name__)

# Redis connection (initialized in the application lifespan)
redis_client: Optional[redis.Redis] = None


async def init_redis(redis_url: Optional[str] = None) -> Optional[redis.Redis]:
    """
    Initialize the Redis connection pool.

    Args:
        redis_url: Redis connection URL (defaults to settings.REDIS_URL)
    """
    global redis_client
    try:
        redis_client = redis.from_url(
            redis_url or settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            max_connections=20,
            socket_connect_timeout=5,
        )
        # Test connection
        await redis_client.ping()
        logger.info("Redis connection pool initialized (max=20)")
    except Exception as e:
        logger.warning(f"Redis not available, using in-memory storage: {e}")
        redis_client = None
    return redis_client


async def close_redis() -> None:
    """Close Redis connection"""
    global redis_client
    if redis_client:
        await redis_client.close()
        logger.info("Redis connection closed")
    redis_client = None


def get_redis_client() -> Optional[redis.Redis]:
    """Get the Redis client, or None when running on in-memory fallbacks."""
    return redis_client


def is_redis_available() -> bool:
    return redis_client is not None
