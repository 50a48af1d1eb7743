"""
Rate Limiting for WireBazaar API
Sliding-window limits backed by Redis, with an in-memory fallback
"""

import time
import logging
from typing import Dict, List

from fastapi import Request

from wirebazaar.core.cache import get_redis_client
from wirebazaar.core.exceptions import COMMON_ERROR_MESSAGES, RateLimitError

logger = logging.getLogger(__name__)

# Rate limit configurations
RATE_LIMITS = {
    # SMS codes cost money and annoy people
    "otp_phone": {
        "max_requests": 5,
        "window_seconds": 600
    },
    "otp_ip": {
        "max_requests": 20,
        "window_seconds": 600
    },
}

# In-memory storage for the fallback (not shared between workers)
_memory_storage: Dict[str, List[float]] = {}


async def check_rate_limit(key: str, limit_type: str) -> bool:
    """
    Check and record one request against a limit.

    Args:
        key: Rate limit key (phone or client IP)
        limit_type: Entry in RATE_LIMITS

    Returns:
        True if within rate limit, False otherwise
    """
    config = RATE_LIMITS[limit_type]
    max_requests = config["max_requests"]
    window_seconds = config["window_seconds"]

    redis_client = get_redis_client()
    if redis_client is None:
        return check_rate_limit_memory(key, limit_type)

    try:
        redis_key = f"rate_limit:{limit_type}:{key}"
        current_time = time.time()
        window_start = current_time - window_seconds

        async with redis_client.pipeline() as pipe:
            pipe.zremrangebyscore(redis_key, 0, window_start)
            pipe.zcard(redis_key)
            results = await pipe.execute()

        current_requests = results[1]
        if current_requests >= max_requests:
            # rejected attempts do not extend the window
            logger.warning(f"Rate limit exceeded for {limit_type}: {key}")
            return False

        async with redis_client.pipeline() as pipe:
            pipe.zadd(redis_key, {f"{current_time:.6f}": current_time})
            pipe.expire(redis_key, window_seconds)
            await pipe.execute()
        return True

    except Exception as e:
        logger.error(f"Rate limit check failed, allowing request: {e}")
        return True


def check_rate_limit_memory(key: str, limit_type: str) -> bool:
    """In-memory rate limiting fallback"""
    config = RATE_LIMITS[limit_type]
    storage_key = f"{limit_type}:{key}"

    current_time = time.time()
    window_start = current_time - config["window_seconds"]

    timestamps = [t for t in _memory_storage.get(storage_key, []) if t > window_start]
    if len(timestamps) >= config["max_requests"]:
        _memory_storage[storage_key] = timestamps
        logger.warning(f"Rate limit exceeded for {limit_type}: {key}")
        return False

    timestamps.append(current_time)
    _memory_storage[storage_key] = timestamps
    return True


def reset_memory_rate_limits() -> None:
    _memory_storage.clear()


async def enforce_otp_rate_limit(request: Request, phone: str) -> None:
    """
    Limit OTP requests per phone number and per client IP.

    Raises:
        RateLimitError: when either limit is exceeded
    """
    client_ip = request.client.host if request.client else "unknown"
    for limit_type, key in (("otp_phone", phone), ("otp_ip", client_ip)):
        if not await check_rate_limit(key, limit_type):
            retry_after = RATE_LIMITS[limit_type]["window_seconds"]
            raise RateLimitError(
                COMMON_ERROR_MESSAGES["RATE_LIMIT_EXCEEDED"],
                {"limit_type": limit_type, "retry_after": retry_after},
            )
