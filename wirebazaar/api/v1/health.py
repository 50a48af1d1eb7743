"""
Health check endpoint
"""

import time

from fastapi import APIRouter, Depends

from wirebazaar.api.deps import get_product_feed
from wirebazaar.core.cache import is_redis_available
from wirebazaar.core.config import settings
from wirebazaar.core.supabase_client import supabase_health
from wirebazaar.services.realtime_products import RealtimeProductFeed

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(feed: RealtimeProductFeed = Depends(get_product_feed)):
    """
    Reports platform configuration, Redis and the live product feed.
    Redis being down is "degraded", not unhealthy: guest carts and rate
    limits fall back to memory.
    """
    platform = supabase_health()
    redis_up = is_redis_available()

    if not platform["configured"]:
        overall = "unconfigured"
    elif not redis_up:
        overall = "degraded"
    else:
        overall = "healthy"

    return {
        "status": overall,
        "timestamp": time.time(),
        "environment": settings.ENVIRONMENT,
        "services": {
            "supabase": platform,
            "redis": {"available": redis_up},
            "productFeed": {
                "subscribed": feed.is_subscribed,
                "productCount": len(feed.products),
                "error": feed.error,
                "lastLoadedAt": feed.last_loaded_at.isoformat() if feed.last_loaded_at else None,
            },
        },
    }
