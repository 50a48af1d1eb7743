"""
Guest Cart Store

Keeps carts of shoppers who are not signed in, keyed by the guest session id
(`X-Session-ID`). Redis is used when it is reachable (key
`wire_cable_cart:<session>`, 7-day TTL refreshed on every write); otherwise an
in-process dictionary with the same expiry semantics takes over.
"""

import json
import logging
import time
from typing import Dict, List, Optional, Tuple

from wirebazaar.core.cache import get_redis_client
from wirebazaar.core.config import settings
from wirebazaar.database.row_mappers import cart_items_from_json, cart_items_to_json
from wirebazaar.models.storefront import CartItem

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "wire_cable_cart"


class GuestCartStore:
    def __init__(self, ttl_seconds: Optional[int] = None, redis_provider=get_redis_client):
        self.ttl_seconds = ttl_seconds or settings.GUEST_CART_TTL_DAYS * 24 * 60 * 60
        self._redis_provider = redis_provider
        # session -> (expires_at, items as JSON-ready dicts)
        self._memory: Dict[str, Tuple[float, List[dict]]] = {}

    @staticmethod
    def storage_key(session_id: str) -> str:
        return f"{CART_STORAGE_KEY}:{session_id}"

    async def load(self, session_id: str) -> List[CartItem]:
        if not session_id:
            return []

        redis_client = self._redis_provider()
        if redis_client is not None:
            try:
                stored = await redis_client.get(self.storage_key(session_id))
                return cart_items_from_json(json.loads(stored)) if stored else []
            except Exception as e:
                logger.warning(f"Redis read failed for guest cart {session_id}, using memory: {e}")

        entry = self._memory.get(session_id)
        if entry is None:
            return []
        expires_at, items = entry
        if expires_at < time.time():
            del self._memory[session_id]
            return []
        return cart_items_from_json(items)

    async def save(self, session_id: str, items: List[CartItem]) -> None:
        if not session_id:
            return

        payload = cart_items_to_json(items)
        redis_client = self._redis_provider()
        if redis_client is not None:
            try:
                await redis_client.setex(
                    self.storage_key(session_id),
                    self.ttl_seconds,
                    json.dumps(payload),
                )
                return
            except Exception as e:
                logger.warning(f"Redis write failed for guest cart {session_id}, using memory: {e}")

        now = time.time()
        self._purge_expired(now)
        self._memory[session_id] = (now + self.ttl_seconds, payload)

    def _purge_expired(self, now: float) -> None:
        for expired in [sid for sid, (expires_at, _) in self._memory.items() if expires_at < now]:
            del self._memory[expired]

    async def clear(self, session_id: str) -> None:
        if not session_id:
            return

        self._memory.pop(session_id, None)
        redis_client = self._redis_provider()
        if redis_client is not None:
            try:
                await redis_client.delete(self.storage_key(session_id))
            except Exception as e:
                logger.warning(f"Redis delete failed for guest cart {session_id}: {e}")


guest_cart_store = GuestCartStore()
