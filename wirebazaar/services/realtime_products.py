"""
Realtime Product Feed

Keeps an in-process copy of the catalog in sync with the `products` table:
- subscribes to Supabase Realtime (`postgres_changes` on public.products)
- reloads the full catalog, newest first, on every change
- notifies listeners (websocket clients) after each reload

Load failures are recorded in `error` instead of raised; the last good
catalog stays in place.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from supabase import AsyncClient

from wirebazaar.core.supabase_client import PRODUCTS_TABLE, new_async_client
from wirebazaar.database.row_mappers import lenient_product_from_row
from wirebazaar.models.storefront import Product

logger = logging.getLogger(__name__)

CHANNEL_NAME = "products-changes"
LOAD_FAILED_MESSAGE = "Failed to load products"

ProductListener = Callable[[List[Product]], Awaitable[None]]


class RealtimeProductFeed:
    def __init__(self, client_provider: Callable[[], Awaitable[Optional[AsyncClient]]] = new_async_client):
        self._client_provider = client_provider
        self._client: Optional[AsyncClient] = None
        self._channel = None
        self._listeners: Set[ProductListener] = set()
        self._pending: Set[asyncio.Task] = set()

        self.products: List[Product] = []
        self.loading: bool = False
        self.error: Optional[str] = None
        self.last_loaded_at: Optional[datetime] = None

    @property
    def is_subscribed(self) -> bool:
        return self._channel is not None

    async def start(self) -> None:
        """Load the catalog and subscribe to changes (no-op without configuration)."""
        self._client = await self._client_provider()
        if self._client is None:
            logger.info("Realtime product feed disabled: Supabase is not configured")
            self.products = []
            return

        await self.refetch()

        try:
            channel = self._client.channel(CHANNEL_NAME)
            channel.on_postgres_changes(
                "*",
                schema="public",
                table=PRODUCTS_TABLE,
                callback=self._on_change,
            )
            await channel.subscribe()
            self._channel = channel
            logger.info(f"Subscribed to realtime channel {CHANNEL_NAME}")
        except Exception as e:
            logger.error(f"Realtime subscription failed: {e}")
            self._channel = None

    async def stop(self) -> None:
        if self._channel is not None:
            try:
                await self._channel.unsubscribe()
            except Exception as e:
                logger.warning(f"Error unsubscribing from {CHANNEL_NAME}: {e}")
            self._channel = None

        for task in list(self._pending):
            task.cancel()
        self._pending.clear()

    def _on_change(self, payload: Dict[str, Any]) -> None:
        """Realtime callback; schedules a full reload."""
        logger.debug(f"Product change received: {payload.get('eventType') if isinstance(payload, dict) else payload}")
        task = asyncio.get_running_loop().create_task(self.refetch())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def refetch(self) -> List[Product]:
        if self._client is None:
            return self.products

        self.loading = True
        try:
            response = await (
                self._client.table(PRODUCTS_TABLE)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
            self.products = [lenient_product_from_row(row) for row in response.data or []]
            self.error = None
            self.last_loaded_at = datetime.utcnow()
        except Exception as e:
            logger.error(f"Error loading products: {e}")
            self.error = str(e) or LOAD_FAILED_MESSAGE
        finally:
            self.loading = False

        await self._notify()
        return self.products

    def add_listener(self, listener: ProductListener) -> Callable[[], None]:
        self._listeners.add(listener)
        return lambda: self._listeners.discard(listener)

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                await listener(self.products)
            except Exception as e:
                logger.warning(f"Dropping product feed listener after error: {e}")
                self._listeners.discard(listener)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "products": [p.model_dump(mode="json", by_alias=True) for p in self.products],
            "loading": self.loading,
            "error": self.error,
        }


product_feed = RealtimeProductFeed()
