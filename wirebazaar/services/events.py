"""
In-process event bus.

Carries storefront notifications (currently `cart-updated`) to whatever is
listening in this process: websocket pushes, tests, logging hooks. Handlers
may be plain functions or coroutines. A failing handler is logged and does
not stop the others.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

CART_UPDATED = "cart-updated"

EventHandler = Callable[[Dict[str, Any]], Any]


class EventBus:
    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)

    def subscribe(self, event: str, handler: EventHandler) -> Callable[[], None]:
        """Register a handler; returns a callable that unsubscribes it."""
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            self.unsubscribe(event, handler)

        return unsubscribe

    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def handler_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    async def publish(self, event: str, payload: Dict[str, Any]) -> int:
        """Deliver an event to every handler. Returns how many handlers ran cleanly."""
        delivered = 0
        for handler in list(self._handlers.get(event, [])):
            try:
                result = handler(payload)
                if asyncio.iscoroutine(result):
                    await result
                delivered += 1
            except Exception as e:
                logger.error(f"Event handler for '{event}' failed: {e}", exc_info=True)
        logger.debug(f"Published {event} to {delivered} handler(s)")
        return delivered


event_bus = EventBus()
