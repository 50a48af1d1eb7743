"""
Cart Storage Service

A cart belongs either to a signed-in shopper (stored remotely in the `carts`
table) or to a guest session (stored in the guest cart store). Remote
failures fall back to the guest store so a shopper never loses the line
they just added.

Every successful save publishes a `cart-updated` event.
"""

import logging
import time
import uuid
from typing import List, Optional

from wirebazaar.database.storefront_db import StorefrontDatabase, storefront_db
from wirebazaar.models.forms import AddToCartRequest
from wirebazaar.models.storefront import CartItem, CartSummary
from wirebazaar.services.events import CART_UPDATED, EventBus, event_bus
from wirebazaar.services.guest_cart_store import GuestCartStore, guest_cart_store

logger = logging.getLogger(__name__)


def new_cart_line_id() -> str:
    """`cart_<epoch-ms>_<random>`"""
    return f"cart_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def merge_line(items: List[CartItem], line: CartItem) -> List[CartItem]:
    """
    Add a line to a cart: same product, colour and unit means more quantity
    on the existing line, anything else is appended.
    """
    for existing in items:
        if existing.merge_key() == line.merge_key():
            existing.quantity += line.quantity
            return items
    items.append(line)
    return items


def cart_total(items: List[CartItem]) -> float:
    return sum(item.line_total for item in items)


def cart_item_count(items: List[CartItem]) -> int:
    return sum(item.quantity for item in items)


class CartStorage:
    """
    Cart operations for one caller.

    Args:
        session_id: Guest session id (X-Session-ID)
        user_id: Platform user id of the signed-in shopper, if any
    """

    def __init__(
        self,
        session_id: str,
        user_id: Optional[str] = None,
        db: StorefrontDatabase = storefront_db,
        guest_store: GuestCartStore = guest_cart_store,
        bus: EventBus = event_bus,
    ):
        self.session_id = session_id
        self.user_id = user_id
        self.db = db
        self.guest_store = guest_store
        self.bus = bus

    def set_user_id(self, user_id: Optional[str]) -> None:
        """Bind the cart to a shopper (login) or back to the guest session (logout)."""
        self.user_id = user_id

    @property
    def owner_key(self) -> str:
        return f"user:{self.user_id}" if self.user_id else f"guest:{self.session_id}"

    async def get_cart_items(self) -> List[CartItem]:
        if self.user_id:
            try:
                return await self.db.get_user_cart(self.user_id)
            except Exception as e:
                logger.error(f"Error fetching cart from database for {self.user_id}: {e}")

        return await self.guest_store.load(self.session_id)

    async def save_cart_items(self, items: List[CartItem]) -> bool:
        """Returns True when the lines reached the remote cart."""
        if self.user_id:
            try:
                await self.db.save_user_cart(self.user_id, items)
                await self._publish(items)
                return True
            except Exception as e:
                logger.error(f"Error saving cart to database for {self.user_id}: {e}")

        await self.guest_store.save(self.session_id, items)
        await self._publish(items)
        return False

    async def _publish(self, items: List[CartItem]) -> None:
        await self.bus.publish(CART_UPDATED, {
            "owner": self.owner_key,
            "item_count": cart_item_count(items),
        })

    async def add_to_cart(self, request: AddToCartRequest) -> List[CartItem]:
        items = await self.get_cart_items()
        line = CartItem(id=new_cart_line_id(), **request.model_dump())
        items = merge_line(items, line)
        await self.save_cart_items(items)
        return items

    async def update_cart_item_quantity(self, item_id: str, quantity: int) -> List[CartItem]:
        """Quantity <= 0 removes the line; an unknown id changes nothing."""
        items = await self.get_cart_items()
        index = next((i for i, item in enumerate(items) if item.id == item_id), None)
        if index is None:
            return items

        if quantity <= 0:
            items.pop(index)
        else:
            items[index].quantity = quantity
        await self.save_cart_items(items)
        return items

    async def remove_from_cart(self, item_id: str) -> List[CartItem]:
        items = [item for item in await self.get_cart_items() if item.id != item_id]
        await self.save_cart_items(items)
        return items

    async def clear_cart(self) -> None:
        await self.save_cart_items([])

    async def get_cart_total(self) -> float:
        return cart_total(await self.get_cart_items())

    async def get_cart_item_count(self) -> int:
        return cart_item_count(await self.get_cart_items())

    async def get_summary(self) -> CartSummary:
        items = await self.get_cart_items()
        return CartSummary(
            items=items,
            total=round(cart_total(items), 2),
            item_count=cart_item_count(items),
        )

    async def merge_guest_cart(self) -> int:
        """
        Move the guest session's lines into the shopper's remote cart.

        Returns:
            Number of guest lines merged (0 when there was nothing to move or the
            remote cart could not be written)
        """
        if not self.user_id or not self.session_id:
            return 0

        guest_items = await self.guest_store.load(self.session_id)
        if not guest_items:
            return 0

        items = await self.get_cart_items()
        for line in guest_items:
            items = merge_line(items, line)
        if not await self.save_cart_items(items):
            # merged lines now live in the guest store; keep them for the next attempt
            logger.warning(f"Guest cart {self.session_id} kept, remote cart for {self.user_id} unavailable")
            return 0
        await self.guest_store.clear(self.session_id)

        logger.info(
            f"Merged {len(guest_items)} guest cart line(s) from {self.session_id} into user {self.user_id}"
        )
        return len(guest_items)
