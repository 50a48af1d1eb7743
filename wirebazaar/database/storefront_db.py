"""
Storefront Database for WireBazaar
All table access goes through Supabase PostgREST.

Failure policy:
- platform not configured: every operation returns its empty value
  ([], None, False) or does nothing
- read failures are logged and return the empty value
- write failures are logged and re-raised (delete_product reports False)
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client

from wirebazaar.core.supabase_client import (
    CARTS_TABLE,
    INQUIRIES_TABLE,
    NO_ROWS_ERROR_CODE,
    ORDERS_TABLE,
    OWNER_CREDENTIALS_TABLE,
    PRODUCTS_TABLE,
    USERS_TABLE,
    get_supabase,
)
from wirebazaar.database.row_mappers import (
    cart_items_from_json,
    cart_items_to_json,
    inquiry_from_row,
    inquiry_to_row,
    order_from_row,
    order_to_row,
    payment_status_to_row,
    product_from_row,
    product_to_row,
)
from wirebazaar.models.storefront import (
    CartItem,
    Inquiry,
    Order,
    Product,
    UserProfile,
)

logger = logging.getLogger(__name__)


def _first_row(response) -> Optional[Dict[str, Any]]:
    """First row of a PostgREST response (list or single-object payload)."""
    if response is None:
        return None
    data = response.data
    if isinstance(data, list):
        return data[0] if data else None
    return data or None


class StorefrontDatabase:
    """
    Data-access layer over the hosted tables.

    The client provider is called on every operation so configuration
    changes (and test doubles) take effect without rebuilding the object.
    """

    def __init__(self, client_provider: Callable[[], Optional[Client]] = get_supabase):
        self._client_provider = client_provider

    @property
    def client(self) -> Optional[Client]:
        return self._client_provider()

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    async def _execute(self, query):
        # supabase-py's sync client blocks; keep it off the event loop
        return await asyncio.to_thread(query.execute)

    async def _maybe_single(self, query) -> Optional[Dict[str, Any]]:
        """Run a single-row query; "no rows" is None, not an error."""
        try:
            response = await self._execute(query.maybe_single())
        except APIError as e:
            if e.code == NO_ROWS_ERROR_CODE:
                return None
            raise
        return _first_row(response)

    # =========================================================================
    # Products
    # =========================================================================

    async def get_products(self) -> List[Product]:
        """Active products, newest first"""
        client = self.client
        if client is None:
            return []

        try:
            response = await self._execute(
                client.table(PRODUCTS_TABLE)
                .select("*")
                .eq("is_active", True)
                .order("created_at", desc=True)
            )
            return [product_from_row(row) for row in response.data or []]
        except Exception as e:
            logger.error(f"Error fetching products: {e}")
            return []

    async def get_all_products(self) -> List[Product]:
        """Every product including inactive ones, newest first"""
        client = self.client
        if client is None:
            return []

        try:
            response = await self._execute(
                client.table(PRODUCTS_TABLE)
                .select("*")
                .order("created_at", desc=True)
            )
            return [product_from_row(row) for row in response.data or []]
        except Exception as e:
            logger.error(f"Error fetching all products: {e}")
            return []

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        client = self.client
        if client is None or not product_id:
            return None

        try:
            row = await self._maybe_single(
                client.table(PRODUCTS_TABLE).select("*").eq("id", product_id)
            )
        except Exception as e:
            logger.error(f"Error fetching product {product_id}: {e}")
            return None
        return product_from_row(row) if row else None

    async def save_product(self, product: Product) -> Optional[Product]:
        """Update when the product has an id, insert otherwise. Returns the stored product."""
        client = self.client
        if client is None:
            return None

        row = product_to_row(product)
        try:
            if product.id:
                response = await self._execute(
                    client.table(PRODUCTS_TABLE).update(row).eq("id", product.id)
                )
            else:
                response = await self._execute(client.table(PRODUCTS_TABLE).insert(row))
        except Exception as e:
            logger.error(f"Error saving product: {e}")
            raise

        saved = _first_row(response)
        return product_from_row(saved) if saved else None

    async def delete_product(self, product_id: str) -> bool:
        client = self.client
        if client is None:
            return False

        try:
            await self._execute(client.table(PRODUCTS_TABLE).delete().eq("id", product_id))
            return True
        except Exception as e:
            logger.error(f"Error deleting product {product_id}: {e}")
            return False

    # =========================================================================
    # Carts
    # =========================================================================

    async def get_user_cart(self, user_id: str) -> List[CartItem]:
        client = self.client
        if client is None or not user_id:
            return []

        try:
            row = await self._maybe_single(
                client.table(CARTS_TABLE).select("items").eq("user_id", user_id)
            )
        except Exception as e:
            logger.error(f"Error fetching cart for user {user_id}: {e}")
            return []
        return cart_items_from_json(row.get("items")) if row else []

    async def save_user_cart(self, user_id: str, items: List[CartItem]) -> None:
        client = self.client
        if client is None or not user_id:
            return

        try:
            await self._execute(
                client.table(CARTS_TABLE).upsert(
                    {"user_id": user_id, "items": cart_items_to_json(items)},
                    on_conflict="user_id",
                )
            )
        except Exception as e:
            logger.error(f"Error saving cart for user {user_id}: {e}")
            raise

    # =========================================================================
    # Orders
    # =========================================================================

    async def get_user_orders(self, user_id: str) -> List[Order]:
        """A shopper's orders, newest first"""
        client = self.client
        if client is None or not user_id:
            return []

        try:
            response = await self._execute(
                client.table(ORDERS_TABLE)
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
            )
            return [order_from_row(row) for row in response.data or []]
        except Exception as e:
            logger.error(f"Error fetching orders for user {user_id}: {e}")
            return []

    async def get_order_by_id(self, order_id: str) -> Optional[Order]:
        client = self.client
        if client is None or not order_id:
            return None

        try:
            row = await self._maybe_single(
                client.table(ORDERS_TABLE).select("*").eq("id", order_id)
            )
        except Exception as e:
            logger.error(f"Error fetching order {order_id}: {e}")
            return None
        return order_from_row(row) if row else None

    async def save_order(self, order: Order) -> Optional[Order]:
        client = self.client
        if client is None:
            return None

        try:
            response = await self._execute(
                client.table(ORDERS_TABLE).insert(order_to_row(order))
            )
        except Exception as e:
            logger.error(f"Error saving order {order.order_number}: {e}")
            raise

        saved = _first_row(response)
        if saved:
            logger.info(f"Order saved: {saved.get('order_number')} ({saved.get('id')})")
        return order_from_row(saved) if saved else None

    async def get_all_orders(self) -> List[Order]:
        """Every order, newest first (owner dashboard)"""
        client = self.client
        if client is None:
            return []

        try:
            response = await self._execute(
                client.table(ORDERS_TABLE)
                .select("*")
                .order("created_at", desc=True)
            )
            return [order_from_row(row) for row in response.data or []]
        except Exception as e:
            logger.error(f"Error fetching all orders: {e}")
            return []

    async def update_order_status(
        self,
        order_id: str,
        status: str,
        payment_status: Optional[str] = None,
    ) -> None:
        """Write the order status; the payment status only when given."""
        client = self.client
        if client is None:
            return

        update_data = {"status": getattr(status, "value", status)}
        if payment_status:
            update_data["payment_status"] = payment_status_to_row(payment_status)

        try:
            await self._execute(
                client.table(ORDERS_TABLE).update(update_data).eq("id", order_id)
            )
            logger.info(f"Order {order_id} updated: {update_data}")
        except Exception as e:
            logger.error(f"Error updating order status for {order_id}: {e}")
            raise

    async def update_order_payment(self, order_id: str, transaction_id: str) -> None:
        """Record the UPI reference a shopper supplied when confirming payment."""
        client = self.client
        if client is None or not transaction_id:
            return

        try:
            await self._execute(
                client.table(ORDERS_TABLE)
                .update({"transaction_id": transaction_id})
                .eq("id", order_id)
            )
        except Exception as e:
            logger.error(f"Error saving transaction id for order {order_id}: {e}")
            raise

    # =========================================================================
    # Inquiries
    # =========================================================================

    async def save_inquiry(self, inquiry: Inquiry) -> Optional[Inquiry]:
        client = self.client
        if client is None:
            return None

        try:
            response = await self._execute(
                client.table(INQUIRIES_TABLE).insert(inquiry_to_row(inquiry))
            )
        except Exception as e:
            logger.error(f"Error saving inquiry: {e}")
            raise

        saved = _first_row(response)
        return inquiry_from_row(saved) if saved else None

    async def get_all_inquiries(self) -> List[Inquiry]:
        client = self.client
        if client is None:
            return []

        try:
            response = await self._execute(
                client.table(INQUIRIES_TABLE)
                .select("*")
                .order("created_at", desc=True)
            )
            return [inquiry_from_row(row) for row in response.data or []]
        except Exception as e:
            logger.error(f"Error fetching inquiries: {e}")
            return []

    async def update_inquiry_status(self, inquiry_id: str, status: str) -> None:
        client = self.client
        if client is None:
            return

        try:
            await self._execute(
                client.table(INQUIRIES_TABLE)
                .update({"status": getattr(status, "value", status)})
                .eq("id", inquiry_id)
            )
        except Exception as e:
            logger.error(f"Error updating inquiry status for {inquiry_id}: {e}")
            raise

    # =========================================================================
    # Users & owners
    # =========================================================================

    async def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        client = self.client
        if client is None or not user_id:
            return None

        try:
            row = await self._maybe_single(
                client.table(USERS_TABLE).select("*").eq("id", user_id)
            )
        except Exception as e:
            logger.error(f"Error fetching user profile {user_id}: {e}")
            return None
        return UserProfile.model_validate(row) if row else None

    async def save_user_profile(self, user_id: str, profile: Dict[str, Any]) -> Optional[UserProfile]:
        """Upsert the profile row; email and full name default to empty strings."""
        client = self.client
        if client is None or not user_id:
            return None

        row = {
            "id": user_id,
            "email": profile.get("email") or "",
            "full_name": profile.get("full_name") or "",
            "phone": profile.get("phone"),
        }
        try:
            response = await self._execute(
                client.table(USERS_TABLE).upsert(row, on_conflict="id")
            )
        except Exception as e:
            logger.error(f"Error saving user profile {user_id}: {e}")
            raise

        saved = _first_row(response)
        return UserProfile.model_validate(saved) if saved else None

    async def create_user_row(self, row: Dict[str, Any]) -> None:
        """
        Insert a bare `users` row after a platform sign-up or first OTP login.

        Failures are logged only: the platform account already exists and
        the profile can be completed later.
        """
        client = self.client
        if client is None or not row.get("id"):
            return

        try:
            await self._execute(client.table(USERS_TABLE).insert(row))
        except Exception as e:
            logger.warning(f"Could not create profile row for user {row.get('id')}: {e}")

    async def check_is_owner(self, user_id: str) -> bool:
        client = self.client
        if client is None or not user_id:
            return False

        try:
            row = await self._maybe_single(
                client.table(OWNER_CREDENTIALS_TABLE).select("id").eq("user_id", user_id)
            )
        except Exception as e:
            logger.error(f"Error checking owner status for {user_id}: {e}")
            return False
        return row is not None


# Module-level instance used by the services and routers
storefront_db = StorefrontDatabase()
