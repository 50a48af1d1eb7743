"""
Checkout Service

Turns the current cart into an order:
1. price the cart (subtotal, shipping, total)
2. build the order with a UPI payment link for the QR code
3. store it and empty the cart
"""

import logging
import secrets
import string
from datetime import datetime, timedelta
from typing import List, Optional

from wirebazaar.core.config import settings
from wirebazaar.core.exceptions import (
    COMMON_ERROR_MESSAGES,
    ConfigurationError,
    DatabaseError,
    handle_validation_error,
)
from wirebazaar.database.storefront_db import StorefrontDatabase, storefront_db
from wirebazaar.models.forms import CheckoutAddress
from wirebazaar.models.storefront import (
    CartItem,
    CheckoutQuote,
    CustomerInfo,
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from wirebazaar.services.cart_storage import CartStorage, cart_item_count, cart_total
from wirebazaar.services.payment_qr import build_upi_uri

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "WB"
_ORDER_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number(now: Optional[datetime] = None) -> str:
    """WB-<YYYYMMDD>-<6 uppercase alphanumerics>"""
    now = now or datetime.utcnow()
    suffix = "".join(secrets.choice(_ORDER_SUFFIX_ALPHABET) for _ in range(6))
    return f"{ORDER_NUMBER_PREFIX}-{now.strftime('%Y%m%d')}-{suffix}"


def shipping_cost_for(subtotal: float) -> float:
    if subtotal <= 0:
        return 0.0
    if subtotal >= settings.FREE_SHIPPING_THRESHOLD:
        return 0.0
    return settings.FLAT_SHIPPING_COST


def quote_items(items: List[CartItem]) -> CheckoutQuote:
    subtotal = round(cart_total(items), 2)
    shipping = shipping_cost_for(subtotal)
    return CheckoutQuote(
        subtotal=subtotal,
        shipping_cost=shipping,
        total_amount=round(subtotal + shipping, 2),
        item_count=cart_item_count(items),
        free_shipping_threshold=settings.FREE_SHIPPING_THRESHOLD,
    )


class CheckoutService:
    def __init__(self, db: StorefrontDatabase = storefront_db):
        self.db = db

    async def quote(self, cart: CartStorage) -> CheckoutQuote:
        return quote_items(await cart.get_cart_items())

    def build_order(
        self,
        items: List[CartItem],
        address: CheckoutAddress,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Order:
        now = now or datetime.utcnow()
        quote = quote_items(items)
        order_number = generate_order_number(now)
        estimated = now + timedelta(days=settings.ESTIMATED_DELIVERY_DAYS)

        return Order(
            user_id=user_id,
            order_number=order_number,
            customer_info=CustomerInfo(**address.model_dump()),
            items=items,
            subtotal=quote.subtotal,
            shipping_cost=quote.shipping_cost,
            total_amount=quote.total_amount,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            payment_method=PaymentMethod.QR_CODE,
            qr_code_data=build_upi_uri(quote.total_amount, order_number),
            created_at=now.isoformat(),
            estimated_delivery=estimated.date().isoformat(),
        )

    async def place_order(
        self,
        cart: CartStorage,
        address: CheckoutAddress,
        user_id: Optional[str] = None,
    ) -> Order:
        """
        Create the order for the current cart and clear the cart.

        Raises:
            ValidationError: the cart is empty
            ConfigurationError: orders cannot be stored
            DatabaseError: the insert returned no row
        """
        if not self.db.is_configured:
            raise ConfigurationError(COMMON_ERROR_MESSAGES["BACKEND_NOT_CONFIGURED"])

        items = await cart.get_cart_items()
        if not items:
            raise handle_validation_error("items", "Your cart is empty")

        order = self.build_order(items, address, user_id=user_id)
        saved = await self.db.save_order(order)
        if saved is None:
            raise DatabaseError("Order could not be saved", {"order_number": order.order_number})

        await cart.clear_cart()
        logger.info(
            f"Order placed: total={saved.total_amount} lines={len(items)}",
            extra={"order_number": saved.order_number, "user_id": user_id},
        )
        return saved


checkout_service = CheckoutService()
