"""
Shared FastAPI dependencies.

Services are handed out through small getter functions so tests can swap
them with `app.dependency_overrides`.
"""

import uuid
from typing import Any, Dict, Optional

from fastapi import Depends, Header, Response

from wirebazaar.core.security import get_optional_current_customer
from wirebazaar.database.storefront_db import StorefrontDatabase, storefront_db
from wirebazaar.services.cart_storage import CartStorage
from wirebazaar.services.checkout_service import CheckoutService, checkout_service
from wirebazaar.services.events import EventBus, event_bus
from wirebazaar.services.guest_cart_store import GuestCartStore, guest_cart_store
from wirebazaar.services.order_dashboard import OrderDashboard, order_dashboard
from wirebazaar.services.owner_auth import OwnerAuthService, owner_auth_service
from wirebazaar.services.realtime_products import RealtimeProductFeed, product_feed
from wirebazaar.services.user_auth import UserAuthService, user_auth_service

SESSION_HEADER = "X-Session-ID"


def get_db() -> StorefrontDatabase:
    return storefront_db


def get_guest_cart_store() -> GuestCartStore:
    return guest_cart_store


def get_event_bus() -> EventBus:
    return event_bus


def get_user_auth_service() -> UserAuthService:
    return user_auth_service


def get_owner_auth_service() -> OwnerAuthService:
    return owner_auth_service


def get_checkout_service() -> CheckoutService:
    return checkout_service


def get_order_dashboard() -> OrderDashboard:
    return order_dashboard


def get_product_feed() -> RealtimeProductFeed:
    return product_feed


def get_session_id(
    response: Response,
    session_token: Optional[str] = Header(None, alias=SESSION_HEADER),
) -> str:
    """Get or create the guest session id; always echoed back in the response."""
    session_id = session_token or f"guest-{uuid.uuid4()}"
    response.headers[SESSION_HEADER] = session_id
    return session_id


def get_cart_storage(
    session_id: str = Depends(get_session_id),
    customer: Optional[Dict[str, Any]] = Depends(get_optional_current_customer),
    db: StorefrontDatabase = Depends(get_db),
    guest_store: GuestCartStore = Depends(get_guest_cart_store),
    bus: EventBus = Depends(get_event_bus),
) -> CartStorage:
    """The caller's cart: the account cart when signed in, else the guest cart."""
    return CartStorage(
        session_id=session_id,
        user_id=customer["user_id"] if customer else None,
        db=db,
        guest_store=guest_store,
        bus=bus,
    )
