"""
WireBazaar Test Configuration and Fixtures

This module provides:
- Test environment variables (set before the settings object is built)
- A chainable fake of the Supabase query builder
- Database, cart and service fixtures wired to the fake
- API client with dependency overrides
- Token fixtures and sample rows
"""

import os
from types import SimpleNamespace
from typing import Any, Dict, Generator, List
from unittest.mock import MagicMock

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test_secret_key_for_testing_only_32chars!"
os.environ.pop("SUPABASE_URL", None)
os.environ.pop("SUPABASE_ANON_KEY", None)
os.environ.pop("SUPABASE_SERVICE_ROLE_KEY", None)

from fastapi.testclient import TestClient

from wirebazaar.database.storefront_db import StorefrontDatabase
from wirebazaar.middleware.rate_limit import reset_memory_rate_limits
from wirebazaar.services.cart_storage import CartStorage
from wirebazaar.services.events import EventBus
from wirebazaar.services.guest_cart_store import GuestCartStore


# =============================================================================
# Supabase Fakes
# =============================================================================

class FakeQuery:
    """
    Stand-in for a PostgREST query builder. Every builder call is recorded
    and returns the query itself; `execute()` answers from the owning
    FakeSupabase.
    """

    def __init__(self, client: "FakeSupabase", table: str):
        self.client = client
        self.table = table
        self.calls: List[tuple] = []

    def _record(name):
        def method(self, *args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    select = _record("select")
    eq = _record("eq")
    order = _record("order")
    insert = _record("insert")
    update = _record("update")
    upsert = _record("upsert")
    delete = _record("delete")
    maybe_single = _record("maybe_single")

    def called(self, name: str) -> bool:
        return any(call[0] == name for call in self.calls)

    def args_of(self, name: str) -> tuple:
        for call in self.calls:
            if call[0] == name:
                return call[1]
        raise AssertionError(f"{name}() was not called on {self.table}")

    def kwargs_of(self, name: str) -> Dict[str, Any]:
        for call in self.calls:
            if call[0] == name:
                return call[2]
        raise AssertionError(f"{name}() was not called on {self.table}")

    @property
    def action(self) -> str:
        for name in ("insert", "update", "upsert", "delete"):
            if self.called(name):
                return name
        return "select"

    def execute(self):
        self.client.executed.append(self)

        error = self.client.errors.get((self.table, self.action)) or self.client.errors.get(self.table)
        if error is not None:
            raise error

        data = self.client.responses.get((self.table, self.action))
        if data is None and self.action == "select":
            data = self.client.responses.get(self.table)
        if callable(data):
            data = data(self)
        if data is None and self.action in ("insert", "upsert", "update"):
            # echo the written row back, as `return=representation` does
            payload = self.args_of(self.action)[0]
            data = [payload] if isinstance(payload, dict) else payload
        if data is None:
            data = []

        if self.called("maybe_single"):
            if isinstance(data, list):
                data = data[0] if data else None
            if data is None:
                return None
        return SimpleNamespace(data=data)


class FakeSupabase:
    """
    Minimal synchronous Supabase client.

    responses: table (or (table, action)) -> rows, or a callable(query)
    errors: table (or (table, action)) -> exception raised by execute()
    """

    def __init__(self):
        self.responses: Dict[Any, Any] = {}
        self.errors: Dict[Any, Exception] = {}
        self.executed: List[FakeQuery] = []
        self.auth = MagicMock()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def queries(self, table: str, action: str = None) -> List[FakeQuery]:
        return [
            q for q in self.executed
            if q.table == table and (action is None or q.action == action)
        ]


def platform_user(user_id: str = "user-1", email: str = None, phone: str = None):
    return SimpleNamespace(id=user_id, email=email, phone=phone)


def platform_session(access_token: str = "platform-access", refresh_token: str = "platform-refresh"):
    return SimpleNamespace(access_token=access_token, refresh_token=refresh_token, expires_in=3600)


@pytest.fixture
def make_user():
    return platform_user


@pytest.fixture
def make_session():
    return platform_session


# =============================================================================
# Pytest Configuration
# =============================================================================

@pytest.fixture(autouse=True)
def _reset_rate_limits():
    reset_memory_rate_limits()
    yield
    reset_memory_rate_limits()


# =============================================================================
# Database & Service Fixtures
# =============================================================================

@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def db(fake_supabase) -> StorefrontDatabase:
    return StorefrontDatabase(client_provider=lambda: fake_supabase)


@pytest.fixture
def unconfigured_db() -> StorefrontDatabase:
    return StorefrontDatabase(client_provider=lambda: None)


@pytest.fixture
def guest_store() -> GuestCartStore:
    """Memory-backed guest cart store"""
    return GuestCartStore(redis_provider=lambda: None)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def cart(db, guest_store, bus) -> CartStorage:
    return CartStorage("guest-test", db=db, guest_store=guest_store, bus=bus)


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app(db, guest_store, bus):
    """Application with data access pointed at the fake platform."""
    from wirebazaar.api import deps
    from wirebazaar.main import app as fastapi_app
    from wirebazaar.services.checkout_service import CheckoutService
    from wirebazaar.services.order_dashboard import OrderDashboard

    fastapi_app.dependency_overrides[deps.get_db] = lambda: db
    fastapi_app.dependency_overrides[deps.get_guest_cart_store] = lambda: guest_store
    fastapi_app.dependency_overrides[deps.get_event_bus] = lambda: bus
    fastapi_app.dependency_overrides[deps.get_checkout_service] = lambda: CheckoutService(db)
    fastapi_app.dependency_overrides[deps.get_order_dashboard] = lambda: OrderDashboard(db)
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> Generator:
    """Synchronous test client (lifespan not run: no Redis, no realtime)."""
    yield TestClient(app)


# =============================================================================
# Authentication Fixtures
# =============================================================================

@pytest.fixture
def customer_token():
    from wirebazaar.core.security import create_customer_token
    return create_customer_token("user-1", email="shopper@example.com", phone="+919876543210")


@pytest.fixture
def owner_token():
    from wirebazaar.core.security import create_owner_token
    return create_owner_token("owner-1", phone="+919800000001")


@pytest.fixture
def customer_headers(customer_token):
    return {"Authorization": f"Bearer {customer_token}"}


@pytest.fixture
def owner_headers(owner_token):
    return {"Authorization": f"Bearer {owner_token}"}


# =============================================================================
# Test Data Factories
# =============================================================================

@pytest.fixture
def product_row() -> Dict[str, Any]:
    return {
        "id": "prod-1",
        "name": "FR PVC Insulated Wire 1.5 sq mm",
        "brand": "Polycab",
        "category": "House Wires",
        "colors": ["Red", "Black"],
        "description": "Flame retardant copper wire",
        "specifications": {"conductor": "copper", "size": "1.5 sq mm"},
        "base_price": 1450.0,
        "unit_type": "coils",
        "stock_quantity": 40,
        "image_url": "https://cdn.example.com/wire.png",
        "brochure_url": None,
        "is_active": True,
        "created_at": "2024-05-01T10:00:00",
    }


@pytest.fixture
def cart_line() -> Dict[str, Any]:
    """AddToCartRequest payload (camelCase, as the API receives it)"""
    return {
        "productId": "prod-1",
        "productName": "FR PVC Insulated Wire 1.5 sq mm",
        "brand": "Polycab",
        "color": "Red",
        "quantity": 2,
        "unitType": "coils",
        "unitPrice": 1450.0,
        "imageUrl": "",
    }


@pytest.fixture
def order_row() -> Dict[str, Any]:
    return {
        "id": "order-1",
        "user_id": "user-1",
        "order_number": "WB-20240501-ABC123",
        "customer_name": "Ravi Kumar",
        "customer_email": "ravi@example.com",
        "customer_phone": "9876543210",
        "customer_address": "12 MG Road, Bengaluru",
        "customer_pincode": "560001",
        "items": [{
            "id": "cart_1_abcd",
            "productId": "prod-1",
            "productName": "FR PVC Insulated Wire 1.5 sq mm",
            "brand": "Polycab",
            "color": "Red",
            "quantity": 2,
            "unitType": "coils",
            "unitPrice": 1450.0,
            "imageUrl": "",
        }],
        "subtotal": 2900.0,
        "shipping_cost": 150.0,
        "total_amount": 3050.0,
        "status": "pending",
        "payment_status": "pending",
        "payment_method": "qr_code",
        "qr_code_data": "upi://pay?pa=wirebazaar%40upi&am=3050.00",
        "transaction_id": None,
        "created_at": "2024-05-01T10:00:00",
        "estimated_delivery": "2024-05-06",
    }


@pytest.fixture
def inquiry_row() -> Dict[str, Any]:
    return {
        "id": "inq-1",
        "user_type": "contractor",
        "full_name": "Anita Sharma",
        "phone": "9876543210",
        "email": "anita@example.com",
        "address": "Plot 4, Industrial Area, Pune",
        "pincode": "411001",
        "product_name": "Armoured Cable 4 core",
        "brand": "Havells",
        "color": "Black",
        "quantity": 500,
        "unit": "metres",
        "specifications": "16 sq mm",
        "verification_code": None,
        "is_verified": True,
        "status": "pending",
        "created_at": "2024-05-02T09:30:00",
        "updated_at": None,
    }
