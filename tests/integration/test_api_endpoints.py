"""
Integration Tests for the WireBazaar API

Runs the FastAPI app against the fake Supabase client from conftest.
Tests for:
- Catalog and guest/account carts
- Checkout, order visibility, UPI QR and payment confirmation
- Bulk inquiry wizard
- Shopper and owner auth endpoints
- Owner dashboard access control and exports
- Health
"""

import pytest
from unittest.mock import MagicMock

from wirebazaar.api import deps
from wirebazaar.services.owner_auth import OwnerAuthService
from wirebazaar.services.user_auth import UserAuthService


SESSION = {"X-Session-ID": "guest-it"}

CHECKOUT_BODY = {
    "customerInfo": {
        "name": "Ravi Kumar",
        "email": "ravi@example.com",
        "phone": "98765 43210",
        "address": "12 MG Road, Bengaluru",
        "pincode": "560001",
    }
}

INQUIRY_BODY = {
    "userType": "contractor",
    "fullName": "Anita Sharma",
    "phone": "9876543210",
    "email": "anita@example.com",
    "address": "Plot 4, Industrial Area, Pune",
    "pincode": "411001",
    "productName": "Armoured Cable 4 core",
    "brand": "Havells",
    "color": "Black",
    "quantity": 500,
    "unit": "metres",
    "specifications": "16 sq mm",
}

PRODUCT_BODY = {
    "name": "Coaxial Cable RG6",
    "brand": "Finolex",
    "category": "Coaxial",
    "color": ["White"],
    "basePrice": 2100,
    "unitType": "coils",
    "stockQuantity": 12,
}


@pytest.fixture
def auth_client(make_user, make_session):
    platform = MagicMock()
    platform.auth.verify_otp.return_value = MagicMock(
        user=make_user("user-1", phone="919876543210"), session=make_session()
    )
    return platform


@pytest.fixture
def with_auth(app, db, auth_client):
    app.dependency_overrides[deps.get_user_auth_service] = (
        lambda: UserAuthService(db=db, client_factory=lambda: auth_client)
    )
    app.dependency_overrides[deps.get_owner_auth_service] = (
        lambda: OwnerAuthService(db=db, client_factory=lambda: auth_client)
    )
    return auth_client


# =============================================================================
# Catalog
# =============================================================================

class TestProducts:

    def test_list_products(self, client, fake_supabase, product_row):
        fake_supabase.responses["products"] = [product_row]

        response = client.get("/api/v1/products")

        assert response.status_code == 200
        data = response.json()
        assert data[0]["id"] == "prod-1"
        assert data[0]["basePrice"] == 1450.0
        assert data[0]["color"] == ["Red", "Black"]

    def test_get_product(self, client, fake_supabase, product_row):
        fake_supabase.responses["products"] = [product_row]
        response = client.get("/api/v1/products/prod-1")
        assert response.status_code == 200
        assert response.json()["unitType"] == "coils"

    def test_missing_product(self, client):
        response = client.get("/api/v1/products/nope")
        assert response.status_code == 404

    def test_live_feed_pushes_catalog(self, app, client, product_row):
        from wirebazaar.database.row_mappers import product_from_row
        from wirebazaar.services.realtime_products import RealtimeProductFeed

        feed = RealtimeProductFeed()
        feed.products = [product_from_row(product_row)]
        app.dependency_overrides[deps.get_product_feed] = lambda: feed

        with client.websocket_connect("/api/v1/products/live") as websocket:
            message = websocket.receive_json()

        assert message["type"] == "products"
        assert message["products"][0]["name"] == product_row["name"]
        assert message["error"] is None


# =============================================================================
# Cart
# =============================================================================

class TestCart:

    def test_new_session_id_is_issued(self, client):
        response = client.get("/api/v1/cart")

        assert response.status_code == 200
        assert response.headers["X-Session-ID"].startswith("guest-")
        assert response.json() == {"items": [], "total": 0.0, "itemCount": 0}

    def test_guest_cart_flow(self, client, cart_line):
        added = client.post("/api/v1/cart/items", json=cart_line, headers=SESSION)
        assert added.status_code == 201
        assert added.headers["X-Session-ID"] == "guest-it"
        line_id = added.json()["items"][0]["id"]

        client.post("/api/v1/cart/items", json={**cart_line, "quantity": 1}, headers=SESSION)
        summary = client.get("/api/v1/cart/summary", headers=SESSION).json()
        assert summary == {"total": 4350.0, "itemCount": 3}

        updated = client.put(f"/api/v1/cart/items/{line_id}", json={"quantity": 5}, headers=SESSION)
        assert updated.json()["itemCount"] == 5

        removed = client.delete(f"/api/v1/cart/items/{line_id}", headers=SESSION)
        assert removed.json()["items"] == []

    def test_carts_are_per_session(self, client, cart_line):
        client.post("/api/v1/cart/items", json=cart_line, headers=SESSION)
        other = client.get("/api/v1/cart", headers={"X-Session-ID": "guest-other"})
        assert other.json()["itemCount"] == 0

    def test_clear_cart(self, client, cart_line):
        client.post("/api/v1/cart/items", json=cart_line, headers=SESSION)
        assert client.delete("/api/v1/cart", headers=SESSION).json()["itemCount"] == 0
        assert client.get("/api/v1/cart", headers=SESSION).json()["itemCount"] == 0

    def test_invalid_line(self, client, cart_line):
        response = client.post("/api/v1/cart/items", json={**cart_line, "quantity": 0}, headers=SESSION)
        assert response.status_code == 422

    def test_signed_in_cart_is_stored_remotely(self, client, cart_line, customer_headers, fake_supabase):
        client.post("/api/v1/cart/items", json=cart_line, headers={**SESSION, **customer_headers})

        upsert = fake_supabase.queries("carts", "upsert")[0]
        assert upsert.args_of("upsert")[0]["user_id"] == "user-1"


# =============================================================================
# Checkout & Orders
# =============================================================================

class TestCheckout:

    def test_quote(self, client, cart_line):
        client.post("/api/v1/cart/items", json=cart_line, headers=SESSION)

        response = client.post("/api/v1/checkout/quote", headers=SESSION)

        assert response.json() == {
            "subtotal": 2900.0,
            "shippingCost": 150.0,
            "totalAmount": 3050.0,
            "itemCount": 2,
            "freeShippingThreshold": 5000.0,
        }

    def test_place_order(self, client, cart_line, fake_supabase):
        client.post("/api/v1/cart/items", json=cart_line, headers=SESSION)

        response = client.post("/api/v1/checkout", json=CHECKOUT_BODY, headers=SESSION)

        assert response.status_code == 201
        order = response.json()
        assert order["orderNumber"].startswith("WB-")
        assert order["customerInfo"]["phone"] == "9876543210"
        assert order["paymentStatus"] == "pending"
        assert order["qrCodeData"].startswith("upi://pay?")
        assert order["userId"] is None
        assert client.get("/api/v1/cart", headers=SESSION).json()["itemCount"] == 0

    def test_signed_in_order_records_user(self, client, cart_line, customer_headers, fake_supabase):
        headers = {**SESSION, **customer_headers}
        client.post("/api/v1/cart/items", json=cart_line, headers=headers)
        fake_supabase.responses["carts"] = [{"items": fake_supabase.queries("carts", "upsert")[-1].args_of("upsert")[0]["items"]}]

        response = client.post("/api/v1/checkout", json=CHECKOUT_BODY, headers=headers)

        assert response.status_code == 201
        assert response.json()["userId"] == "user-1"

    def test_empty_cart(self, client):
        response = client.post("/api/v1/checkout", json=CHECKOUT_BODY, headers=SESSION)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_bad_address(self, client, cart_line):
        client.post("/api/v1/cart/items", json=cart_line, headers=SESSION)
        body = {"customerInfo": {**CHECKOUT_BODY["customerInfo"], "pincode": "123"}}

        assert client.post("/api/v1/checkout", json=body, headers=SESSION).status_code == 422


class TestOrders:

    def test_history_requires_login(self, client):
        assert client.get("/api/v1/orders").status_code == 401

    def test_history(self, client, customer_headers, fake_supabase, order_row):
        fake_supabase.responses["orders"] = [order_row]

        response = client.get("/api/v1/orders", headers=customer_headers)

        assert response.status_code == 200
        assert response.json()[0]["orderNumber"] == "WB-20240501-ABC123"
        assert fake_supabase.queries("orders")[0].args_of("eq") == ("user_id", "user-1")

    def test_owner_sees_own_order(self, client, customer_headers, fake_supabase, order_row):
        fake_supabase.responses["orders"] = [order_row]
        response = client.get("/api/v1/orders/order-1", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["customerInfo"]["name"] == "Ravi Kumar"

    def test_other_users_order_is_hidden(self, client, fake_supabase, order_row):
        fake_supabase.responses["orders"] = [order_row]

        response = client.get("/api/v1/orders/order-1")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ORDER_NOT_FOUND"

    def test_guest_order_is_visible(self, client, fake_supabase, order_row):
        fake_supabase.responses["orders"] = [{**order_row, "user_id": None}]
        assert client.get("/api/v1/orders/order-1").status_code == 200

    def test_payment_qr(self, client, customer_headers, fake_supabase, order_row):
        fake_supabase.responses["orders"] = [order_row]

        response = client.get("/api/v1/orders/order-1/payment-qr", headers=customer_headers)

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.headers["cache-control"] == "no-store"
        assert response.content.startswith(b"\x89PNG")

    def test_confirm_payment(self, client, customer_headers, fake_supabase, order_row):
        fake_supabase.responses["orders"] = [order_row]

        response = client.post(
            "/api/v1/orders/order-1/payment/confirm",
            json={"transactionId": "UPI123456"},
            headers=customer_headers,
        )

        assert response.status_code == 200
        assert response.json()["paymentStatus"] == "completed"
        assert response.json()["status"] == "pending"
        updates = [q.args_of("update")[0] for q in fake_supabase.queries("orders", "update")]
        assert updates == [{"status": "pending", "payment_status": "paid"}, {"transaction_id": "UPI123456"}]

    def test_confirm_without_body(self, client, fake_supabase, order_row):
        fake_supabase.responses["orders"] = [{**order_row, "user_id": None}]

        response = client.post("/api/v1/orders/order-1/payment/confirm")

        assert response.status_code == 200
        assert len(fake_supabase.queries("orders", "update")) == 1


# =============================================================================
# Inquiries
# =============================================================================

class TestInquiries:

    def test_contact_step(self, client):
        response = client.post(
            "/api/v1/inquiries/contact",
            json={"phone": "98765-43210", "email": "anita@example.com"},
        )
        assert response.json() == {
            "success": True, "verified": True, "phone": "9876543210", "email": "anita@example.com",
        }

    def test_contact_step_rejects_short_phone(self, client):
        response = client.post("/api/v1/inquiries/contact", json={"phone": "12345", "email": "a@b.co"})
        assert response.status_code == 422

    def test_submit(self, client, fake_supabase):
        response = client.post("/api/v1/inquiries", json=INQUIRY_BODY)

        assert response.status_code == 201
        assert response.json()["fullName"] == "Anita Sharma"
        row = fake_supabase.queries("inquiries", "insert")[0].args_of("insert")[0]
        assert row["user_type"] == "contractor"
        assert row["quantity"] == 500

    def test_submit_failure(self, client, fake_supabase):
        fake_supabase.errors[("inquiries", "insert")] = RuntimeError("rls")
        response = client.post("/api/v1/inquiries", json=INQUIRY_BODY)
        assert response.status_code == 500


# =============================================================================
# Authentication
# =============================================================================

class TestShopperAuth:

    def test_request_otp(self, client, with_auth):
        response = client.post("/api/v1/auth/otp/request", json={"phone": "9876543210"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "OTP sent successfully!"}
        with_auth.auth.sign_in_with_otp.assert_called_once_with({"phone": "+919876543210"})

    def test_otp_rate_limit(self, client, with_auth):
        for _ in range(5):
            client.post("/api/v1/auth/otp/request", json={"phone": "9876543210"})

        response = client.post("/api/v1/auth/otp/request", json={"phone": "9876543210"})

        assert response.status_code == 429
        assert response.json()["error"]["code"] == "RATE_LIMIT_EXCEEDED"

    def test_verify_otp_merges_guest_cart(self, client, with_auth, cart_line, fake_supabase):
        client.post("/api/v1/cart/items", json=cart_line, headers=SESSION)

        response = client.post(
            "/api/v1/auth/otp/verify",
            json={"phone": "9876543210", "token": "123456"},
            headers=SESSION,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token"]
        assert body["user"]["id"] == "user-1"
        assert body["session"]["access_token"] == "platform-access"
        assert fake_supabase.queries("carts", "upsert")[0].args_of("upsert")[0]["user_id"] == "user-1"

    def test_verify_bad_code_format(self, client, with_auth):
        response = client.post("/api/v1/auth/otp/verify", json={"phone": "9876543210", "token": "12"})
        assert response.status_code == 422

    def test_verify_wrong_code(self, client, with_auth):
        with_auth.auth.verify_otp.side_effect = RuntimeError("Token has expired or is invalid")

        response = client.post("/api/v1/auth/otp/verify", json={"phone": "9876543210", "token": "000000"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_OTP"

    def test_signup_password_mismatch(self, client, with_auth):
        response = client.post("/api/v1/auth/signup", json={
            "email": "new@example.com", "password": "secret1",
            "confirmPassword": "secret2", "fullName": "Asha Rao",
        })
        assert response.status_code == 422

    def test_auth_not_configured(self, client):
        # default services: no platform credentials in the test environment
        response = client.post("/api/v1/auth/otp/request", json={"phone": "9876543210"})
        assert response.status_code == 503

    def test_me(self, client, customer_headers, fake_supabase):
        fake_supabase.responses["users"] = [{"id": "user-1", "full_name": "Ravi", "phone_number": "+919876543210"}]

        response = client.get("/api/v1/auth/me", headers=customer_headers)

        assert response.json()["user"]["email"] == "shopper@example.com"
        assert response.json()["profile"]["full_name"] == "Ravi"

    def test_logout_without_tokens(self, client, with_auth):
        response = client.post("/api/v1/auth/logout")
        assert response.json() == {"success": True, "message": "You have been logged out."}


class TestProfile:

    def test_get_profile_requires_login(self, client):
        assert client.get("/api/v1/profile").status_code == 401

    def test_missing_profile(self, client, customer_headers):
        assert client.get("/api/v1/profile", headers=customer_headers).status_code == 404

    def test_update_merges_existing(self, client, customer_headers, fake_supabase):
        fake_supabase.responses["users"] = [{"id": "user-1", "email": "s@example.com", "full_name": "Ravi"}]

        response = client.put("/api/v1/profile", json={"fullName": "Ravi Kumar"}, headers=customer_headers)

        assert response.status_code == 200
        upsert = fake_supabase.queries("users", "upsert")[0].args_of("upsert")[0]
        assert upsert["full_name"] == "Ravi Kumar"
        assert upsert["email"] == "s@example.com"


class TestOwnerAuth:

    def test_owner_login(self, client, with_auth, fake_supabase):
        fake_supabase.responses["owner_credentials"] = [{"id": "cred-1"}]

        response = client.post(
            "/api/v1/owner/auth/otp/verify", json={"phone": "+919876543210", "token": "123456"}
        )

        assert response.status_code == 200
        token = response.json()["token"]
        me = client.get("/api/v1/owner/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json() == {"user": {"id": "user-1", "phone": "+919876543210"}, "isOwner": True}

    def test_non_owner_rejected(self, client, with_auth):
        response = client.post(
            "/api/v1/owner/auth/otp/verify", json={"phone": "+919876543210", "token": "123456"}
        )
        assert response.status_code == 403
        assert response.json()["error"]["message"] == "You do not have owner access"


# =============================================================================
# Owner Dashboard
# =============================================================================

class TestOwnerDashboard:

    def test_requires_token(self, client):
        assert client.get("/api/v1/owner/orders").status_code == 401

    def test_customer_token_forbidden(self, client, customer_headers):
        assert client.get("/api/v1/owner/orders", headers=customer_headers).status_code == 403

    def test_stats(self, client, owner_headers, fake_supabase, order_row):
        fake_supabase.responses["orders"] = [order_row, {**order_row, "id": "o2", "payment_status": "paid"}]

        response = client.get("/api/v1/owner/orders/stats", headers=owner_headers)

        assert response.json() == {
            "total": 2, "pending": 2, "processing": 0, "shipped": 0, "delivered": 0, "revenue": 3050.0,
        }

    def test_update_order_status(self, client, owner_headers, fake_supabase, order_row):
        fake_supabase.responses["orders"] = [order_row]

        response = client.put(
            "/api/v1/owner/orders/order-1/status", json={"status": "shipped"}, headers=owner_headers
        )

        assert response.json()["status"] == "shipped"
        update = fake_supabase.queries("orders", "update")[0].args_of("update")[0]
        assert update == {"status": "shipped", "payment_status": "pending"}

    def test_invalid_status(self, client, owner_headers):
        response = client.put(
            "/api/v1/owner/orders/order-1/status", json={"status": "lost"}, headers=owner_headers
        )
        assert response.status_code == 422

    def test_update_payment_status(self, client, owner_headers, fake_supabase, order_row):
        fake_supabase.responses["orders"] = [order_row]

        response = client.put(
            "/api/v1/owner/orders/order-1/payment-status",
            json={"paymentStatus": "completed"},
            headers=owner_headers,
        )

        assert response.json()["paymentStatus"] == "completed"

    def test_export_orders(self, client, owner_headers, fake_supabase, order_row):
        fake_supabase.responses["orders"] = [order_row]

        body = client.get("/api/v1/owner/orders/export", headers=owner_headers).json()

        assert body["success"] is True
        assert body["count"] == 1
        assert body["filename"].startswith("orders_")
        assert body["data"].startswith("order_number,")

    def test_export_nothing(self, client, owner_headers):
        body = client.get("/api/v1/owner/inquiries/export", headers=owner_headers).json()
        assert body["success"] is False
        assert body["message"] == "No data to export"

    def test_create_product(self, client, owner_headers, fake_supabase):
        response = client.post("/api/v1/owner/products", json=PRODUCT_BODY, headers=owner_headers)

        assert response.status_code == 201
        row = fake_supabase.queries("products", "insert")[0].args_of("insert")[0]
        assert row["colors"] == ["White"]
        assert row["base_price"] == 2100

    def test_update_missing_product(self, client, owner_headers):
        response = client.put("/api/v1/owner/products/nope", json=PRODUCT_BODY, headers=owner_headers)
        assert response.status_code == 404

    def test_delete_product(self, client, owner_headers, fake_supabase):
        response = client.delete("/api/v1/owner/products/prod-1", headers=owner_headers)

        assert response.json() == {"success": True, "id": "prod-1"}
        assert fake_supabase.queries("products", "delete")[0].args_of("eq") == ("id", "prod-1")

    def test_update_inquiry_status(self, client, owner_headers):
        response = client.put(
            "/api/v1/owner/inquiries/inq-1/status", json={"status": "quoted"}, headers=owner_headers
        )
        assert response.json() == {"success": True, "id": "inq-1", "status": "quoted"}


# =============================================================================
# Health
# =============================================================================

class TestHealth:

    @pytest.mark.parametrize("path", ["/health", "/api/v1/health"])
    def test_health(self, client, path):
        response = client.get(path)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "unconfigured"
        assert body["services"]["redis"] == {"available": False}
        assert body["services"]["productFeed"]["subscribed"] is False
        assert body["services"]["productFeed"]["lastLoadedAt"] is None

    def test_security_headers(self, client):
        response = client.get("/api/v1/products")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "X-Request-ID" in response.headers
