"""
Unit Tests for row <-> view model mapping
"""

from wirebazaar.database.row_mappers import (
    cart_items_from_json,
    cart_items_to_json,
    inquiry_from_row,
    inquiry_to_row,
    lenient_product_from_row,
    order_export_row,
    order_from_row,
    order_to_row,
    payment_status_from_row,
    payment_status_to_row,
    product_from_row,
    product_to_row,
)


class TestProducts:

    def test_product_from_row(self, product_row):
        product = product_from_row(product_row)

        assert product.id == "prod-1"
        assert product.color == ["Red", "Black"]
        assert product.unit_type == "coils"
        assert product.base_price == 1450.0
        assert product.brochure_url is None

    def test_numeric_strings_become_floats(self, product_row):
        product_row["base_price"] = "99.50"
        assert product_from_row(product_row).base_price == 99.5

    def test_unknown_unit_defaults_to_units(self, product_row):
        product_row["unit_type"] = "drums"
        assert product_from_row(product_row).unit_type == "units"

    def test_product_to_row_skips_missing_id(self, product_row):
        product = product_from_row(product_row).model_copy(update={"id": None})
        row = product_to_row(product)

        assert "id" not in row
        assert row["colors"] == ["Red", "Black"]
        assert row["unit_type"] == "coils"

    def test_camel_case_output(self, product_row):
        data = product_from_row(product_row).model_dump(by_alias=True)
        assert data["basePrice"] == 1450.0
        assert data["unitType"] == "coils"
        assert data["isActive"] is True


class TestLenientProducts:

    def test_sparse_row_gets_defaults(self):
        product = lenient_product_from_row({"id": "p", "name": "Flexible cable"})

        assert product.brand == "Unknown"
        assert product.category == "General"
        assert product.color == []
        assert product.specifications == {}
        assert product.base_price == 0.0
        assert product.unit_type == "units"
        assert product.stock_quantity == 0
        assert product.is_active is True

    def test_legacy_price_and_stock_columns_win(self):
        product = lenient_product_from_row({
            "name": "Wire", "price": 10, "base_price": 20, "stock": 3, "stock_quantity": 9,
        })
        assert product.base_price == 10.0
        assert product.stock_quantity == 3

    def test_zero_price_falls_through_to_base_price(self):
        product = lenient_product_from_row({"name": "Wire", "price": 0, "base_price": 20})
        assert product.base_price == 20.0

    def test_only_explicit_false_is_inactive(self):
        assert lenient_product_from_row({"name": "a", "is_active": None}).is_active is True
        assert lenient_product_from_row({"name": "a", "is_active": False}).is_active is False


class TestCartJson:

    def test_malformed_lines_are_skipped(self, order_row):
        raw = order_row["items"] + [{"id": "broken"}]
        items = cart_items_from_json(raw)

        assert len(items) == 1
        assert items[0].product_id == "prod-1"

    def test_round_trip_uses_camel_case(self, order_row):
        items = cart_items_from_json(order_row["items"])
        assert cart_items_to_json(items)[0]["unitPrice"] == 1450.0

    def test_none_is_empty(self):
        assert cart_items_from_json(None) == []


class TestOrders:

    def test_order_from_row(self, order_row):
        order = order_from_row(order_row)

        assert order.customer_info.name == "Ravi Kumar"
        assert order.customer_info.pincode == "560001"
        assert order.total_amount == 3050.0
        assert order.payment_method == "qr_code"
        assert order.transaction_id is None
        assert len(order.items) == 1

    def test_paid_rows_read_as_completed(self, order_row):
        order_row["payment_status"] = "paid"
        assert order_from_row(order_row).payment_status == "completed"

    def test_payment_status_vocabulary(self):
        assert payment_status_from_row("paid") == "completed"
        assert payment_status_from_row("failed") == "failed"
        assert payment_status_from_row("weird") == "pending"
        assert payment_status_to_row("completed") == "paid"
        assert payment_status_to_row("pending") == "pending"

    def test_order_to_row_flattens_customer(self, order_row):
        row = order_to_row(order_from_row(order_row))

        assert row["customer_email"] == "ravi@example.com"
        assert row["items"][0]["productId"] == "prod-1"
        assert row["id"] == "order-1"

    def test_export_row_columns(self, order_row):
        row = order_export_row(order_from_row(order_row))
        assert list(row.keys()) == [
            "order_number", "customer_name", "customer_email", "customer_phone",
            "customer_address", "customer_pincode", "total_amount", "status",
            "payment_status", "created_at",
        ]


class TestInquiries:

    def test_inquiry_from_row(self, inquiry_row):
        inquiry = inquiry_from_row(inquiry_row)

        assert inquiry.user_type == "contractor"
        assert inquiry.quantity == 500
        assert inquiry.is_verified is True
        assert inquiry.status == "pending"

    def test_insert_payload_leaves_status_to_table(self, inquiry_row):
        row = inquiry_to_row(inquiry_from_row(inquiry_row))

        assert "status" not in row
        assert "is_verified" not in row
        assert row["product_name"] == "Armoured Cable 4 core"
