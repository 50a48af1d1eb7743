"""
Row <-> view model translation for the hosted tables.

Rows are snake_case dicts straight from PostgREST; view models are the
pydantic models in wirebazaar.models.storefront. Numeric columns arrive as
numbers or numeric strings and are always converted to float. Optional text
columns that are NULL or empty become None.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Type

from pydantic import ValidationError as PydanticValidationError

from wirebazaar.models.rows import InquiryRow, OrderRow, ProductRow
from wirebazaar.models.storefront import (
    CartItem,
    CustomerInfo,
    Inquiry,
    InquiryStatus,
    InquiryUserType,
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Product,
    UnitType,
)

logger = logging.getLogger(__name__)

# Payment status written to order rows for a completed payment
ROW_PAYMENT_PAID = "paid"


# =============================================================================
# Helpers
# =============================================================================

def _to_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Non-numeric value in numeric column: {value!r}")
        return default


def _optional_text(value: Any) -> Optional[str]:
    return value if value else None


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _coerce_enum(enum_cls: Type[Enum], value: Any, default: Enum) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        logger.warning(f"Unknown {enum_cls.__name__} value {value!r}, using {default.value!r}")
        return default.value


# =============================================================================
# Payment status vocabulary
# =============================================================================

def payment_status_from_row(value: Any) -> str:
    """Rows may carry `paid`; the view model says `completed`."""
    if value == ROW_PAYMENT_PAID:
        return PaymentStatus.COMPLETED.value
    return _coerce_enum(PaymentStatus, value, PaymentStatus.PENDING)


def payment_status_to_row(value: Any) -> str:
    value = _enum_value(value)
    if value == PaymentStatus.COMPLETED.value:
        return ROW_PAYMENT_PAID
    return value


# =============================================================================
# Products
# =============================================================================

def product_from_row(row: ProductRow) -> Product:
    return Product(
        id=row.get("id"),
        name=row.get("name") or "",
        brand=row.get("brand") or "",
        category=row.get("category") or "",
        color=row.get("colors") or [],
        description=row.get("description") or "",
        specifications=row.get("specifications"),
        base_price=_to_float(row.get("base_price")),
        unit_type=_coerce_enum(UnitType, row.get("unit_type"), UnitType.UNITS),
        stock_quantity=int(row.get("stock_quantity") or 0),
        image_url=row.get("image_url") or "",
        brochure_url=_optional_text(row.get("brochure_url")),
        is_active=bool(row.get("is_active", True)),
    )


def product_to_row(product: Product) -> ProductRow:
    row = {
        "name": product.name,
        "brand": product.brand,
        "category": product.category,
        "colors": list(product.color),
        "description": product.description,
        "specifications": product.specifications,
        "base_price": product.base_price,
        "unit_type": _enum_value(product.unit_type),
        "stock_quantity": product.stock_quantity,
        "image_url": product.image_url,
        "brochure_url": product.brochure_url,
        "is_active": product.is_active,
    }
    if product.id:
        row["id"] = product.id
    return row


def lenient_product_from_row(row: ProductRow) -> Product:
    """
    Mapping used by the realtime catalog feed.

    Tolerates partially filled rows and the older `price` / `stock` column
    names. A product is active unless the row says `false` explicitly.
    """
    price = row.get("price") or row.get("base_price") or 0
    stock = row.get("stock") or row.get("stock_quantity") or 0

    unit = row.get("unit_type") or UnitType.UNITS.value
    return Product(
        id=row.get("id"),
        name=row.get("name") or "",
        brand=row.get("brand") or "Unknown",
        category=row.get("category") or "General",
        color=row.get("colors") or [],
        description=row.get("description") or "",
        specifications=row.get("specifications") or {},
        base_price=_to_float(price),
        unit_type=_coerce_enum(UnitType, unit, UnitType.UNITS),
        stock_quantity=int(_to_float(stock)),
        image_url=row.get("image_url") or "",
        brochure_url=_optional_text(row.get("brochure_url")),
        is_active=row.get("is_active") is not False,
    )


# =============================================================================
# Cart items (stored as JSON in carts.items and orders.items)
# =============================================================================

def cart_items_from_json(items: Optional[Iterable[Dict[str, Any]]]) -> List[CartItem]:
    result = []
    for raw in items or []:
        try:
            result.append(CartItem.model_validate(raw))
        except PydanticValidationError as e:
            logger.warning(f"Skipping malformed cart line {raw!r}: {e.error_count()} errors")
    return result


def cart_items_to_json(items: Iterable[CartItem]) -> List[Dict[str, Any]]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]


# =============================================================================
# Orders
# =============================================================================

def order_from_row(row: OrderRow) -> Order:
    return Order(
        id=row.get("id"),
        user_id=row.get("user_id"),
        order_number=row.get("order_number") or "",
        customer_info=CustomerInfo(
            name=row.get("customer_name") or "",
            email=row.get("customer_email") or "",
            phone=row.get("customer_phone") or "",
            address=row.get("customer_address") or "",
            pincode=row.get("customer_pincode") or "",
        ),
        items=cart_items_from_json(row.get("items")),
        subtotal=_to_float(row.get("subtotal")),
        shipping_cost=_to_float(row.get("shipping_cost")),
        total_amount=_to_float(row.get("total_amount")),
        status=_coerce_enum(OrderStatus, row.get("status"), OrderStatus.PENDING),
        payment_status=payment_status_from_row(row.get("payment_status")),
        payment_method=_coerce_enum(PaymentMethod, row.get("payment_method"), PaymentMethod.QR_CODE),
        qr_code_data=_optional_text(row.get("qr_code_data")),
        transaction_id=_optional_text(row.get("transaction_id")),
        created_at=row.get("created_at"),
        estimated_delivery=_optional_text(row.get("estimated_delivery")),
    )


def order_to_row(order: Order) -> OrderRow:
    row = {
        "user_id": order.user_id,
        "order_number": order.order_number,
        "customer_name": order.customer_info.name,
        "customer_email": order.customer_info.email,
        "customer_phone": order.customer_info.phone,
        "customer_address": order.customer_info.address,
        "customer_pincode": order.customer_info.pincode,
        "items": cart_items_to_json(order.items),
        "subtotal": order.subtotal,
        "shipping_cost": order.shipping_cost,
        "total_amount": order.total_amount,
        "status": _enum_value(order.status),
        "payment_status": payment_status_to_row(order.payment_status),
        "payment_method": _enum_value(order.payment_method),
        "qr_code_data": order.qr_code_data,
        "transaction_id": order.transaction_id,
        "estimated_delivery": order.estimated_delivery,
    }
    if order.id:
        row["id"] = order.id
    return row


def order_export_row(order: Order) -> Dict[str, Any]:
    """Flattened order used by the owner CSV export."""
    return {
        "order_number": order.order_number,
        "customer_name": order.customer_info.name,
        "customer_email": order.customer_info.email,
        "customer_phone": order.customer_info.phone,
        "customer_address": order.customer_info.address,
        "customer_pincode": order.customer_info.pincode,
        "total_amount": order.total_amount,
        "status": _enum_value(order.status),
        "payment_status": _enum_value(order.payment_status),
        "created_at": order.created_at,
    }


# =============================================================================
# Inquiries
# =============================================================================

def inquiry_from_row(row: InquiryRow) -> Inquiry:
    return Inquiry(
        id=row.get("id"),
        user_type=_coerce_enum(InquiryUserType, row.get("user_type"), InquiryUserType.RETAIL),
        full_name=row.get("full_name") or "",
        phone=row.get("phone") or "",
        email=row.get("email") or "",
        address=row.get("address") or "",
        pincode=row.get("pincode") or "",
        product_name=row.get("product_name") or "",
        brand=row.get("brand") or "",
        color=row.get("color") or "",
        quantity=int(row.get("quantity") or 0),
        unit=row.get("unit") or "",
        specifications=row.get("specifications"),
        verification_code=_optional_text(row.get("verification_code")),
        is_verified=bool(row.get("is_verified", False)),
        status=_coerce_enum(InquiryStatus, row.get("status"), InquiryStatus.PENDING),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def inquiry_to_row(inquiry: Inquiry) -> InquiryRow:
    """Insert payload; verification flag and status are left to table defaults."""
    return {
        "user_type": _enum_value(inquiry.user_type),
        "full_name": inquiry.full_name,
        "phone": inquiry.phone,
        "email": inquiry.email,
        "address": inquiry.address,
        "pincode": inquiry.pincode,
        "product_name": inquiry.product_name,
        "brand": inquiry.brand,
        "color": inquiry.color,
        "quantity": inquiry.quantity,
        "unit": inquiry.unit,
        "specifications": inquiry.specifications,
        "verification_code": inquiry.verification_code,
    }
