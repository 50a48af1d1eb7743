"""
Row shapes of the hosted tables, as PostgREST returns them.

These are documentation types for the row mappers; nothing validates them at
runtime.
"""

from typing import Any, List, Optional, TypedDict


class UserRow(TypedDict, total=False):
    id: str
    email: str
    full_name: str
    phone: Optional[str]
    phone_number: Optional[str]
    address: Optional[str]
    created_at: str
    updated_at: str


class ProductRow(TypedDict, total=False):
    id: str
    name: str
    brand: str
    category: str
    colors: List[str]
    description: str
    specifications: Any
    base_price: float
    unit_type: str
    stock_quantity: int
    image_url: str
    brochure_url: Optional[str]
    is_active: bool
    created_at: str
    updated_at: str


class OrderRow(TypedDict, total=False):
    id: str
    user_id: Optional[str]
    order_number: str
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_address: str
    customer_pincode: str
    items: List[dict]
    subtotal: float
    shipping_cost: float
    total_amount: float
    status: str
    payment_status: str
    payment_method: str
    qr_code_data: Optional[str]
    transaction_id: Optional[str]
    estimated_delivery: Optional[str]
    created_at: str
    updated_at: str


class InquiryRow(TypedDict, total=False):
    id: str
    user_type: str
    full_name: str
    phone: str
    email: str
    address: str
    pincode: str
    product_name: str
    brand: str
    color: str
    quantity: int
    unit: str
    specifications: Any
    verification_code: Optional[str]
    is_verified: bool
    status: str
    created_at: str
    updated_at: str


class OwnerCredentialRow(TypedDict, total=False):
    id: str
    user_id: str
    created_at: str
    updated_at: str


class CartRow(TypedDict, total=False):
    id: str
    user_id: str
    items: List[dict]
    created_at: str
    updated_at: str
