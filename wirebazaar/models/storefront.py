"""
Storefront View Models

Shapes returned by the API and passed between services. Field names are
snake_case in Python and camelCase on the wire (`basePrice`, `orderNumber`,
`customerInfo`), matching what the browser frontend reads.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# Enums
# =============================================================================

class UnitType(str, Enum):
    """Selling unit of a product"""
    METRES = "metres"
    COILS = "coils"
    # Only produced by the lenient realtime mapping
    UNITS = "units"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    QR_CODE = "qr_code"


class InquiryUserType(str, Enum):
    RETAIL = "retail"
    BUSINESS = "business"
    CONTRACTOR = "contractor"


class InquiryStatus(str, Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    QUOTED = "quoted"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CamelModel(BaseModel):
    """Base model: camelCase aliases, population by either name."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )


# =============================================================================
# Catalog
# =============================================================================

class Product(CamelModel):
    id: Optional[str] = None
    name: str
    brand: str
    category: str
    color: List[str] = Field(default_factory=list)
    description: str = ""
    specifications: Any = None
    base_price: float
    unit_type: UnitType
    stock_quantity: int = 0
    image_url: str = ""
    brochure_url: Optional[str] = None
    is_active: bool = True


# =============================================================================
# Cart
# =============================================================================

class CartItem(CamelModel):
    id: str
    product_id: str
    product_name: str
    brand: str
    color: str
    quantity: int
    unit_type: UnitType
    unit_price: float
    image_url: str = ""

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def merge_key(self) -> tuple:
        """Lines with the same product, colour and unit are one cart line."""
        return (self.product_id, self.color, self.unit_type)


class CartSummary(CamelModel):
    items: List[CartItem] = Field(default_factory=list)
    total: float = 0.0
    item_count: int = 0


# =============================================================================
# Orders
# =============================================================================

class CustomerInfo(CamelModel):
    name: str
    email: str
    phone: str
    address: str
    pincode: str


class Order(CamelModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    order_number: str
    customer_info: CustomerInfo
    items: List[CartItem] = Field(default_factory=list)
    subtotal: float
    shipping_cost: float = 0.0
    total_amount: float
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.QR_CODE
    qr_code_data: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: Optional[str] = None
    estimated_delivery: Optional[str] = None


class OrderStats(CamelModel):
    """Counters shown on the owner dashboard"""
    total: int = 0
    pending: int = 0
    processing: int = 0
    shipped: int = 0
    delivered: int = 0
    revenue: float = 0.0


class CheckoutQuote(CamelModel):
    subtotal: float
    shipping_cost: float
    total_amount: float
    item_count: int
    free_shipping_threshold: float


# =============================================================================
# Inquiries
# =============================================================================

class Inquiry(CamelModel):
    id: Optional[str] = None
    user_type: InquiryUserType
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
    specifications: Any = None
    verification_code: Optional[str] = None
    is_verified: bool = False
    status: InquiryStatus = InquiryStatus.PENDING
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# =============================================================================
# Users
# =============================================================================

class UserProfile(BaseModel):
    """
    Profile row, returned in row shape (snake_case).

    Rows created by phone login carry `phone_number`; rows written by the
    profile form carry `phone`. Both land in `phone`.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    email: Optional[str] = ""
    full_name: Optional[str] = ""
    phone: Optional[str] = Field(default=None, validation_alias=AliasChoices("phone", "phone_number"))
    address: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AuthenticatedUser(BaseModel):
    """Shopper or owner identity returned after login."""
    id: str
    email: Optional[str] = None
    phone: Optional[str] = None


__all__ = [
    "UnitType",
    "OrderStatus",
    "PaymentStatus",
    "PaymentMethod",
    "InquiryUserType",
    "InquiryStatus",
    "CamelModel",
    "Product",
    "CartItem",
    "CartSummary",
    "CustomerInfo",
    "Order",
    "OrderStats",
    "CheckoutQuote",
    "Inquiry",
    "UserProfile",
    "AuthenticatedUser",
]
