"""
Request Models for the storefront forms

Each model performs the same field checks the shopper and owner forms do
before anything reaches the hosted backend:
- phone login and OTP entry
- email sign-up / sign-in
- the inquiry wizard contact step and full submission
- checkout address
- owner product editing and status changes
"""

from typing import Any, List, Optional

from pydantic import Field, field_validator, model_validator

from wirebazaar.core.validation import (
    MAX_ADDRESS_LENGTH,
    MAX_NAME_LENGTH,
    contact_phone_validator,
    email_validator,
    otp_validator,
    phone_validator,
    pincode_validator,
    required_text_validator,
    validate_password_pair,
)
from wirebazaar.models.storefront import (
    CamelModel,
    InquiryStatus,
    InquiryUserType,
    OrderStatus,
    PaymentStatus,
    UnitType,
)

_required_name = required_text_validator(MAX_NAME_LENGTH)
_required_address = required_text_validator(MAX_ADDRESS_LENGTH)
_required_text = required_text_validator()


# =============================================================================
# Authentication
# =============================================================================

class OtpRequest(CamelModel):
    """Phone number entry step of the OTP login"""
    phone: str = Field(..., description="Mobile number, e.g. +919876543210 or 9876543210")

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, v):
        return phone_validator(v)


class OtpVerifyRequest(OtpRequest):
    token: str = Field(..., description="6-digit code received by SMS")

    @field_validator("token", mode="before")
    @classmethod
    def check_token(cls, v):
        return otp_validator(v)


class SignUpRequest(CamelModel):
    email: str
    password: str
    confirm_password: str
    full_name: str

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        return email_validator(v)

    @field_validator("full_name", mode="before")
    @classmethod
    def check_full_name(cls, v):
        return _required_name(v)

    @model_validator(mode="after")
    def check_passwords(self):
        is_valid, message = validate_password_pair(self.password, self.confirm_password)
        if not is_valid:
            raise ValueError(message)
        return self


class SignInRequest(CamelModel):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        return email_validator(v)


class LogoutRequest(CamelModel):
    """Platform session tokens to revoke; both optional (local logout)."""
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


class SessionRestoreRequest(CamelModel):
    """Existing platform session to resume after an app reload."""
    access_token: str = Field(..., min_length=1)


class ProfileUpdateRequest(CamelModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        if v in (None, ""):
            return None
        return email_validator(v)

    @field_validator("full_name", mode="before")
    @classmethod
    def check_full_name(cls, v):
        if v is None:
            return None
        return _required_name(v)


# =============================================================================
# Cart & Checkout
# =============================================================================

class AddToCartRequest(CamelModel):
    product_id: str = Field(..., min_length=1)
    product_name: str
    brand: str
    color: str
    quantity: int = Field(..., ge=1)
    unit_type: UnitType
    unit_price: float = Field(..., ge=0)
    image_url: str = ""


class UpdateCartQuantityRequest(CamelModel):
    """Zero or negative removes the line"""
    quantity: int


class CheckoutAddress(CamelModel):
    name: str
    email: str
    phone: str
    address: str
    pincode: str

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, v):
        return _required_name(v)

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        return email_validator(v)

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, v):
        return contact_phone_validator(v)

    @field_validator("address", mode="before")
    @classmethod
    def check_address(cls, v):
        return _required_address(v)

    @field_validator("pincode", mode="before")
    @classmethod
    def check_pincode(cls, v):
        return pincode_validator(v)


class CheckoutRequest(CamelModel):
    customer_info: CheckoutAddress


class ConfirmPaymentRequest(CamelModel):
    """Shopper's "Mark Payment as Done"; the UPI reference is optional."""
    transaction_id: Optional[str] = Field(None, max_length=100)


# =============================================================================
# Inquiry wizard
# =============================================================================

class ContactStepRequest(CamelModel):
    phone: str
    email: str

    @field_validator("phone", mode="before")
    @classmethod
    def check_phone(cls, v):
        return contact_phone_validator(v)

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        return email_validator(v)


class InquirySubmitRequest(ContactStepRequest):
    user_type: InquiryUserType
    full_name: str
    address: str
    pincode: str
    product_name: str
    brand: str
    color: str
    quantity: int = Field(..., ge=1)
    unit: str
    specifications: Any = None
    verification_code: Optional[str] = None

    @field_validator("full_name", mode="before")
    @classmethod
    def check_full_name(cls, v):
        return _required_name(v)

    @field_validator("address", mode="before")
    @classmethod
    def check_address(cls, v):
        return _required_address(v)

    @field_validator("pincode", mode="before")
    @classmethod
    def check_pincode(cls, v):
        return pincode_validator(v)

    @field_validator("product_name", "brand", "color", "unit", mode="before")
    @classmethod
    def check_required_text(cls, v):
        return _required_text(v)


# =============================================================================
# Owner dashboard
# =============================================================================

class ProductUpsertRequest(CamelModel):
    name: str
    brand: str
    category: str
    color: List[str] = Field(default_factory=list)
    description: str = ""
    specifications: Any = None
    base_price: float = Field(..., ge=0)
    unit_type: UnitType
    stock_quantity: int = Field(0, ge=0)
    image_url: str = ""
    brochure_url: Optional[str] = None
    is_active: bool = True

    @field_validator("name", "brand", "category", mode="before")
    @classmethod
    def check_required_text(cls, v):
        return _required_name(v)


class OrderStatusUpdateRequest(CamelModel):
    status: OrderStatus


class PaymentStatusUpdateRequest(CamelModel):
    payment_status: PaymentStatus


class InquiryStatusUpdateRequest(CamelModel):
    status: InquiryStatus


__all__ = [
    "OtpRequest",
    "OtpVerifyRequest",
    "SignUpRequest",
    "SignInRequest",
    "LogoutRequest",
    "ProfileUpdateRequest",
    "AddToCartRequest",
    "UpdateCartQuantityRequest",
    "CheckoutAddress",
    "CheckoutRequest",
    "ConfirmPaymentRequest",
    "ContactStepRequest",
    "InquirySubmitRequest",
    "ProductUpsertRequest",
    "OrderStatusUpdateRequest",
    "PaymentStatusUpdateRequest",
    "InquiryStatusUpdateRequest",
]
