"""
Centralized Input Validation for WireBazaar

Provides:
- Login phone normalization (E.164, Indian numbers default to +91)
- OTP, password, email, pincode and 10-digit contact phone checks
- Small sanitizers shared by the request models

Every validate_* helper returns a (is_valid, normalized_value_or_error) tuple;
the *_validator helpers raise ValueError for use inside pydantic validators.

Usage:
    from wirebazaar.core.validation import phone_validator, otp_validator
"""

import re
import logging
from typing import Any

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 254
MAX_ADDRESS_LENGTH = 500
MAX_TEXT_LENGTH = 2000
MIN_PASSWORD_LENGTH = 6

E164_PHONE_REGEX = re.compile(r'^\+[1-9]\d{10,14}$')
INDIAN_MOBILE_REGEX = re.compile(r'^\d{10}$')
CONTACT_PHONE_REGEX = re.compile(r'^\d{10}$')
OTP_REGEX = re.compile(r'^\d{6}$')
PINCODE_REGEX = re.compile(r'^\d{6}$')
EMAIL_REGEX = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

# User-facing messages
PHONE_REQUIRED = "Please enter a phone number"
PHONE_INVALID = "Please enter a valid phone number with country code, e.g. +919876543210"
OTP_REQUIRED = "Please enter the OTP"
OTP_INVALID = "OTP must be 6 digits"
PASSWORDS_DO_NOT_MATCH = "Passwords do not match"
PASSWORD_TOO_SHORT = "Password must be at least 6 characters"
REQUIRED_FIELDS_MISSING = "Please fill in all required fields"
CONTACT_PHONE_INVALID = "Please enter a valid 10-digit phone number"
EMAIL_INVALID = "Please enter a valid email address"
PINCODE_INVALID = "Please enter a valid 6-digit pincode"


# =============================================================================
# Sanitization
# =============================================================================

def clean_text(value: Any, max_length: int = MAX_TEXT_LENGTH) -> str:
    """Strip whitespace, drop null bytes and truncate."""
    if value is None:
        return ""
    value = str(value).replace('\x00', '').strip()
    if len(value) > max_length:
        logger.warning(f"Input truncated from {len(value)} to {max_length} characters")
        value = value[:max_length]
    return value


def digits_only(value: str) -> str:
    return re.sub(r"\D", "", str(value or ""))


# =============================================================================
# Validation Functions
# =============================================================================

def normalize_login_phone(phone: str) -> tuple[bool, str]:
    """
    Normalize a phone number entered on a login form.

    Spaces and dashes are removed, a bare 10-digit number is treated as an
    Indian mobile and prefixed with +91. The result must be E.164.

    Returns:
        Tuple of (is_valid, normalized_phone_or_error)
    """
    phone = str(phone or "").strip()
    if not phone:
        return False, PHONE_REQUIRED

    cleaned = re.sub(r'[\s\-]', '', phone)
    if INDIAN_MOBILE_REGEX.match(cleaned):
        cleaned = '+91' + cleaned

    if not E164_PHONE_REGEX.match(cleaned):
        return False, PHONE_INVALID

    return True, cleaned


def validate_otp(token: str) -> tuple[bool, str]:
    token = str(token or "").strip()
    if not token:
        return False, OTP_REQUIRED
    if not OTP_REGEX.match(token):
        return False, OTP_INVALID
    return True, token


def validate_password_pair(password: str, confirm_password: str) -> tuple[bool, str]:
    """Mismatch is reported before length, as on the sign-up form."""
    if password != confirm_password:
        return False, PASSWORDS_DO_NOT_MATCH
    if len(str(password or "")) < MIN_PASSWORD_LENGTH:
        return False, PASSWORD_TOO_SHORT
    return True, password


def validate_email(email: str) -> tuple[bool, str]:
    email = str(email or "").strip()
    if not email:
        return False, REQUIRED_FIELDS_MISSING
    if len(email) > MAX_EMAIL_LENGTH or not EMAIL_REGEX.match(email):
        return False, EMAIL_INVALID
    return True, email


def validate_contact_phone(phone: str) -> tuple[bool, str]:
    """
    Validate a contact phone: exactly 10 digits once formatting is removed.

    Returns:
        Tuple of (is_valid, digits_or_error)
    """
    if not str(phone or "").strip():
        return False, REQUIRED_FIELDS_MISSING
    digits = digits_only(phone)
    if not CONTACT_PHONE_REGEX.match(digits):
        return False, CONTACT_PHONE_INVALID
    return True, digits


def validate_pincode(pincode: str) -> tuple[bool, str]:
    pincode = str(pincode or "").strip()
    if not PINCODE_REGEX.match(pincode):
        return False, PINCODE_INVALID
    return True, pincode


# =============================================================================
# Pydantic Validator Helpers
# =============================================================================

def _raise_if_invalid(result: tuple[bool, str]) -> str:
    is_valid, value = result
    if not is_valid:
        raise ValueError(value)
    return value


def phone_validator(v: str) -> str:
    """Pydantic validator for login phone numbers."""
    return _raise_if_invalid(normalize_login_phone(v))


def otp_validator(v: str) -> str:
    return _raise_if_invalid(validate_otp(v))


def email_validator(v: str) -> str:
    return _raise_if_invalid(validate_email(v))


def contact_phone_validator(v: str) -> str:
    return _raise_if_invalid(validate_contact_phone(v))


def pincode_validator(v: str) -> str:
    return _raise_if_invalid(validate_pincode(v))


def required_text_validator(max_length: int = MAX_TEXT_LENGTH):
    """
    Factory for required free-text validators.

    Usage:
        _required_name = required_text_validator(MAX_NAME_LENGTH)

        @field_validator("full_name")
        @classmethod
        def check_name(cls, v):
            return _required_name(v)
    """
    def validate(v: str) -> str:
        v = clean_text(v, max_length=max_length)
        if not v:
            raise ValueError(REQUIRED_FIELDS_MISSING)
        return v

    return validate
