"""
Centralized Exception Handling for WireBazaar

This module provides:
- Custom exception classes for different error types
- Standardized error response format
- Exception handler for FastAPI
"""

from fastapi.responses import JSONResponse
from datetime import datetime
import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    "StorefrontException",
    "AuthenticationError",
    "AuthorizationError",
    "InvalidOTPError",
    "RateLimitError",
    "ValidationError",
    "NotFoundError",
    "OrderNotFoundError",
    "ProductNotFoundError",
    "DatabaseError",
    "ConfigurationError",
    "create_error_response",
    "storefront_exception_handler",
    "handle_validation_error",
    "COMMON_ERROR_MESSAGES",
]


class StorefrontException(Exception):
    """Base exception for the WireBazaar storefront"""

    def __init__(self, message: str, error_code: str = "INTERNAL_ERROR", details: Dict[str, Any] = None, status_code: int = 500):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)


class AuthenticationError(StorefrontException):
    """Authentication related errors"""

    def __init__(self, message: str = "Authentication failed", details: Dict[str, Any] = None):
        super().__init__(message, "AUTH_ERROR", details, 401)


class AuthorizationError(StorefrontException):
    """Authorization/permission related errors"""

    def __init__(self, message: str = "Access denied", details: Dict[str, Any] = None):
        super().__init__(message, "AUTHZ_ERROR", details, 403)


class InvalidOTPError(StorefrontException):
    """Invalid OTP error"""

    def __init__(self, message: str = "Invalid or expired OTP", details: Dict[str, Any] = None):
        super().__init__(message, "INVALID_OTP", details, 400)


class RateLimitError(StorefrontException):
    """Rate limiting error"""

    def __init__(self, message: str = "Rate limit exceeded", details: Dict[str, Any] = None):
        super().__init__(message, "RATE_LIMIT_EXCEEDED", details, 429)


class ValidationError(StorefrontException):
    """Data validation error"""

    def __init__(self, message: str = "Validation failed", details: Dict[str, Any] = None):
        super().__init__(message, "VALIDATION_ERROR", details, 400)


class NotFoundError(StorefrontException):
    """Resource not found error"""

    def __init__(self, message: str = "Resource not found", details: Dict[str, Any] = None):
        super().__init__(message, "NOT_FOUND", details, 404)


class OrderNotFoundError(NotFoundError):
    """Order not found error"""

    def __init__(self, order_id: str):
        super().__init__(f"Order '{order_id}' not found", {"order_id": order_id})
        self.error_code = "ORDER_NOT_FOUND"


class ProductNotFoundError(NotFoundError):
    """Product not found error"""

    def __init__(self, product_id: str):
        super().__init__(f"Product '{product_id}' not found", {"product_id": product_id})
        self.error_code = "PRODUCT_NOT_FOUND"


class DatabaseError(StorefrontException):
    """Database operation error"""

    def __init__(self, message: str = "Database operation failed", details: Dict[str, Any] = None):
        super().__init__(message, "DATABASE_ERROR", details, 500)


class ConfigurationError(StorefrontException):
    """Raised when the hosted backend (or another collaborator) is not configured"""

    def __init__(self, message: str = "Configuration error", details: Dict[str, Any] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details, 503)


def create_error_response(error: StorefrontException, status_code: Optional[int] = None) -> JSONResponse:
    """Create standardized error response"""

    if status_code is None:
        status_code = error.status_code

    error_response = {
        "success": False,
        "error": {
            "code": error.error_code,
            "message": error.message,
            "details": error.details
        },
        "timestamp": datetime.utcnow().isoformat()
    }

    return JSONResponse(
        status_code=status_code,
        content=error_response
    )


async def storefront_exception_handler(request, exc: StorefrontException) -> JSONResponse:
    """Global exception handler for storefront exceptions"""

    if exc.status_code >= 500:
        logger.error(f"Storefront Exception: {exc.error_code} - {exc.message}", extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
        })
    else:
        logger.info(f"Storefront Exception: {exc.error_code} - {exc.message}")

    return create_error_response(exc)


def handle_validation_error(field: str, message: str, value: Any = None) -> ValidationError:
    """Create a validation error for a specific field"""
    details = {
        "field": field,
        "value": value,
        "constraint": message
    }
    return ValidationError(message, details)


COMMON_ERROR_MESSAGES = {
    "NOT_CONFIGURED": "Authentication is not configured",
    "BACKEND_NOT_CONFIGURED": "Supabase is not configured",
    "OWNER_ACCESS_REQUIRED": "You do not have owner access",
    "RATE_LIMIT_EXCEEDED": "Too many requests. Please try again later",
}
