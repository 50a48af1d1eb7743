"""
Token issuing and verification for WireBazaar

The hosted auth platform owns shopper and owner sessions. After a successful
platform login the API mints its own short JWT so the routers can identify the
caller without a round trip to the platform:

- customer tokens (shoppers), long lived
- owner tokens (store owners), short lived

`sub` always carries the platform user id.
"""

import logging
from typing import Optional, Dict, Any
from datetime import datetime, timedelta

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from wirebazaar.core.config import settings

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    "IS_PRODUCTION",
    "CUSTOMER_TOKEN_TYPE",
    "OWNER_TOKEN_TYPE",
    "validate_security_config",
    "get_jwt_secret",
    "create_customer_token",
    "create_owner_token",
    "verify_token",
    "security_scheme",
    "get_current_customer",
    "get_optional_current_customer",
    "get_current_owner",
]

logger = logging.getLogger(__name__)

IS_PRODUCTION: bool = settings.ENVIRONMENT == "production"

CUSTOMER_TOKEN_TYPE = "customer"
OWNER_TOKEN_TYPE = "owner"

# Only used outside production when JWT_SECRET is not set
_DEV_FALLBACK_SECRET = "dev_only_fallback_secret_not_for_production_use_32chars"
_DEV_FALLBACK_WARNED = False


def _get_jwt_secret() -> str:
    """Return the signing secret, falling back to a development secret outside production."""
    global _DEV_FALLBACK_WARNED

    secret = settings.JWT_SECRET
    if secret and len(secret) >= 32:
        return secret

    if IS_PRODUCTION:
        raise ValueError(
            "JWT_SECRET must be set and at least 32 characters in production"
        )

    if not secret:
        if not _DEV_FALLBACK_WARNED:
            logger.warning("JWT_SECRET not set - using development fallback secret")
            _DEV_FALLBACK_WARNED = True
        return _DEV_FALLBACK_SECRET

    logger.warning(
        f"JWT_SECRET is only {len(secret)} characters. "
        "Recommended minimum is 32 characters."
    )
    return secret


def get_jwt_secret() -> str:
    """Get the active JWT secret."""
    return _get_jwt_secret()


def validate_security_config() -> Dict[str, Any]:
    """
    Validate security configuration on application startup.

    Raises:
        ValueError: If critical requirements are not met in production
    """
    issues = []
    warnings = []

    secret = settings.JWT_SECRET
    if not secret:
        if IS_PRODUCTION:
            issues.append("JWT_SECRET environment variable is not set")
        else:
            warnings.append("JWT_SECRET not set - using development fallback")
    elif len(secret) < 32:
        if IS_PRODUCTION:
            issues.append(f"JWT_SECRET is too short ({len(secret)} chars). Minimum 32 required.")
        else:
            warnings.append(f"JWT_SECRET is short ({len(secret)} chars). Recommend 32+.")

    allowed_algorithms = ["HS256", "HS384", "HS512"]
    if settings.JWT_ALGORITHM not in allowed_algorithms:
        issues.append(f"JWT_ALGORITHM '{settings.JWT_ALGORITHM}' is not supported. Use one of: {allowed_algorithms}")

    for issue in issues:
        logger.error(f"Security configuration error: {issue}")
    if issues and IS_PRODUCTION:
        raise ValueError(f"Security configuration errors: {'; '.join(issues)}")

    for warning in warnings:
        logger.warning(f"Security configuration warning: {warning}")

    return {
        "valid": len(issues) == 0,
        "environment": settings.ENVIRONMENT,
        "issues": issues,
        "warnings": warnings,
        "jwt_algorithm": settings.JWT_ALGORITHM,
    }


# =============================================================================
# Token Creation
# =============================================================================

def _encode(claims: Dict[str, Any], lifetime: timedelta, token_type: str) -> str:
    now = datetime.utcnow()
    to_encode = {
        **claims,
        "exp": now + lifetime,
        "iat": now,
        "type": token_type,
    }
    return jwt.encode(to_encode, _get_jwt_secret(), algorithm=settings.JWT_ALGORITHM)


def create_customer_token(user_id: str, email: Optional[str] = None, phone: Optional[str] = None) -> str:
    """
    Create a JWT for a signed-in shopper.

    Args:
        user_id: Platform user id, stored as `sub`
        email: Optional email claim
        phone: Optional phone claim
    """
    claims = {"sub": user_id}
    if email:
        claims["email"] = email
    if phone:
        claims["phone"] = phone
    return _encode(
        claims,
        timedelta(days=settings.JWT_CUSTOMER_TOKEN_EXPIRE_DAYS),
        CUSTOMER_TOKEN_TYPE,
    )


def create_owner_token(user_id: str, phone: Optional[str] = None) -> str:
    """Create a JWT for a verified store owner (shorter expiry)."""
    claims = {"sub": user_id}
    if phone:
        claims["phone"] = phone
    return _encode(
        claims,
        timedelta(hours=settings.JWT_OWNER_TOKEN_EXPIRE_HOURS),
        OWNER_TOKEN_TYPE,
    )


def verify_token(token: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
    """
    Verify and decode a JWT.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid
        ValueError: If token type doesn't match expected
    """
    payload = jwt.decode(
        token,
        _get_jwt_secret(),
        algorithms=[settings.JWT_ALGORITHM],
        options={
            "verify_signature": True,
            "verify_exp": True,
            "require": ["exp", "iat", "sub"]
        }
    )

    if expected_type and payload.get("type") != expected_type:
        raise ValueError(f"Expected token type '{expected_type}', got '{payload.get('type')}'")

    return payload


# =============================================================================
# FastAPI Authentication Dependencies
# =============================================================================

security_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def _decode_credentials(
    credentials: Optional[HTTPAuthorizationCredentials],
    expected_type: str,
    forbidden_detail: str,
) -> Dict[str, Any]:
    if credentials is None:
        raise _unauthorized("Authentication required")

    try:
        return verify_token(credentials.credentials, expected_type=expected_type)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid token: {e}")
        raise _unauthorized("Invalid authentication token")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=forbidden_detail
        )


async def get_current_customer(
    credentials: HTTPAuthorizationCredentials = Depends(security_scheme)
) -> Dict[str, Any]:
    """
    FastAPI dependency returning the signed-in shopper.

    Raises:
        HTTPException: 401 when the token is missing, invalid or expired;
            403 when it is not a customer token
    """
    payload = _decode_credentials(credentials, CUSTOMER_TOKEN_TYPE, "Customer access required")
    return {
        "user_id": payload.get("sub"),
        "email": payload.get("email"),
        "phone": payload.get("phone"),
        "token_type": CUSTOMER_TOKEN_TYPE,
        "payload": payload,
    }


async def get_optional_current_customer(
    credentials: HTTPAuthorizationCredentials = Depends(security_scheme)
) -> Optional[Dict[str, Any]]:
    """Like get_current_customer, but guests (no or unusable token) get None."""
    if credentials is None:
        return None

    try:
        return await get_current_customer(credentials)
    except HTTPException:
        return None


async def get_current_owner(
    credentials: HTTPAuthorizationCredentials = Depends(security_scheme)
) -> Dict[str, Any]:
    """FastAPI dependency returning the verified store owner."""
    payload = _decode_credentials(credentials, OWNER_TOKEN_TYPE, "Owner access required")
    return {
        "user_id": payload.get("sub"),
        "phone": payload.get("phone"),
        "token_type": OWNER_TOKEN_TYPE,
        "payload": payload,
    }
