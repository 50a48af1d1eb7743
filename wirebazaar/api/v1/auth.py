"""
Shopper authentication API
Phone OTP and email/password logins backed by the hosted auth platform
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request

from wirebazaar.api.deps import get_cart_storage, get_db, get_user_auth_service
from wirebazaar.core.security import get_current_customer
from wirebazaar.database.storefront_db import StorefrontDatabase
from wirebazaar.middleware.rate_limit import enforce_otp_rate_limit
from wirebazaar.models.forms import (
    LogoutRequest,
    OtpRequest,
    OtpVerifyRequest,
    SessionRestoreRequest,
    SignInRequest,
    SignUpRequest,
)
from wirebazaar.models.storefront import AuthenticatedUser
from wirebazaar.services.cart_storage import CartStorage
from wirebazaar.services.user_auth import UserAuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def _mask(phone: str) -> str:
    return phone[-4:].rjust(len(phone), "*")


@router.post("/otp/request")
async def request_otp(
    body: OtpRequest,
    request: Request,
    service: UserAuthService = Depends(get_user_auth_service),
):
    """Text a 6-digit login code to the phone"""
    await enforce_otp_rate_limit(request, body.phone)
    logger.info(f"OTP requested for {_mask(body.phone)}")
    result = await service.request_otp(body.phone)
    return result.to_dict()


@router.post("/otp/verify")
async def verify_otp(
    body: OtpVerifyRequest,
    cart: CartStorage = Depends(get_cart_storage),
    service: UserAuthService = Depends(get_user_auth_service),
):
    """
    Check the code. On success the response carries the API token, the
    platform session and the profile; the guest cart joins the account cart.
    """
    result = await service.verify_otp(body.phone, body.token, cart=cart)
    return result.to_dict()


@router.post("/signup")
async def sign_up(
    body: SignUpRequest,
    service: UserAuthService = Depends(get_user_auth_service),
):
    result = await service.sign_up(body.email, body.password, body.full_name)
    return result.to_dict()


@router.post("/signin")
async def sign_in(
    body: SignInRequest,
    cart: CartStorage = Depends(get_cart_storage),
    service: UserAuthService = Depends(get_user_auth_service),
):
    result = await service.sign_in(body.email, body.password, cart=cart)
    return result.to_dict()


@router.post("/session")
async def restore_session(
    body: SessionRestoreRequest,
    service: UserAuthService = Depends(get_user_auth_service),
):
    """Resume from a stored platform access token"""
    result = await service.restore_session(body.access_token)
    return result.to_dict()


@router.get("/me")
async def get_me(
    customer: Dict[str, Any] = Depends(get_current_customer),
    db: StorefrontDatabase = Depends(get_db),
):
    profile = await db.get_user_profile(customer["user_id"])
    return {
        "user": AuthenticatedUser(
            id=customer["user_id"],
            email=customer.get("email"),
            phone=customer.get("phone"),
        ).model_dump(),
        "profile": profile.model_dump() if profile else None,
    }


@router.post("/logout")
async def logout(
    body: Optional[LogoutRequest] = None,
    cart: CartStorage = Depends(get_cart_storage),
    service: UserAuthService = Depends(get_user_auth_service),
):
    """End the platform session; the API token simply stops being sent"""
    body = body or LogoutRequest()
    result = await service.logout(body.access_token, body.refresh_token, cart=cart)
    return result.to_dict()
