"""
Store owner authentication API
Phone OTP only; the verified user must be registered in owner_credentials
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request

from wirebazaar.api.deps import get_owner_auth_service
from wirebazaar.core.security import get_current_owner
from wirebazaar.middleware.rate_limit import enforce_otp_rate_limit
from wirebazaar.models.forms import LogoutRequest, OtpRequest, OtpVerifyRequest, SessionRestoreRequest
from wirebazaar.services.owner_auth import OwnerAuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/owner/auth", tags=["owner-authentication"])


@router.post("/otp/request")
async def request_owner_otp(
    body: OtpRequest,
    request: Request,
    service: OwnerAuthService = Depends(get_owner_auth_service),
):
    await enforce_otp_rate_limit(request, body.phone)
    result = await service.request_otp(body.phone)
    return result.to_dict()


@router.post("/otp/verify")
async def verify_owner_otp(
    body: OtpVerifyRequest,
    service: OwnerAuthService = Depends(get_owner_auth_service),
):
    """Returns an owner token; 403 when the phone does not belong to an owner"""
    result = await service.verify_otp(body.phone, body.token)
    return result.to_dict()


@router.post("/session")
async def restore_owner_session(
    body: SessionRestoreRequest,
    service: OwnerAuthService = Depends(get_owner_auth_service),
):
    result = await service.restore_session(body.access_token)
    return result.to_dict()


@router.get("/me")
async def get_owner_me(owner: Dict[str, Any] = Depends(get_current_owner)):
    return {
        "user": {"id": owner["user_id"], "phone": owner.get("phone")},
        "isOwner": True,
    }


@router.post("/logout")
async def owner_logout(
    body: Optional[LogoutRequest] = None,
    service: OwnerAuthService = Depends(get_owner_auth_service),
):
    body = body or LogoutRequest()
    result = await service.logout(body.access_token, body.refresh_token)
    return result.to_dict()
