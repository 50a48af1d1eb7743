"""
Shopper profile API
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from wirebazaar.api.deps import get_db
from wirebazaar.core.exceptions import COMMON_ERROR_MESSAGES, ConfigurationError, NotFoundError
from wirebazaar.core.security import get_current_customer
from wirebazaar.database.storefront_db import StorefrontDatabase
from wirebazaar.models.forms import ProfileUpdateRequest
from wirebazaar.models.storefront import UserProfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=UserProfile)
async def get_profile(
    customer: Dict[str, Any] = Depends(get_current_customer),
    db: StorefrontDatabase = Depends(get_db),
):
    profile = await db.get_user_profile(customer["user_id"])
    if profile is None:
        raise NotFoundError("Profile not found", {"user_id": customer["user_id"]})
    return profile


@router.put("", response_model=UserProfile)
async def update_profile(
    request: ProfileUpdateRequest,
    customer: Dict[str, Any] = Depends(get_current_customer),
    db: StorefrontDatabase = Depends(get_db),
):
    """Update name, email or phone; fields left out keep their stored value"""
    if not db.is_configured:
        raise ConfigurationError(COMMON_ERROR_MESSAGES["BACKEND_NOT_CONFIGURED"])

    user_id = customer["user_id"]
    current = await db.get_user_profile(user_id)
    merged = current.model_dump() if current else {"email": customer.get("email")}
    merged.update(request.model_dump(exclude_none=True))

    try:
        saved = await db.save_user_profile(user_id, merged)
    except Exception as e:
        logger.error(f"Profile update failed for {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update profile"
        )

    return saved or UserProfile.model_validate({**merged, "id": user_id})
