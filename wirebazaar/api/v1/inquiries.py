"""
Bulk inquiry wizard API
Step 1 checks the contact details, the final step stores the inquiry
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from wirebazaar.api.deps import get_db
from wirebazaar.core.exceptions import COMMON_ERROR_MESSAGES, ConfigurationError
from wirebazaar.database.storefront_db import StorefrontDatabase
from wirebazaar.models.forms import ContactStepRequest, InquirySubmitRequest
from wirebazaar.models.storefront import Inquiry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inquiries", tags=["inquiries"])


@router.post("/contact")
async def verify_contact_step(request: ContactStepRequest):
    """
    Validate the contact step. Field errors come back as the usual 422
    validation response; a passing step is marked verified.
    """
    return {
        "success": True,
        "verified": True,
        "phone": request.phone,
        "email": request.email,
    }


@router.post("", response_model=Inquiry, response_model_by_alias=True,
             status_code=status.HTTP_201_CREATED)
async def submit_inquiry(
    request: InquirySubmitRequest,
    db: StorefrontDatabase = Depends(get_db),
):
    if not db.is_configured:
        raise ConfigurationError(COMMON_ERROR_MESSAGES["BACKEND_NOT_CONFIGURED"])

    inquiry = Inquiry(**request.model_dump(), is_verified=True)
    try:
        saved = await db.save_inquiry(inquiry)
    except Exception as e:
        logger.error(f"Inquiry submission failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit inquiry. Please try again."
        )

    logger.info(f"Inquiry received from {request.full_name} for {request.product_name}")
    return saved or inquiry
