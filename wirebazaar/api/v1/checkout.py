"""
Checkout API
Quote the current cart and turn it into a QR-payment order
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from wirebazaar.api.deps import get_cart_storage, get_checkout_service
from wirebazaar.core.exceptions import StorefrontException
from wirebazaar.core.security import get_optional_current_customer
from wirebazaar.models.forms import CheckoutRequest
from wirebazaar.models.storefront import CheckoutQuote, Order
from wirebazaar.services.cart_storage import CartStorage
from wirebazaar.services.checkout_service import CheckoutService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("/quote", response_model=CheckoutQuote, response_model_by_alias=True)
async def quote_checkout(
    cart: CartStorage = Depends(get_cart_storage),
    service: CheckoutService = Depends(get_checkout_service),
):
    """Subtotal, shipping and total for the current cart"""
    return await service.quote(cart)


@router.post("", response_model=Order, response_model_by_alias=True,
             status_code=status.HTTP_201_CREATED)
async def place_order(
    request: CheckoutRequest,
    cart: CartStorage = Depends(get_cart_storage),
    customer: Optional[Dict[str, Any]] = Depends(get_optional_current_customer),
    service: CheckoutService = Depends(get_checkout_service),
):
    """
    Create a pending order for the cart, with the UPI payment link in
    `qrCodeData`, then empty the cart.
    """
    try:
        return await service.place_order(
            cart,
            request.customer_info,
            user_id=customer["user_id"] if customer else None,
        )
    except (HTTPException, StorefrontException):
        raise
    except Exception as e:
        logger.error(f"Checkout failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to place order. Please try again."
        )
