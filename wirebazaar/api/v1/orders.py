"""
Orders API (shopper side)
Order history, the confirmation view, the UPI QR and "Mark Payment as Done"
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from wirebazaar.api.deps import get_db
from wirebazaar.core.exceptions import (
    COMMON_ERROR_MESSAGES,
    ConfigurationError,
    OrderNotFoundError,
    StorefrontException,
)
from wirebazaar.core.security import get_current_customer, get_optional_current_customer
from wirebazaar.database.storefront_db import StorefrontDatabase
from wirebazaar.models.forms import ConfirmPaymentRequest
from wirebazaar.models.storefront import Order, PaymentStatus
from wirebazaar.services.payment_qr import build_upi_uri, render_qr_png

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


async def _visible_order(
    order_id: str,
    customer: Optional[Dict[str, Any]],
    db: StorefrontDatabase,
) -> Order:
    """
    Orders placed while signed in are visible to that shopper only; guest
    orders are visible to anyone holding the id. Everything else is a 404.
    """
    order = await db.get_order_by_id(order_id)
    if order is None:
        raise OrderNotFoundError(order_id)

    if order.user_id is None:
        return order
    if customer and customer.get("user_id") == order.user_id:
        return order
    raise OrderNotFoundError(order_id)


@router.get("", response_model=List[Order], response_model_by_alias=True)
async def list_my_orders(
    customer: Dict[str, Any] = Depends(get_current_customer),
    db: StorefrontDatabase = Depends(get_db),
):
    """The signed-in shopper's orders, newest first"""
    return await db.get_user_orders(customer["user_id"])


@router.get("/{order_id}", response_model=Order, response_model_by_alias=True)
async def get_order(
    order_id: str,
    customer: Optional[Dict[str, Any]] = Depends(get_optional_current_customer),
    db: StorefrontDatabase = Depends(get_db),
):
    """Order confirmation view"""
    return await _visible_order(order_id, customer, db)


@router.get(
    "/{order_id}/payment-qr",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def get_payment_qr(
    order_id: str,
    customer: Optional[Dict[str, Any]] = Depends(get_optional_current_customer),
    db: StorefrontDatabase = Depends(get_db),
):
    """PNG QR code of the order's UPI payment link"""
    order = await _visible_order(order_id, customer, db)
    data = order.qr_code_data or build_upi_uri(order.total_amount, order.order_number)

    try:
        png = render_qr_png(data)
    except Exception as e:
        logger.error(f"QR rendering failed for order {order.order_number}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate payment QR code"
        )

    return Response(
        content=png,
        media_type="image/png",
        headers={"Cache-Control": "no-store"},
    )


@router.post("/{order_id}/payment/confirm", response_model=Order, response_model_by_alias=True)
async def confirm_payment(
    order_id: str,
    request: Optional[ConfirmPaymentRequest] = None,
    customer: Optional[Dict[str, Any]] = Depends(get_optional_current_customer),
    db: StorefrontDatabase = Depends(get_db),
):
    """
    "Mark Payment as Done": the payment becomes completed, the order status
    stays as it is. An optional UPI transaction reference is stored.
    """
    if not db.is_configured:
        raise ConfigurationError(COMMON_ERROR_MESSAGES["BACKEND_NOT_CONFIGURED"])

    order = await _visible_order(order_id, customer, db)
    transaction_id = request.transaction_id if request else None

    try:
        await db.update_order_status(order_id, order.status, PaymentStatus.COMPLETED.value)
        if transaction_id:
            await db.update_order_payment(order_id, transaction_id)
    except (HTTPException, StorefrontException):
        raise
    except Exception as e:
        logger.error(f"Payment confirmation failed for order {order.order_number}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to confirm payment. Please try again."
        )

    logger.info("Payment marked as done", extra={"order_number": order.order_number})
    update = {"payment_status": PaymentStatus.COMPLETED.value}
    if transaction_id:
        update["transaction_id"] = transaction_id
    return order.model_copy(update=update)
