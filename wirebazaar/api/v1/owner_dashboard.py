"""
Owner Dashboard API
Orders, products and bulk inquiries for the store owner (owner token required)

Includes:
- Order list, counters and separate order / payment status edits
- Product catalog editing
- Inquiry follow-up
- CSV exports of all three
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from wirebazaar.api.deps import get_db, get_order_dashboard
from wirebazaar.core.exceptions import (
    COMMON_ERROR_MESSAGES,
    ConfigurationError,
    ProductNotFoundError,
    StorefrontException,
)
from wirebazaar.core.security import get_current_owner
from wirebazaar.database.storefront_db import StorefrontDatabase
from wirebazaar.models.forms import (
    InquiryStatusUpdateRequest,
    OrderStatusUpdateRequest,
    PaymentStatusUpdateRequest,
    ProductUpsertRequest,
)
from wirebazaar.models.storefront import Inquiry, Order, OrderStats, Product
from wirebazaar.services.csv_export import (
    export_filename,
    inquiries_csv,
    orders_csv,
    products_csv,
)
from wirebazaar.services.order_dashboard import OrderDashboard

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/owner",
    tags=["owner-dashboard"],
    dependencies=[Depends(get_current_owner)],
)


def _export_response(kind: str, csv_data: Optional[str], count: int) -> Dict[str, Any]:
    if csv_data is None:
        return {
            "success": False,
            "message": "No data to export",
            "format": "csv",
            "data": None,
            "filename": None,
            "count": 0,
        }
    return {
        "success": True,
        "format": "csv",
        "data": csv_data,
        "filename": export_filename(kind),
        "count": count,
    }


def _require_backend(db: StorefrontDatabase) -> None:
    if not db.is_configured:
        raise ConfigurationError(COMMON_ERROR_MESSAGES["BACKEND_NOT_CONFIGURED"])


# =============================================================================
# Orders
# =============================================================================

@router.get("/orders", response_model=List[Order], response_model_by_alias=True)
async def list_orders(db: StorefrontDatabase = Depends(get_db)):
    """All orders, newest first"""
    return await db.get_all_orders()


@router.get("/orders/stats", response_model=OrderStats, response_model_by_alias=True)
async def order_stats(dashboard: OrderDashboard = Depends(get_order_dashboard)):
    """
    Order counters by status plus revenue (sum of totals whose payment is
    completed)
    """
    return await dashboard.stats()


@router.get("/orders/export")
async def export_orders(db: StorefrontDatabase = Depends(get_db)):
    orders = await db.get_all_orders()
    return _export_response("orders", orders_csv(orders), len(orders))


@router.put("/orders/{order_id}/status", response_model=Order, response_model_by_alias=True)
async def update_order_status(
    order_id: str,
    request: OrderStatusUpdateRequest,
    dashboard: OrderDashboard = Depends(get_order_dashboard),
):
    """Change the order status; the payment status is kept"""
    _require_backend(dashboard.db)
    try:
        return await dashboard.set_status(order_id, request.status)
    except (HTTPException, StorefrontException):
        raise
    except Exception as e:
        logger.error(f"Error updating order {order_id} status: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update order status"
        )


@router.put("/orders/{order_id}/payment-status", response_model=Order, response_model_by_alias=True)
async def update_payment_status(
    order_id: str,
    request: PaymentStatusUpdateRequest,
    dashboard: OrderDashboard = Depends(get_order_dashboard),
):
    """Change the payment status; the order status is kept"""
    _require_backend(dashboard.db)
    try:
        return await dashboard.set_payment_status(order_id, request.payment_status)
    except (HTTPException, StorefrontException):
        raise
    except Exception as e:
        logger.error(f"Error updating order {order_id} payment status: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update payment status"
        )


# =============================================================================
# Products
# =============================================================================

@router.get("/products", response_model=List[Product], response_model_by_alias=True)
async def list_all_products(db: StorefrontDatabase = Depends(get_db)):
    """Every product, inactive ones included"""
    return await db.get_all_products()


@router.get("/products/export")
async def export_products(db: StorefrontDatabase = Depends(get_db)):
    products = await db.get_all_products()
    return _export_response("products", products_csv(products), len(products))


@router.post("/products", response_model=Product, response_model_by_alias=True,
             status_code=status.HTTP_201_CREATED)
async def create_product(
    request: ProductUpsertRequest,
    db: StorefrontDatabase = Depends(get_db),
):
    _require_backend(db)
    product = Product(**request.model_dump())
    try:
        saved = await db.save_product(product)
    except Exception as e:
        logger.error(f"Error creating product {request.name}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save product"
        )

    logger.info(f"Product created: {request.name}")
    return saved or product


@router.put("/products/{product_id}", response_model=Product, response_model_by_alias=True)
async def update_product(
    product_id: str,
    request: ProductUpsertRequest,
    db: StorefrontDatabase = Depends(get_db),
):
    _require_backend(db)
    if await db.get_product_by_id(product_id) is None:
        raise ProductNotFoundError(product_id)

    product = Product(id=product_id, **request.model_dump())
    try:
        saved = await db.save_product(product)
    except Exception as e:
        logger.error(f"Error updating product {product_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save product"
        )
    return saved or product


@router.delete("/products/{product_id}")
async def delete_product(product_id: str, db: StorefrontDatabase = Depends(get_db)):
    _require_backend(db)
    if not await db.delete_product(product_id):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete product"
        )

    logger.info(f"Product deleted: {product_id}")
    return {"success": True, "id": product_id}


# =============================================================================
# Inquiries
# =============================================================================

@router.get("/inquiries", response_model=List[Inquiry], response_model_by_alias=True)
async def list_inquiries(db: StorefrontDatabase = Depends(get_db)):
    return await db.get_all_inquiries()


@router.get("/inquiries/export")
async def export_inquiries(db: StorefrontDatabase = Depends(get_db)):
    inquiries = await db.get_all_inquiries()
    return _export_response("inquiries", inquiries_csv(inquiries), len(inquiries))


@router.put("/inquiries/{inquiry_id}/status")
async def update_inquiry_status(
    inquiry_id: str,
    request: InquiryStatusUpdateRequest,
    db: StorefrontDatabase = Depends(get_db),
):
    _require_backend(db)
    try:
        await db.update_inquiry_status(inquiry_id, request.status)
    except Exception as e:
        logger.error(f"Error updating inquiry {inquiry_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update inquiry status"
        )

    return {"success": True, "id": inquiry_id, "status": request.status}
