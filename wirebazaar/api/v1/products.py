"""
Catalog API
Public product listing plus a live websocket feed of catalog changes
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from wirebazaar.api.deps import get_db, get_product_feed
from wirebazaar.database.storefront_db import StorefrontDatabase
from wirebazaar.models.storefront import Product
from wirebazaar.services.realtime_products import RealtimeProductFeed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[Product], response_model_by_alias=True)
async def list_products(db: StorefrontDatabase = Depends(get_db)):
    """Active products, newest first"""
    return await db.get_products()


@router.websocket("/live")
async def live_products(
    websocket: WebSocket,
    feed: RealtimeProductFeed = Depends(get_product_feed),
):
    """
    Push the catalog on connect and again after every change in the
    products table.
    """
    await websocket.accept()

    async def push(products: List[Product]) -> None:
        await websocket.send_json({
            "type": "products",
            "products": [p.model_dump(mode="json", by_alias=True) for p in products],
            "error": feed.error,
        })

    remove_listener = feed.add_listener(push)
    try:
        await push(feed.products)
        while True:
            message = await websocket.receive_text()
            if message == "refetch":
                await feed.refetch()
    except WebSocketDisconnect:
        logger.debug("Product feed websocket disconnected")
    finally:
        remove_listener()


@router.get("/{product_id}", response_model=Product, response_model_by_alias=True)
async def get_product(product_id: str, db: StorefrontDatabase = Depends(get_db)):
    product = await db.get_product_by_id(product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product '{product_id}' not found"
        )
    return product
