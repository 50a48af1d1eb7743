"""
Cart API
Guest carts live under the X-Session-ID session; signed-in shoppers use their
account cart.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from wirebazaar.api.deps import get_cart_storage
from wirebazaar.models.forms import AddToCartRequest, UpdateCartQuantityRequest
from wirebazaar.models.storefront import CartSummary
from wirebazaar.services.cart_storage import CartStorage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartSummary, response_model_by_alias=True)
async def get_cart(cart: CartStorage = Depends(get_cart_storage)):
    """Current cart with total and item count"""
    return await cart.get_summary()


@router.get("/summary")
async def get_cart_summary(cart: CartStorage = Depends(get_cart_storage)):
    """Total and item count only (header badge)"""
    return {
        "total": round(await cart.get_cart_total(), 2),
        "itemCount": await cart.get_cart_item_count(),
    }


@router.post("/items", response_model=CartSummary, response_model_by_alias=True,
             status_code=status.HTTP_201_CREATED)
async def add_cart_item(
    request: AddToCartRequest,
    cart: CartStorage = Depends(get_cart_storage),
):
    """Add a line; same product, colour and unit adds to the existing line"""
    try:
        await cart.add_to_cart(request)
        return await cart.get_summary()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding to cart: {e}")
        raise HTTPException(status_code=500, detail="Failed to add to cart")


@router.put("/items/{item_id}", response_model=CartSummary, response_model_by_alias=True)
async def update_cart_item(
    item_id: str,
    request: UpdateCartQuantityRequest,
    cart: CartStorage = Depends(get_cart_storage),
):
    """Set a line's quantity; zero or less removes it"""
    try:
        await cart.update_cart_item_quantity(item_id, request.quantity)
        return await cart.get_summary()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating cart item {item_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update cart")


@router.delete("/items/{item_id}", response_model=CartSummary, response_model_by_alias=True)
async def remove_cart_item(item_id: str, cart: CartStorage = Depends(get_cart_storage)):
    try:
        await cart.remove_from_cart(item_id)
        return await cart.get_summary()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error removing cart item {item_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to remove item from cart")


@router.delete("", response_model=CartSummary, response_model_by_alias=True)
async def clear_cart(cart: CartStorage = Depends(get_cart_storage)):
    try:
        await cart.clear_cart()
        return CartSummary()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error clearing cart: {e}")
        raise HTTPException(status_code=500, detail="Failed to clear cart")
