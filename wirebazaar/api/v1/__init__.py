"""
API v1 Router Initialization
Exports all routers for the WireBazaar API v1
"""

from fastapi import APIRouter
from .auth import router as auth_router
from .cart import router as cart_router
from .checkout import router as checkout_router
from .health import router as health_router
from .inquiries import router as inquiries_router
from .orders import router as orders_router
from .owner_auth import router as owner_auth_router
from .owner_dashboard import router as owner_dashboard_router
from .products import router as products_router
from .profile import router as profile_router

# Create main v1 router
api_v1_router = APIRouter(prefix="/api/v1")

# Include all routers
api_v1_router.include_router(health_router)
api_v1_router.include_router(products_router)
api_v1_router.include_router(cart_router)
api_v1_router.include_router(checkout_router)
api_v1_router.include_router(orders_router)
api_v1_router.include_router(inquiries_router)
api_v1_router.include_router(auth_router)
api_v1_router.include_router(profile_router)
api_v1_router.include_router(owner_auth_router)
api_v1_router.include_router(owner_dashboard_router)

# Export the main router
__all__ = ["api_v1_router", "health_router"]
