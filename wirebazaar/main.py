"""
WireBazaar FastAPI Application
Storefront API for wires and cables: catalog, cart, QR checkout, order
tracking and the owner dashboard
"""

import time
import uuid
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from wirebazaar.api.deps import SESSION_HEADER
from wirebazaar.api.v1 import api_v1_router, health_router
from wirebazaar.core.cache import close_redis, init_redis
from wirebazaar.core.config import settings
from wirebazaar.core.exceptions import StorefrontException, storefront_exception_handler
from wirebazaar.core.logging_config import bind_request_context, reset_request_context, setup_logging
from wirebazaar.core.security import validate_security_config
from wirebazaar.services.realtime_products import product_feed

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"
DEBUG = settings.ENVIRONMENT == "development"
REQUEST_ID_HEADER = "X-Request-ID"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if not DEBUG:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        if request.url.path.startswith(settings.API_V1_STR) and "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store"

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Handles startup and shutdown events
    """
    setup_logging()
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})...")

    # Raises in production when misconfigured; the app must not start
    security_status = validate_security_config()
    if security_status["valid"]:
        logger.info(f"Security validated ({security_status['environment']} mode)")

    await init_redis(settings.REDIS_URL)

    try:
        await product_feed.start()
    except Exception as e:
        logger.error(f"Product feed failed to start: {e}")

    app.state.startup_time = time.time()
    logger.info(f"{settings.PROJECT_NAME} started")

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}...")
    try:
        await product_feed.stop()
        await close_redis()
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


app = FastAPI(
    title=f"{settings.PROJECT_NAME} Storefront API",
    version=APP_VERSION,
    debug=DEBUG,
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER, SESSION_HEADER],
    expose_headers=[REQUEST_ID_HEADER, SESSION_HEADER],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Use the caller's request id (or mint one) and guest session for logs and the response"""
    request_id = request.headers.get(REQUEST_ID_HEADER) or f"req_{uuid.uuid4().hex[:16]}"
    request.state.request_id = request_id
    tokens = bind_request_context(request_id, request.headers.get(SESSION_HEADER))
    try:
        response = await call_next(request)
    finally:
        reset_request_context(tokens)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


app.add_exception_handler(StorefrontException, storefront_exception_handler)

app.include_router(health_router)
app.include_router(api_v1_router)


@app.get("/", include_in_schema=False)
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": APP_VERSION,
        "docs": "/docs",
        "health": "/health",
    }
