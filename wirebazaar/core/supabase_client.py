"""
Supabase Connection Manager for WireBazaar

Supabase hosts everything durable for the storefront:
- GoTrue auth (shopper and owner sessions, phone OTP, email/password)
- PostgREST tables (users, products, orders, inquiries, owner_credentials, carts)
- Realtime change feed (products)

Key Design Decisions:
1. One shared data client, created lazily on first use
2. A fresh auth client per login request, with session persistence and
   auto-refresh disabled, so a shopper's session never lands on the shared client
3. Missing configuration is not an error: callers get None and degrade

Usage:
    from wirebazaar.core.supabase_client import get_supabase

    client = get_supabase()
    if client is not None:
        rows = client.table(PRODUCTS_TABLE).select("*").execute().data
"""

import logging
from typing import Optional, Dict, Any

from supabase import Client, AsyncClient, ClientOptions, create_client, acreate_client

from wirebazaar.core.config import settings

logger = logging.getLogger(__name__)

# =============================================================================
# Module Exports
# =============================================================================
__all__ = [
    "USERS_TABLE",
    "PRODUCTS_TABLE",
    "ORDERS_TABLE",
    "INQUIRIES_TABLE",
    "OWNER_CREDENTIALS_TABLE",
    "CARTS_TABLE",
    "NO_ROWS_ERROR_CODE",
    "is_supabase_configured",
    "get_supabase",
    "new_auth_client",
    "new_async_client",
    "reset_supabase",
    "supabase_health",
]

# Table names
USERS_TABLE = "users"
PRODUCTS_TABLE = "products"
ORDERS_TABLE = "orders"
INQUIRIES_TABLE = "inquiries"
OWNER_CREDENTIALS_TABLE = "owner_credentials"
CARTS_TABLE = "carts"

# PostgREST error code for "zero rows returned" on single-row queries
NO_ROWS_ERROR_CODE = "PGRST116"

_client: Optional[Client] = None
_warned_unconfigured = False


def is_supabase_configured() -> bool:
    """True when both the project URL and the anon key are set."""
    return bool(settings.SUPABASE_URL and settings.SUPABASE_ANON_KEY)


def _warn_unconfigured() -> None:
    global _warned_unconfigured
    if not _warned_unconfigured:
        logger.warning(
            "Supabase is not configured (SUPABASE_URL / SUPABASE_ANON_KEY missing); "
            "storefront runs without persistence or authentication"
        )
        _warned_unconfigured = True


def get_supabase() -> Optional[Client]:
    """
    Get the shared data client.

    Uses the service role key when set (owner dashboards read every row),
    otherwise the anon key.

    Returns:
        Supabase client, or None when the platform is not configured
    """
    global _client

    if not is_supabase_configured():
        _warn_unconfigured()
        return None

    if _client is None:
        key = settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_ANON_KEY
        _client = create_client(settings.SUPABASE_URL, key)
        logger.info(
            f"Supabase client initialized: url={settings.SUPABASE_URL}, "
            f"key={'service_role' if settings.SUPABASE_SERVICE_ROLE_KEY else 'anon'}"
        )
    return _client


def new_auth_client() -> Optional[Client]:
    """
    Create a short-lived client for one auth flow.

    Always uses the anon key: the platform applies its normal auth rules.
    """
    if not is_supabase_configured():
        _warn_unconfigured()
        return None

    return create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY,
        options=ClientOptions(persist_session=False, auto_refresh_token=False),
    )


async def new_async_client() -> Optional[AsyncClient]:
    """Create an async client for the Realtime change feed."""
    if not is_supabase_configured():
        _warn_unconfigured()
        return None

    key = settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_ANON_KEY
    return await acreate_client(settings.SUPABASE_URL, key)


def reset_supabase() -> None:
    """Drop the shared client (used when settings change, e.g. in tests)."""
    global _client, _warned_unconfigured
    _client = None
    _warned_unconfigured = False


def supabase_health() -> Dict[str, Any]:
    return {
        "configured": is_supabase_configured(),
        "client_initialized": _client is not None,
        "service_role": bool(settings.SUPABASE_SERVICE_ROLE_KEY),
    }
