"""
Logging for the WireBazaar API

Every record carries the request id and the guest session (X-Session-ID) of
the request that produced it. Order, shopper and product ids passed through
`extra=` are kept as first-class fields:

    logger.info("Order placed", extra={"order_number": "WB-20240501-ABC123"})

Development prints one text line per record; production prints JSON.
"""

import sys
import json
import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple
from contextvars import ContextVar, Token

from wirebazaar.core.config import settings

__all__ = [
    "setup_logging",
    "bind_request_context",
    "reset_request_context",
    "StorefrontContextFilter",
    "StorefrontJsonFormatter",
    "StorefrontTextFormatter",
    "STOREFRONT_FIELDS",
]

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_session_id: ContextVar[Optional[str]] = ContextVar("session_id", default=None)

# extras worth indexing; anything else passed via extra= stays out of the JSON line
STOREFRONT_FIELDS = (
    "order_number",
    "order_id",
    "user_id",
    "product_id",
    "error_code",
    "status_code",
)

QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "hpack", "websockets", "realtime")

ContextTokens = Tuple[Token, Token]


def bind_request_context(request_id: str, session_id: Optional[str] = None) -> ContextTokens:
    """Attach a request (and its guest session, if any) to log records in this context."""
    return _request_id.set(request_id), _session_id.set(session_id)


def reset_request_context(tokens: ContextTokens) -> None:
    request_token, session_token = tokens
    _request_id.reset(request_token)
    _session_id.reset(session_token)


class StorefrontContextFilter(logging.Filter):
    """Stamps request_id and session_id on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get() or "-"
        record.session_id = _session_id.get() or "-"
        return True


def _storefront_fields(record: logging.LogRecord) -> Dict[str, object]:
    return {
        name: getattr(record, name)
        for name in STOREFRONT_FIELDS
        if getattr(record, name, None) is not None
    }


class StorefrontJsonFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
            "session_id": getattr(record, "session_id", "-"),
        }
        entry.update(_storefront_fields(record))
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class StorefrontTextFormatter(logging.Formatter):
    """`12:00:01 INFO  [req_ab12|sess_9f] wirebazaar.x: message order_number=WB-...`"""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s %(levelname)-5s [%(request_id)s|%(session_id)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = _storefront_fields(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Route all logging to stdout with the storefront context attached.

    Args:
        level: Defaults to settings.LOG_LEVEL (DEBUG in development, INFO otherwise)
        log_format: "json" or "text"; defaults to JSON in production
    """
    is_production = settings.ENVIRONMENT == "production"
    level = (level or settings.LOG_LEVEL or ("INFO" if is_production else "DEBUG")).upper()
    log_format = (log_format or settings.LOG_FORMAT or ("json" if is_production else "text")).lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(StorefrontContextFilter())
    handler.setFormatter(
        StorefrontJsonFormatter() if log_format == "json" else StorefrontTextFormatter()
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        f"Logging ready: level={level} format={log_format} env={settings.ENVIRONMENT}"
    )
