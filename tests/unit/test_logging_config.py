"""
Unit Tests for logging setup and request context
"""

import json
import logging
import pytest
from unittest.mock import patch

from wirebazaar.core.config import settings
from wirebazaar.core.logging_config import (
    StorefrontContextFilter,
    StorefrontJsonFormatter,
    StorefrontTextFormatter,
    bind_request_context,
    reset_request_context,
    setup_logging,
)


def _record(message="Order placed", **extra) -> logging.LogRecord:
    record = logging.LogRecord("wirebazaar.test", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    StorefrontContextFilter().filter(record)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestRequestContext:

    def test_records_carry_request_and_session(self):
        tokens = bind_request_context("req_1", "sess_1")
        try:
            record = _record()
        finally:
            reset_request_context(tokens)

        assert record.request_id == "req_1"
        assert record.session_id == "sess_1"

    def test_context_is_cleared_after_reset(self):
        reset_request_context(bind_request_context("req_1", "sess_1"))
        record = _record()

        assert record.request_id == "-"
        assert record.session_id == "-"

    def test_missing_session_is_dashed(self):
        tokens = bind_request_context("req_2")
        try:
            assert _record().session_id == "-"
        finally:
            reset_request_context(tokens)


class TestFormatters:

    def test_json_keeps_storefront_fields_only(self):
        record = _record(order_number="WB-20240501-ABC123", user_id="user-1", password="secret")

        entry = json.loads(StorefrontJsonFormatter().format(record))

        assert entry["msg"] == "Order placed"
        assert entry["level"] == "INFO"
        assert entry["order_number"] == "WB-20240501-ABC123"
        assert entry["user_id"] == "user-1"
        assert "password" not in entry
        assert entry["request_id"] == "-"

    def test_json_skips_empty_fields(self):
        entry = json.loads(StorefrontJsonFormatter().format(_record(user_id=None)))
        assert "user_id" not in entry

    def test_text_appends_fields(self):
        line = StorefrontTextFormatter().format(_record(order_number="WB-1"))

        assert "[-|-] wirebazaar.test: Order placed" in line
        assert line.endswith("order_number=WB-1")


class TestSetupLogging:

    def test_json_handler_installed(self, restore_root_logger):
        setup_logging(level="warning", log_format="json")

        assert restore_root_logger.level == logging.WARNING
        assert len(restore_root_logger.handlers) == 1
        handler = restore_root_logger.handlers[0]
        assert isinstance(handler.formatter, StorefrontJsonFormatter)
        assert any(isinstance(f, StorefrontContextFilter) for f in handler.filters)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_text_is_default_in_development(self, restore_root_logger):
        with patch.multiple(settings, ENVIRONMENT="development", LOG_LEVEL=None, LOG_FORMAT=None):
            setup_logging()

        assert isinstance(restore_root_logger.handlers[0].formatter, StorefrontTextFormatter)
        assert restore_root_logger.level == logging.DEBUG
