"""Tests for logging setup and request context binding."""

import logging

import pytest
import structlog

from btcsignal.logging import bind_request_context, clear_request_context, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_sets_level_and_quiets_ccxt(self, restore_root_logger) -> None:
        setup_logging("DEBUG")

        assert restore_root_logger.level == logging.DEBUG
        assert logging.getLogger("ccxt").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, restore_root_logger) -> None:
        setup_logging("chatty")
        assert restore_root_logger.level == logging.INFO


class TestRequestContext:
    """Tests for per-request contextvars."""

    def test_bind_and_clear(self) -> None:
        request_id = bind_request_context("/api/signal", "req-1")

        assert request_id == "req-1"
        assert structlog.contextvars.get_contextvars() == {
            "request_id": "req-1",
            "path": "/api/signal",
        }

        clear_request_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_generates_id(self) -> None:
        request_id = bind_request_context("/api/health")
        clear_request_context()
        assert len(request_id) == 12
