"""Tests for schemadb.core.logging."""

import logging

import structlog
from structlog.testing import capture_logs

from schemadb.core.logging import LogContext, bind_context, clear_context, configure_logging, get_logger


def test_configure_sets_level_filter():
    configure_logging(level="WARNING", json_format=True)
    assert structlog.is_configured()
    assert structlog.get_config()["wrapper_class"] is structlog.make_filtering_bound_logger(logging.WARNING)


def test_logger_emits_events():
    with capture_logs() as logs:
        get_logger("schemadb.test").info("table_described", table="users")
    assert logs == [{"event": "table_described", "table": "users", "log_level": "info"}]


def test_log_context_scoped():
    bind_context(run="r1")
    with LogContext(table="users"):
        assert structlog.contextvars.get_contextvars() == {"run": "r1", "table": "users"}
    assert structlog.contextvars.get_contextvars() == {"run": "r1"}
    clear_context()
    assert structlog.contextvars.get_contextvars() == {}
