"""Tests for ``dbspine.logging`` — structlog configuration and context helpers."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from dbspine.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    unbind_context,
)
from dbspine.settings import DatabaseSettings


@pytest.fixture
def records(caplog):
    """Rendered structlog lines, as seen by the stdlib logging handlers."""
    caplog.set_level(logging.DEBUG)

    def rendered() -> list[str]:
        return [record.getMessage() for record in caplog.records]

    return rendered


def _json_events(lines: list[str]) -> list[dict]:
    return [json.loads(line) for line in lines if line.startswith("{")]


class TestConfigureLogging:
    def test_json_output(self, records):
        configure_logging(level="INFO", json_format=True, service="billing", cache_logger_on_first_use=False)
        get_logger("dbspine.test").error("database_error", sql="SELECT 1", parameters={"id": 1})

        payload = _json_events(records())[-1]
        assert payload["event"] == "database_error"
        assert payload["sql"] == "SELECT 1"
        assert payload["parameters"] == {"id": 1}
        assert payload["service.name"] == "billing"
        assert payload["log.level"] == "error"
        assert payload["logger"] == "dbspine.test"
        assert "@timestamp" in payload

    def test_level_filtering(self, records):
        configure_logging(level="ERROR", json_format=True, cache_logger_on_first_use=False)
        logger = get_logger("dbspine.test")
        logger.debug("transaction_rolled_back")
        logger.error("no_result")

        events = [e["event"] for e in _json_events(records())]
        assert "transaction_rolled_back" not in events
        assert "no_result" in events

    def test_without_timestamp(self, records):
        configure_logging(json_format=True, add_timestamp=False, cache_logger_on_first_use=False)
        get_logger("dbspine.test").info("connected")

        assert "@timestamp" not in _json_events(records())[-1]

    def test_unserializable_values_fall_back_to_repr(self, records):
        configure_logging(json_format=True, cache_logger_on_first_use=False)
        get_logger("dbspine.test").error("database_error", parameters={"blob": object()})

        payload = _json_events(records())[-1]
        assert payload["parameters"]["blob"].startswith("<object object")

    def test_console_output(self, records):
        configure_logging(json_format=False, cache_logger_on_first_use=False)
        get_logger("dbspine.test").info("connected", backend="sqlite")

        assert any("connected" in line for line in records())

    def test_from_settings(self, records):
        settings = DatabaseSettings(_env_file=None, log_level="WARNING", json_logs=True)
        configure_logging_from_settings(settings, cache_logger_on_first_use=False)
        logger = get_logger("dbspine.test")
        logger.info("connected")
        logger.warning("ping_failed")

        events = [e["event"] for e in _json_events(records())]
        assert "connected" not in events
        assert "ping_failed" in events


class TestContext:
    def test_bind_and_clear(self):
        bind_context(request_id="abc")
        assert structlog.contextvars.get_contextvars() == {"request_id": "abc"}
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_unbind(self):
        bind_context(a=1, b=2)
        unbind_context("a")
        assert structlog.contextvars.get_contextvars() == {"b": 2}

    def test_log_context_scopes_keys(self):
        with LogContext(job="nightly_import"):
            assert structlog.contextvars.get_contextvars()["job"] == "nightly_import"
        assert "job" not in structlog.contextvars.get_contextvars()

    def test_context_included_in_events(self, records):
        configure_logging(json_format=True, cache_logger_on_first_use=False)
        with LogContext(request_id="r-1"):
            get_logger("dbspine.test").error("database_error")

        assert _json_events(records())[-1]["request_id"] == "r-1"


class TestDatabaseLogging:
    def test_contract_events_reach_structlog(self, records):
        from dbspine import NoResultError, connect_sqlite

        configure_logging(json_format=True, cache_logger_on_first_use=False)
        db = connect_sqlite()
        db.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
        with pytest.raises(NoResultError):
            db.get_one("SELECT * FROM t WHERE id = :id", {"id": 1})
        db.close()

        no_result = next(e for e in _json_events(records()) if e["event"] == "no_result")
        assert no_result["sql"] == "SELECT * FROM t WHERE id = :id"
        assert no_result["parameters"] == {"id": 1}
        assert no_result["logger"] == "dbspine.database"
