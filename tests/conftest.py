"""
Shared pytest fixtures and configuration for dbspine tests.

This module provides:
- A recording logger that captures the structured events dbspine emits
- structlog / contextvars reset between tests
- A fresh in-memory SQLite ``Database`` with a ``users`` table

Usage:
    Fixtures are auto-discovered by pytest; request them as test arguments.

    def test_lookup(db, log):
        ...
"""

from pathlib import Path
from typing import Any, Generator

import pytest
import structlog

from dbspine import Database, connect_sqlite


USERS_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT UNIQUE,
    age INTEGER,
    score REAL,
    avatar BLOB,
    active INTEGER
)
"""


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark tests that are not explicitly marked as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Logging Fixtures
# =============================================================================


class RecordingLogger:
    """Stand-in for a structlog logger that keeps every event in memory."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, event: str, **kwargs: Any) -> None:
        self.events.append((level, event, kwargs))

    def debug(self, event: str, **kwargs: Any) -> None:
        self._record("debug", event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._record("info", event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._record("warning", event, **kwargs)

    def error(self, event: str, **kwargs: Any) -> None:
        self._record("error", event, **kwargs)

    @property
    def names(self) -> list[str]:
        return [event for _, event, _ in self.events]

    def find(self, event: str) -> dict[str, Any]:
        """Keyword arguments of the first ``event``; fails the test if it was never logged."""
        for _, name, kwargs in self.events:
            if name == event:
                return kwargs
        raise AssertionError(f"{event!r} not logged; got {self.names}")

    def level_of(self, event: str) -> str:
        for level, name, _ in self.events:
            if name == event:
                return level
        raise AssertionError(f"{event!r} not logged; got {self.names}")


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo any ``configure_logging`` / bound context a test leaves behind."""
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


@pytest.fixture
def log() -> RecordingLogger:
    return RecordingLogger()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def db(log: RecordingLogger) -> Generator[Database, None, None]:
    """In-memory SQLite database with an empty ``users`` table."""
    database = connect_sqlite(":memory:", logger=log)
    database.execute(USERS_DDL)
    yield database
    database.close()


@pytest.fixture
def seeded_db(db: Database) -> Database:
    """``db`` with three users: ada (36), bob (36), cy (19)."""
    db.insert("users", {"name": "ada", "email": "ada@example.com", "age": 36, "score": 9.5, "active": 1})
    db.insert("users", {"name": "bob", "email": "bob@example.com", "age": 36, "score": 7.0, "active": 0})
    db.insert("users", {"name": "cy", "email": None, "age": 19, "score": None, "active": 1})
    return db


@pytest.fixture
def db_file(tmp_path: Path) -> Path:
    return tmp_path / "data" / "app.db"
