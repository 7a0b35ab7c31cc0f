"""SQLite database adapter."""

from __future__ import annotations

import sqlite3
from typing import Any

from dbspine.errors import DatabaseConnectionError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Uses the built-in sqlite3 module with the driver's implicit transaction
    handling switched off (``isolation_level=None``): every statement
    autocommits unless :meth:`begin` opened a transaction. Suitable for:
    - Embedded single-file databases
    - Development and testing (``:memory:``)
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        readonly: bool = False,
        timeout: float = 5.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            timeout=timeout,
            readonly=readonly,
            options=kwargs,
        )
        super().__init__(config)
        self._conn: sqlite3.Connection | None = None

    @property
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        return (sqlite3.Error, sqlite3.Warning)

    @property
    def in_transaction(self) -> bool:
        return self._conn is not None and self._conn.in_transaction

    def connect(self) -> None:
        """Connect to SQLite database."""
        self._closed = False
        if self._conn is not None:
            return

        path = self._config.path or ":memory:"
        uri = path.startswith("file:")

        try:
            self._conn = sqlite3.connect(
                path,
                timeout=self._config.timeout,
                isolation_level=None,
                check_same_thread=False,
                uri=uri,
                **self._config.options,
            )

            # Enable foreign keys
            self._conn.execute("PRAGMA foreign_keys = ON")

            if self._config.readonly:
                self._conn.execute("PRAGMA query_only = ON")

            self._connected = True

        except sqlite3.Error as e:
            self._conn = None
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ).with_context(backend="sqlite") from e

    def disconnect(self) -> None:
        """Close SQLite connection."""
        self._closed = True
        if self._conn:
            self._conn.close()
            self._conn = None
            self._connected = False

    def get_connection(self) -> sqlite3.Connection:
        """Get the SQLite connection."""
        if self._conn is None:
            self._ensure_open()
            self.connect()
        return self._conn

    def begin(self) -> None:
        self.get_connection().execute("BEGIN")

    def commit(self) -> None:
        self.get_connection().execute("COMMIT")

    def rollback(self) -> None:
        conn = self.get_connection()
        # A failed COMMIT may already have ended the transaction
        if conn.in_transaction:
            conn.execute("ROLLBACK")


__all__ = [
    "SQLiteAdapter",
]
