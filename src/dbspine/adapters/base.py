"""Database adapter base class.

Manifesto:
    Every backend shares the same lifecycle (connect/disconnect), the same
    DB-API cursor surface and the same transaction primitives. The abstract
    base class defines that contract so the query executor and the result
    contract layer never depend on a specific driver.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``begin()``, ``commit()``,
      ``rollback()``
    - ``driver_errors`` so callers can translate faults without importing
      the driver
    - Property-based dialect and connection-state introspection
    - Context-manager protocol for connection lifecycle

Tags:
    dbspine, database, abstract-base, adapter-pattern
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from dbspine.dialect import Dialect, get_dialect
from dbspine.errors import DatabaseConnectionError

from .types import DatabaseConfig, DatabaseType


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    An adapter owns exactly one driver connection. It is not safe for
    concurrent use by several threads without external serialization.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False
        self._closed = False
        self._dialect: Dialect = get_dialect(config.db_type.value)

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's database type."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        """Database type."""
        return self._config.db_type

    @property
    def is_connected(self) -> bool:
        """Whether adapter is connected."""
        return self._connected

    @property
    def is_closed(self) -> bool:
        """Whether the owner released the connection with :meth:`disconnect`."""
        return self._closed

    @property
    @abstractmethod
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        """Exception types raised by the driver for statement and connection faults."""
        ...

    @property
    @abstractmethod
    def in_transaction(self) -> bool:
        """Whether the driver session has an open transaction."""
        ...

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to database."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to database."""
        ...

    @abstractmethod
    def get_connection(self) -> Any:
        """Get the underlying driver connection, connecting on first use.

        Raises DatabaseConnectionError once the adapter has been closed; a
        closed adapter is only reopened by an explicit :meth:`connect`.
        """
        ...

    @abstractmethod
    def begin(self) -> None:
        """Start a transaction."""
        ...

    @abstractmethod
    def commit(self) -> None:
        """Commit the open transaction."""
        ...

    @abstractmethod
    def rollback(self) -> None:
        """Roll back the open transaction."""
        ...

    def _ensure_open(self) -> None:
        if self._closed:
            raise DatabaseConnectionError(
                f"{self._dialect.name} connection is closed"
            ).with_context(backend=self._dialect.name)

    def cursor(self) -> Any:
        """Open a DB-API cursor on the connection."""
        return self.get_connection().cursor()

    def last_insert_id(self, cursor: Any) -> int:
        """Generated key of the last insert executed through ``cursor``."""
        return int(cursor.lastrowid or 0)

    def __enter__(self) -> DatabaseAdapter:
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.disconnect()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}"
            f"({self._config.to_connection_string()!r}, connected={self._connected})"
        )


__all__ = [
    "DatabaseAdapter",
]
