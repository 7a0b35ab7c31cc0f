"""MySQL database adapter.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package and
connects either over TCP (host/port) or over a unix-domain socket. The
connection negotiates ``utf8mb4`` so 4-byte characters survive the round
trip.

Install the driver::

    pip install mysql-connector-python
    # or:  pip install dbspine[mysql]

This adapter is import-guarded: if ``mysql.connector`` is not installed
a clear :class:`~dbspine.errors.ConfigError` is raised at ``connect()``
time.
"""

from __future__ import annotations

from typing import Any

from dbspine.errors import ConfigError, DatabaseConnectionError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


def _import_driver() -> Any:
    try:
        import mysql.connector
    except ImportError:
        raise ConfigError(
            "mysql-connector-python is required for MySQL. "
            "Install with: pip install mysql-connector-python"
        ) from None
    return mysql.connector


class MySQLAdapter(DatabaseAdapter):
    """MySQL / MariaDB database adapter.

    Holds a single connection (no pooling). The session runs with
    ``autocommit=True``; :meth:`begin` starts an explicit transaction.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        unix_socket: str | None = None,
        charset: str = "utf8mb4",
        connect_timeout: int = 10,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.MYSQL,
            host=host,
            port=port,
            socket=unix_socket,
            database=database,
            username=username,
            password=password,
            charset=charset,
            connect_timeout=connect_timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._conn: Any = None
        self._errors: tuple[type[BaseException], ...] = ()

    @property
    def driver_errors(self) -> tuple[type[BaseException], ...]:
        if not self._errors:
            self._errors = (_import_driver().Error,)
        return self._errors

    @property
    def in_transaction(self) -> bool:
        return self._conn is not None and bool(self._conn.in_transaction)

    def _connect_args(self) -> dict[str, Any]:
        args: dict[str, Any] = {
            "database": self._config.database,
            "user": self._config.username,
            "password": self._config.password,
            "charset": self._config.charset,
            "use_unicode": True,
            "connect_timeout": self._config.connect_timeout,
            "autocommit": True,
        }
        if self._config.socket:
            args["unix_socket"] = self._config.socket
        else:
            args["host"] = self._config.host
            args["port"] = self._config.port
        args.update(self._config.options)
        return args

    def connect(self) -> None:
        """Connect to MySQL database."""
        self._closed = False
        if self._conn is not None:
            return

        driver = _import_driver()

        try:
            self._conn = driver.connect(**self._connect_args())
            self._connected = True
        except driver.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to MySQL: {e}",
                cause=e,
            ).with_context(backend="mysql") from e

    def disconnect(self) -> None:
        """Close MySQL connection."""
        self._closed = True
        if self._conn is not None:
            try:
                self._conn.close()
            finally:
                self._conn = None
                self._connected = False

    def get_connection(self) -> Any:
        """Get the MySQL connection."""
        if self._conn is None:
            self._ensure_open()
            self.connect()
        return self._conn

    def cursor(self) -> Any:
        # Buffered so a partially read result never blocks the next statement
        return self.get_connection().cursor(buffered=True)

    def begin(self) -> None:
        self.get_connection().start_transaction()

    def commit(self) -> None:
        self.get_connection().commit()

    def rollback(self) -> None:
        self.get_connection().rollback()


__all__ = [
    "MySQLAdapter",
]
