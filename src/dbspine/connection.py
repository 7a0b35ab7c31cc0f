"""Connection factory -- open a :class:`~dbspine.database.Database` from a host,
socket, file path, URL or settings object.

Every function here connects eagerly: a bad host, wrong credentials or an
unwritable SQLite path fail at construction time with
:class:`~dbspine.errors.DatabaseConnectionError`, not on the first query.

Supported URL schemes
---------------------
==================  ==============================================  ============
Scheme              Example                                         Backend
==================  ==============================================  ============
``memory``          ``memory`` or ``:memory:`` or ``None``           SQLite RAM
``sqlite``          ``sqlite:///path/to/file.db``                    SQLite file
``(file path)``     ``./data/app.db`` or ``/tmp/app.db``             SQLite file
``mysql``           ``mysql://user:pw@host:3306/db``                 MySQL (TCP)
``mysql``           ``mysql://user:pw@localhost/db?unix_socket=/p``  MySQL (socket)
``mariadb``         ``mariadb://user:pw@host/db``                    MySQL (TCP)
==================  ==============================================  ============

Any other ``scheme://`` raises :class:`~dbspine.errors.ConfigError`.

Usage
-----
::

    from dbspine.connection import connect, connect_mysql_host

    db = connect("sqlite:///runs.db")
    db = connect_mysql_host("db.internal", "shop", "app", "secret")

    print(db.info)
    # ConnectionInfo(backend='sqlite', persistent=True, path='/srv/runs.db')
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, unquote, urlsplit

from dbspine.adapters.base import DatabaseAdapter
from dbspine.adapters.mysql import MySQLAdapter
from dbspine.adapters.sqlite import SQLiteAdapter
from dbspine.database import Database
from dbspine.errors import ConfigError
from dbspine.logging import get_logger
from dbspine.settings import DatabaseSettings

logger = get_logger(__name__)


# ── ConnectionInfo ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ConnectionInfo:
    """Metadata about an opened database."""

    backend: str
    """Backend identifier: ``"sqlite"`` or ``"mysql"``."""

    persistent: bool
    """Whether data survives process exit."""

    url: str
    """DSN the database was opened with, password redacted."""

    resolved_path: str | None = None
    """For file-based SQLite, the resolved absolute path."""

    def __repr__(self) -> str:
        parts = [f"backend={self.backend!r}", f"persistent={self.persistent}"]
        if self.resolved_path:
            parts.append(f"path={self.resolved_path!r}")
        else:
            parts.append(f"url={self.url!r}")
        return f"ConnectionInfo({', '.join(parts)})"

    @property
    def is_sqlite(self) -> bool:
        return self.backend == "sqlite"

    @property
    def is_mysql(self) -> bool:
        return self.backend == "mysql"


# ── Constructors ─────────────────────────────────────────────────────────


def _open(adapter: DatabaseAdapter, info: ConnectionInfo, db_logger: Any) -> Database:
    adapter.connect()
    logger.debug("database_connected", backend=info.backend, url=info.url)
    return Database(adapter, logger=db_logger, info=info)


def connect_sqlite(
    path: str = ":memory:",
    *,
    readonly: bool = False,
    timeout: float = 5.0,
    logger: Any = None,
) -> Database:
    """Open a SQLite database file, or an in-memory database for ``:memory:``.

    Parent directories of a file path are created as needed.
    """
    if path in ("", ":memory:"):
        adapter = SQLiteAdapter(":memory:", readonly=readonly, timeout=timeout)
        info = ConnectionInfo(backend="sqlite", persistent=False, url=":memory:")
        return _open(adapter, info, logger)

    if path.startswith("file:"):
        adapter = SQLiteAdapter(path, readonly=readonly, timeout=timeout)
        info = ConnectionInfo(backend="sqlite", persistent="mode=memory" not in path, url=path)
        return _open(adapter, info, logger)

    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    resolved = str(file_path.resolve())

    adapter = SQLiteAdapter(resolved, readonly=readonly, timeout=timeout)
    info = ConnectionInfo(backend="sqlite", persistent=True, url=path, resolved_path=resolved)
    return _open(adapter, info, logger)


def connect_mysql_host(
    host: str,
    database: str,
    user: str | None,
    password: str | None,
    port: int = 3306,
    *,
    charset: str = "utf8mb4",
    connect_timeout: int = 10,
    logger: Any = None,
    **options: Any,
) -> Database:
    """Open a MySQL / MariaDB database over TCP."""
    adapter = MySQLAdapter(
        host=host,
        port=port,
        database=database,
        username=user,
        password=password,
        charset=charset,
        connect_timeout=connect_timeout,
        **options,
    )
    info = ConnectionInfo(backend="mysql", persistent=True, url=adapter.config.to_connection_string())
    return _open(adapter, info, logger)


def connect_mysql_socket(
    socket: str,
    database: str,
    user: str | None,
    password: str | None,
    *,
    charset: str = "utf8mb4",
    connect_timeout: int = 10,
    logger: Any = None,
    **options: Any,
) -> Database:
    """Open a MySQL / MariaDB database over a unix-domain socket."""
    adapter = MySQLAdapter(
        database=database,
        username=user,
        password=password,
        unix_socket=socket,
        charset=charset,
        connect_timeout=connect_timeout,
        **options,
    )
    info = ConnectionInfo(backend="mysql", persistent=True, url=adapter.config.to_connection_string())
    return _open(adapter, info, logger)


# ── URL parsing ──────────────────────────────────────────────────────────


def _parse_url(url: str | None) -> tuple[str, str]:
    """Parse a database URL into (scheme, target).

    Returns
    -------
    tuple[str, str]
        (scheme, target) where scheme is one of:
        ``"memory"``, ``"sqlite"``, ``"file"``, ``"mysql"``.
    """
    if url is None or url in ("", "memory", ":memory:"):
        return "memory", ":memory:"

    if url.startswith("sqlite:///"):
        path = url[len("sqlite:///"):]
        if not path or path == ":memory:":
            return "memory", ":memory:"
        return "sqlite", path

    if url.startswith("sqlite://"):
        # sqlite:// without triple slash
        path = url[len("sqlite://"):]
        if not path or path == ":memory:":
            return "memory", ":memory:"
        return "sqlite", path

    if url.startswith(("mysql://", "mariadb://")):
        return "mysql", url

    if url.startswith(("mysql+", "mariadb+")):
        # Driver-qualified DSNs: mysql+mysqlconnector://...
        return "mysql", "mysql://" + url.split("://", 1)[1]

    if "://" in url:
        raise ConfigError(f"Unsupported database URL scheme: {url.split('://', 1)[0]!r}")

    # Bare file path
    return "file", url


def _connect_mysql_url(url: str, db_logger: Any, **options: Any) -> Database:
    parts = urlsplit(url)
    query = parse_qs(parts.query)
    user = unquote(parts.username) if parts.username else None
    password = unquote(parts.password) if parts.password else None
    database = parts.path.lstrip("/")

    try:
        port = parts.port or 3306
    except ValueError as e:
        raise ConfigError(f"Invalid port in database URL: {e}") from e

    if "unix_socket" in query:
        return connect_mysql_socket(
            query["unix_socket"][0], database, user, password, logger=db_logger, **options
        )
    return connect_mysql_host(
        parts.hostname or "localhost", database, user, password, port, logger=db_logger, **options
    )


def connect(url: str | None = None, *, logger: Any = None, **options: Any) -> Database:
    """Open a database from a URL, file path or keyword.

    Parameters
    ----------
    url:
        - ``None``, ``"memory"`` or ``":memory:"`` -- in-memory SQLite
        - ``"path/to/file.db"`` -- file-based SQLite
        - ``"sqlite:///path/to/file.db"`` -- explicit SQLite URL
        - ``"mysql://user:pw@host:port/db"`` -- MySQL over TCP
        - ``"mysql://user:pw@localhost/db?unix_socket=/run/mysqld.sock"`` -- MySQL over a socket
    logger:
        Logger handed to the :class:`Database` (defaults to structlog).
    options:
        Backend keyword arguments (``readonly``/``timeout`` for SQLite,
        ``charset``/``connect_timeout`` for MySQL).

    Raises
    ------
    ConfigError
        Unsupported URL scheme, or the MySQL driver is not installed.
    DatabaseConnectionError
        The backend refused the connection.
    """
    scheme, target = _parse_url(url)

    match scheme:
        case "memory" | "sqlite" | "file":
            return connect_sqlite(target, logger=logger, **options)
        case "mysql":
            return _connect_mysql_url(target, logger, **options)
        case _:
            raise ConfigError(f"Unsupported database URL scheme: {scheme!r}")


def connect_from_settings(settings: DatabaseSettings | None = None, *, logger: Any = None) -> Database:
    """Open the database described by ``settings`` (read from the environment when omitted).

    ``settings.url`` wins over the discrete fields when set.
    """
    settings = settings or DatabaseSettings()

    if settings.url:
        if settings.url.startswith(("mysql", "mariadb")):
            return connect(
                settings.url,
                logger=logger,
                charset=settings.charset,
                connect_timeout=settings.connect_timeout,
            )
        return connect(settings.url, logger=logger)

    if settings.driver == "sqlite":
        return connect_sqlite(settings.path, logger=logger)

    password = settings.password.get_secret_value() if settings.password else None
    if settings.socket:
        return connect_mysql_socket(
            settings.socket,
            settings.database,
            settings.user,
            password,
            charset=settings.charset,
            connect_timeout=settings.connect_timeout,
            logger=logger,
        )
    return connect_mysql_host(
        settings.host,
        settings.database,
        settings.user,
        password,
        settings.port,
        charset=settings.charset,
        connect_timeout=settings.connect_timeout,
        logger=logger,
    )


__all__ = [
    "ConnectionInfo",
    "connect",
    "connect_from_settings",
    "connect_mysql_host",
    "connect_mysql_socket",
    "connect_sqlite",
]
