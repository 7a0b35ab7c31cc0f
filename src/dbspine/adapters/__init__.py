"""Database adapters -- one interface for SQLite and MySQL/MariaDB.

Each adapter owns exactly one driver connection and exposes the DB-API
cursor, the transaction primitives (``begin``/``commit``/``rollback``) and
the driver's exception types. The MySQL driver is **import-guarded**: it is
only required at ``connect()`` time::

    pip install dbspine[mysql]   # mysql-connector-python

Architecture::

    DatabaseAdapter (base.py)        Abstract base: lifecycle, cursor, transactions
        |-- SQLiteAdapter            stdlib sqlite3 (always available)
        |-- MySQLAdapter             mysql.connector (optional)

    DatabaseConfig (types.py)        Dataclass of connection parameters
    DatabaseType (types.py)          Enum of supported backends

Guardrails:
    ❌ ``db.query("SELECT * FROM t WHERE id=" + user_input)``
    ✅ ``db.query("SELECT * FROM t WHERE id = :id", {"id": user_input})``
    ❌ Importing optional drivers at module scope
    ✅ Import-guarded at ``connect()`` time with clear ``ConfigError``

Tags:
    dbspine, database, adapters, import-guarded, sqlite, mysql
"""

from dbspine.dialect import Dialect, get_dialect

from .base import DatabaseAdapter
from .mysql import MySQLAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    # Types
    "DatabaseType",
    "DatabaseConfig",
    # Abstractions
    "Dialect",
    "get_dialect",
    # Base class
    "DatabaseAdapter",
    # Implementations
    "SQLiteAdapter",
    "MySQLAdapter",
]
