"""dbspine -- a thin, synchronous relational data-access layer.

Manifesto:
    Application code should state what it expects back from a query, not
    count rows by hand. ``dbspine`` runs parameterized SQL over one
    connection to SQLite or MySQL/MariaDB and enforces result cardinality
    (exactly one, zero-or-one, many), scopes transactions, and turns driver
    faults into a small typed error hierarchy.

    - **Parameters always bound:** ``:name`` or ``?``, never string-built SQL
    - **Cardinality is a contract:** ``get_one`` never picks "the first" row
    - **Transactions roll back on anything:** the original error propagates
    - **Import-guarded extras:** the MySQL driver is loaded at connect time

Architecture::

    Layer 1 -- Types & Errors
        errors.py          Structured error hierarchy (DbSpineError, ...)
        record.py          Record: column-name -> value mapping, typed accessors
        params.py          Placeholder parsing, parameter checks, typed binding
        cardinality.py     One / Empty / TooMany fetch outcomes

    Layer 2 -- Backends
        dialect.py         Placeholder rendering per backend
        adapters/          SQLite and MySQL adapters

    Layer 3 -- Data Access
        executor.py        QueryExecutor: bind, execute, materialize
        database.py        Database: result contracts, transactions, CRUD
        builder.py         INSERT / UPDATE / DELETE / SELECT builders
        connection.py      connect_sqlite / connect_mysql_* / connect(url)

    Ambient
        logging.py         structlog configuration
        settings.py        DatabaseSettings (pydantic-settings, DBSPINE_*)

Examples:
    >>> from dbspine import connect
    >>> db = connect(":memory:")
    >>> db.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
    0
    >>> db.run_transaction(lambda tx: tx.insert("t", {"name": "a"}))
    1
"""

from dbspine.cardinality import Empty, FetchOutcome, One, TooMany, classify
from dbspine.connection import (
    ConnectionInfo,
    connect,
    connect_from_settings,
    connect_mysql_host,
    connect_mysql_socket,
    connect_sqlite,
)
from dbspine.database import Database
from dbspine.errors import (
    BuilderError,
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    DbSpineError,
    ErrorCategory,
    ErrorContext,
    ExecutionError,
    NoResultError,
    ResultError,
    TooManyResultsError,
    TransactionError,
    TypeMismatchError,
    ValidationError,
)
from dbspine.executor import QueryExecutor
from dbspine.params import ParamType, bind_typed
from dbspine.record import Record
from dbspine.settings import DatabaseSettings

__version__ = "0.1.0"

__all__ = [
    # Connection
    "connect",
    "connect_from_settings",
    "connect_mysql_host",
    "connect_mysql_socket",
    "connect_sqlite",
    "ConnectionInfo",
    # Data access
    "Database",
    "QueryExecutor",
    "Record",
    "ParamType",
    "bind_typed",
    # Cardinality
    "One",
    "Empty",
    "TooMany",
    "FetchOutcome",
    "classify",
    # Errors
    "DbSpineError",
    "ErrorCategory",
    "ErrorContext",
    "DatabaseError",
    "ExecutionError",
    "TransactionError",
    "DatabaseConnectionError",
    "ResultError",
    "NoResultError",
    "TooManyResultsError",
    "ValidationError",
    "TypeMismatchError",
    "BuilderError",
    "ConfigError",
    # Settings
    "DatabaseSettings",
]
