"""Result contract layer -- cardinality-enforcing fetches and transactions.

``Database`` wraps a :class:`~dbspine.executor.QueryExecutor` and gives
callers a small vocabulary for what they expect back:

======================  ====================================================
Method                  Contract
======================  ====================================================
``get_one``             exactly one row, else ``NoResultError`` /
                        ``TooManyResultsError``
``get_optional_one``    zero or one row (``None`` when empty)
``get_many``            any number of rows
``get_column``          first column of the first row, or ``None``
``query``               raw executor pass-through (rows)
``execute``             raw executor pass-through (insert id or row count)
======================  ====================================================

Error translation:
    Driver and binding faults inside the ``get_*`` family are logged as a
    ``database_error`` event (``message``, ``sql``, ``parameters``) and
    re-raised as :class:`~dbspine.errors.DatabaseError` chained to the
    driver exception. Cardinality violations are logged as ``no_result`` /
    ``too_many_results`` and raised as their own error kinds, never as
    ``DatabaseError``.

Transactions:
    ``transaction()`` (context manager) and ``run_transaction(fn)`` open a
    transaction, commit when the body returns, and roll back exactly once
    when anything escapes the body -- application exceptions, driver
    faults and a failing commit alike. The original exception propagates
    unchanged. Transactions do not nest.

Examples:
    >>> db = connect_sqlite(":memory:")
    >>> db.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)")
    0
    >>> db.insert("users", {"name": "Ada"})
    1
    >>> db.get_one("SELECT * FROM users WHERE id = :id", {"id": 1})["name"]
    'Ada'
    >>> db.get_optional_one("SELECT * FROM users WHERE id = :id", {"id": 2}) is None
    True

Tags:
    database, result-contract, cardinality, transactions, dbspine
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from dbspine.adapters.base import DatabaseAdapter
from dbspine.builder import build_delete, build_insert, build_select, build_update
from dbspine.cardinality import Empty, FetchOutcome, One, TooMany, classify
from dbspine.dialect import Dialect
from dbspine.errors import (
    BuilderError,
    DatabaseConnectionError,
    DatabaseError,
    ExecutionError,
    NoResultError,
    TooManyResultsError,
    TransactionError,
)
from dbspine.executor import QueryExecutor
from dbspine.logging import get_logger
from dbspine.params import Params, TypeHints
from dbspine.record import Record

if TYPE_CHECKING:
    from dbspine.connection import ConnectionInfo

T = TypeVar("T")


class Database:
    """A single connection with result contracts and transaction scoping.

    Not thread-safe: share one ``Database`` per thread, or serialize access.
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        *,
        logger: Any = None,
        info: ConnectionInfo | None = None,
    ):
        self._adapter = adapter
        self._logger = logger or get_logger("dbspine.database")
        self._executor = QueryExecutor(adapter, logger=self._logger)
        self._info = info
        self._in_transaction = False

    @property
    def adapter(self) -> DatabaseAdapter:
        return self._adapter

    @property
    def executor(self) -> QueryExecutor:
        return self._executor

    @property
    def dialect(self) -> Dialect:
        return self._adapter.dialect

    @property
    def info(self) -> ConnectionInfo | None:
        """How this database was opened, when built by a ``connect_*`` function."""
        return self._info

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def get_connection(self) -> Any:
        """The underlying driver connection, for anything the contract layer does not cover."""
        return self._adapter.get_connection()

    # -- Raw pass-throughs ---------------------------------------------------

    def query(self, sql: str, params: Params = None, types: TypeHints = None) -> list[Record]:
        return self._executor.query_rows(sql, params, types)

    def execute(self, sql: str, params: Params = None, types: TypeHints = None) -> int:
        return self._executor.execute(sql, params, types)

    def query_scalar(self, sql: str, params: Params = None, types: TypeHints = None) -> Any:
        return self._executor.query_scalar(sql, params, types)

    # -- Result contracts ----------------------------------------------------

    def fetch_outcome(self, sql: str, params: Params = None, types: TypeHints = None) -> FetchOutcome:
        """Run ``sql`` and classify the result as ``One``, ``Empty`` or ``TooMany``."""
        return classify(self._fetch(sql, params, types))

    def get_one(self, sql: str, params: Params = None, types: TypeHints = None) -> Record:
        """Exactly one row.

        Raises:
            NoResultError: nothing matched
            TooManyResultsError: more than one row matched
            DatabaseError: the statement failed
        """
        match self.fetch_outcome(sql, params, types):
            case One(record):
                return record
            case Empty():
                self._logger.error("no_result", message=NoResultError.default_message, sql=sql, parameters=params)
                raise NoResultError().with_context(sql=sql, parameters=params)
            case TooMany(count):
                raise self._too_many(count, sql, params)

    def get_optional_one(self, sql: str, params: Params = None, types: TypeHints = None) -> Record | None:
        """Zero or one row; ``None`` when nothing matched.

        More than one row is still an error (``TooManyResultsError``).
        """
        match self.fetch_outcome(sql, params, types):
            case One(record):
                return record
            case Empty():
                return None
            case TooMany(count):
                raise self._too_many(count, sql, params)

    def get_many(self, sql: str, params: Params = None, types: TypeHints = None) -> list[Record]:
        """All matching rows, in driver order."""
        return self._fetch(sql, params, types)

    def get_column(self, sql: str, params: Params = None, types: TypeHints = None) -> Any:
        """First column of the first row, ``None`` when nothing matched."""
        try:
            return self._executor.query_scalar(sql, params, types)
        except ExecutionError as e:
            raise self._database_error(e, sql, params) from (e.cause or e)

    # -- Transactions --------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Database]:
        """Transaction scope: commit on normal exit, roll back on any exception.

        Usage:
            with db.transaction():
                db.insert("accounts", {"owner": "ada"})
                db.update("ledger", {"balance": 0}, {"owner": "ada"})
        """
        if self._in_transaction or self._adapter.in_transaction:
            raise TransactionError("A transaction is already active; transactions do not nest")

        try:
            self._adapter.begin()
        except self._adapter.driver_errors as e:
            raise TransactionError(f"Failed to begin transaction: {e}", cause=e).with_context(
                backend=self.dialect.name
            ) from e

        self._in_transaction = True
        try:
            yield self
            try:
                self._adapter.commit()
            except self._adapter.driver_errors as e:
                raise TransactionError(f"Failed to commit transaction: {e}", cause=e).with_context(
                    backend=self.dialect.name
                ) from e
        except BaseException as e:
            self._rollback(e)
            raise
        finally:
            self._in_transaction = False

    def run_transaction(self, unit_of_work: Callable[[Database], T]) -> T:
        """Call ``unit_of_work(self)`` inside :meth:`transaction` and return its result."""
        with self.transaction():
            return unit_of_work(self)

    # -- CRUD ----------------------------------------------------------------

    def insert(self, table: str, data: Mapping[str, Any]) -> int:
        """Insert one row; returns the generated id."""
        statement = build_insert(table, data)
        return self._executor.execute(statement.sql, statement.params)

    def insert_many(self, table: str, rows: Sequence[Mapping[str, Any]]) -> int:
        """Insert rows sharing one column set; returns the number inserted."""
        if not rows:
            return 0
        statement = build_insert(table, rows[0])
        columns = set(statement.params)
        param_sets = []
        for row in rows:
            if set(row) != columns:
                raise BuilderError(
                    "All rows must have the same columns",
                    field="rows",
                    value=sorted(row),
                )
            param_sets.append(dict(row))
        return self._executor.execute_many(statement.sql, param_sets)

    def update(self, table: str, data: Mapping[str, Any], criteria: Mapping[str, Any]) -> int:
        """Update matching rows; returns the affected row count."""
        statement = build_update(table, data, criteria)
        return self._executor.execute(statement.sql, statement.params)

    def delete(self, table: str, criteria: Mapping[str, Any]) -> int:
        """Delete matching rows; returns the affected row count."""
        statement = build_delete(table, criteria)
        return self._executor.execute(statement.sql, statement.params)

    def select(self, table: str, criteria: Mapping[str, Any]) -> list[Record]:
        statement = build_select(table, criteria)
        return self.get_many(statement.sql, statement.params)

    # -- Lifecycle -----------------------------------------------------------

    def ping(self) -> bool:
        """Whether the connection answers ``SELECT 1``."""
        try:
            return self._executor.query_scalar("SELECT 1") == 1
        except (ExecutionError, DatabaseConnectionError) as e:
            self._logger.warning("ping_failed", message=str(e))
            return False

    def close(self) -> None:
        """Release the connection; later calls raise ``DatabaseConnectionError``."""
        self._adapter.disconnect()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Database({self._adapter!r})"

    # -- Internal ------------------------------------------------------------

    def _fetch(self, sql: str, params: Params, types: TypeHints) -> list[Record]:
        try:
            return self._executor.query_rows(sql, params, types)
        except ExecutionError as e:
            raise self._database_error(e, sql, params) from (e.cause or e)

    def _database_error(self, error: ExecutionError, sql: str, params: Params) -> DatabaseError:
        self._logger.error("database_error", message=str(error), sql=sql, parameters=params)
        return DatabaseError(str(error), cause=error.cause or error).with_context(
            sql=sql,
            parameters=params,
            backend=self.dialect.name,
        )

    def _too_many(self, count: int, sql: str, params: Params) -> TooManyResultsError:
        self._logger.error(
            "too_many_results",
            message=TooManyResultsError.default_message,
            sql=sql,
            parameters=params,
            count=count,
        )
        return TooManyResultsError(count=count).with_context(sql=sql, parameters=params)

    def _rollback(self, error: BaseException) -> None:
        """Roll back after ``error``; a failing rollback is logged, ``error`` still propagates."""
        try:
            self._adapter.rollback()
        except (*self._adapter.driver_errors, DatabaseConnectionError) as e:
            self._logger.error("rollback_failed", message=str(e), cause=str(error))
        else:
            self._logger.debug("transaction_rolled_back", message=str(error))


__all__ = [
    "Database",
]
