"""Query executor -- SQL text plus a parameter set in, rows or a count out.

The executor is the only place that talks to a DB-API cursor. Each call:

1. parses the statement and checks the parameter set against its
   placeholders (named keys must match ``:name`` placeholders exactly,
   ordinal values must match the ``?`` count),
2. applies explicit type hints for ordinal parameters (:func:`bind_typed`),
3. renders the placeholders in the driver's paramstyle,
4. executes on a fresh cursor and materializes the result,
5. translates any driver fault into :class:`~dbspine.errors.ExecutionError`
   after logging it with the SQL text and parameters.

There are no retries: one attempt per call, and transient connectivity
errors propagate to the caller.

Insert ids:
    ``execute()`` returns the connection's last-insert-id when the statement
    text, with leading whitespace removed, starts with ``insert``
    (case-insensitive), and the affected row count otherwise. This is a
    prefix check, not a parser: an insert wrapped in a CTE
    (``WITH ... INSERT ...``) reports a row count.

Examples:
    >>> executor = QueryExecutor(SQLiteAdapter())
    >>> executor.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
    0
    >>> executor.execute("INSERT INTO t (name) VALUES (:name)", {"name": "a"})
    1
    >>> executor.query_rows("SELECT * FROM t")
    [Record({'id': 1, 'name': 'a'})]
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from dbspine.adapters.base import DatabaseAdapter
from dbspine.errors import ExecutionError
from dbspine.logging import get_logger
from dbspine.params import (
    Params,
    TypeHints,
    bind_typed,
    check_named,
    check_positional,
    normalize_named,
)
from dbspine.record import Record


def is_insert(sql: str) -> bool:
    """Whether ``sql`` is literally prefixed with ``insert`` (ignoring case and leading whitespace)."""
    return sql.lstrip()[:6].lower() == "insert"


class QueryExecutor:
    """Runs statements against one adapter's connection."""

    def __init__(self, adapter: DatabaseAdapter, *, logger: Any = None):
        self._adapter = adapter
        self._logger = logger or get_logger(__name__)

    @property
    def adapter(self) -> DatabaseAdapter:
        return self._adapter

    # -- Public API --------------------------------------------------------

    def query_rows(self, sql: str, params: Params = None, types: TypeHints = None) -> list[Record]:
        """Execute ``sql`` and return every row, in driver order."""
        with self._statement(sql, params, types) as cursor:
            if cursor.description is None:
                return []
            columns = [desc[0] for desc in cursor.description]
            return [Record.from_row(columns, row) for row in cursor.fetchall()]

    def execute(self, sql: str, params: Params = None, types: TypeHints = None) -> int:
        """Execute a mutating statement.

        Returns the generated id for ``INSERT`` statements, the number of
        affected rows otherwise.
        """
        with self._statement(sql, params, types) as cursor:
            if is_insert(sql):
                return self._adapter.last_insert_id(cursor)
            # DB-API reports -1 when the count is undetermined (DDL)
            return max(cursor.rowcount, 0)

    def execute_many(self, sql: str, param_sets: Sequence[Params]) -> int:
        """Execute ``sql`` once per parameter set; returns the total affected rows."""
        total = 0
        for params in param_sets:
            with self._statement(sql, params, None) as cursor:
                total += max(cursor.rowcount, 0)
        return total

    def query_scalar(self, sql: str, params: Params = None, types: TypeHints = None) -> Any:
        """First column of the first row, or ``None`` when nothing matched."""
        with self._statement(sql, params, types) as cursor:
            if cursor.description is None:
                return None
            row = cursor.fetchone()
            return None if row is None else row[0]

    # -- Internal ----------------------------------------------------------

    def _bind(self, sql: str, params: Params, types: TypeHints) -> tuple[str, Any]:
        """Check ``params`` against the placeholders and render driver SQL."""
        dialect = self._adapter.dialect
        parsed = dialect.parse(sql)

        if parsed.is_mixed:
            raise ExecutionError("Named and positional placeholders cannot be mixed in one statement")

        if isinstance(params, (str, bytes)):
            raise ExecutionError("Parameters must be a mapping or a sequence, not a string")

        if types is not None:
            values: Any = bind_typed(params if params is not None else (), types)
            check_positional(parsed, values)
        elif isinstance(params, Mapping):
            values = normalize_named(params)
            if parsed.positional_count:
                raise ExecutionError("Statement uses positional placeholders but got named parameters")
            check_named(parsed, values)
        else:
            values = tuple(params) if params is not None else ()
            if parsed.names:
                if values:
                    raise ExecutionError("Statement uses named placeholders but got positional parameters")
                check_named(parsed, {})
            check_positional(parsed, values)

        return dialect.translate(parsed, bound=bool(values)), values

    @contextmanager
    def _statement(self, sql: str, params: Params, types: TypeHints) -> Iterator[Any]:
        """Bind, execute and yield the cursor; driver faults become ExecutionError."""
        cursor = None
        try:
            statement, values = self._bind(sql, params, types)
            cursor = self._adapter.cursor()
            if values:
                cursor.execute(statement, values)
            else:
                cursor.execute(statement)
            yield cursor
        except ExecutionError as e:
            self._log_failure(e, sql, params)
            raise e.with_context(sql=sql, parameters=params, backend=self._adapter.dialect.name)
        except self._adapter.driver_errors as e:
            self._log_failure(e, sql, params)
            raise ExecutionError(
                str(e),
                cause=e,
            ).with_context(sql=sql, parameters=params, backend=self._adapter.dialect.name) from e
        finally:
            if cursor is not None:
                cursor.close()

    def _log_failure(self, error: BaseException, sql: str, params: Params) -> None:
        self._logger.error(
            "statement_failed",
            message=str(error),
            sql=sql,
            parameters=params,
        )


__all__ = [
    "QueryExecutor",
    "is_insert",
]
