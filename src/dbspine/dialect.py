"""SQL dialect abstraction.

Callers write statements once, with ``:name`` or ``?`` placeholders; the
``Dialect`` of the connection renders them into whatever paramstyle its
driver expects.

Architecture::

    Caller SQL:   SELECT * FROM t WHERE id = :id AND kind = :kind
                              │
                              ▼
    ┌────────────────────────────┐   ┌────────────────────────────────────┐
    │ SQLiteDialect              │   │ MySQLDialect                       │
    │ paramstyle named / qmark   │   │ paramstyle pyformat / format       │
    │ ... id = :id ...           │   │ ... id = %(id)s ...                │
    │ ... id = ? ...             │   │ ... id = %s ...                    │
    └────────────────────────────┘   └────────────────────────────────────┘

Examples:
    >>> from dbspine.dialect import get_dialect
    >>> get_dialect("mysql").translate("SELECT * FROM t WHERE id = :id")
    'SELECT * FROM t WHERE id = %(id)s'

Tags:
    dialect, sql, paramstyle, portability, dbspine
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from dbspine.errors import ConfigError, ExecutionError
from dbspine.params import ParsedSQL, parse_sql


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract."""

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    @property
    def mysql_syntax(self) -> bool:
        """Whether string literals use backslash escapes and ``#`` starts a comment."""
        ...

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (0-based index)."""
        ...

    def named_placeholder(self, name: str) -> str:
        """Driver-level placeholder for a named parameter."""
        ...

    def parse(self, sql: str) -> ParsedSQL:
        """Split ``sql`` into literal text and placeholders."""
        ...

    def translate(self, sql: str | ParsedSQL, *, bound: bool = True) -> str:
        """Render ``:name`` / ``?`` placeholders in the driver's paramstyle.

        ``bound`` is false when the statement runs without a parameter set.
        """
        ...


_DRIVER_MARKER = re.compile(r"%(?:\([^)]*\))?s")


class _BaseDialect:
    mysql_syntax = False

    def parse(self, sql: str) -> ParsedSQL:
        return parse_sql(sql, mysql_syntax=self.mysql_syntax)

    def translate(self, sql: str | ParsedSQL, *, bound: bool = True) -> str:  # noqa: ARG002
        parsed = self.parse(sql) if isinstance(sql, str) else sql
        return parsed.render(self.named_placeholder, self.placeholder)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class SQLiteDialect(_BaseDialect):
    """SQLite: the driver understands ``:name`` and ``?`` natively."""

    @property
    def name(self) -> str:
        return "sqlite"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def named_placeholder(self, name: str) -> str:
        return f":{name}"


class MySQLDialect(_BaseDialect):
    """MySQL / MariaDB via mysql-connector: ``%(name)s`` and ``%s``.

    mysql-connector substitutes parameters with a pattern match over the
    whole statement and has no escape for a literal ``%s``. A bound
    statement whose literal text (string constants and comments included)
    contains ``%s`` or ``%(name)s`` is rejected with ``ExecutionError``;
    pass such values as parameters instead.
    """

    mysql_syntax = True

    @property
    def name(self) -> str:
        return "mysql"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def named_placeholder(self, name: str) -> str:
        return f"%({name})s"

    def translate(self, sql: str | ParsedSQL, *, bound: bool = True) -> str:
        parsed = self.parse(sql) if isinstance(sql, str) else sql
        if bound:
            for chunk in parsed.chunks:
                if isinstance(chunk, str) and (marker := _DRIVER_MARKER.search(chunk)):
                    raise ExecutionError(
                        f"Literal {marker.group()!r} would be substituted by the MySQL driver; "
                        "bind the value as a parameter"
                    )
        return super().translate(parsed)


_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "mysql": MySQLDialect(),
    "mariadb": MySQLDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Return the dialect registered for ``db_type``."""
    try:
        return _DIALECTS[db_type.lower()]
    except KeyError:
        raise ConfigError(
            f"Unknown SQL dialect: {db_type!r}. Known: {', '.join(sorted(_DIALECTS))}"
        ) from None


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a dialect for a custom adapter."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
    "register_dialect",
]
