"""CRUD statement builder.

Builds parameterized ``INSERT`` / ``UPDATE`` / ``DELETE`` / ``SELECT``
statements from mappings. Column names come from the mapping keys, values
are bound as ``:name`` parameters; each ``(column, value)`` pair is visited
once and emits its identifier, placeholder and bound value together, so the
three can never drift out of order.

Table and column names are interpolated, never bound. They must come from
code, not from users. Names that are not plain identifiers
(``[A-Za-z_][A-Za-z0-9_]*``, tables optionally ``schema.table``) are
rejected to keep the generated SQL well formed; this is not an escaping
layer.

Criteria are combined with ``AND``; a ``None`` criterion renders as
``IS NULL``. Empty data and empty criteria are rejected: an ``UPDATE`` or
``DELETE`` without a ``WHERE`` clause is never generated by accident.

Examples:
    >>> build_update("users", {"name": "Bob"}, {"id": 7})
    Statement(sql='UPDATE users SET name = :set_name WHERE id = :where_id', params={'set_name': 'Bob', 'where_id': 7})
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from dbspine.errors import BuilderError

_COLUMN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TABLE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


@dataclass(frozen=True)
class Statement:
    """SQL text and the named parameters it binds."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)


def _table(table: str) -> str:
    if not isinstance(table, str) or not _TABLE.match(table):
        raise BuilderError(f"Invalid table name: {table!r}", field="table", value=table)
    return table


def _pairs(values: Mapping[str, Any], prefix: str, what: str) -> list[tuple[str, str, Any]]:
    """``(column, parameter name, value)`` triples in mapping order."""
    if not values:
        raise BuilderError(f"{what} must not be empty", field=what)
    triples = []
    for column, value in values.items():
        if not isinstance(column, str) or not _COLUMN.match(column):
            raise BuilderError(f"Invalid column name: {column!r}", field=what, value=column)
        triples.append((column, f"{prefix}{column}", value))
    return triples


def _where(criteria: Mapping[str, Any], prefix: str) -> tuple[str, dict[str, Any]]:
    predicates = []
    params = {}
    for column, name, value in _pairs(criteria, prefix, "criteria"):
        if value is None:
            predicates.append(f"{column} IS NULL")
        else:
            predicates.append(f"{column} = :{name}")
            params[name] = value
    return " AND ".join(predicates), params


def build_insert(table: str, data: Mapping[str, Any]) -> Statement:
    """``INSERT INTO table (c1, c2) VALUES (:c1, :c2)``."""
    table = _table(table)
    columns, placeholders, params = [], [], {}
    for column, name, value in _pairs(data, "", "data"):
        columns.append(column)
        placeholders.append(f":{name}")
        params[name] = value
    sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join(placeholders)})"
    return Statement(sql, params)


def build_update(table: str, data: Mapping[str, Any], criteria: Mapping[str, Any]) -> Statement:
    """``UPDATE table SET c = :set_c WHERE k = :where_k``.

    Prefixed parameter names keep a column that appears in both ``data``
    and ``criteria`` unambiguous.
    """
    table = _table(table)
    assignments, params = [], {}
    for column, name, value in _pairs(data, "set_", "data"):
        assignments.append(f"{column} = :{name}")
        params[name] = value
    where, where_params = _where(criteria, "where_")
    params.update(where_params)
    return Statement(f"UPDATE {table} SET {', '.join(assignments)} WHERE {where}", params)


def build_delete(table: str, criteria: Mapping[str, Any]) -> Statement:
    """``DELETE FROM table WHERE k = :k``."""
    table = _table(table)
    where, params = _where(criteria, "")
    return Statement(f"DELETE FROM {table} WHERE {where}", params)


def build_select(table: str, criteria: Mapping[str, Any]) -> Statement:
    """``SELECT * FROM table WHERE k = :k``."""
    table = _table(table)
    where, params = _where(criteria, "")
    return Statement(f"SELECT * FROM {table} WHERE {where}", params)


__all__ = [
    "Statement",
    "build_insert",
    "build_update",
    "build_delete",
    "build_select",
]
