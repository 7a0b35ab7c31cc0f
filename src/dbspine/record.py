"""Generic result rows.

A :class:`Record` is one fetched row: an ordered, read-only mapping from
column name to the scalar the driver produced. It behaves like a ``dict``
for reading (``record["name"]``, ``record.get("name")``, ``dict(record)``)
and compares equal to any mapping with the same items, so tests and callers
can write ``assert row == {"id": 1, "name": "Alice"}``.

Typed accessors never coerce. ``get_int("price")`` on a ``'12'`` string
raises :class:`~dbspine.errors.TypeMismatchError` instead of quietly
returning ``12``.

Examples:
    >>> row = Record([("id", 1), ("name", "Alice"), ("avatar", None)])
    >>> row.get_int("id")
    1
    >>> row.get_bytes("avatar", nullable=True) is None
    True
    >>> row.get_str("id")
    Traceback (most recent call last):
    ...
    TypeMismatchError: Column 'id' is int, expected str
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from dbspine.errors import TypeMismatchError


class Record(Mapping[str, Any]):
    """One row of a result set, keyed by column name in select order."""

    __slots__ = ("_values",)

    def __init__(self, items: Iterable[tuple[str, Any]] | Mapping[str, Any] = ()):
        if isinstance(items, Mapping):
            items = items.items()
        self._values: dict[str, Any] = dict(items)

    @classmethod
    def from_row(cls, columns: Sequence[str], row: Sequence[Any]) -> Record:
        """Build a record from cursor column names and a row tuple."""
        return cls(zip(columns, row, strict=True))

    # -- Mapping protocol --------------------------------------------------

    def __getitem__(self, column: str) -> Any:
        return self._values[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    @property
    def columns(self) -> tuple[str, ...]:
        """Column names in select order."""
        return tuple(self._values)

    def to_dict(self) -> dict[str, Any]:
        """Plain ``dict`` copy of the row."""
        return dict(self._values)

    def is_null(self, column: str) -> bool:
        return self._values[column] is None

    # -- Typed accessors ---------------------------------------------------

    def get_int(self, column: str, *, nullable: bool = False) -> int | None:
        value = self._fetch(column, nullable)
        if value is None:
            return None
        # bool is an int subclass; a boolean column is not an integer column
        if isinstance(value, bool) or not isinstance(value, int):
            raise self._mismatch(column, value, "int")
        return value

    def get_float(self, column: str, *, nullable: bool = False) -> float | None:
        value = self._fetch(column, nullable)
        if value is None:
            return None
        if not isinstance(value, float):
            raise self._mismatch(column, value, "float")
        return value

    def get_str(self, column: str, *, nullable: bool = False) -> str | None:
        value = self._fetch(column, nullable)
        if value is None:
            return None
        if not isinstance(value, str):
            raise self._mismatch(column, value, "str")
        return value

    def get_bytes(self, column: str, *, nullable: bool = False) -> bytes | None:
        """Binary column value. ``bytearray``/``memoryview`` are returned as ``bytes``."""
        value = self._fetch(column, nullable)
        if value is None:
            return None
        if isinstance(value, (bytearray, memoryview)):
            return bytes(value)
        if not isinstance(value, bytes):
            raise self._mismatch(column, value, "bytes")
        return value

    def get_bool(self, column: str, *, nullable: bool = False) -> bool | None:
        """Boolean column value.

        SQLite and MySQL store booleans as integers, so the storage values
        ``0`` and ``1`` are accepted alongside real ``bool`` values. Any other
        integer is a mismatch.
        """
        value = self._fetch(column, nullable)
        if value is None:
            return None
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise self._mismatch(column, value, "bool")

    # -- Internal ----------------------------------------------------------

    def _fetch(self, column: str, nullable: bool) -> Any:
        value = self._values[column]
        if value is None and not nullable:
            raise TypeMismatchError(
                f"Column {column!r} is NULL",
                field=column,
            )
        return value

    @staticmethod
    def _mismatch(column: str, value: Any, expected: str) -> TypeMismatchError:
        return TypeMismatchError(
            f"Column {column!r} is {type(value).__name__}, expected {expected}",
            field=column,
            value=value,
        )

    def __repr__(self) -> str:
        return f"Record({self._values!r})"


__all__ = [
    "Record",
]
