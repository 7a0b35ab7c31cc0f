"""
Cardinality outcome of a single-row fetch.

A query that is expected to return one row can end three ways, and all
three are ordinary values here rather than exceptions:

- ``One(record)`` -- exactly one row matched
- ``Empty()`` -- nothing matched
- ``TooMany(count)`` -- the predicate was not unique

``Database.get_one`` and ``Database.get_optional_one`` are thin callers of
:func:`classify` that turn the outcome into their final contract, so the
counting logic lives in one place and can be tested without any error
propagation involved.

Architecture:
    ::

        rows ──► classify() ──► One(record) ──► get_one / get_optional_one → record
                          ├──► Empty()     ──► get_one → NoResultError
                          │                    get_optional_one → None
                          └──► TooMany(n)  ──► both → TooManyResultsError

Examples:
    >>> match classify(rows):
    ...     case One(record):
    ...         print(record["name"])
    ...     case Empty():
    ...         print("not found")
    ...     case TooMany(count):
    ...         print(f"{count} rows matched")

Tags:
    cardinality, result-pattern, dbspine
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Union

from dbspine.record import Record


@dataclass(frozen=True, slots=True)
class One:
    """Exactly one row matched."""

    record: Record

    def is_one(self) -> bool:
        return True

    def is_empty(self) -> bool:
        return False

    def is_too_many(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Empty:
    """No row matched."""

    def is_one(self) -> bool:
        return False

    def is_empty(self) -> bool:
        return True

    def is_too_many(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class TooMany:
    """More than one row matched."""

    count: int

    def is_one(self) -> bool:
        return False

    def is_empty(self) -> bool:
        return False

    def is_too_many(self) -> bool:
        return True


FetchOutcome = Union[One, Empty, TooMany]


def classify(rows: Sequence[Record]) -> FetchOutcome:
    """Classify a fully materialized result set by its row count."""
    count = len(rows)
    if count == 0:
        return Empty()
    if count > 1:
        return TooMany(count)
    return One(rows[0])


__all__ = [
    "One",
    "Empty",
    "TooMany",
    "FetchOutcome",
    "classify",
]
