"""Parameter sets and placeholder handling.

Statements use two binding styles, never mixed within one call:

- **Named** ``:name`` placeholders bound from a mapping. Keys may be written
  with or without the leading colon (``{"id": 1}`` or ``{":id": 1}``).
- **Ordinal** ``?`` placeholders bound from a sequence, optionally with
  explicit per-position storage types (see :func:`bind_typed`).

:func:`parse_sql` splits a statement into literal text and placeholders,
skipping string literals, quoted identifiers and comments, so that
``WHERE t = '10:30'`` is not mistaken for a ``:30`` placeholder. The parsed
form is what dialects render into their driver's paramstyle and what the
executor checks parameter sets against before anything reaches the driver.

Examples:
    >>> parsed = parse_sql("SELECT * FROM users WHERE id = :id AND note <> ':x'")
    >>> parsed.names
    ('id',)
    >>> bind_typed(["abc", "7"], {1: ParamType.BINARY, 2: ParamType.INTEGER})
    (b'abc', 7)
"""

from __future__ import annotations

import string
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Union

from dbspine.errors import ExecutionError

_IDENT_START = frozenset(string.ascii_letters + "_")
_IDENT_CHARS = _IDENT_START | frozenset(string.digits)

Params = Union[Mapping[str, Any], Sequence[Any], None]
TypeHints = Union[Mapping[int, "ParamType"], Sequence[Union["ParamType", None]], None]


class ParamType(str, Enum):
    """Storage type to bind an ordinal parameter as."""

    STRING = "string"
    INTEGER = "integer"
    BINARY = "binary"
    NULL = "null"


@dataclass(frozen=True, slots=True)
class Placeholder:
    """One placeholder occurrence. ``name`` is ``None`` for ``?``."""

    index: int
    name: str | None = None


@dataclass(frozen=True)
class ParsedSQL:
    """A statement split into literal chunks and placeholders."""

    chunks: tuple[str | Placeholder, ...]

    @property
    def placeholders(self) -> tuple[Placeholder, ...]:
        return tuple(c for c in self.chunks if isinstance(c, Placeholder))

    @property
    def names(self) -> tuple[str, ...]:
        """Distinct placeholder names in first-occurrence order."""
        seen: dict[str, None] = {}
        for p in self.placeholders:
            if p.name is not None:
                seen.setdefault(p.name)
        return tuple(seen)

    @property
    def positional_count(self) -> int:
        return sum(1 for p in self.placeholders if p.name is None)

    @property
    def is_mixed(self) -> bool:
        return bool(self.names) and self.positional_count > 0

    def render(
        self,
        named: Callable[[str], str],
        positional: Callable[[int], str],
    ) -> str:
        """Rebuild the SQL text with placeholders rendered by the callbacks."""
        parts = []
        for chunk in self.chunks:
            if isinstance(chunk, str):
                parts.append(chunk)
            elif chunk.name is not None:
                parts.append(named(chunk.name))
            else:
                parts.append(positional(chunk.index))
        return "".join(parts)


def _skip_quoted(sql: str, start: int, quote: str, backslash_escapes: bool) -> int:
    """Return the index just past the quoted section opening at ``start``."""
    i, n = start + 1, len(sql)
    while i < n:
        ch = sql[i]
        if backslash_escapes and ch == "\\" and quote == "'":
            i += 2
            continue
        if ch == quote:
            if i + 1 < n and sql[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    # Unterminated; let the driver report it
    return n


@lru_cache(maxsize=512)
def parse_sql(sql: str, *, mysql_syntax: bool = False) -> ParsedSQL:
    """Split ``sql`` into literal text and ``:name`` / ``?`` placeholders.

    ``mysql_syntax`` enables backslash escapes inside string literals and
    ``#`` line comments.
    """
    chunks: list[str | Placeholder] = []
    buf: list[str] = []
    position = 0
    i, n = 0, len(sql)

    def flush() -> None:
        if buf:
            chunks.append("".join(buf))
            buf.clear()

    while i < n:
        ch = sql[i]

        if ch in ("'", '"', "`"):
            end = _skip_quoted(sql, i, ch, mysql_syntax)
            buf.append(sql[i:end])
            i = end
            continue

        if sql.startswith("--", i) or (mysql_syntax and ch == "#"):
            end = sql.find("\n", i)
            end = n if end == -1 else end
            buf.append(sql[i:end])
            i = end
            continue

        if sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = n if end == -1 else end + 2
            buf.append(sql[i:end])
            i = end
            continue

        if ch == ":":
            if sql.startswith("::", i):
                buf.append("::")
                i += 2
                continue
            j = i + 1
            if j < n and sql[j] in _IDENT_START:
                while j < n and sql[j] in _IDENT_CHARS:
                    j += 1
                flush()
                chunks.append(Placeholder(index=position, name=sql[i + 1:j]))
                position += 1
                i = j
                continue

        if ch == "?":
            flush()
            chunks.append(Placeholder(index=position))
            position += 1
            i += 1
            continue

        buf.append(ch)
        i += 1

    flush()
    return ParsedSQL(chunks=tuple(chunks))


def normalize_named(params: Mapping[str, Any]) -> dict[str, Any]:
    """Strip the optional leading ``:`` from parameter names."""
    normalized: dict[str, Any] = {}
    for key, value in params.items():
        if not isinstance(key, str):
            raise ExecutionError(f"Parameter names must be strings, got {key!r}")
        name = key[1:] if key.startswith(":") else key
        if name in normalized:
            raise ExecutionError(f"Parameter {name!r} given more than once")
        normalized[name] = value
    return normalized


def check_named(parsed: ParsedSQL, params: Mapping[str, Any]) -> None:
    """Require the parameter names to match the placeholders exactly."""
    expected = set(parsed.names)
    given = set(params)
    missing = sorted(expected - given)
    unexpected = sorted(given - expected)
    if missing or unexpected:
        details = []
        if missing:
            details.append(f"missing {', '.join(missing)}")
        if unexpected:
            details.append(f"unexpected {', '.join(unexpected)}")
        raise ExecutionError(f"Parameter set does not match placeholders: {'; '.join(details)}")


def check_positional(parsed: ParsedSQL, values: Sequence[Any]) -> None:
    """Require one value per ``?`` placeholder."""
    if parsed.positional_count != len(values):
        raise ExecutionError(
            f"Statement has {parsed.positional_count} positional placeholder(s), "
            f"got {len(values)} value(s)"
        )


def _coerce(value: Any, param_type: ParamType, position: int) -> Any:
    if value is None or param_type is ParamType.NULL:
        return None
    try:
        match param_type:
            case ParamType.STRING:
                if isinstance(value, (bytes, bytearray, memoryview)):
                    return bytes(value).decode("utf-8")
                return str(value)
            case ParamType.INTEGER:
                return int(value)
            case ParamType.BINARY:
                if isinstance(value, str):
                    return value.encode("utf-8")
                if isinstance(value, (bytes, bytearray, memoryview)):
                    return bytes(value)
                raise TypeError(f"cannot bind {type(value).__name__} as binary")
    except (TypeError, ValueError, UnicodeDecodeError) as e:
        raise ExecutionError(
            f"Cannot bind parameter {position} as {param_type.value}: {e}",
            cause=e,
        ) from e
    raise ExecutionError(f"Unknown parameter type {param_type!r}")


def bind_typed(params: Sequence[Any], types: TypeHints) -> tuple[Any, ...]:
    """Bind ``params`` by 1-based ordinal position with declared storage types.

    ``types`` is either a mapping ``{position: ParamType}`` or a sequence
    aligned with ``params`` where ``None`` keeps the inferred type.
    """
    if isinstance(params, Mapping):
        raise ExecutionError("Type hints require ordinal parameters, got a named parameter set")
    if isinstance(params, (str, bytes)):
        raise ExecutionError("Parameters must be a sequence of values, not a string")

    values = list(params)
    if types is None:
        return tuple(values)

    if isinstance(types, Mapping):
        hints = dict(types)
    else:
        if len(types) > len(values):
            raise ExecutionError(f"Got {len(types)} type hint(s) for {len(values)} parameter(s)")
        hints = {i: t for i, t in enumerate(types, start=1) if t is not None}

    for position, param_type in hints.items():
        if not isinstance(position, int) or not 1 <= position <= len(values):
            raise ExecutionError(f"Type hint position {position!r} is out of range 1..{len(values)}")
        try:
            param_type = ParamType(param_type)
        except ValueError as e:
            raise ExecutionError(f"Unknown parameter type {param_type!r}", cause=e) from e
        values[position - 1] = _coerce(values[position - 1], param_type, position)

    return tuple(values)


__all__ = [
    "ParamType",
    "Placeholder",
    "ParsedSQL",
    "Params",
    "TypeHints",
    "parse_sql",
    "normalize_named",
    "check_named",
    "check_positional",
    "bind_typed",
]
