"""
Structured error types for dbspine.

Every error raised by dbspine extends :class:`DbSpineError` and carries the
metadata callers need to decide what to do next:

- **Category:** What kind of failure (database, result, validation, config)
- **Retryable:** Whether repeating the same call may succeed
- **Code:** Stable machine-readable identifier (``database.result.empty``)
- **Context:** The SQL text and parameters involved
- **Cause:** The underlying driver exception, chained as ``__cause__``

Manifesto:
    - **Classify, never swallow:** The contract layer only annotates errors
    - **Driver faults vs. cardinality:** A query that matched zero or many
      rows is an expected, structurally detectable condition and gets its
      own error kind; a broken statement is a ``DatabaseError``
    - **Chain the cause:** The original driver exception is always kept

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                        DbSpineError                          │
        │          (category, retryable, code, context, cause)         │
        ├──────────────────────────────────────────────────────────────┤
        │  DatabaseError        ResultError         ValidationError    │
        │  (DATABASE)           (RESULT)            (VALIDATION)       │
        │       │                    │                    │            │
        │  ExecutionError       NoResultError       TypeMismatchError  │
        │  TransactionError     TooManyResults      BuilderError       │
        │  DatabaseConnection                                          │
        │                                                              │
        │  ConfigError (CONFIG)                                        │
        └──────────────────────────────────────────────────────────────┘

Examples:
    >>> error = NoResultError().with_context(sql="SELECT 1", parameters={})
    >>> error.code
    'database.result.empty'
    >>> error.to_dict()["context"]["sql"]
    'SELECT 1'

    >>> try:
    ...     raise sqlite3.OperationalError("no such table: t")
    ... except sqlite3.OperationalError as e:
    ...     raise DatabaseError("Database error", cause=e)
    Traceback (most recent call last):
    ...
    DatabaseError: Database error

Guardrails:
    ❌ DON'T: Raise bare ``Exception`` from dbspine code
    ✅ DO: Pick the most specific DbSpineError subclass

    ❌ DON'T: Drop the driver exception when wrapping
    ✅ DO: Pass it as ``cause=``

Tags:
    error-handling, exception-hierarchy, error-context, dbspine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        DATABASE: Driver faults, connection loss, transaction misuse
        RESULT: Result cardinality violations (zero or too many rows)
        VALIDATION: Bad input detected before reaching the driver
        CONFIG: Missing driver, unsupported URL, invalid settings
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    DATABASE = "DATABASE"
    RESULT = "RESULT"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    ``sql`` and ``parameters`` are the statement that failed; anything else
    goes to ``metadata``. ``to_dict()`` only emits fields that are set.
    """

    sql: str | None = None
    parameters: Any = None
    table: str | None = None
    backend: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["sql", "parameters", "table", "backend"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DbSpineError(Exception):
    """
    Base exception for all dbspine errors.

    Subclasses set ``default_category``, ``default_retryable`` and
    ``default_code``; instances may override all three.

    Examples:
        >>> error = DbSpineError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False
    default_code: str = "dbspine.error"
    default_message: str = "dbspine error"

    def __init__(
        self,
        message: str | None = None,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        code: str | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.code = code or self.default_code
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DbSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ExecutionError("Bind failed").with_context(
                sql=sql,
                parameters=params,
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(DbSpineError):
    """
    Driver-level fault: syntax error, constraint violation, connectivity.

    Raised by the result contract layer for any failure that is not a
    cardinality violation. The driver exception is available as ``cause``.
    """

    default_category = ErrorCategory.DATABASE
    default_retryable = False
    default_code = "database.general.error"
    default_message = "Database error"


class ExecutionError(DatabaseError):
    """Statement could not be prepared, bound or run by the query executor."""

    default_code = "database.execution.error"
    default_message = "Statement execution failed"


class TransactionError(DatabaseError):
    """Transaction misuse, e.g. starting a transaction inside another one."""

    default_code = "database.transaction.error"
    default_message = "Transaction error"


class DatabaseConnectionError(DatabaseError):
    """Connection could not be opened."""

    default_retryable = True
    default_code = "database.connection.error"
    default_message = "Failed to connect to database"


# =============================================================================
# RESULT CARDINALITY ERRORS
# =============================================================================


class ResultError(DbSpineError):
    """A single-row fetch did not match exactly one row."""

    default_category = ErrorCategory.RESULT
    default_retryable = False


class NoResultError(ResultError):
    """
    A single-row fetch matched zero rows.

    Recoverable by the caller: fall back to a default or report "not found".
    """

    default_code = "database.result.empty"
    default_message = "Query returned no result"


class TooManyResultsError(ResultError):
    """
    A single-row fetch matched more than one row.

    Indicates a non-unique predicate on a lookup that expects uniqueness.
    Never resolved by picking a row.
    """

    default_code = "database.result.too_many"
    default_message = "Query returned more than one result"

    def __init__(self, message: str | None = None, *, count: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.count = count

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.count is not None:
            result["count"] = self.count
        return result


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(DbSpineError):
    """
    Input rejected before reaching the driver.

    Never retryable - the input must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False
    default_code = "dbspine.validation.error"
    default_message = "Validation error"

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class TypeMismatchError(ValidationError):
    """A typed Record accessor found a value of another type."""

    default_code = "dbspine.record.type_mismatch"
    default_message = "Column value has an unexpected type"


class BuilderError(ValidationError):
    """CRUD helper input cannot produce a well-formed statement."""

    default_code = "dbspine.builder.error"
    default_message = "Cannot build statement"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(DbSpineError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False
    default_code = "dbspine.config.error"
    default_message = "Configuration error"


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, DbSpineError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, DbSpineError):
        return error.category
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    # Category enum
    "ErrorCategory",
    # Context
    "ErrorContext",
    # Base
    "DbSpineError",
    # Database
    "DatabaseError",
    "ExecutionError",
    "TransactionError",
    "DatabaseConnectionError",
    # Result
    "ResultError",
    "NoResultError",
    "TooManyResultsError",
    # Validation
    "ValidationError",
    "TypeMismatchError",
    "BuilderError",
    # Config
    "ConfigError",
    # Utilities
    "is_retryable",
    "categorize_error",
]
