"""Database types and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote

from dbspine.errors import ConfigError


class DatabaseType(str, Enum):
    """Supported database types."""

    SQLITE = "sqlite"
    MYSQL = "mysql"


@dataclass
class DatabaseConfig:
    """
    Configuration for database connection.

    Different fields are used by different database types.
    """

    # Common
    db_type: DatabaseType = DatabaseType.SQLITE

    # SQLite
    path: str | None = None
    timeout: float = 5.0

    # MySQL
    host: str = "localhost"
    port: int = 3306
    socket: str | None = None
    database: str = ""
    username: str | None = None
    password: str | None = None
    charset: str = "utf8mb4"

    # Options
    connect_timeout: int = 10
    readonly: bool = False

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)

    def to_connection_string(self, *, redact: bool = True) -> str:
        """Generate a DSN for the database type.

        The password is replaced by ``***`` unless ``redact=False``.
        """
        match self.db_type:
            case DatabaseType.SQLITE:
                return f"sqlite:///{self.path or ':memory:'}"
            case DatabaseType.MYSQL:
                auth = ""
                if self.username:
                    auth = quote(self.username, safe="")
                    if self.password:
                        auth += ":" + ("***" if redact else quote(self.password, safe=""))
                    auth += "@"
                if self.socket:
                    return f"mysql://{auth}localhost/{self.database}?unix_socket={self.socket}"
                return f"mysql://{auth}{self.host}:{self.port}/{self.database}"
            case _:
                raise ConfigError(f"Connection string not supported for: {self.db_type}")


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
