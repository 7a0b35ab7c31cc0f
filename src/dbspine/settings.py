"""Environment-driven database settings.

``DatabaseSettings`` collects everything needed to open a connection from
environment variables (``DBSPINE_*``) or a ``.env`` file, so credentials never
have to be hard-coded next to the queries that use them.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked when the settings are built
    - **Environment-driven:** Reads from env vars and .env files
    - **Secrets stay secret:** ``password`` is a ``SecretStr`` and never
      shows up in ``repr()`` or logs
    - **URL wins:** ``DBSPINE_URL`` overrides the discrete fields

Examples:
    >>> import os
    >>> os.environ["DBSPINE_DRIVER"] = "mysql"
    >>> os.environ["DBSPINE_HOST"] = "db.internal"
    >>> settings = DatabaseSettings()
    >>> settings.port
    3306

Tags:
    settings, configuration, pydantic, environment, dbspine
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Connection and logging settings.

    Fields
    ──────
    url              : Full DSN; when set, the discrete fields are ignored
    driver           : ``sqlite`` or ``mysql``
    path             : SQLite database file (``:memory:`` for RAM)
    host / port      : MySQL TCP endpoint
    socket           : MySQL unix-domain socket; wins over host/port
    database         : MySQL schema name
    user / password  : MySQL credentials
    charset          : MySQL connection charset
    connect_timeout  : Seconds to wait when opening the connection
    log_level        : Structlog log level
    json_logs        : Force JSON (True) / console (False) / auto (None)
    """

    model_config = SettingsConfigDict(
        env_prefix="DBSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Connection ───────────────────────────────────────────────
    url: str | None = None
    driver: Literal["sqlite", "mysql"] = "sqlite"

    # SQLite
    path: str = ":memory:"

    # MySQL
    host: str = "localhost"
    port: int = Field(default=3306, ge=1, le=65535)
    socket: str | None = None
    database: str = ""
    user: str | None = None
    password: SecretStr | None = None
    charset: str = "utf8mb4"
    connect_timeout: int = Field(default=10, ge=1)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None


__all__ = [
    "DatabaseSettings",
]
