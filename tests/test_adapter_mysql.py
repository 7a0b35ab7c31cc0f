"""Tests for ``dbspine.adapters.mysql`` — MySQL adapter (driver mocked)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import mysql.connector
import pytest

from dbspine.adapters.mysql import MySQLAdapter
from dbspine.adapters.types import DatabaseType
from dbspine.errors import ConfigError, DatabaseConnectionError


class TestMySQLAdapterInit:
    def test_defaults(self):
        adapter = MySQLAdapter()
        assert adapter.db_type == DatabaseType.MYSQL
        assert adapter.config.host == "localhost"
        assert adapter.config.port == 3306
        assert adapter.config.charset == "utf8mb4"
        assert adapter.is_connected is False

    def test_dialect(self):
        assert MySQLAdapter().dialect.name == "mysql"

    def test_repr_hides_password(self):
        adapter = MySQLAdapter(host="db", database="shop", username="app", password="s3cret")
        assert "s3cret" not in repr(adapter)


class TestMySQLAdapterConnect:
    @patch("mysql.connector.connect")
    def test_connect_over_tcp(self, mock_connect):
        adapter = MySQLAdapter(host="db", port=3307, database="shop", username="app", password="pw")
        adapter.connect()

        assert adapter.is_connected is True
        kwargs = mock_connect.call_args.kwargs
        assert kwargs["host"] == "db"
        assert kwargs["port"] == 3307
        assert kwargs["database"] == "shop"
        assert kwargs["user"] == "app"
        assert kwargs["password"] == "pw"
        assert kwargs["charset"] == "utf8mb4"
        assert kwargs["autocommit"] is True
        assert "unix_socket" not in kwargs

    @patch("mysql.connector.connect")
    def test_connect_over_socket(self, mock_connect):
        adapter = MySQLAdapter(database="shop", username="app", password="pw", unix_socket="/run/mysqld.sock")
        adapter.connect()

        kwargs = mock_connect.call_args.kwargs
        assert kwargs["unix_socket"] == "/run/mysqld.sock"
        assert "host" not in kwargs
        assert "port" not in kwargs

    @patch("mysql.connector.connect")
    def test_extra_options_forwarded(self, mock_connect):
        MySQLAdapter(database="shop", ssl_disabled=True).connect()
        assert mock_connect.call_args.kwargs["ssl_disabled"] is True

    @patch("mysql.connector.connect")
    def test_connect_is_idempotent(self, mock_connect):
        adapter = MySQLAdapter()
        adapter.connect()
        adapter.connect()
        assert mock_connect.call_count == 1

    @patch("mysql.connector.connect", side_effect=mysql.connector.Error("Access denied"))
    def test_connect_failure_raises(self, mock_connect):
        adapter = MySQLAdapter(host="db", database="shop")
        with pytest.raises(DatabaseConnectionError) as exc_info:
            adapter.connect()
        assert exc_info.value.context.backend == "mysql"
        assert isinstance(exc_info.value.cause, mysql.connector.Error)
        assert adapter.is_connected is False

    def test_missing_driver_raises_config_error(self):
        with patch.dict("sys.modules", {"mysql": None, "mysql.connector": None}):
            with pytest.raises(ConfigError, match="mysql-connector-python"):
                MySQLAdapter().connect()


class TestMySQLAdapterConnection:
    @pytest.fixture
    def conn(self):
        with patch("mysql.connector.connect") as mock_connect:
            mock_connect.return_value = MagicMock()
            yield mock_connect.return_value

    def test_cursor_is_buffered(self, conn):
        adapter = MySQLAdapter()
        adapter.cursor()
        conn.cursor.assert_called_once_with(buffered=True)

    def test_begin_starts_transaction(self, conn):
        adapter = MySQLAdapter()
        adapter.begin()
        conn.start_transaction.assert_called_once()

    def test_commit_and_rollback_delegate(self, conn):
        adapter = MySQLAdapter()
        adapter.commit()
        adapter.rollback()
        conn.commit.assert_called_once()
        conn.rollback.assert_called_once()

    def test_in_transaction_reads_connection(self, conn):
        adapter = MySQLAdapter()
        adapter.connect()
        conn.in_transaction = True
        assert adapter.in_transaction is True
        conn.in_transaction = False
        assert adapter.in_transaction is False

    def test_disconnect_closes(self, conn):
        adapter = MySQLAdapter()
        adapter.connect()
        adapter.disconnect()
        conn.close.assert_called_once()
        assert adapter.is_connected is False

    def test_closed_adapter_does_not_reconnect(self, conn):
        adapter = MySQLAdapter()
        adapter.connect()
        adapter.disconnect()

        with pytest.raises(DatabaseConnectionError, match="connection is closed"):
            adapter.begin()
        mysql.connector.connect.assert_called_once()

    def test_driver_errors(self):
        assert MySQLAdapter().driver_errors == (mysql.connector.Error,)
