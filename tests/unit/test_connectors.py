"""
Unit tests for store connectors and address helpers.
"""

from unittest.mock import MagicMock, patch

import pymysql
import pytest

from src.custody import StoreConnectionError
from src.custody.storage import (
    Credentials,
    DuckDBConnector,
    MySQLConnector,
    ResolvedAddress,
    auction_table_name,
    resolve_tcp_address,
)


ADDRESS = ResolvedAddress("127.0.0.1", 3306)
CREDENTIALS = Credentials("opencx", "secret")


# ============================================================================
# MySQL
# ============================================================================

def test_mysql_connect_without_default_schema():
    with patch("pymysql.connect") as connect:
        MySQLConnector(connect_timeout=3).connect(CREDENTIALS, ADDRESS)

    kwargs = connect.call_args.kwargs
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 3306
    assert kwargs["user"] == "opencx"
    assert kwargs["password"] == "secret"
    assert kwargs["connect_timeout"] == 3
    assert kwargs["autocommit"] is True
    assert "database" not in kwargs


def test_mysql_connect_failure_is_connection_error():
    with patch("pymysql.connect", side_effect=pymysql.err.OperationalError(2003, "refused")):
        with pytest.raises(StoreConnectionError, match="127.0.0.1:3306"):
            MySQLConnector().connect(CREDENTIALS, ADDRESS)


def test_mysql_ping_failure_is_connection_error():
    conn = MagicMock()
    conn.ping.side_effect = pymysql.err.OperationalError(2006, "gone away")

    with pytest.raises(StoreConnectionError, match="is it running"):
        MySQLConnector().ping(conn)

    conn.ping.assert_called_once_with(reconnect=False)


def test_mysql_execute_uses_cursor():
    conn = MagicMock()
    cursor = conn.cursor.return_value.__enter__.return_value

    MySQLConnector().execute(conn, "USE `orders`;")

    cursor.execute.assert_called_once_with("USE `orders`;")


def test_mysql_close_connection_logs_driver_errors():
    conn = MagicMock()
    conn.close.side_effect = pymysql.err.Error("already closed")

    MySQLConnector().close_connection(conn)

    conn.close.assert_called_once()


# ============================================================================
# DuckDB
# ============================================================================

def test_duckdb_connections_share_catalog(tmp_path):
    connector = DuckDBConnector(str(tmp_path / "nested" / "exchange.duckdb"))
    try:
        root = connector.connect(CREDENTIALS, ADDRESS)
        client = connector.connect(CREDENTIALS, ADDRESS)

        connector.execute(root, 'CREATE SCHEMA IF NOT EXISTS "balances";')
        connector.close_connection(root)

        connector.ping(client)
        schemas = {row[0] for row in client.execute(
            "SELECT schema_name FROM information_schema.schemata"
        ).fetchall()}
        assert "balances" in schemas
        assert connector.dialect.catalog == "exchange"
    finally:
        connector.close()


def test_duckdb_in_memory():
    connector = DuckDBConnector()
    try:
        conn = connector.connect(CREDENTIALS, ADDRESS)
        connector.ping(conn)
        assert connector.dialect.catalog == "memory"
    finally:
        connector.close()


def test_duckdb_ping_closed_connection():
    connector = DuckDBConnector()
    conn = connector.connect(CREDENTIALS, ADDRESS)
    conn.close()
    try:
        with pytest.raises(StoreConnectionError):
            connector.ping(conn)
    finally:
        connector.close()


# ============================================================================
# Addresses and auction ids
# ============================================================================

def test_resolve_numeric_address():
    address = resolve_tcp_address("127.0.0.1", 3306)

    assert address == ResolvedAddress("127.0.0.1", 3306)
    assert str(address) == "127.0.0.1:3306"


def test_ipv6_address_formatting():
    assert str(ResolvedAddress("::1", 3306)) == "[::1]:3306"


def test_auction_table_name_all_zero():
    assert auction_table_name(bytes(32)) == "0" * 64


def test_auction_table_name_is_lowercase_hex():
    auction_id = bytes([0xAB] * 32)

    assert auction_table_name(auction_id) == "ab" * 32
    assert auction_table_name("AB" * 32) == "ab" * 32
    assert auction_table_name(bytearray(auction_id)) == "ab" * 32


@pytest.mark.parametrize("auction_id", [
    b"", bytes(31), bytes(64), "00" * 31, "xyz", "00 " * 32, " " + "00" * 32, "0x" + "00" * 31,
])
def test_auction_table_name_rejects_bad_ids(auction_id):
    with pytest.raises(ValueError):
        auction_table_name(auction_id)
