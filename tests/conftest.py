"""
Shared fixtures for exchange store tests.

RecordingConnector stands in for a networked store: it records every
statement, can be told to fail on a statement fragment, and tracks which
connections were closed. DuckDB-backed fixtures exercise real DDL.
"""

import pytest

from src.custody import Coin, StoreConnectionError, create_connection
from src.custody.storage import Connector, DuckDBConnector, MySQLDialect


class FakeDriverError(Exception):
    """Driver level error raised by RecordingConnector."""
    pass


class FakeConnection:
    def __init__(self, conn_id, username):
        self.conn_id = conn_id
        self.username = username
        self.closed = False

    def close(self):
        self.closed = True


class RecordingConnector(Connector):
    """Connector that records statements instead of talking to a store."""

    name = "recording"
    errors = (FakeDriverError,)

    def __init__(self, fail_on=None, fail_connect=False, fail_ping=False):
        self._dialect = MySQLDialect()
        self.fail_on = fail_on
        self.fail_connect = fail_connect
        self.fail_ping = fail_ping
        self.connections = []
        self.statements = []

    @property
    def dialect(self):
        return self._dialect

    def connect(self, credentials, address):
        if self.fail_connect:
            raise StoreConnectionError(f"Error opening database at {address}: refused")
        conn = FakeConnection(len(self.connections), credentials.username)
        self.connections.append(conn)
        return conn

    def ping(self, conn):
        if self.fail_ping:
            raise StoreConnectionError("Could not ping the database, is it running")

    def execute(self, conn, statement):
        if conn.closed:
            raise FakeDriverError("connection closed")
        if self.fail_on and self.fail_on in statement:
            raise FakeDriverError(f"rejected: {statement}")
        self.statements.append((conn.conn_id, statement))

    def statements_on(self, conn_id):
        return [sql for cid, sql in self.statements if cid == conn_id]


@pytest.fixture
def coins():
    """Three coins, giving three pairs."""
    return [
        Coin(name="testnet3", ticker="btc"),
        Coin(name="litetest4", ticker="ltc"),
        Coin(name="vtctest", ticker="vtc"),
    ]


@pytest.fixture
def recording_connector():
    return RecordingConnector()


@pytest.fixture
def make_recording_connector():
    """Factory for RecordingConnector with failure options."""
    return RecordingConnector


@pytest.fixture
def duckdb_path(tmp_path):
    return tmp_path / "exchange.duckdb"


@pytest.fixture
def exchange_db(duckdb_path):
    """ExchangeDB on a temporary DuckDB file, not yet set up."""
    db = create_connection(
        "opencx", "secret", "127.0.0.1", 3306,
        connector=DuckDBConnector(str(duckdb_path)),
    )
    yield db
    db.close()


class StoreInspector:
    """Read-only helpers over a DuckDB connection."""

    def __init__(self, conn):
        self.conn = conn

    def tables(self, schema):
        rows = self.conn.execute(
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = ? AND table_catalog = current_database() "
            "ORDER BY table_name",
            [schema],
        ).fetchall()
        return [row[0] for row in rows]

    def schemas(self):
        rows = self.conn.execute(
            "SELECT schema_name FROM information_schema.schemata "
            "WHERE catalog_name = current_database()"
        ).fetchall()
        return {row[0] for row in rows}

    def count(self, schema, table):
        return self.conn.execute(f'SELECT COUNT(*) FROM "{schema}"."{table}"').fetchone()[0]

    def columns(self, schema, table):
        rows = self.conn.execute(
            "SELECT column_name FROM information_schema.columns "
            "WHERE table_schema = ? AND table_name = ? "
            "AND table_catalog = current_database() "
            "ORDER BY ordinal_position",
            [schema, table],
        ).fetchall()
        return [row[0] for row in rows]


@pytest.fixture
def inspect_store():
    """Build a StoreInspector for a DuckDB connection."""
    return StoreInspector
