"""
Store connectors - the boundary to the database driver.

A connector opens connections, pings them, runs single statements and
names the driver exceptions it can raise. Everything above it stays
driver independent.

Connectors:
- MySQLConnector: networked MySQL/MariaDB via PyMySQL
- DuckDBConnector: embedded DuckDB file (or :memory:) for local runs and tests
"""

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Tuple, Type

import duckdb
import pymysql

from ..errors import StoreConnectionError
from .dialects import Dialect, DuckDBDialect, MySQLDialect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class ResolvedAddress:
    """TCP address the store listens on, after resolution."""

    host: str
    port: int
    network: str = "tcp"

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


class Connector:
    """Base class for store connectors."""

    name = "base"

    # Driver exceptions that statement execution can raise
    errors: Tuple[Type[BaseException], ...] = ()

    @property
    def dialect(self) -> Dialect:
        raise NotImplementedError

    def connect(self, credentials: Credentials, address: ResolvedAddress) -> Any:
        """
        Open a connection with no default schema selected.

        Raises:
            StoreConnectionError: If the store cannot be opened
        """
        raise NotImplementedError

    def ping(self, conn: Any) -> None:
        """
        Check the store answers on conn.

        Raises:
            StoreConnectionError: If the store is unreachable
        """
        raise NotImplementedError

    def execute(self, conn: Any, statement: str) -> None:
        raise NotImplementedError

    def close_connection(self, conn: Any) -> None:
        try:
            conn.close()
        except self.errors as e:
            logger.warning(f"Error closing {self.name} connection: {e}")

    def close(self) -> None:
        """Release resources shared by all connections of this connector."""
        pass


class MySQLConnector(Connector):
    """
    Networked MySQL / MariaDB store.

    Example:
        connector = MySQLConnector(connect_timeout=5)
        conn = connector.connect(Credentials("opencx", "secret"),
                                 ResolvedAddress("127.0.0.1", 3306))
    """

    name = "mysql"
    errors = (pymysql.MySQLError,)

    def __init__(self, connect_timeout: int = 10, charset: str = "utf8mb4"):
        self.connect_timeout = connect_timeout
        self.charset = charset
        self._dialect = MySQLDialect()

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    def connect(self, credentials: Credentials, address: ResolvedAddress) -> Any:
        try:
            conn = pymysql.connect(
                host=address.host,
                port=address.port,
                user=credentials.username,
                password=credentials.password,
                charset=self.charset,
                connect_timeout=self.connect_timeout,
                autocommit=True,
            )
        except pymysql.MySQLError as e:
            raise StoreConnectionError(f"Error opening database at {address}: {e}") from e

        logger.debug(f"Opened MySQL connection to {address} as {credentials.username}")
        return conn

    def ping(self, conn: Any) -> None:
        try:
            conn.ping(reconnect=False)
        except pymysql.MySQLError as e:
            raise StoreConnectionError(
                f"Could not ping the database, is it running: {e}"
            ) from e

    def execute(self, conn: Any, statement: str) -> None:
        with conn.cursor() as cursor:
            cursor.execute(statement)


class DuckDBConnector(Connector):
    """
    Embedded DuckDB store.

    All connections are cursors on one database instance, so a schema made
    on the privileged connection is visible on the operating one. The
    address and credentials are accepted for interface parity and ignored.

    Example:
        connector = DuckDBConnector("/var/lib/exchange/exchange.duckdb")
    """

    name = "duckdb"
    errors = (duckdb.Error,)

    def __init__(self, database: str = ":memory:"):
        self.database = str(database)
        self._base: Optional[duckdb.DuckDBPyConnection] = None
        self._catalog: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def dialect(self) -> Dialect:
        return DuckDBDialect(catalog=self._catalog)

    def _open_base(self) -> duckdb.DuckDBPyConnection:
        with self._lock:
            if self._base is None:
                if self.database != ":memory:":
                    Path(self.database).parent.mkdir(parents=True, exist_ok=True)
                self._base = duckdb.connect(self.database)
                self._catalog = self._base.execute("SELECT current_database()").fetchone()[0]
                logger.info(f"Opened DuckDB database {self.database} (catalog={self._catalog})")
            return self._base

    def connect(self, credentials: Credentials, address: ResolvedAddress) -> Any:
        try:
            return self._open_base().cursor()
        except duckdb.Error as e:
            raise StoreConnectionError(f"Error opening database {self.database}: {e}") from e

    def ping(self, conn: Any) -> None:
        try:
            conn.execute("SELECT 1").fetchone()
        except duckdb.Error as e:
            raise StoreConnectionError(
                f"Could not ping the database, is it running: {e}"
            ) from e

    def execute(self, conn: Any, statement: str) -> None:
        conn.execute(statement)

    def close(self) -> None:
        with self._lock:
            if self._base is not None:
                self._base.close()
                self._base = None
                logger.info(f"Closed DuckDB database {self.database}")


def build_connector(db_config) -> Connector:
    """
    Create the connector named by a DatabaseConfig.

    Args:
        db_config: DatabaseConfig with driver, duckdb_path, connect_timeout

    Returns:
        Connector instance
    """
    if db_config.driver == "mysql":
        return MySQLConnector(connect_timeout=db_config.connect_timeout)
    if db_config.driver == "duckdb":
        return DuckDBConnector(database=str(db_config.duckdb_path))
    raise ValueError(f"Unknown database driver: {db_config.driver}")
