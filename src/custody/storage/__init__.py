"""
Exchange store layer - connectors, table layouts and provisioning.

This module provides:
- Connectors: MySQLConnector (PyMySQL), DuckDBConnector (embedded)
- Dialects: concrete column types and DDL per store
- Schema: declarative layouts of every table kind
- TableProvisioner: SINGLETON / PER_COIN / PER_COIN_DESTRUCTIVE / PER_PAIR generation
- BootstrapManager: schema creation and table group ordering
"""

from .bootstrap import BootstrapManager, auction_table_name, resolve_tcp_address
from .connectors import (
    Connector,
    Credentials,
    DuckDBConnector,
    MySQLConnector,
    ResolvedAddress,
    build_connector,
)
from .dialects import Dialect, DuckDBDialect, MySQLDialect
from .provisioning import GenerationStrategy, TableGroup, TableProvisioner
from .schema import (
    AUCTION_ORDER_TABLE,
    BALANCE_TABLE,
    DEPOSIT_TABLE,
    ORDER_TABLE,
    PEER_TABLE,
    PENDING_DEPOSIT_TABLE,
    PUZZLE_TABLE,
    Column,
    ColumnType,
    TableSpec,
    UniqueConstraint,
)

__all__ = [
    # Bootstrap
    "BootstrapManager",
    "auction_table_name",
    "resolve_tcp_address",
    # Connectors
    "Connector",
    "Credentials",
    "ResolvedAddress",
    "MySQLConnector",
    "DuckDBConnector",
    "build_connector",
    # Dialects
    "Dialect",
    "MySQLDialect",
    "DuckDBDialect",
    # Provisioning
    "GenerationStrategy",
    "TableGroup",
    "TableProvisioner",
    # Table layouts
    "Column",
    "ColumnType",
    "TableSpec",
    "UniqueConstraint",
    "BALANCE_TABLE",
    "DEPOSIT_TABLE",
    "PENDING_DEPOSIT_TABLE",
    "ORDER_TABLE",
    "AUCTION_ORDER_TABLE",
    "PEER_TABLE",
    "PUZZLE_TABLE",
]
