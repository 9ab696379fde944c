"""
Column layouts for every table kind the exchange keeps.

Layouts are declared once here and rendered to a column-spec string by the
SQL dialect of the active store. The provisioning engine treats the
rendered string as opaque; the store is the only validator.

Tables per kind:
- balance: one per coin (amounts held per public key)
- deposit: one per coin (deposit address assigned to a public key)
- pending deposit: one per coin, emptied on every bring-up
- order: one per pair (spot order book)
- auction order: one per pair (batch auction order book)
- peer: single directory table
- puzzle: one per auction, named after the auction id
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ColumnType(str, Enum):
    """Semantic column types, mapped to concrete types by a dialect."""
    BINARY = "binary"            # bounded binary, needs size
    VARBINARY = "varbinary"      # unbounded binary
    VARCHAR = "varchar"          # bounded text, needs size
    TEXT = "text"
    INT64 = "int64"
    UINT32 = "uint32"
    DECIMAL = "decimal"          # needs precision and scale
    TIMESTAMP = "timestamp"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class Column:
    name: str
    type: ColumnType
    size: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None


@dataclass(frozen=True)
class UniqueConstraint:
    name: str
    columns: Tuple[str, ...]


@dataclass(frozen=True)
class TableSpec:
    """Declarative layout of one table kind."""

    kind: str
    columns: Tuple[Column, ...]
    unique: Tuple[UniqueConstraint, ...] = field(default_factory=tuple)

    def render(self, dialect) -> str:
        """
        Render the column-spec string placed inside CREATE TABLE (...).

        Args:
            dialect: SQL dialect of the target store

        Returns:
            Comma separated column and constraint definitions
        """
        parts = [
            f"{dialect.quote(column.name)} {dialect.column_type(column)}"
            for column in self.columns
        ]
        parts.extend(dialect.unique_constraint(constraint) for constraint in self.unique)
        return ", ".join(parts)

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)


# Public keys are 33-byte compressed keys; 66 leaves room for hex storage
PUBKEY = Column("pubkey", ColumnType.BINARY, size=66)

BALANCE_TABLE = TableSpec(
    kind="balance",
    columns=(
        PUBKEY,
        Column("balance", ColumnType.INT64),
    ),
)

DEPOSIT_TABLE = TableSpec(
    kind="deposit",
    columns=(
        PUBKEY,
        Column("address", ColumnType.VARCHAR, size=34),
    ),
    unique=(UniqueConstraint("unique_pubkeys", ("pubkey", "address")),),
)

PENDING_DEPOSIT_TABLE = TableSpec(
    kind="pending_deposit",
    columns=(
        PUBKEY,
        Column("expected_confirm_height", ColumnType.UINT32),
        Column("deposit_height", ColumnType.UINT32),
        Column("amount", ColumnType.INT64),
        Column("txid", ColumnType.TEXT),
    ),
)

# Prices up to 30 digits total, 10 of them after the decimal point
ORDER_COLUMNS = (
    PUBKEY,
    Column("order_id", ColumnType.TEXT),
    Column("side", ColumnType.TEXT),
    Column("price", ColumnType.DECIMAL, precision=30, scale=10),
    Column("amount_have", ColumnType.INT64),
    Column("amount_want", ColumnType.INT64),
    Column("time", ColumnType.TIMESTAMP),
)

ORDER_TABLE = TableSpec(kind="order", columns=ORDER_COLUMNS)

AUCTION_ORDER_TABLE = TableSpec(
    kind="auction_order",
    columns=ORDER_COLUMNS + (
        Column("auction_id", ColumnType.BINARY, size=64),
        Column("nonce", ColumnType.BINARY, size=4),
        Column("hashed_order", ColumnType.VARBINARY),
    ),
)

PEER_TABLE = TableSpec(
    kind="peer",
    columns=(
        Column("lnaddr", ColumnType.BINARY, size=40),
        Column("name", ColumnType.TEXT),
        Column("netaddr", ColumnType.TEXT),
        Column("peer_idx", ColumnType.UINT32),
    ),
)

# "selected" marks whether the puzzle was picked for the auction batch
PUZZLE_TABLE = TableSpec(
    kind="puzzle",
    columns=(
        Column("encoded_puzzle", ColumnType.VARBINARY),
        Column("selected", ColumnType.BOOLEAN),
    ),
)
