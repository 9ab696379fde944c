"""
Bootstrap manager - schema creation and table group orchestration.

Bring-up order:
1. privileged connection creates the schemas, then is closed
2. operating connection is opened and pinged
3. custody tables (balance, deposit, pending deposit)
4. exchange tables (order books)

Peer and auction tables are set up later, on demand.
"""

import binascii
import logging
import re
import socket
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence, Union

from ...config.settings import SchemaNames
from ..errors import AddressResolutionError, SchemaCreationError
from .connectors import Connector, Credentials, ResolvedAddress
from .provisioning import GenerationStrategy, TableGroup, TableProvisioner
from .schema import (
    AUCTION_ORDER_TABLE,
    BALANCE_TABLE,
    DEPOSIT_TABLE,
    ORDER_TABLE,
    PEER_TABLE,
    PENDING_DEPOSIT_TABLE,
    PUZZLE_TABLE,
)

logger = logging.getLogger(__name__)


AUCTION_ID_SIZE = 32
AUCTION_ID_HEX = re.compile(r"[0-9a-fA-F]{%d}" % (AUCTION_ID_SIZE * 2))


def resolve_tcp_address(host: str, port: int) -> ResolvedAddress:
    """
    Resolve host:port to a TCP address.

    Raises:
        AddressResolutionError: If the address cannot be resolved
    """
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError, OverflowError, TypeError) as e:
        raise AddressResolutionError(
            f"Error resolving database address {host}:{port}: {e}"
        ) from e

    if not infos:
        raise AddressResolutionError(f"No address found for database {host}:{port}")

    resolved_host, resolved_port = infos[0][4][:2]
    return ResolvedAddress(host=resolved_host, port=resolved_port)


def auction_table_name(auction_id: Union[bytes, bytearray, str]) -> str:
    """
    Puzzle table name for an auction: lowercase hex of the 32-byte id.

    Args:
        auction_id: 32 raw bytes, or their 64-character hex encoding

    Raises:
        ValueError: If the id is not exactly 32 bytes or 64 hex characters
    """
    if isinstance(auction_id, str):
        if not AUCTION_ID_HEX.fullmatch(auction_id):
            raise ValueError(
                f"Auction id must be {AUCTION_ID_SIZE * 2} hex characters: {auction_id!r}"
            )
        auction_id = bytes.fromhex(auction_id)

    if len(auction_id) != AUCTION_ID_SIZE:
        raise ValueError(
            f"Auction id must be {AUCTION_ID_SIZE} bytes, got {len(auction_id)}"
        )
    return binascii.hexlify(bytes(auction_id)).decode("ascii")


class BootstrapManager:
    """
    Creates schemas with a short-lived privileged connection and lays out
    the table groups of the exchange.

    Example:
        manager = BootstrapManager(connector, credentials, address, SchemaNames())
        manager.init_schemas(manager.schemas.client_schemas())
        conn = manager.open_client_connection()
    """

    def __init__(
        self,
        connector: Connector,
        credentials: Credentials,
        address: ResolvedAddress,
        schemas: SchemaNames,
        root_credentials: Optional[Credentials] = None
    ):
        self.connector = connector
        self.credentials = credentials
        self.address = address
        self.schemas = schemas
        self.root_credentials = root_credentials or credentials

    @contextmanager
    def privileged_connection(self) -> Iterator[Any]:
        """Pinged privileged connection, closed on every exit path."""
        conn = self.connector.connect(self.root_credentials, self.address)
        try:
            self.connector.ping(conn)
            yield conn
        finally:
            self.connector.close_connection(conn)
            logger.debug("Closed privileged connection")

    def init_schemas(self, schema_names: Sequence[str]) -> None:
        """
        Create schemas if they do not exist.

        Raises:
            StoreConnectionError: If the privileged connection fails
            SchemaCreationError: On the first schema that cannot be created
        """
        dialect = self.connector.dialect
        with self.privileged_connection() as conn:
            for schema in schema_names:
                try:
                    self.connector.execute(conn, dialect.create_schema(schema))
                except self.connector.errors as e:
                    raise SchemaCreationError(schema, f"Could not create schema: {e}") from e
                logger.debug(f"Schema {schema} ready", extra={'schema': schema})

        logger.info(f"Initialized schemas: {', '.join(schema_names)}")

    def open_client_connection(self) -> Any:
        """Operating connection, no schema selected."""
        conn = self.connector.connect(self.credentials, self.address)
        logger.info(f"Opened {self.connector.name} client connection to {self.address}")
        return conn

    def verify(self, conn: Any) -> None:
        self.connector.ping(conn)

    # ------------------------------------------------------------------
    # Table groups
    # ------------------------------------------------------------------

    def custody_groups(self) -> List[TableGroup]:
        """Funds tracking tables. Only pending deposits are reset."""
        return [
            TableGroup("balance", self.schemas.balance, BALANCE_TABLE,
                       GenerationStrategy.PER_COIN),
            TableGroup("deposit", self.schemas.deposit, DEPOSIT_TABLE,
                       GenerationStrategy.PER_COIN),
            TableGroup("pending deposit", self.schemas.pending_deposit, PENDING_DEPOSIT_TABLE,
                       GenerationStrategy.PER_COIN_DESTRUCTIVE),
        ]

    def exchange_groups(self) -> List[TableGroup]:
        return [
            TableGroup("order", self.schemas.order, ORDER_TABLE,
                       GenerationStrategy.PER_PAIR),
        ]

    def auction_groups(self, auction_id: Union[bytes, bytearray, str]) -> List[TableGroup]:
        return [
            TableGroup("auction order", self.schemas.auction_order, AUCTION_ORDER_TABLE,
                       GenerationStrategy.PER_PAIR),
            TableGroup("puzzle", self.schemas.puzzle, PUZZLE_TABLE,
                       GenerationStrategy.SINGLETON, table=auction_table_name(auction_id)),
        ]

    def peer_groups(self, schema: Optional[str] = None, table: Optional[str] = None) -> List[TableGroup]:
        return [
            TableGroup("peer", schema or self.schemas.peer, PEER_TABLE,
                       GenerationStrategy.SINGLETON, table=table or self.schemas.peer_table),
        ]

    def provision_groups(self, provisioner: TableProvisioner, groups: Sequence[TableGroup]) -> List[str]:
        """
        Provision groups in order, stopping at the first failure.

        Returns:
            Qualified names (schema.table) of every table provisioned
        """
        created = []
        for group in groups:
            names = provisioner.provision_group(group)
            created.extend(f"{group.schema}.{name}" for name in names)
            logger.info(
                f"Initialized {group.name} tables in {group.schema}: {len(names)}",
                extra={'schema': group.schema, 'strategy': group.strategy.value},
            )
        return created
