"""
Table provisioning engine.

Creates the tables of one schema according to a generation strategy:

- SINGLETON: exactly one named table
- PER_COIN: one table per coin, kept across restarts
- PER_COIN_DESTRUCTIVE: one table per coin, replaced and emptied every time
- PER_PAIR: one table per derived trading pair

The first failing statement aborts the whole group. Tables created before
the failure are left in place.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence

from ..assets import Coin, Pair
from ..errors import SchemaCreationError, TableCreationError
from .connectors import Connector
from .schema import TableSpec

logger = logging.getLogger(__name__)


class GenerationStrategy(str, Enum):
    """How many tables a group produces and how they are created."""
    SINGLETON = "singleton"
    PER_COIN = "per_coin"
    PER_COIN_DESTRUCTIVE = "per_coin_destructive"
    PER_PAIR = "per_pair"


@dataclass(frozen=True)
class TableGroup:
    """
    One logical group of tables to provision.

    Attributes:
        name: Label used in logs and errors (e.g. 'balance')
        schema: Schema the tables live in
        spec: Column layout of every table in the group
        strategy: Generation strategy
        table: Table name, SINGLETON only
    """

    name: str
    schema: str
    spec: TableSpec
    strategy: GenerationStrategy
    table: Optional[str] = None


class TableProvisioner:
    """
    Runs table DDL on the operating connection.

    Example:
        provisioner = TableProvisioner(connector, conn, coins, pairs)
        provisioner.initialize_tables("balances", BALANCE_TABLE.render(connector.dialect))
    """

    def __init__(
        self,
        connector: Connector,
        conn: Any,
        coins: Sequence[Coin] = (),
        pairs: Sequence[Pair] = ()
    ):
        self.connector = connector
        self.conn = conn
        self.coins = list(coins)
        self.pairs = list(pairs)

    def use_schema(self, schema: str) -> None:
        """Select schema as the default for following statements."""
        try:
            self.connector.execute(self.conn, self.connector.dialect.use_schema(schema))
        except self.connector.errors as e:
            raise SchemaCreationError(schema, f"Could not use schema: {e}") from e

    def _table_names(self, strategy: GenerationStrategy, table: Optional[str]) -> List[str]:
        if strategy == GenerationStrategy.SINGLETON:
            if not table:
                raise ValueError("SINGLETON generation needs a table name")
            return [table]
        if strategy in (GenerationStrategy.PER_COIN, GenerationStrategy.PER_COIN_DESTRUCTIVE):
            return [coin.name for coin in self.coins]
        if strategy == GenerationStrategy.PER_PAIR:
            return [str(pair) for pair in self.pairs]
        raise ValueError(f"Unknown generation strategy: {strategy}")

    def _create_table(self, schema: str, table: str, spec: str) -> None:
        dialect = self.connector.dialect
        try:
            self.connector.execute(self.conn, dialect.create_table(table, spec))
        except self.connector.errors as e:
            raise TableCreationError(schema, table, f"Could not create table: {e}") from e

    def _reset_table(self, schema: str, table: str, spec: str) -> None:
        dialect = self.connector.dialect
        try:
            self.connector.execute(self.conn, dialect.replace_table(table, spec))
        except self.connector.errors as e:
            raise TableCreationError(schema, table, f"Could not replace table: {e}") from e
        try:
            self.connector.execute(self.conn, dialect.delete_all(table))
        except self.connector.errors as e:
            raise TableCreationError(
                schema, table, f"Could not delete rows after creating: {e}"
            ) from e

    def provision(
        self,
        schema: str,
        spec: str,
        strategy: GenerationStrategy,
        table: Optional[str] = None
    ) -> List[str]:
        """
        Create the tables of one group.

        Args:
            schema: Schema to create the tables in
            spec: Rendered column-spec string
            strategy: Generation strategy
            table: Table name for SINGLETON

        Returns:
            Names of the tables created, replaced or confirmed present

        Raises:
            SchemaCreationError: If the schema cannot be selected
            TableCreationError: On the first table that fails
        """
        names = self._table_names(strategy, table)
        self.use_schema(schema)

        for name in names:
            if strategy == GenerationStrategy.PER_COIN_DESTRUCTIVE:
                self._reset_table(schema, name, spec)
            else:
                self._create_table(schema, name, spec)

        logger.debug(
            f"Provisioned {len(names)} {strategy.value} table(s) in {schema}",
            extra={'schema': schema, 'strategy': strategy.value},
        )
        return names

    def provision_group(self, group: TableGroup) -> List[str]:
        """Render the group's layout for this store and provision it."""
        spec = group.spec.render(self.connector.dialect)
        return self.provision(group.schema, spec, group.strategy, group.table)

    def initialize_single_table(self, schema: str, table: str, spec: str) -> List[str]:
        return self.provision(schema, spec, GenerationStrategy.SINGLETON, table)

    def initialize_tables(self, schema: str, spec: str) -> List[str]:
        """One table per coin, existing data kept."""
        return self.provision(schema, spec, GenerationStrategy.PER_COIN)

    def initialize_new_tables(self, schema: str, spec: str) -> List[str]:
        """One empty table per coin, previous contents discarded."""
        return self.provision(schema, spec, GenerationStrategy.PER_COIN_DESTRUCTIVE)

    def initialize_pair_tables(self, schema: str, spec: str) -> List[str]:
        return self.provision(schema, spec, GenerationStrategy.PER_PAIR)
