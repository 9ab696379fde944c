"""
SQL dialects for the stores the exchange runs on.

A dialect turns semantic column types into concrete ones and renders the
handful of DDL statements provisioning needs. Identifiers are always
quoted: coin names and auction ids (hex, possibly all digits) are not
guaranteed to be valid bare identifiers.
"""

from typing import Optional

from .schema import Column, ColumnType, UniqueConstraint


class Dialect:
    """Base dialect, ANSI-style double quoted identifiers."""

    name = "ansi"
    quote_char = '"'

    def quote(self, identifier: str) -> str:
        q = self.quote_char
        return f"{q}{identifier.replace(q, q + q)}{q}"

    def column_type(self, column: Column) -> str:
        raise NotImplementedError

    def unique_constraint(self, constraint: UniqueConstraint) -> str:
        columns = ", ".join(self.quote(name) for name in constraint.columns)
        return f"CONSTRAINT {self.quote(constraint.name)} UNIQUE ({columns})"

    def create_schema(self, schema: str) -> str:
        return f"CREATE SCHEMA IF NOT EXISTS {self.quote(schema)};"

    def use_schema(self, schema: str) -> str:
        return f"USE {self.quote(schema)};"

    def create_table(self, table: str, spec: str) -> str:
        return f"CREATE TABLE IF NOT EXISTS {self.quote(table)} ({spec});"

    def replace_table(self, table: str, spec: str) -> str:
        return f"CREATE OR REPLACE TABLE {self.quote(table)} ({spec});"

    def delete_all(self, table: str) -> str:
        return f"DELETE FROM {self.quote(table)};"


class MySQLDialect(Dialect):
    """MySQL / MariaDB. CREATE OR REPLACE TABLE needs MariaDB 10.0.8+."""

    name = "mysql"
    quote_char = "`"

    def column_type(self, column: Column) -> str:
        if column.type == ColumnType.BINARY:
            return f"VARBINARY({column.size})"
        if column.type == ColumnType.VARBINARY:
            # VARBINARY requires a length in MySQL
            return "BLOB"
        if column.type == ColumnType.VARCHAR:
            return f"VARCHAR({column.size})"
        if column.type == ColumnType.TEXT:
            return "TEXT"
        if column.type == ColumnType.INT64:
            return "BIGINT"
        if column.type == ColumnType.UINT32:
            return "INT UNSIGNED"
        if column.type == ColumnType.DECIMAL:
            return f"DECIMAL({column.precision},{column.scale})"
        if column.type == ColumnType.TIMESTAMP:
            return "TIMESTAMP NULL"
        if column.type == ColumnType.BOOLEAN:
            return "BOOLEAN"
        raise ValueError(f"Unsupported column type for {self.name}: {column.type}")


class DuckDBDialect(Dialect):
    """
    DuckDB (embedded).

    Args:
        catalog: Attached database name; qualifies USE so a schema never
            resolves to a catalog of the same name
    """

    name = "duckdb"

    def __init__(self, catalog: Optional[str] = None):
        self.catalog = catalog

    def column_type(self, column: Column) -> str:
        if column.type in (ColumnType.BINARY, ColumnType.VARBINARY):
            return "BLOB"
        if column.type == ColumnType.VARCHAR:
            return "VARCHAR"
        if column.type == ColumnType.TEXT:
            return "TEXT"
        if column.type == ColumnType.INT64:
            return "BIGINT"
        if column.type == ColumnType.UINT32:
            return "UINTEGER"
        if column.type == ColumnType.DECIMAL:
            return f"DECIMAL({column.precision},{column.scale})"
        if column.type == ColumnType.TIMESTAMP:
            return "TIMESTAMP"
        if column.type == ColumnType.BOOLEAN:
            return "BOOLEAN"
        raise ValueError(f"Unsupported column type for {self.name}: {column.type}")

    def unique_constraint(self, constraint: UniqueConstraint) -> str:
        columns = ", ".join(self.quote(name) for name in constraint.columns)
        return f"UNIQUE ({columns})"

    def use_schema(self, schema: str) -> str:
        if self.catalog:
            return f"USE {self.quote(self.catalog)}.{self.quote(schema)};"
        return f"USE {self.quote(schema)};"
