"""
Unit tests for table layouts and SQL dialects.
"""

import pytest

from src.custody.storage import (
    AUCTION_ORDER_TABLE,
    BALANCE_TABLE,
    DEPOSIT_TABLE,
    ORDER_TABLE,
    PEER_TABLE,
    PENDING_DEPOSIT_TABLE,
    PUZZLE_TABLE,
    Column,
    ColumnType,
    DuckDBDialect,
    MySQLDialect,
)


@pytest.fixture
def mysql():
    return MySQLDialect()


@pytest.fixture
def duck():
    return DuckDBDialect()


def test_balance_layout_mysql(mysql):
    assert BALANCE_TABLE.render(mysql) == "`pubkey` VARBINARY(66), `balance` BIGINT"


def test_deposit_layout_has_unique_constraint(mysql, duck):
    assert DEPOSIT_TABLE.render(mysql) == (
        "`pubkey` VARBINARY(66), `address` VARCHAR(34), "
        "CONSTRAINT `unique_pubkeys` UNIQUE (`pubkey`, `address`)"
    )
    assert DEPOSIT_TABLE.render(duck).endswith('UNIQUE ("pubkey", "address")')


def test_pending_deposit_layout(mysql):
    assert PENDING_DEPOSIT_TABLE.column_names == (
        "pubkey", "expected_confirm_height", "deposit_height", "amount", "txid"
    )
    rendered = PENDING_DEPOSIT_TABLE.render(mysql)
    assert "`expected_confirm_height` INT UNSIGNED" in rendered
    assert "`amount` BIGINT" in rendered
    assert "`txid` TEXT" in rendered


def test_order_price_is_fixed_point(mysql, duck):
    assert "`price` DECIMAL(30,10)" in ORDER_TABLE.render(mysql)
    assert '"price" DECIMAL(30,10)' in ORDER_TABLE.render(duck)


def test_auction_order_extends_order(mysql):
    assert AUCTION_ORDER_TABLE.column_names[:len(ORDER_TABLE.column_names)] == ORDER_TABLE.column_names
    assert AUCTION_ORDER_TABLE.column_names[-3:] == ("auction_id", "nonce", "hashed_order")

    rendered = AUCTION_ORDER_TABLE.render(mysql)
    assert "`auction_id` VARBINARY(64)" in rendered
    assert "`nonce` VARBINARY(4)" in rendered
    assert "`hashed_order` BLOB" in rendered


def test_peer_and_puzzle_layouts(mysql, duck):
    assert PEER_TABLE.render(mysql) == (
        "`lnaddr` VARBINARY(40), `name` TEXT, `netaddr` TEXT, `peer_idx` INT UNSIGNED"
    )
    assert PUZZLE_TABLE.render(duck) == '"encoded_puzzle" BLOB, "selected" BOOLEAN'


def test_duckdb_types(duck):
    rendered = PENDING_DEPOSIT_TABLE.render(duck)

    assert '"pubkey" BLOB' in rendered
    assert '"deposit_height" UINTEGER' in rendered
    assert '"amount" BIGINT' in rendered


def test_identifiers_are_quoted_and_escaped(mysql, duck):
    assert mysql.quote("0000") == "`0000`"
    assert mysql.quote("we`ird") == "`we``ird`"
    assert duck.quote('we"ird') == '"we""ird"'


def test_ddl_statements(mysql):
    assert mysql.create_schema("balances") == "CREATE SCHEMA IF NOT EXISTS `balances`;"
    assert mysql.use_schema("balances") == "USE `balances`;"
    assert mysql.create_table("testnet3", "a BIGINT") == (
        "CREATE TABLE IF NOT EXISTS `testnet3` (a BIGINT);"
    )
    assert mysql.replace_table("testnet3", "a BIGINT") == (
        "CREATE OR REPLACE TABLE `testnet3` (a BIGINT);"
    )
    assert mysql.delete_all("testnet3") == "DELETE FROM `testnet3`;"


def test_duckdb_use_is_catalog_qualified():
    assert DuckDBDialect(catalog="exchange").use_schema("orders") == 'USE "exchange"."orders";'
    assert DuckDBDialect().use_schema("orders") == 'USE "orders";'


def test_sized_types_carry_their_size(mysql):
    column = Column("address", ColumnType.VARCHAR, size=90)

    assert mysql.column_type(column) == "VARCHAR(90)"
