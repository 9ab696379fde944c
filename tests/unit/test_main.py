"""
Unit tests for the provisioning CLI and logging setup.
"""

import json
import logging

import duckdb
import pytest

from src.main import main
from src.utils.logger import JSONFormatter, PerformanceLogger


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config_dir(tmp_path):
    db_path = tmp_path / "store" / "exchange.duckdb"
    (tmp_path / "config.yaml").write_text(f"""
system:
  log_level: WARNING
database:
  driver: duckdb
  host: 127.0.0.1
  duckdb_path: {db_path}
coins:
  - name: testnet3
    ticker: btc
  - name: litetest4
    ticker: ltc
""")
    return tmp_path


def test_provision_command(config_dir, capsys):
    code = main(["--config-dir", str(config_dir), "provision", "--with-peers",
                 "--auction-id", "00" * 32])

    assert code == 0
    assert capsys.readouterr().out.split() == ["btc_ltc"]

    conn = duckdb.connect(str(config_dir / "store" / "exchange.duckdb"))
    try:
        tables = {
            (schema, table) for schema, table in conn.execute(
                "SELECT table_schema, table_name FROM information_schema.tables "
                "WHERE table_catalog = current_database()"
            ).fetchall()
        }
    finally:
        conn.close()

    assert ("balances", "testnet3") in tables
    assert ("pending_deposits", "litetest4") in tables
    assert ("orders", "btc_ltc") in tables
    assert ("peers", "opencxpeers") in tables
    assert ("auctionorders", "btc_ltc") in tables
    assert ("puzzle", "0" * 64) in tables


def test_provision_bad_auction_id(config_dir):
    code = main(["--config-dir", str(config_dir), "provision", "--auction-id", "1234"])

    assert code == 2


def test_pairs_command(config_dir, capsys):
    assert main(["--config-dir", str(config_dir), "pairs"]) == 0
    assert capsys.readouterr().out.split() == ["btc_ltc"]


def test_pairs_command_rejects_single_coin(tmp_path):
    (tmp_path / "config.yaml").write_text("coins:\n  - name: testnet3\n    ticker: btc\n")

    assert main(["--config-dir", str(tmp_path), "pairs"]) == 1


def test_json_formatter_includes_context():
    record = logging.LogRecord("custody", logging.INFO, __file__, 10, "created", None, None)
    record.schema = "balances"
    record.table = "testnet3"

    entry = json.loads(JSONFormatter().format(record))

    assert entry["message"] == "created"
    assert entry["schema"] == "balances"
    assert entry["table"] == "testnet3"
    assert "pair" not in entry


def test_performance_timer_logs_on_success(caplog):
    perf = PerformanceLogger(logging.getLogger("test.perf"))

    with caplog.at_level(logging.INFO, logger="test.perf"):
        with perf.timer("setup_custody_tables", schema="balances"):
            pass

    assert "Operation completed: setup_custody_tables" in caplog.text
    assert caplog.records[0].schema == "balances"
