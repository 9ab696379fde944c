"""
Provision the exchange store.

Usage:
    python -m src.main provision                      # schemas, custody + order tables
    python -m src.main provision --with-peers         # also the peer directory
    python -m src.main provision --auction-id <hex>   # also tables for one auction
    python -m src.main pairs                          # print derived pairs, no store access
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config.loader import ConfigLoader
from .config.settings import AppConfig
from .custody import Coin, StoreError, connect_from_config, generate_asset_pairs
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)


def coins_from_config(config: AppConfig) -> List[Coin]:
    return [Coin(name=coin.name, ticker=coin.ticker) for coin in config.coins]


def provision(config: AppConfig, auction_id: Optional[str] = None, with_peers: bool = False) -> int:
    """Run exchange setup against the configured store. Returns an exit code."""
    coins = coins_from_config(config)

    try:
        with connect_from_config(config.database) as db:
            db.setup_client(coins)
            if with_peers:
                db.setup_peer_tables()
            if auction_id:
                db.setup_auction_tables(auction_id)

            for pair in db.get_pairs():
                print(pair)
    except StoreError as e:
        logger.error(f"Exchange store setup failed: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid argument: {e}")
        return 2

    logger.info("Exchange store provisioned")
    return 0


def print_pairs(config: AppConfig) -> int:
    try:
        pairs = generate_asset_pairs(coins_from_config(config))
    except StoreError as e:
        logger.error(f"{e}")
        return 1

    for pair in pairs:
        print(pair)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Provision the exchange custody store',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        '--config-dir',
        type=Path,
        default=None,
        help='Directory holding config.yaml (default: ./config)'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    provision_parser = subparsers.add_parser('provision', help='Create schemas and tables')
    provision_parser.add_argument(
        '--auction-id',
        type=str,
        default=None,
        help='Hex encoded 32-byte auction id to create auction tables for'
    )
    provision_parser.add_argument(
        '--with-peers',
        action='store_true',
        help='Also create the peer directory table'
    )

    subparsers.add_parser('pairs', help='Print the pairs derived from the configured coins')

    args = parser.parse_args(argv)

    config = ConfigLoader(config_dir=args.config_dir).load_app_config()
    setup_logging(
        log_level=config.system.log_level,
        log_file=str(config.system.log_file) if config.system.log_file else None,
        json_format=config.system.json_logs,
    )

    if args.command == 'provision':
        return provision(config, auction_id=args.auction_id, with_peers=args.with_peers)
    return print_pairs(config)


if __name__ == "__main__":
    sys.exit(main())
