"""
Exchange custody store - schema provisioning and last price cache.

This package provides:
- ExchangeDB: Handle owning the operating connection, coins, pairs and prices
- create_connection: Resolve the store address and build an ExchangeDB
- PriceCache: Lock-guarded last traded price cache
- Coin / Pair / generate_asset_pairs: Assets and pair derivation

Example:
    from src.custody import Coin, create_connection

    db = create_connection("opencx", "secret", "localhost", 3306)
    db.setup_client([Coin("testnet3", "btc"), Coin("litetest4", "ltc")])
    db.set_price("btc_ltc", 12.5)
"""

from .assets import Coin, Pair, generate_asset_pairs
from .errors import (
    AddressResolutionError,
    PairDerivationError,
    PriceNotFoundError,
    SchemaCreationError,
    StoreConnectionError,
    StoreError,
    TableCreationError,
)
from .exchange_db import ExchangeDB, connect_from_config, create_connection
from .price_cache import PriceCache

__all__ = [
    # Facade
    "ExchangeDB",
    "create_connection",
    "connect_from_config",
    # Assets
    "Coin",
    "Pair",
    "generate_asset_pairs",
    # Prices
    "PriceCache",
    # Errors
    "StoreError",
    "AddressResolutionError",
    "StoreConnectionError",
    "SchemaCreationError",
    "TableCreationError",
    "PairDerivationError",
    "PriceNotFoundError",
]
