"""
Exchange database handle.

ExchangeDB owns the operating connection, the coin list, the pairs derived
from it and the last price cache. Matching, settlement, peer storage and
auction code all work through one shared instance.

Lifecycle:
    db = create_connection("opencx", "secret", "localhost", 3306)
    db.setup_client(coins)            # schemas, custody + order tables
    db.setup_peer_tables()            # when peer storage starts
    db.setup_auction_tables(auction_id)
    db.set_price("btc_ltc", 12.5)
    db.close()

Setup runs once, before concurrent use. Only the price cache is safe to
share between threads while the exchange is running.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple, Union

from ..config.settings import DatabaseConfig, SchemaNames
from ..utils.logger import get_performance_logger
from .assets import Coin, Pair, PairGenerator, generate_asset_pairs
from .errors import PairDerivationError, StoreConnectionError, StoreError
from .price_cache import PairKey, PriceCache
from .storage.bootstrap import BootstrapManager, resolve_tcp_address
from .storage.connectors import Connector, Credentials, ResolvedAddress, build_connector
from .storage.provisioning import TableProvisioner

logger = logging.getLogger(__name__)
perf = get_performance_logger(__name__)


class ExchangeDB:
    """
    Long-lived handle to the exchange store.

    Args:
        credentials: Operating user credentials
        address: Resolved store address
        config: Database configuration (schema names, driver, root user)
        connector: Store connector, built from config when omitted
        pair_generator: Capability deriving pairs from the coin list
    """

    def __init__(
        self,
        credentials: Credentials,
        address: ResolvedAddress,
        config: Optional[DatabaseConfig] = None,
        connector: Optional[Connector] = None,
        pair_generator: PairGenerator = generate_asset_pairs
    ):
        self.config = config or DatabaseConfig()
        self.connector = connector or build_connector(self.config)
        self.credentials = credentials
        self.address = address
        self.pair_generator = pair_generator

        root_credentials = None
        if self.config.root_username:
            root_password = self.config.root_password or self.config.password
            root_credentials = Credentials(
                self.config.root_username, root_password.get_secret_value()
            )

        self.bootstrap = BootstrapManager(
            connector=self.connector,
            credentials=credentials,
            address=address,
            schemas=self.config.schemas,
            root_credentials=root_credentials,
        )

        self.handler: Any = None
        self.coins: List[Coin] = []
        self.pairs: List[Pair] = []
        self.price_cache = PriceCache()
        self._ready = False

    @property
    def schemas(self) -> SchemaNames:
        return self.config.schemas

    @property
    def is_ready(self) -> bool:
        """True once setup_client has finished successfully."""
        return self._ready

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def setup_client(self, coins: Sequence[Coin]) -> None:
        """
        Create schemas, open the operating connection and provision the
        custody and order tables.

        Args:
            coins: Coins supported by the exchange

        Raises:
            StoreConnectionError: If the store cannot be opened or pinged
            SchemaCreationError: If a schema cannot be created
            PairDerivationError: If pairs cannot be derived from coins
            TableCreationError: On the first table that cannot be created
        """
        self._ready = False
        self.price_cache = PriceCache()
        self.coins = []
        self.pairs = []

        phase = "root schemas"
        try:
            self.bootstrap.init_schemas(self.schemas.client_schemas())

            phase = "client connection"
            if self.handler is not None:
                self.connector.close_connection(self.handler)
                self.handler = None
            self.handler = self.bootstrap.open_client_connection()

            phase = "asset pairs"
            coin_list = list(coins)
            pairs = self._derive_pairs(coin_list)
            self.coins, self.pairs = coin_list, pairs

            for i, coin in enumerate(self.coins):
                logger.debug(f"Asset {i}: {coin.name} ({coin.ticker})")
            for i, pair in enumerate(self.pairs):
                logger.debug(f"Pair {i}: {pair}", extra={'pair': str(pair)})

            phase = "connectivity check"
            self.bootstrap.verify(self.handler)

            provisioner = self._client_provisioner()

            phase = "custody tables"
            self._setup_custody_tables(provisioner)

            phase = "exchange tables"
            self._setup_exchange_tables(provisioner)

        except StoreError as e:
            logger.error(f"Error setting up {phase}: {e}")
            raise

        self._ready = True
        logger.info(
            f"Exchange database ready: {len(self.coins)} coins, {len(self.pairs)} pairs"
        )

    def _derive_pairs(self, coins: List[Coin]) -> List[Pair]:
        try:
            pairs = list(self.pair_generator(coins))
        except PairDerivationError:
            raise
        except Exception as e:
            raise PairDerivationError(f"Could not generate asset pairs: {e}") from e

        members = set(coins)
        for pair in pairs:
            if pair.asset_want not in members or pair.asset_have not in members:
                raise PairDerivationError(
                    f"Pair {pair} has a leg outside the coin list"
                )
        return pairs

    def _client_provisioner(self) -> TableProvisioner:
        return TableProvisioner(self.connector, self.handler, self.coins, self.pairs)

    def _provisioner(self) -> TableProvisioner:
        if not self._ready:
            raise StoreConnectionError("Exchange database is not set up, call setup_client first")
        return self._client_provisioner()

    def _setup_custody_tables(self, provisioner: TableProvisioner) -> List[str]:
        with perf.timer("setup_custody_tables"):
            return self.bootstrap.provision_groups(provisioner, self.bootstrap.custody_groups())

    def _setup_exchange_tables(self, provisioner: TableProvisioner) -> List[str]:
        with perf.timer("setup_exchange_tables"):
            return self.bootstrap.provision_groups(provisioner, self.bootstrap.exchange_groups())

    def setup_custody_tables(self) -> List[str]:
        """Balance, deposit and pending deposit tables for every coin."""
        return self._setup_custody_tables(self._provisioner())

    def setup_exchange_tables(self) -> List[str]:
        """Order book table for every pair."""
        return self._setup_exchange_tables(self._provisioner())

    def setup_peer_tables(self, schema: Optional[str] = None, table: Optional[str] = None) -> List[str]:
        """
        Peer directory table used by peer storage.

        Args:
            schema: Peer schema (defaults to the configured one)
            table: Peer table (defaults to the configured one)

        Returns:
            Qualified table names provisioned
        """
        provisioner = self._provisioner()
        with perf.timer("setup_peer_tables"):
            return self.bootstrap.provision_groups(
                provisioner, self.bootstrap.peer_groups(schema, table)
            )

    def setup_auction_tables(self, auction_id: Union[bytes, bytearray, str]) -> List[str]:
        """
        Auction order books for every pair and the puzzle table of one auction.

        Safe to call once per auction; tables of earlier auctions are kept.

        Args:
            auction_id: 32-byte auction id (raw or hex)

        Returns:
            Qualified table names provisioned

        Raises:
            StoreConnectionError: If setup_client has not succeeded
            ValueError: If auction_id is not 32 bytes
        """
        provisioner = self._provisioner()
        groups = self.bootstrap.auction_groups(auction_id)
        self.bootstrap.init_schemas(self.schemas.auction_schemas())

        with perf.timer("setup_auction_tables"):
            return self.bootstrap.provision_groups(provisioner, groups)

    # ------------------------------------------------------------------
    # Prices and pairs
    # ------------------------------------------------------------------

    def get_pairs(self) -> List[Pair]:
        """Pairs derived at setup time."""
        return list(self.pairs)

    def set_price(self, pair: PairKey, price: float) -> None:
        self.price_cache.set_price(pair, price)

    def get_price(self, pair: PairKey) -> float:
        """
        Last traded price of a pair.

        Raises:
            PriceNotFoundError: If no trade has set a price yet
        """
        return self.price_cache.get_price(pair)

    def lookup_price(self, pair: PairKey) -> Tuple[float, bool]:
        return self.price_cache.lookup(pair)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the operating connection and release connector resources."""
        if self.handler is not None:
            self.connector.close_connection(self.handler)
            self.handler = None
        self.connector.close()
        self._ready = False
        logger.info("Exchange database closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_connection(
    username: str,
    password: str,
    host: str,
    port: int,
    config: Optional[DatabaseConfig] = None,
    connector: Optional[Connector] = None,
    pair_generator: PairGenerator = generate_asset_pairs
) -> ExchangeDB:
    """
    Resolve the store address and build an ExchangeDB. No connection is
    opened until setup_client.

    Raises:
        AddressResolutionError: If host:port cannot be resolved
    """
    address = resolve_tcp_address(host, port)
    logger.debug(f"Resolved database address {host}:{port} -> {address}")
    return ExchangeDB(
        credentials=Credentials(username, password),
        address=address,
        config=config,
        connector=connector,
        pair_generator=pair_generator,
    )


def connect_from_config(
    config: DatabaseConfig,
    connector: Optional[Connector] = None,
    pair_generator: PairGenerator = generate_asset_pairs
) -> ExchangeDB:
    """create_connection with address and credentials taken from config."""
    return create_connection(
        config.username,
        config.password.get_secret_value(),
        config.host,
        config.port,
        config=config,
        connector=connector,
        pair_generator=pair_generator,
    )
