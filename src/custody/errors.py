"""
Error taxonomy for exchange store provisioning.

Every fault raised while bringing the store up derives from StoreError.
A price cache miss is routine and derives from KeyError instead, so callers
can tell "no trade yet" apart from a broken store.
"""


class StoreError(Exception):
    """Base class for store provisioning failures."""
    pass


class AddressResolutionError(StoreError):
    """Database host:port could not be resolved."""
    pass


class StoreConnectionError(StoreError):
    """Store could not be opened or did not answer a ping."""
    pass


class SchemaCreationError(StoreError):
    """A schema could not be created or selected."""

    def __init__(self, schema: str, message: str):
        self.schema = schema
        super().__init__(f"Schema {schema}: {message}")


class TableCreationError(StoreError):
    """A table could not be created, replaced or emptied."""

    def __init__(self, schema: str, table: str, message: str):
        self.schema = schema
        self.table = table
        super().__init__(f"Table {schema}.{table}: {message}")


class PairDerivationError(StoreError):
    """Asset pairs could not be derived from the coin list."""
    pass


class PriceNotFoundError(KeyError):
    """No price has been recorded for the pair."""

    def __init__(self, pair: str):
        self.pair = pair
        super().__init__(pair)

    def __str__(self) -> str:
        return f"Could not get price, pair not found: {self.pair}"
