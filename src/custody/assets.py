"""
Coins, trading pairs and pair derivation.

A Coin is the configured asset descriptor handed to the exchange at
startup. Pairs are derived once from the coin list and name the per-pair
order book tables, so their string form must never change between runs.
"""

import re
from dataclasses import dataclass
from itertools import combinations
from typing import Callable, Iterable, List, Sequence

from .errors import PairDerivationError


TICKER_PATTERN = re.compile(r"^[a-z][a-z0-9]*$")


@dataclass(frozen=True)
class Coin:
    """
    Asset descriptor supplied by the exchange at startup.

    Attributes:
        name: Configured chain identifier, used verbatim as the per-coin
            table name (e.g. 'testnet3', 'litetest4')
        ticker: Short asset code used for pair names (e.g. 'btc')
    """

    name: str
    ticker: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Pair:
    """Market for exchanging asset_have into asset_want."""

    asset_want: Coin
    asset_have: Coin

    def __str__(self) -> str:
        return f"{self.asset_want.ticker.lower()}_{self.asset_have.ticker.lower()}"

    @classmethod
    def from_string(cls, pair_string: str, coins: Iterable[Coin]) -> "Pair":
        """
        Parse a canonical pair string back into a Pair.

        Args:
            pair_string: String of the form '<want>_<have>'
            coins: Coins the legs are looked up in

        Returns:
            Pair whose legs are members of coins

        Raises:
            PairDerivationError: If the string is malformed or a leg is unknown
        """
        want_ticker, sep, have_ticker = pair_string.partition("_")
        if not sep or not want_ticker or not have_ticker:
            raise PairDerivationError(f"Malformed pair string: {pair_string!r}")

        by_ticker = {coin.ticker.lower(): coin for coin in coins}
        try:
            return cls(by_ticker[want_ticker.lower()], by_ticker[have_ticker.lower()])
        except KeyError as e:
            raise PairDerivationError(
                f"Pair {pair_string!r} references unknown asset {e.args[0]!r}"
            ) from e


# Signature of the pair generation capability the exchange database consumes
PairGenerator = Callable[[Sequence[Coin]], List[Pair]]


def generate_asset_pairs(coins: Sequence[Coin]) -> List[Pair]:
    """
    Derive every supported trading pair from a coin list.

    One pair per unordered combination of coins, in coin list order, with
    the earlier coin as the wanted asset. The result depends only on the
    order of the input.

    Args:
        coins: Coins supported by the exchange

    Returns:
        List of pairs

    Raises:
        PairDerivationError: On fewer than two coins, duplicates, or a
            ticker that cannot be used in a table name
    """
    coins = list(coins)
    if len(coins) < 2:
        raise PairDerivationError(
            f"At least two coins are needed to form a pair, got {len(coins)}"
        )

    seen_names = set()
    seen_tickers = set()
    for coin in coins:
        ticker = coin.ticker.lower()
        if not TICKER_PATTERN.match(ticker):
            raise PairDerivationError(
                f"Unsupported asset ticker {coin.ticker!r} for coin {coin.name!r}"
            )
        if coin.name in seen_names:
            raise PairDerivationError(f"Duplicate coin name {coin.name!r}")
        if ticker in seen_tickers:
            raise PairDerivationError(f"Duplicate asset ticker {coin.ticker!r}")
        seen_names.add(coin.name)
        seen_tickers.add(ticker)

    return [Pair(want, have) for want, have in combinations(coins, 2)]
