"""
Last traded price cache.

Written by the settlement path on every trade and read by client-facing
code, so every access goes through one lock.
"""

import logging
import threading
from typing import Dict, Tuple, Union

from .assets import Pair
from .errors import PriceNotFoundError

logger = logging.getLogger(__name__)


PairKey = Union[Pair, str]


class PriceCache:
    """
    Lock-guarded mapping of pair string to last traded price.

    A missing key means no price is known, which is not the same as a
    price of zero.

    Example:
        cache = PriceCache()
        cache.set_price("btc_ltc", 12.5)
        price = cache.get_price("btc_ltc")
    """

    def __init__(self):
        self._prices: Dict[str, float] = {}
        self._lock = threading.Lock()

    def set_price(self, pair: PairKey, price: float) -> None:
        """Overwrite the last price for a pair."""
        key = str(pair)
        with self._lock:
            self._prices[key] = float(price)
        logger.debug(f"Set price {key}={price}")

    def get_price(self, pair: PairKey) -> float:
        """
        Get the last price for a pair.

        Raises:
            PriceNotFoundError: If no price was ever set for the pair
        """
        key = str(pair)
        with self._lock:
            try:
                return self._prices[key]
            except KeyError:
                raise PriceNotFoundError(key) from None

    def lookup(self, pair: PairKey) -> Tuple[float, bool]:
        """Return (price, found) without raising on a miss."""
        key = str(pair)
        with self._lock:
            if key in self._prices:
                return self._prices[key], True
            return 0.0, False

    def clear(self) -> None:
        with self._lock:
            self._prices.clear()

    def snapshot(self) -> Dict[str, float]:
        """Copy of every known price."""
        with self._lock:
            return dict(self._prices)

    def __contains__(self, pair: PairKey) -> bool:
        with self._lock:
            return str(pair) in self._prices

    def __len__(self) -> int:
        with self._lock:
            return len(self._prices)
