"""Per-market serialization for mutating operations.

A quote and the reserve update derived from it must never interleave with
another mutation of the same pool. Every mutating application service takes
the market's lock for the whole operation; pure quotes take no lock.
Market creation is serialized per creator so the market cap holds.
"""

import threading
from collections import defaultdict


class MarketLockRegistry:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._market_locks: dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._creator_locks: dict[str, threading.Lock] = defaultdict(threading.Lock)

    def for_market(self, market_id: str) -> threading.Lock:
        with self._guard:
            return self._market_locks[market_id]

    def for_creator(self, creator: str) -> threading.Lock:
        with self._guard:
            return self._creator_locks[creator]
