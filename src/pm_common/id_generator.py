"""Sequential ID generator for business IDs (market ids).

Market ids are derived from a global creation counter rather than the wall
clock, so replaying the same operations always yields the same ids.
"""

import threading


class SequenceIdGenerator:
    """Thread-safe monotonically increasing ID generator.

    Layout: "<prefix>-<zero-padded sequence>", e.g. "MKT-000001".
    """

    _WIDTH = 6

    def __init__(self, prefix: str, start: int = 1) -> None:
        if start < 0:
            raise ValueError("start must be >= 0")
        self._prefix = prefix
        self._next = start
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            seq = self._next
            self._next += 1
        return f"{self._prefix}-{seq:0{self._WIDTH}d}"


def pool_id_for(market_id: str, outcome: str) -> str:
    """Deterministic pool id for one outcome of a market: 'MKT-000001:YES'."""
    return f"{market_id}:{outcome}"
