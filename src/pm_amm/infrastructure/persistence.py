"""In-memory PoolRepository — reference implementation of the Protocol."""

import copy

from src.pm_amm.domain.models import Pool


class InMemoryPoolRepository:
    def __init__(self) -> None:
        self._pools: dict[str, Pool] = {}

    def get_pool(self, pool_id: str) -> Pool | None:
        pool = self._pools.get(pool_id)
        return copy.deepcopy(pool) if pool is not None else None

    def save_pool(self, pool: Pool) -> None:
        self._pools[pool.id] = copy.deepcopy(pool)

    def list_pools(self, market_id: str | None = None) -> list[Pool]:
        return [
            copy.deepcopy(p)
            for p in self._pools.values()
            if market_id is None or p.market_id == market_id
        ]
