# src/pm_amm/domain/repository.py
"""Repository Protocol for pools."""

from typing import Protocol

from src.pm_amm.domain.models import Pool


class PoolRepositoryProtocol(Protocol):
    def get_pool(self, pool_id: str) -> Pool | None: ...

    def save_pool(self, pool: Pool) -> None: ...

    def list_pools(self, market_id: str | None = None) -> list[Pool]: ...
