# src/pm_market/domain/repository.py
"""Repository Protocol — dependency inversion for testability.

Storage is owned by the surrounding system; the core only needs these reads
and writes. Implementations must hand out copies so a failed operation can
never leak half-applied state into storage.
"""

from typing import Protocol

from src.pm_market.domain.models import Market


class MarketRepositoryProtocol(Protocol):
    def next_market_id(self) -> str: ...

    def get_market(self, market_id: str) -> Market | None: ...

    def save_market(self, market: Market) -> None: ...

    def list_markets(self) -> list[Market]: ...
