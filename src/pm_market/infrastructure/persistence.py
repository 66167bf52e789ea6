"""In-memory MarketRepository — reference implementation of the Protocol."""

import copy

from src.pm_common.id_generator import SequenceIdGenerator
from src.pm_market.domain.models import Market


class InMemoryMarketRepository:
    def __init__(self) -> None:
        self._markets: dict[str, Market] = {}
        self._ids = SequenceIdGenerator("MKT")

    def next_market_id(self) -> str:
        return self._ids.next_id()

    def get_market(self, market_id: str) -> Market | None:
        market = self._markets.get(market_id)
        return copy.deepcopy(market) if market is not None else None

    def save_market(self, market: Market) -> None:
        self._markets[market.id] = copy.deepcopy(market)

    def list_markets(self) -> list[Market]:
        return [copy.deepcopy(m) for m in self._markets.values()]
