"""In-memory account repositories — reference implementations of the Protocols.

Reads return deep copies and writes store deep copies, so services can mutate
what they loaded freely and only a completed operation reaches storage.
"""

import copy

from src.pm_account.domain.models import LiquidityPosition, Position, User
from src.pm_common.enums import Outcome


class InMemoryPositionRepository:
    def __init__(self) -> None:
        self._positions: dict[tuple[str, str, Outcome], Position] = {}

    def get_position(self, owner: str, market_id: str, outcome: Outcome) -> Position | None:
        pos = self._positions.get((owner, market_id, outcome))
        return copy.deepcopy(pos) if pos is not None else None

    def save_position(self, position: Position) -> None:
        key = (position.owner, position.market_id, position.outcome)
        self._positions[key] = copy.deepcopy(position)

    def list_positions(
        self, market_id: str | None = None, owner: str | None = None
    ) -> list[Position]:
        return [
            copy.deepcopy(p)
            for p in self._positions.values()
            if (market_id is None or p.market_id == market_id)
            and (owner is None or p.owner == owner)
        ]


class InMemoryLiquidityPositionRepository:
    def __init__(self) -> None:
        self._lp_positions: dict[tuple[str, str], LiquidityPosition] = {}

    def get_lp_position(self, owner: str, pool_id: str) -> LiquidityPosition | None:
        lp = self._lp_positions.get((owner, pool_id))
        return copy.deepcopy(lp) if lp is not None else None

    def save_lp_position(self, lp_position: LiquidityPosition) -> None:
        key = (lp_position.owner, lp_position.pool_id)
        self._lp_positions[key] = copy.deepcopy(lp_position)

    def list_lp_positions(self, pool_id: str | None = None) -> list[LiquidityPosition]:
        return [
            copy.deepcopy(lp)
            for lp in self._lp_positions.values()
            if pool_id is None or lp.pool_id == pool_id
        ]


class InMemoryUserRepository:
    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    def get_user(self, authority: str) -> User | None:
        user = self._users.get(authority)
        return copy.deepcopy(user) if user is not None else None

    def save_user(self, user: User) -> None:
        self._users[user.authority] = copy.deepcopy(user)
