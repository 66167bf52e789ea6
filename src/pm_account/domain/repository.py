# src/pm_account/domain/repository.py
"""Repository Protocols for trader positions, LP positions and user rollups."""

from typing import Protocol

from src.pm_account.domain.models import LiquidityPosition, Position, User
from src.pm_common.enums import Outcome


class PositionRepositoryProtocol(Protocol):
    def get_position(
        self, owner: str, market_id: str, outcome: Outcome
    ) -> Position | None: ...

    def save_position(self, position: Position) -> None: ...

    def list_positions(
        self, market_id: str | None = None, owner: str | None = None
    ) -> list[Position]: ...


class LiquidityPositionRepositoryProtocol(Protocol):
    def get_lp_position(self, owner: str, pool_id: str) -> LiquidityPosition | None: ...

    def save_lp_position(self, lp_position: LiquidityPosition) -> None: ...

    def list_lp_positions(self, pool_id: str | None = None) -> list[LiquidityPosition]: ...


class UserRepositoryProtocol(Protocol):
    def get_user(self, authority: str) -> User | None: ...

    def save_user(self, user: User) -> None: ...
