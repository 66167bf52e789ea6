"""Domain models for pm_market — market record and its lifecycle guards.

State machine:
    ACTIVE ──resolve──▶ RESOLVED   (terminal)
    ACTIVE ──cancel───▶ CANCELLED  (terminal)

winning_outcome and resolved_at are set exactly once, together with the
transition to RESOLVED. Pool ids are bound once and never re-pointed.
"""

from dataclasses import dataclass
from typing import Union

from src.pm_common.enums import MarketCategory, MarketStatus, Outcome, ResolutionSource
from src.pm_common.errors import (
    InsufficientLiquidityError,
    InvalidFeeRateError,
    MarketAlreadyResolvedError,
    MarketNotActiveError,
    MarketNotResolvedError,
    PoolsAlreadyCreatedError,
)
from src.pm_common.fixed_point import U64
from src.pm_common.parameters import MAX_FEE_RATE_BPS

MAX_TITLE_BYTES = 64
MAX_DESCRIPTION_BYTES = 128


@dataclass(frozen=True)
class OracleResolution:
    oracle_account: str
    target_price: int

    @property
    def source(self) -> ResolutionSource:
        return ResolutionSource.ORACLE


@dataclass(frozen=True)
class ManualResolution:
    @property
    def source(self) -> ResolutionSource:
        return ResolutionSource.MANUAL


ResolutionPolicy = Union[OracleResolution, ManualResolution]


@dataclass
class Market:
    id: str
    creator: str
    title: str
    description: str
    category: MarketCategory
    resolution: ResolutionPolicy
    created_at: int
    end_time: int
    fee_rate: int                       # bps
    bond_amount: int = 0
    status: MarketStatus = MarketStatus.ACTIVE
    resolved_at: int | None = None
    winning_outcome: Outcome | None = None
    yes_pool_id: str | None = None
    no_pool_id: str | None = None
    total_volume: int = 0
    total_liquidity: int = 0
    trader_count: int = 0
    lp_count: int = 0
    settlement_reserve: int = 0        # base held for winning claims

    @property
    def is_active(self) -> bool:
        return self.status == MarketStatus.ACTIVE

    @property
    def is_resolved(self) -> bool:
        return self.status == MarketStatus.RESOLVED

    @property
    def has_pools(self) -> bool:
        return self.yes_pool_id is not None and self.no_pool_id is not None

    def is_expired(self, now: int) -> bool:
        return now >= self.end_time

    def can_trade(self, now: int) -> bool:
        return self.is_active and not self.is_expired(now)

    def can_resolve(self, now: int) -> bool:
        """Manual markets resolve any time while active; oracle markets only after expiry."""
        return self.is_active and (
            self.is_expired(now) or isinstance(self.resolution, ManualResolution)
        )

    def pool_id_for(self, outcome: Outcome) -> str | None:
        return self.yes_pool_id if outcome == Outcome.YES else self.no_pool_id

    def bind_pools(self, yes_pool_id: str, no_pool_id: str) -> None:
        if self.yes_pool_id is not None or self.no_pool_id is not None:
            raise PoolsAlreadyCreatedError(self.id)
        self.yes_pool_id = yes_pool_id
        self.no_pool_id = no_pool_id

    def mark_resolved(self, outcome: Outcome, now: int) -> None:
        if self.is_resolved:
            raise MarketAlreadyResolvedError(self.id)
        if not self.is_active:
            raise MarketNotActiveError(self.id)
        self.status = MarketStatus.RESOLVED
        self.winning_outcome = outcome
        self.resolved_at = now

    def cancel(self) -> None:
        if not self.is_active:
            raise MarketNotActiveError(self.id)
        self.status = MarketStatus.CANCELLED

    def update_fee_rate(self, fee_rate: int) -> None:
        if not self.is_active:
            raise MarketNotActiveError(self.id)
        if not (0 <= fee_rate <= MAX_FEE_RATE_BPS):
            raise InvalidFeeRateError(fee_rate, MAX_FEE_RATE_BPS)
        self.fee_rate = fee_rate

    def record_trade(self, volume: int, new_trader: bool) -> None:
        self.total_volume = U64(self.total_volume).add(volume).value
        if new_trader:
            self.trader_count += 1

    def record_liquidity(self, base_deposit: int, new_provider: bool) -> None:
        self.total_liquidity = U64(self.total_liquidity).add(base_deposit).value
        if new_provider:
            self.lp_count += 1

    def fund_settlement(self, amount: int) -> None:
        if not self.is_resolved:
            raise MarketNotResolvedError(self.id)
        self.settlement_reserve = U64(self.settlement_reserve).add(amount).value

    def pay_settlement(self, amount: int) -> None:
        """Draw a winning claim from the settlement reserve."""
        if amount > self.settlement_reserve:
            raise InsufficientLiquidityError(
                f"Settlement reserve {self.settlement_reserve} cannot cover claim {amount}"
            )
        self.settlement_reserve -= amount
