"""AccountApplicationService — position/LP reporting, user stats and settlement claims."""

import logging

from src.pm_account.application.schemas import (
    ClaimWinningsResponse,
    LiquidityPositionSummary,
    PositionSummary,
    UserStats,
)
from src.pm_account.domain.models import User
from src.pm_account.domain.repository import (
    LiquidityPositionRepositoryProtocol,
    PositionRepositoryProtocol,
    UserRepositoryProtocol,
)
from src.pm_account.infrastructure.persistence import (
    InMemoryLiquidityPositionRepository,
    InMemoryPositionRepository,
    InMemoryUserRepository,
)
from src.pm_amm.domain.repository import PoolRepositoryProtocol
from src.pm_amm.infrastructure.persistence import InMemoryPoolRepository
from src.pm_clearing.application.schemas import TransferOut
from src.pm_clearing.domain.invariants import raise_on_violations, verify_position_invariants
from src.pm_clearing.domain.payout import calculate_payout
from src.pm_clearing.domain.transfers import (
    CustodianProtocol,
    LedgerTransfer,
    RecordingCustodian,
    settlement_account,
    share_asset,
)
from src.pm_common.enums import AssetType, Outcome, TransferType
from src.pm_common.errors import (
    MarketNotFoundError,
    MarketNotResolvedError,
    NoWinningsToClaimError,
    PositionNotFoundError,
)
from src.pm_common.fixed_point import PRICE_PRECISION
from src.pm_common.locks import MarketLockRegistry
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import InMemoryMarketRepository

logger = logging.getLogger(__name__)


class AccountApplicationService:
    def __init__(
        self,
        markets: MarketRepositoryProtocol | None = None,
        pools: PoolRepositoryProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
        lp_positions: LiquidityPositionRepositoryProtocol | None = None,
        users: UserRepositoryProtocol | None = None,
        locks: MarketLockRegistry | None = None,
        custodian: CustodianProtocol | None = None,
    ) -> None:
        self._markets: MarketRepositoryProtocol = markets or InMemoryMarketRepository()
        self._pools: PoolRepositoryProtocol = pools or InMemoryPoolRepository()
        self._positions: PositionRepositoryProtocol = positions or InMemoryPositionRepository()
        self._lp_positions: LiquidityPositionRepositoryProtocol = (
            lp_positions or InMemoryLiquidityPositionRepository()
        )
        self._users: UserRepositoryProtocol = users or InMemoryUserRepository()
        self._locks = locks or MarketLockRegistry()
        self._custodian: CustodianProtocol = custodian or RecordingCustodian()

    def _get_market(self, market_id: str) -> Market:
        market = self._markets.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    def _current_price(self, market: Market, outcome: Outcome) -> int:
        pool_id = market.pool_id_for(outcome)
        pool = self._pools.get_pool(pool_id) if pool_id is not None else None
        return pool.current_price if pool is not None else PRICE_PRECISION

    def get_position(self, owner: str, market_id: str, outcome: Outcome) -> PositionSummary:
        market = self._get_market(market_id)
        position = self._positions.get_position(owner, market_id, outcome)
        if position is None:
            raise PositionNotFoundError(f"{owner}/{market_id}/{outcome.value}")
        return PositionSummary.from_domain(position, self._current_price(market, outcome))

    def list_positions(self, owner: str) -> list[PositionSummary]:
        summaries = []
        for p in self._positions.list_positions(owner=owner):
            market = self._get_market(p.market_id)
            summaries.append(
                PositionSummary.from_domain(p, self._current_price(market, p.outcome))
            )
        return summaries

    def get_lp_position(
        self, owner: str, market_id: str, outcome: Outcome
    ) -> LiquidityPositionSummary:
        """Current redeemable value, impermanent loss and fees including unaccrued growth."""
        market = self._get_market(market_id)
        pool_id = market.pool_id_for(outcome)
        pool = self._pools.get_pool(pool_id) if pool_id is not None else None
        lp = self._lp_positions.get_lp_position(owner, pool_id) if pool_id else None
        if pool is None or lp is None:
            raise PositionNotFoundError(f"LP position {owner}/{market_id}/{outcome.value}")
        lp.accrue_fees(pool.fee_growth_per_lp_token)
        base_value, share_value = lp.calculate_current_value(
            pool.base_reserves, pool.share_reserves, pool.lp_token_supply
        )
        il = lp.calculate_impermanent_loss(base_value, share_value, pool.current_price)
        return LiquidityPositionSummary.from_domain(lp, base_value, share_value, il)

    def get_user_stats(self, authority: str) -> UserStats:
        user = self._users.get_user(authority) or User(authority=authority)
        return UserStats.from_domain(user)

    def claim_winnings(self, owner: str, market_id: str, now: int) -> ClaimWinningsResponse:
        """Redeem winning shares one-for-one in base tokens and close the position."""
        with self._locks.for_market(market_id):
            market = self._get_market(market_id)
            if not market.is_resolved or market.winning_outcome is None:
                raise NoWinningsToClaimError(market_id, owner)
            winner = market.winning_outcome
            position = self._positions.get_position(owner, market_id, winner)
            payout = calculate_payout(position, winner) if position is not None else 0
            if position is None or payout == 0:
                raise NoWinningsToClaimError(market_id, owner)

            market.pay_settlement(payout)
            realized = position.update_after_trade(
                -position.shares, PRICE_PRECISION, payout, now
            )
            raise_on_violations(verify_position_invariants(position))

            user = self._users.get_user(owner) or User(authority=owner, created_at=now)
            user.record_realized_pnl(realized, now)

            transfers = [
                LedgerTransfer(
                    transfer_type=TransferType.SETTLEMENT_SHARES_IN,
                    asset=share_asset(winner),
                    from_account=owner,
                    to_account=settlement_account(market_id),
                    amount=payout,
                ),
                LedgerTransfer(
                    transfer_type=TransferType.SETTLEMENT_PAYOUT,
                    asset=AssetType.BASE,
                    from_account=settlement_account(market_id),
                    to_account=owner,
                    amount=payout,
                ),
            ]
            self._custodian.apply(transfers)
            self._positions.save_position(position)
            self._users.save_user(user)
            self._markets.save_market(market)

        logger.info(
            "Winnings claimed: market=%s, owner=%s, outcome=%s, payout=%d, pnl=%d",
            market_id, owner, winner.value, payout, realized,
        )
        return ClaimWinningsResponse(
            owner=owner,
            market_id=market_id,
            outcome=winner.value,
            payout=payout,
            realized_pnl=realized,
            transfers=[TransferOut.from_domain(t) for t in transfers],
        )

    def close_losing_position(
        self, owner: str, market_id: str, now: int
    ) -> ClaimWinningsResponse:
        """Write off a position on the losing outcome of a resolved market.

        The shares are surrendered to settlement for nothing and the whole cost
        basis is realized as a loss.
        """
        with self._locks.for_market(market_id):
            market = self._get_market(market_id)
            if not market.is_resolved or market.winning_outcome is None:
                raise MarketNotResolvedError(market_id)
            loser = Outcome.NO if market.winning_outcome == Outcome.YES else Outcome.YES
            position = self._positions.get_position(owner, market_id, loser)
            if position is None or position.shares == 0:
                raise PositionNotFoundError(f"{owner}/{market_id}/{loser.value}")

            surrendered = position.shares
            realized = position.update_after_trade(-surrendered, 0, 0, now)
            raise_on_violations(verify_position_invariants(position))

            user = self._users.get_user(owner) or User(authority=owner, created_at=now)
            user.record_realized_pnl(realized, now)

            transfers = [
                LedgerTransfer(
                    transfer_type=TransferType.SETTLEMENT_SHARES_IN,
                    asset=share_asset(loser),
                    from_account=owner,
                    to_account=settlement_account(market_id),
                    amount=surrendered,
                )
            ]
            self._custodian.apply(transfers)
            self._positions.save_position(position)
            self._users.save_user(user)

        logger.info(
            "Losing position closed: market=%s, owner=%s, outcome=%s, shares=%d, pnl=%d",
            market_id, owner, loser.value, surrendered, realized,
        )
        return ClaimWinningsResponse(
            owner=owner,
            market_id=market_id,
            outcome=loser.value,
            payout=0,
            realized_pnl=realized,
            transfers=[TransferOut.from_domain(t) for t in transfers],
        )
