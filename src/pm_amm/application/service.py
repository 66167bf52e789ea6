"""AmmApplicationService — trades and liquidity against a market's pools.

Mutating methods hold the market lock from quote to persistence, so a quote
and the reserve update it drives are atomic per pool. quote_trade takes no
lock and changes nothing.
"""

import logging

from src.pm_account.domain.models import LiquidityPosition, Position, User
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
from src.pm_amm.application.schemas import (
    AddLiquidityRequest,
    FeeProjection,
    LiquidityResponse,
    LiquiditySuggestion,
    PoolDetail,
    RemoveLiquidityRequest,
    TradeQuoteResponse,
    TradeRequest,
    TradeResponse,
)
from src.pm_amm.domain.analytics import calculate_optimal_liquidity_ratio
from src.pm_amm.domain.models import Pool
from src.pm_amm.domain.repository import PoolRepositoryProtocol
from src.pm_amm.infrastructure.persistence import InMemoryPoolRepository
from src.pm_clearing.application.schemas import TransferOut
from src.pm_clearing.domain.invariants import (
    raise_on_violations,
    verify_lp_conservation,
    verify_pool_invariants,
    verify_position_invariants,
    verify_swap_invariant,
)
from src.pm_clearing.domain.transfers import (
    CustodianProtocol,
    LedgerTransfer,
    RecordingCustodian,
    share_asset,
)
from src.pm_common.datetime_utils import time_until_end
from src.pm_common.enums import AssetType, Outcome, TradeDirection, TransferType
from src.pm_common.errors import (
    InsufficientLPTokensError,
    MarketNotFoundError,
    PoolNotFoundError,
    PositionNotFoundError,
)
from src.pm_common.fixed_point import compound_interest, price_to_display
from src.pm_common.locks import MarketLockRegistry
from src.pm_common.parameters import GlobalParameters
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import InMemoryMarketRepository
from src.pm_risk.rules.balance_check import check_share_balance
from src.pm_risk.rules.market_status import check_market_tradable, check_pool_binding
from src.pm_risk.rules.trade_limits import (
    check_price_impact,
    check_slippage,
    check_trade_amount,
)

logger = logging.getLogger(__name__)


class AmmApplicationService:
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

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    def _get_market(self, market_id: str) -> Market:
        market = self._markets.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    def _get_pool(self, pool_id: str) -> Pool:
        pool = self._pools.get_pool(pool_id)
        if pool is None:
            raise PoolNotFoundError(pool_id)
        return pool

    def _get_user(self, authority: str, now: int) -> User:
        return self._users.get_user(authority) or User(authority=authority, created_at=now)

    def _check_lp_conservation(self, pool: Pool, working: LiquidityPosition) -> list[str]:
        others = [
            lp for lp in self._lp_positions.list_lp_positions(pool.id)
            if lp.owner != working.owner
        ]
        return verify_lp_conservation(pool, others + [working])

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    def quote_trade(self, req: TradeRequest, now: int) -> TradeQuoteResponse:
        market = self._get_market(req.market_id)
        check_market_tradable(market, now)
        pool = self._get_pool(check_pool_binding(market, req.outcome, req.pool_id))
        quote = pool.quote_swap(req.amount_in, input_is_base=req.direction == TradeDirection.BUY)
        return TradeQuoteResponse.from_quote(market.id, pool, req.direction, quote)

    def execute_trade(
        self,
        trader: str,
        req: TradeRequest,
        params: GlobalParameters,
        now: int,
    ) -> TradeResponse:
        """Buy (base in, shares out) or sell (shares in, base out) one outcome."""
        is_buy = req.direction == TradeDirection.BUY
        with self._locks.for_market(req.market_id):
            market = self._get_market(req.market_id)
            check_market_tradable(market, now)
            pool = self._get_pool(check_pool_binding(market, req.outcome, req.pool_id))
            check_trade_amount(req.amount_in, params.min_trade_amount)

            new_trader = not any(
                self._positions.get_position(trader, market.id, o) is not None for o in Outcome
            )
            position = self._positions.get_position(trader, market.id, req.outcome)
            if not is_buy:
                check_share_balance(position, req.amount_in)

            quote = pool.quote_swap(req.amount_in, input_is_base=is_buy)
            check_slippage(quote.output_amount, req.min_amount_out)
            check_price_impact(quote.price_impact_bps, params.max_price_impact_bps)

            k_before = pool.invariant_k
            pool.update_reserves_after_swap(
                req.amount_in, quote.output_amount, quote.fee_in_base, is_buy, now
            )

            if position is None:
                position = Position(
                    owner=trader, market_id=market.id, outcome=req.outcome, created_at=now
                )
            if is_buy:
                realized = position.update_after_trade(
                    quote.output_amount, pool.current_price, req.amount_in, now
                )
            else:
                realized = position.update_after_trade(
                    -req.amount_in, pool.current_price, quote.output_amount, now
                )

            raise_on_violations(
                verify_swap_invariant(k_before, pool)
                + verify_pool_invariants(pool)
                + verify_position_invariants(position)
            )

            user = self._get_user(trader, now)
            user.update_after_trade(req.amount_in, quote.fee_in_base, realized, now)
            market.record_trade(req.amount_in, new_trader)

            shares = share_asset(req.outcome)
            if is_buy:
                transfers = [
                    LedgerTransfer(TransferType.TRADE_PAYMENT, AssetType.BASE,
                                   trader, pool.id, req.amount_in),
                    LedgerTransfer(TransferType.TRADE_SHARES_OUT, shares,
                                   pool.id, trader, quote.output_amount),
                ]
            else:
                transfers = [
                    LedgerTransfer(TransferType.TRADE_SHARES_IN, shares,
                                   trader, pool.id, req.amount_in),
                    LedgerTransfer(TransferType.TRADE_PROCEEDS, AssetType.BASE,
                                   pool.id, trader, quote.output_amount),
                ]
            self._custodian.apply(transfers)
            self._pools.save_pool(pool)
            self._positions.save_position(position)
            self._users.save_user(user)
            self._markets.save_market(market)

        logger.info(
            "Trade executed: market=%s, outcome=%s, %s, trader=%s, in=%d, out=%d, "
            "fee=%d, price=%d->%d",
            market.id, req.outcome.value, req.direction.value, trader, req.amount_in,
            quote.output_amount, quote.fee_in_base, quote.price_before, pool.current_price,
        )
        return TradeResponse(
            quote=TradeQuoteResponse.from_quote(market.id, pool, req.direction, quote),
            trader=trader,
            position_shares=position.shares,
            realized_pnl=realized,
            transfers=[TransferOut.from_domain(t) for t in transfers],
        )

    # ------------------------------------------------------------------
    # Liquidity
    # ------------------------------------------------------------------

    def add_liquidity(self, provider: str, req: AddLiquidityRequest, now: int) -> LiquidityResponse:
        with self._locks.for_market(req.market_id):
            market = self._get_market(req.market_id)
            check_market_tradable(market, now)
            pool = self._get_pool(check_pool_binding(market, req.outcome))

            new_provider = not any(
                self._lp_positions.get_lp_position(provider, pid) is not None
                for pid in (market.yes_pool_id, market.no_pool_id)
                if pid is not None
            )
            lp = self._lp_positions.get_lp_position(provider, pool.id)
            if lp is None:
                lp = LiquidityPosition(
                    owner=provider,
                    pool_id=pool.id,
                    fee_growth_checkpoint=pool.fee_growth_per_lp_token,
                    created_at=now,
                )
            fees = lp.accrue_fees(pool.fee_growth_per_lp_token)
            minted = pool.deposit_liquidity(req.base_amount, req.share_amount, now)
            lp.record_deposit(minted, req.base_amount, req.share_amount, now)

            raise_on_violations(
                verify_pool_invariants(pool) + self._check_lp_conservation(pool, lp)
            )

            user = self._get_user(provider, now)
            user.update_after_fee_earning(fees, now)
            market.record_liquidity(req.base_amount, new_provider)

            transfers: list[LedgerTransfer] = []
            if req.base_amount > 0:
                transfers.append(LedgerTransfer(TransferType.LIQUIDITY_BASE_IN, AssetType.BASE,
                                                provider, pool.id, req.base_amount))
            if req.share_amount > 0:
                transfers.append(LedgerTransfer(TransferType.LIQUIDITY_SHARES_IN,
                                                share_asset(req.outcome),
                                                provider, pool.id, req.share_amount))
            transfers.append(LedgerTransfer(TransferType.LP_MINT, AssetType.LP_TOKENS,
                                            pool.id, provider, minted))
            self._custodian.apply(transfers)
            self._pools.save_pool(pool)
            self._lp_positions.save_lp_position(lp)
            self._users.save_user(user)
            self._markets.save_market(market)

        logger.info(
            "Liquidity added: pool=%s, provider=%s, base=%d, shares=%d, lp_minted=%d",
            pool.id, provider, req.base_amount, req.share_amount, minted,
        )
        return LiquidityResponse(
            market_id=market.id,
            pool_id=pool.id,
            provider=provider,
            base_amount=req.base_amount,
            share_amount=req.share_amount,
            lp_tokens=minted,
            lp_token_balance=lp.lp_tokens,
            fees_accrued=fees,
            pool=PoolDetail.from_domain(pool),
            transfers=[TransferOut.from_domain(t) for t in transfers],
        )

    def remove_liquidity(
        self, provider: str, req: RemoveLiquidityRequest, now: int
    ) -> LiquidityResponse:
        """Burn LP tokens for the proportional reserves. Allowed in any market status."""
        with self._locks.for_market(req.market_id):
            market = self._get_market(req.market_id)
            pool = self._get_pool(check_pool_binding(market, req.outcome))
            lp = self._lp_positions.get_lp_position(provider, pool.id)
            if lp is None:
                raise PositionNotFoundError(f"LP position {provider}/{pool.id}")
            if req.lp_tokens > lp.lp_tokens:
                raise InsufficientLPTokensError(req.lp_tokens, lp.lp_tokens)

            fees = lp.accrue_fees(pool.fee_growth_per_lp_token)
            base_out, share_out = pool.withdraw_liquidity(req.lp_tokens, now)
            lp.record_withdrawal(req.lp_tokens, now)

            raise_on_violations(
                verify_pool_invariants(pool) + self._check_lp_conservation(pool, lp)
            )

            user = self._get_user(provider, now)
            user.update_after_fee_earning(fees, now)

            transfers = [
                LedgerTransfer(TransferType.LP_BURN, AssetType.LP_TOKENS,
                               provider, pool.id, req.lp_tokens),
            ]
            if base_out > 0:
                transfers.append(LedgerTransfer(TransferType.LIQUIDITY_BASE_OUT, AssetType.BASE,
                                                pool.id, provider, base_out))
            if share_out > 0:
                transfers.append(LedgerTransfer(TransferType.LIQUIDITY_SHARES_OUT,
                                                share_asset(req.outcome),
                                                pool.id, provider, share_out))
            self._custodian.apply(transfers)
            self._pools.save_pool(pool)
            self._lp_positions.save_lp_position(lp)
            self._users.save_user(user)

        logger.info(
            "Liquidity removed: pool=%s, provider=%s, lp_burned=%d, base=%d, shares=%d",
            pool.id, provider, req.lp_tokens, base_out, share_out,
        )
        return LiquidityResponse(
            market_id=market.id,
            pool_id=pool.id,
            provider=provider,
            base_amount=base_out,
            share_amount=share_out,
            lp_tokens=req.lp_tokens,
            lp_token_balance=lp.lp_tokens,
            fees_accrued=fees,
            pool=PoolDetail.from_domain(pool),
            transfers=[TransferOut.from_domain(t) for t in transfers],
        )

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def get_pool(self, market_id: str, outcome: Outcome) -> PoolDetail:
        market = self._get_market(market_id)
        return PoolDetail.from_domain(self._get_pool(check_pool_binding(market, outcome)))

    def suggest_liquidity_split(self, market_id: str, now: int) -> LiquiditySuggestion:
        market = self._get_market(market_id)
        yes_pool = self._get_pool(check_pool_binding(market, Outcome.YES))
        no_pool = self._get_pool(check_pool_binding(market, Outcome.NO))
        remaining = time_until_end(market.end_time, now)
        yes_bps, no_bps = calculate_optimal_liquidity_ratio(
            yes_pool.volume, no_pool.volume, remaining
        )
        return LiquiditySuggestion(
            market_id=market_id, yes_bps=yes_bps, no_bps=no_bps, time_to_expiry=remaining
        )

    def project_pool_fees(
        self, market_id: str, outcome: Outcome, rate_bps: int, periods: int
    ) -> FeeProjection:
        market = self._get_market(market_id)
        pool = self._get_pool(check_pool_binding(market, outcome))
        projected = compound_interest(pool.fees_collected, rate_bps, periods)
        return FeeProjection(
            pool_id=pool.id,
            fees_collected=pool.fees_collected,
            rate_bps=rate_bps,
            periods=periods,
            projected_fees=projected,
            projected_fees_display=price_to_display(projected),
        )
