# src/pm_admin/application/service.py
"""Admin application service — protocol-authority operations and audits."""
import logging
from typing import Any

from src.pm_account.domain.repository import (
    LiquidityPositionRepositoryProtocol,
    PositionRepositoryProtocol,
)
from src.pm_account.infrastructure.persistence import (
    InMemoryLiquidityPositionRepository,
    InMemoryPositionRepository,
)
from src.pm_amm.domain.repository import PoolRepositoryProtocol
from src.pm_amm.infrastructure.persistence import InMemoryPoolRepository
from src.pm_clearing.domain.global_invariants import verify_global_invariants
from src.pm_common.errors import MarketNotFoundError, UnauthorizedError
from src.pm_common.locks import MarketLockRegistry
from src.pm_common.parameters import GlobalParameters
from src.pm_market.application.schemas import MarketDetail, UpdateFeeRateRequest
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import InMemoryMarketRepository

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        markets: MarketRepositoryProtocol | None = None,
        pools: PoolRepositoryProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
        lp_positions: LiquidityPositionRepositoryProtocol | None = None,
        locks: MarketLockRegistry | None = None,
    ) -> None:
        self._markets: MarketRepositoryProtocol = markets or InMemoryMarketRepository()
        self._pools: PoolRepositoryProtocol = pools or InMemoryPoolRepository()
        self._positions: PositionRepositoryProtocol = positions or InMemoryPositionRepository()
        self._lp_positions: LiquidityPositionRepositoryProtocol = (
            lp_positions or InMemoryLiquidityPositionRepository()
        )
        self._locks = locks or MarketLockRegistry()

    def _get_market(self, market_id: str) -> Market:
        market = self._markets.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    @staticmethod
    def _require_authority(caller: str, params: GlobalParameters, action: str) -> None:
        if caller != params.authority:
            raise UnauthorizedError(caller, action)

    def cancel_market(
        self, market_id: str, caller: str, params: GlobalParameters
    ) -> MarketDetail:
        self._require_authority(caller, params, f"cancel {market_id}")
        with self._locks.for_market(market_id):
            market = self._get_market(market_id)
            market.cancel()
            self._markets.save_market(market)
        logger.info("Market cancelled: id=%s, by=%s", market_id, caller)
        return MarketDetail.from_domain(market)

    def update_market_fee_rate(
        self,
        market_id: str,
        caller: str,
        req: UpdateFeeRateRequest,
        params: GlobalParameters,
    ) -> MarketDetail:
        """Change the market fee rate; bound pools charge the new rate from the next swap."""
        self._require_authority(caller, params, f"update fee rate of {market_id}")
        with self._locks.for_market(market_id):
            market = self._get_market(market_id)
            old_rate = market.fee_rate
            market.update_fee_rate(req.fee_rate)
            pools = [
                self._pools.get_pool(pid)
                for pid in (market.yes_pool_id, market.no_pool_id)
                if pid is not None
            ]
            for pool in pools:
                if pool is not None:
                    pool.fee_rate = market.fee_rate
                    self._pools.save_pool(pool)
            self._markets.save_market(market)
        logger.info(
            "Market fee rate updated: id=%s, %dbp -> %dbp", market_id, old_rate, market.fee_rate
        )
        return MarketDetail.from_domain(market)

    def get_market_stats(self, market_id: str) -> dict[str, Any]:
        market = self._get_market(market_id)
        pools = self._pools.list_pools(market_id)
        return {
            "market_id": market_id,
            "status": market.status.value,
            "total_volume": market.total_volume,
            "total_liquidity": market.total_liquidity,
            "trader_count": market.trader_count,
            "lp_count": market.lp_count,
            "settlement_reserve": market.settlement_reserve,
            "total_fees": sum(p.fees_collected for p in pools),
            "pools": {
                p.outcome.value: {
                    "base_reserves": p.base_reserves,
                    "share_reserves": p.share_reserves,
                    "lp_token_supply": p.lp_token_supply,
                    "current_price": p.current_price,
                }
                for p in pools
            },
        }

    def verify_all_invariants(self) -> dict[str, object]:
        """Sweep every stored market, pool, position and LP position."""
        violations = verify_global_invariants(
            self._markets.list_markets(),
            self._pools.list_pools(),
            self._positions.list_positions(),
            self._lp_positions.list_lp_positions(),
        )
        return {"ok": len(violations) == 0, "violations": violations}
