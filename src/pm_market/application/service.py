"""MarketApplicationService — market creation, pool binding and resolution.

Every mutating method loads working copies, mutates them, verifies
invariants, hands transfers to the custodian and only then persists. A raised
error therefore leaves storage exactly as it was.
"""

import logging

from src.pm_account.domain.models import User
from src.pm_account.domain.repository import PositionRepositoryProtocol, UserRepositoryProtocol
from src.pm_account.infrastructure.persistence import (
    InMemoryPositionRepository,
    InMemoryUserRepository,
)
from src.pm_amm.domain.models import Pool
from src.pm_amm.domain.repository import PoolRepositoryProtocol
from src.pm_amm.infrastructure.persistence import InMemoryPoolRepository
from src.pm_clearing.application.schemas import TransferOut
from src.pm_clearing.domain.invariants import (
    raise_on_violations,
    verify_market_invariants,
    verify_pool_invariants,
)
from src.pm_clearing.domain.payout import calculate_settlement_funding
from src.pm_clearing.domain.transfers import (
    CustodianProtocol,
    LedgerTransfer,
    RecordingCustodian,
    bond_account,
    settlement_account,
)
from src.pm_common.enums import AssetType, MarketStatus, Outcome, TransferType
from src.pm_common.errors import (
    MarketNotActiveError,
    MarketNotFoundError,
    TooManyMarketsError,
    UnauthorizedError,
)
from src.pm_common.id_generator import pool_id_for
from src.pm_common.locks import MarketLockRegistry
from src.pm_common.parameters import GlobalParameters
from src.pm_market.application.schemas import (
    CreateMarketRequest,
    CreateMarketResponse,
    MarketDetail,
    ResolveMarketRequest,
)
from src.pm_market.domain.lifecycle import resolve, validate_market_creation
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import InMemoryMarketRepository
from src.pm_oracle.domain.models import PriceRecord

logger = logging.getLogger(__name__)


class MarketApplicationService:
    def __init__(
        self,
        markets: MarketRepositoryProtocol | None = None,
        pools: PoolRepositoryProtocol | None = None,
        users: UserRepositoryProtocol | None = None,
        locks: MarketLockRegistry | None = None,
        custodian: CustodianProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
    ) -> None:
        self._markets: MarketRepositoryProtocol = markets or InMemoryMarketRepository()
        self._pools: PoolRepositoryProtocol = pools or InMemoryPoolRepository()
        self._positions: PositionRepositoryProtocol = positions or InMemoryPositionRepository()
        self._users: UserRepositoryProtocol = users or InMemoryUserRepository()
        self._locks = locks or MarketLockRegistry()
        self._custodian: CustodianProtocol = custodian or RecordingCustodian()

    def _get_market(self, market_id: str) -> Market:
        market = self._markets.get_market(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    def create_market(
        self,
        creator: str,
        req: CreateMarketRequest,
        params: GlobalParameters,
        now: int,
    ) -> CreateMarketResponse:
        validate_market_creation(
            params, req.title, req.description, req.end_time, req.bond_amount, now
        )
        with self._locks.for_creator(creator):
            user = self._users.get_user(creator) or User(authority=creator, created_at=now)
            if not user.can_create_market(params.max_markets_per_creator):
                raise TooManyMarketsError(creator, params.max_markets_per_creator)
            policy = req.resolution_policy()

            market = Market(
                id=self._markets.next_market_id(),
                creator=creator,
                title=req.title,
                description=req.description,
                category=req.category,
                resolution=policy,
                created_at=now,
                end_time=req.end_time,
                fee_rate=params.default_market_fee_rate,
                bond_amount=req.bond_amount,
            )
            user.update_after_market_creation(now)
            raise_on_violations(verify_market_invariants(market))

            transfers = [
                LedgerTransfer(
                    transfer_type=TransferType.BOND_DEPOSIT,
                    asset=AssetType.BASE,
                    from_account=creator,
                    to_account=bond_account(market.id),
                    amount=req.bond_amount,
                )
            ]
            self._custodian.apply(transfers)
            self._markets.save_market(market)
            self._users.save_user(user)

        logger.info(
            "Market created: id=%s, creator=%s, source=%s, end_time=%d, fee=%dbp",
            market.id, creator, policy.source.value, market.end_time, market.fee_rate,
        )
        return CreateMarketResponse(
            market=MarketDetail.from_domain(market),
            transfers=[TransferOut.from_domain(t) for t in transfers],
        )

    def create_pools(self, market_id: str, caller: str, now: int) -> MarketDetail:
        """Create the empty YES and NO pools and bind them to the market. Creator only."""
        with self._locks.for_market(market_id):
            market = self._get_market(market_id)
            if caller != market.creator:
                raise UnauthorizedError(caller, f"create pools for {market_id}")
            if not market.can_trade(now):
                raise MarketNotActiveError(market_id)

            yes_pool = Pool(
                id=pool_id_for(market.id, Outcome.YES.value),
                market_id=market.id,
                outcome=Outcome.YES,
                fee_rate=market.fee_rate,
                last_update=now,
            )
            no_pool = Pool(
                id=pool_id_for(market.id, Outcome.NO.value),
                market_id=market.id,
                outcome=Outcome.NO,
                fee_rate=market.fee_rate,
                last_update=now,
            )
            market.bind_pools(yes_pool.id, no_pool.id)
            raise_on_violations(
                verify_pool_invariants(yes_pool) + verify_pool_invariants(no_pool)
            )
            self._pools.save_pool(yes_pool)
            self._pools.save_pool(no_pool)
            self._markets.save_market(market)

        logger.info("Pools created: market=%s, yes=%s, no=%s", market_id, yes_pool.id, no_pool.id)
        return MarketDetail.from_domain(market)

    def resolve_market(
        self,
        market_id: str,
        caller: str,
        req: ResolveMarketRequest,
        params: GlobalParameters,
        now: int,
        price_record: PriceRecord | None = None,
    ) -> MarketDetail:
        """Resolve by oracle price or manual outcome. Creator or protocol authority only.

        The winning pool's base backing every outstanding winning share moves
        into the market's settlement account, so claims are paid from base the
        market actually took in and LPs withdraw only the remainder.
        """
        with self._locks.for_market(market_id):
            market = self._get_market(market_id)
            if caller not in (market.creator, params.authority):
                raise UnauthorizedError(caller, f"resolve {market_id}")
            winner = resolve(
                market,
                now,
                price_record=price_record,
                outcome=req.outcome,
                max_price_age=params.max_price_age,
            )

            pool_id = market.pool_id_for(winner)
            pool = self._pools.get_pool(pool_id) if pool_id is not None else None
            funding = 0
            if pool is not None:
                funding = calculate_settlement_funding(
                    self._positions.list_positions(market_id=market_id),
                    winner,
                    pool.base_reserves,
                )
            transfers: list[LedgerTransfer] = []
            if pool is not None and funding > 0:
                pool.release_base(funding, now)
                market.fund_settlement(funding)
                transfers.append(
                    LedgerTransfer(
                        transfer_type=TransferType.SETTLEMENT_FUNDING,
                        asset=AssetType.BASE,
                        from_account=pool.id,
                        to_account=settlement_account(market.id),
                        amount=funding,
                    )
                )
                raise_on_violations(verify_pool_invariants(pool))
            raise_on_violations(verify_market_invariants(market))

            self._custodian.apply(transfers)
            if pool is not None and funding > 0:
                self._pools.save_pool(pool)
            self._markets.save_market(market)

        logger.info(
            "Market resolved: id=%s, outcome=%s, source=%s, by=%s, settlement=%d",
            market_id, winner.value, market.resolution.source.value, caller, funding,
        )
        return MarketDetail.from_domain(market)

    def get_market(self, market_id: str) -> MarketDetail:
        return MarketDetail.from_domain(self._get_market(market_id))

    def list_markets(self, status: MarketStatus | None = None) -> list[MarketDetail]:
        markets = self._markets.list_markets()
        return [
            MarketDetail.from_domain(m)
            for m in sorted(markets, key=lambda m: m.id)
            if status is None or m.status == status
        ]
