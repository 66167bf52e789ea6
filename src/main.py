"""Composition root — wires the application services over shared repositories.

Usage:
    core = build_core()
    params = GlobalParameters.from_settings()
    core.markets.create_market("alice", req, params, now)
"""

from dataclasses import dataclass

from src.pm_account.application.service import AccountApplicationService
from src.pm_account.infrastructure.persistence import (
    InMemoryLiquidityPositionRepository,
    InMemoryPositionRepository,
    InMemoryUserRepository,
)
from src.pm_admin.application.service import AdminService
from src.pm_amm.application.service import AmmApplicationService
from src.pm_amm.infrastructure.persistence import InMemoryPoolRepository
from src.pm_clearing.domain.transfers import CustodianProtocol, RecordingCustodian
from src.pm_common.locks import MarketLockRegistry
from src.pm_market.application.service import MarketApplicationService
from src.pm_market.infrastructure.persistence import InMemoryMarketRepository


@dataclass
class PoolOddsCore:
    markets: MarketApplicationService
    amm: AmmApplicationService
    accounts: AccountApplicationService
    admin: AdminService
    custodian: CustodianProtocol


def build_core(custodian: CustodianProtocol | None = None) -> PoolOddsCore:
    """One set of in-memory repositories and one lock registry shared by every service."""
    market_repo = InMemoryMarketRepository()
    pool_repo = InMemoryPoolRepository()
    position_repo = InMemoryPositionRepository()
    lp_repo = InMemoryLiquidityPositionRepository()
    user_repo = InMemoryUserRepository()
    locks = MarketLockRegistry()
    custodian = custodian or RecordingCustodian()

    return PoolOddsCore(
        markets=MarketApplicationService(
            markets=market_repo, pools=pool_repo, users=user_repo,
            locks=locks, custodian=custodian, positions=position_repo,
        ),
        amm=AmmApplicationService(
            markets=market_repo, pools=pool_repo, positions=position_repo,
            lp_positions=lp_repo, users=user_repo, locks=locks, custodian=custodian,
        ),
        accounts=AccountApplicationService(
            markets=market_repo, pools=pool_repo, positions=position_repo,
            lp_positions=lp_repo, users=user_repo, locks=locks, custodian=custodian,
        ),
        admin=AdminService(
            markets=market_repo, pools=pool_repo, positions=position_repo,
            lp_positions=lp_repo, locks=locks,
        ),
        custodian=custodian,
    )
