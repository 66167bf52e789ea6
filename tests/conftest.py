"""Shared test fixtures."""

from collections.abc import Callable

import pytest

from src.main import PoolOddsCore, build_core
from src.pm_amm.application.schemas import AddLiquidityRequest
from src.pm_common.enums import Outcome
from src.pm_common.parameters import GlobalParameters
from src.pm_market.application.schemas import CreateMarketRequest

NOW = 1_700_000_000
DAY = 86_400
AUTHORITY = "protocol-authority"


@pytest.fixture
def now() -> int:
    return NOW


@pytest.fixture
def params() -> GlobalParameters:
    return GlobalParameters(
        authority=AUTHORITY,
        protocol_fee_rate=10,
        default_market_fee_rate=30,
        min_market_duration=3600,
        max_market_duration=31_536_000,
        min_bond_amount=100_000_000,
        max_markets_per_creator=3,
        max_price_impact_bps=1000,
        max_price_age=300,
        min_trade_amount=1_000,
    )


@pytest.fixture
def core() -> PoolOddsCore:
    return build_core()


@pytest.fixture
def make_request() -> Callable[..., CreateMarketRequest]:
    """Factory for a valid manual market ending one day after NOW."""

    def _make(**kwargs) -> CreateMarketRequest:
        fields = dict(
            title="Will it rain tomorrow?",
            description="Resolves YES if any rain is recorded.",
            end_time=NOW + DAY,
            bond_amount=100_000_000,
        )
        fields.update(kwargs)
        return CreateMarketRequest(**fields)

    return _make


@pytest.fixture
def market_id(
    core: PoolOddsCore,
    params: GlobalParameters,
    make_request: Callable[..., CreateMarketRequest],
) -> str:
    """Manual market by alice with both pools created but no liquidity."""
    resp = core.markets.create_market("alice", make_request(), params, NOW)
    core.markets.create_pools(resp.market.id, "alice", NOW)
    return resp.market.id


@pytest.fixture
def funded_market_id(core: PoolOddsCore, market_id: str) -> str:
    """Both pools seeded by lp1 with 1,000,000 base / 1,000,000 shares."""
    for outcome in (Outcome.YES, Outcome.NO):
        core.amm.add_liquidity(
            "lp1",
            AddLiquidityRequest(
                market_id=market_id,
                outcome=outcome,
                base_amount=1_000_000,
                share_amount=1_000_000,
            ),
            NOW,
        )
    return market_id
