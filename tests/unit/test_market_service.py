# tests/unit/test_market_service.py
"""Unit tests for MarketApplicationService over in-memory repositories."""
from collections.abc import Callable
from dataclasses import replace

import pytest

from src.main import PoolOddsCore
from src.pm_clearing.domain.transfers import RecordingCustodian, bond_account
from src.pm_common.enums import (
    AssetType,
    MarketStatus,
    Outcome,
    ResolutionSource,
    VerificationLevel,
)
from src.pm_common.errors import (
    InsufficientBondAmountError,
    MarketAlreadyResolvedError,
    MarketNotActiveError,
    MarketNotFoundError,
    MissingOracleDataError,
    PoolsAlreadyCreatedError,
    ProgramPausedError,
    StalePriceDataError,
    TooManyMarketsError,
    UnauthorizedError,
)
from src.pm_common.parameters import GlobalParameters
from src.pm_market.application.schemas import CreateMarketRequest, ResolveMarketRequest
from src.pm_oracle.domain.models import PriceRecord

DAY = 86_400
ORACLE = "pyth-btc-usd"
TARGET = 50_000_000_000

MakeRequest = Callable[..., CreateMarketRequest]


class TestCreateMarket:
    def test_creates_market_and_bond_transfer(
        self, core: PoolOddsCore, params: GlobalParameters, make_request: MakeRequest, now: int
    ) -> None:
        resp = core.markets.create_market("alice", make_request(), params, now)
        assert resp.market.id == "MKT-000001"
        assert resp.market.status == "ACTIVE"
        assert resp.market.fee_rate == params.default_market_fee_rate
        assert resp.market.resolution_source == "MANUAL"
        assert len(resp.transfers) == 1
        assert resp.transfers[0].transfer_type == "BOND_DEPOSIT"
        assert resp.transfers[0].amount == 100_000_000

        custodian = core.custodian
        assert isinstance(custodian, RecordingCustodian)
        assert custodian.net_amount(bond_account("MKT-000001"), AssetType.BASE) == 100_000_000
        assert core.accounts.get_user_stats("alice").markets_created == 1

    def test_ids_are_sequential(
        self, core: PoolOddsCore, params: GlobalParameters, make_request: MakeRequest, now: int
    ) -> None:
        ids = [core.markets.create_market("alice", make_request(), params, now).market.id
               for _ in range(2)]
        assert ids == ["MKT-000001", "MKT-000002"]

    def test_creator_cap(
        self, core: PoolOddsCore, params: GlobalParameters, make_request: MakeRequest, now: int
    ) -> None:
        for _ in range(params.max_markets_per_creator):
            core.markets.create_market("alice", make_request(), params, now)
        with pytest.raises(TooManyMarketsError):
            core.markets.create_market("alice", make_request(), params, now)
        assert len(core.markets.list_markets()) == 3
        # another creator is unaffected
        core.markets.create_market("bob", make_request(), params, now)

    def test_paused(
        self, core: PoolOddsCore, params: GlobalParameters, make_request: MakeRequest, now: int
    ) -> None:
        with pytest.raises(ProgramPausedError):
            core.markets.create_market("alice", make_request(), replace(params, paused=True), now)
        assert core.markets.list_markets() == []

    def test_failed_creation_has_no_side_effects(
        self, core: PoolOddsCore, params: GlobalParameters, make_request: MakeRequest, now: int
    ) -> None:
        with pytest.raises(InsufficientBondAmountError):
            core.markets.create_market("alice", make_request(bond_amount=1), params, now)
        assert core.accounts.get_user_stats("alice").markets_created == 0
        assert core.custodian.applied == []  # type: ignore[attr-defined]
        # the failed attempt did not consume an id
        resp = core.markets.create_market("alice", make_request(), params, now)
        assert resp.market.id == "MKT-000001"

    def test_oracle_without_target(
        self, core: PoolOddsCore, params: GlobalParameters, make_request: MakeRequest, now: int
    ) -> None:
        req = make_request(resolution_source=ResolutionSource.ORACLE, oracle_account=ORACLE)
        with pytest.raises(MissingOracleDataError):
            core.markets.create_market("alice", req, params, now)


class TestCreatePools:
    def test_binds_empty_pools(
        self, core: PoolOddsCore, params: GlobalParameters, make_request: MakeRequest, now: int
    ) -> None:
        market_id = core.markets.create_market("alice", make_request(), params, now).market.id
        detail = core.markets.create_pools(market_id, "alice", now)
        assert detail.yes_pool_id == f"{market_id}:YES"
        assert detail.no_pool_id == f"{market_id}:NO"
        pool = core.amm.get_pool(market_id, Outcome.YES)
        assert pool.base_reserves == 0
        assert pool.fee_rate == 30
        assert pool.current_price_display == "1.000000"

    def test_only_creator(
        self, core: PoolOddsCore, params: GlobalParameters, make_request: MakeRequest, now: int
    ) -> None:
        market_id = core.markets.create_market("alice", make_request(), params, now).market.id
        with pytest.raises(UnauthorizedError):
            core.markets.create_pools(market_id, "bob", now)

    def test_twice(self, core: PoolOddsCore, market_id: str, now: int) -> None:
        with pytest.raises(PoolsAlreadyCreatedError):
            core.markets.create_pools(market_id, "alice", now)

    def test_after_end(
        self, core: PoolOddsCore, params: GlobalParameters, make_request: MakeRequest, now: int
    ) -> None:
        market_id = core.markets.create_market("alice", make_request(), params, now).market.id
        with pytest.raises(MarketNotActiveError):
            core.markets.create_pools(market_id, "alice", now + DAY)

    def test_unknown_market(self, core: PoolOddsCore, now: int) -> None:
        with pytest.raises(MarketNotFoundError):
            core.markets.create_pools("MKT-999999", "alice", now)


class TestResolveMarket:
    def test_manual_by_creator(
        self, core: PoolOddsCore, params: GlobalParameters, market_id: str, now: int
    ) -> None:
        detail = core.markets.resolve_market(
            market_id, "alice", ResolveMarketRequest(outcome=Outcome.NO), params, now + 10
        )
        assert detail.status == MarketStatus.RESOLVED.value
        assert detail.winning_outcome == "NO"
        assert detail.resolved_at == now + 10

    def test_authority_may_resolve(
        self, core: PoolOddsCore, params: GlobalParameters, market_id: str, now: int
    ) -> None:
        detail = core.markets.resolve_market(
            market_id, params.authority, ResolveMarketRequest(outcome=Outcome.YES), params, now
        )
        assert detail.winning_outcome == "YES"

    def test_stranger_rejected(
        self, core: PoolOddsCore, params: GlobalParameters, market_id: str, now: int
    ) -> None:
        with pytest.raises(UnauthorizedError):
            core.markets.resolve_market(
                market_id, "mallory", ResolveMarketRequest(outcome=Outcome.YES), params, now
            )
        assert core.markets.get_market(market_id).status == "ACTIVE"

    def test_second_resolution(
        self, core: PoolOddsCore, params: GlobalParameters, market_id: str, now: int
    ) -> None:
        req = ResolveMarketRequest(outcome=Outcome.YES)
        core.markets.resolve_market(market_id, "alice", req, params, now)
        with pytest.raises(MarketAlreadyResolvedError):
            core.markets.resolve_market(market_id, "alice", req, params, now + 1)

    def test_oracle_staleness(
        self, core: PoolOddsCore, params: GlobalParameters, make_request: MakeRequest, now: int
    ) -> None:
        end = now + DAY
        req = make_request(
            resolution_source=ResolutionSource.ORACLE,
            oracle_account=ORACLE,
            target_price=TARGET,
            end_time=end,
        )
        market_id = core.markets.create_market("alice", req, params, now).market.id

        def record(age: int) -> PriceRecord:
            return PriceRecord(ORACLE, TARGET, VerificationLevel.FULL, end - age)

        with pytest.raises(StalePriceDataError):
            core.markets.resolve_market(
                market_id, "alice", ResolveMarketRequest(), params, end, price_record=record(301)
            )
        assert core.markets.get_market(market_id).status == "ACTIVE"

        detail = core.markets.resolve_market(
            market_id, "alice", ResolveMarketRequest(), params, end, price_record=record(299)
        )
        assert detail.winning_outcome == "YES"


class TestQueries:
    def test_list_by_status(
        self, core: PoolOddsCore, params: GlobalParameters, market_id: str, now: int
    ) -> None:
        assert [m.id for m in core.markets.list_markets(MarketStatus.ACTIVE)] == [market_id]
        assert core.markets.list_markets(MarketStatus.RESOLVED) == []

    def test_get_unknown(self, core: PoolOddsCore) -> None:
        with pytest.raises(MarketNotFoundError):
            core.markets.get_market("nope")
