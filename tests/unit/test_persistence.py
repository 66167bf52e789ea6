"""Tests for id generation, locks and the in-memory repositories."""

import threading

from src.pm_account.domain.models import LiquidityPosition, Position, User
from src.pm_account.infrastructure.persistence import (
    InMemoryLiquidityPositionRepository,
    InMemoryPositionRepository,
    InMemoryUserRepository,
)
from src.pm_amm.domain.models import Pool
from src.pm_amm.infrastructure.persistence import InMemoryPoolRepository
from src.pm_common.enums import MarketCategory, Outcome
from src.pm_common.id_generator import SequenceIdGenerator, pool_id_for
from src.pm_common.locks import MarketLockRegistry
from src.pm_market.domain.models import ManualResolution, Market
from src.pm_market.infrastructure.persistence import InMemoryMarketRepository


class TestIdGenerator:
    def test_sequence(self) -> None:
        gen = SequenceIdGenerator("MKT")
        assert gen.next_id() == "MKT-000001"
        assert gen.next_id() == "MKT-000002"

    def test_concurrent_ids_unique(self) -> None:
        gen = SequenceIdGenerator("MKT")
        ids: list[str] = []

        def worker() -> None:
            for _ in range(200):
                ids.append(gen.next_id())

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(set(ids)) == 800

    def test_pool_id(self) -> None:
        assert pool_id_for("MKT-000001", Outcome.YES.value) == "MKT-000001:YES"


class TestLocks:
    def test_same_market_same_lock(self) -> None:
        locks = MarketLockRegistry()
        assert locks.for_market("A") is locks.for_market("A")
        assert locks.for_market("A") is not locks.for_market("B")
        assert locks.for_creator("A") is not locks.for_market("A")


class TestMarketRepository:
    def test_reads_are_copies(self) -> None:
        repo = InMemoryMarketRepository()
        market = Market(
            id=repo.next_market_id(), creator="alice", title="t", description="",
            category=MarketCategory.OTHER, resolution=ManualResolution(),
            created_at=0, end_time=100, fee_rate=30,
        )
        repo.save_market(market)
        loaded = repo.get_market("MKT-000001")
        assert loaded is not None
        loaded.record_trade(10, new_trader=True)
        assert repo.get_market("MKT-000001").total_volume == 0  # type: ignore[union-attr]
        assert repo.get_market("missing") is None


class TestPoolRepository:
    def test_filter_by_market(self) -> None:
        repo = InMemoryPoolRepository()
        repo.save_pool(Pool(id="A:YES", market_id="A", outcome=Outcome.YES, fee_rate=30))
        repo.save_pool(Pool(id="B:YES", market_id="B", outcome=Outcome.YES, fee_rate=30))
        assert [p.id for p in repo.list_pools("A")] == ["A:YES"]
        assert len(repo.list_pools()) == 2


class TestAccountRepositories:
    def test_position_roundtrip_isolated(self) -> None:
        repo = InMemoryPositionRepository()
        pos = Position(owner="bob", market_id="M", outcome=Outcome.YES)
        repo.save_position(pos)
        pos.shares = 99
        stored = repo.get_position("bob", "M", Outcome.YES)
        assert stored is not None and stored.shares == 0
        assert repo.get_position("bob", "M", Outcome.NO) is None
        assert len(repo.list_positions(owner="bob")) == 1
        assert repo.list_positions(market_id="other") == []

    def test_lp_positions(self) -> None:
        repo = InMemoryLiquidityPositionRepository()
        repo.save_lp_position(LiquidityPosition(owner="lp1", pool_id="P", lp_tokens=5))
        assert repo.get_lp_position("lp1", "P").lp_tokens == 5  # type: ignore[union-attr]
        assert repo.list_lp_positions("Q") == []

    def test_users(self) -> None:
        repo = InMemoryUserRepository()
        assert repo.get_user("bob") is None
        repo.save_user(User(authority="bob", total_trades=2))
        assert repo.get_user("bob").total_trades == 2  # type: ignore[union-attr]
