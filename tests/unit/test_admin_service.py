# tests/unit/test_admin_service.py
"""Unit tests for AdminService."""
import pytest

from src.main import PoolOddsCore
from src.pm_amm.application.schemas import RemoveLiquidityRequest, TradeRequest
from src.pm_common.enums import Outcome, TradeDirection
from src.pm_common.errors import (
    InvalidFeeRateError,
    MarketNotActiveError,
    MarketNotFoundError,
    UnauthorizedError,
)
from src.pm_common.parameters import GlobalParameters
from src.pm_market.application.schemas import UpdateFeeRateRequest


def _buy(market_id: str, amount: int) -> TradeRequest:
    return TradeRequest(
        market_id=market_id, outcome=Outcome.YES, direction=TradeDirection.BUY, amount_in=amount
    )


class TestCancelMarket:
    def test_authority_cancels(
        self, core: PoolOddsCore, params: GlobalParameters, funded_market_id: str, now: int
    ) -> None:
        detail = core.admin.cancel_market(funded_market_id, params.authority, params)
        assert detail.status == "CANCELLED"
        with pytest.raises(MarketNotActiveError):
            core.amm.execute_trade("bob", _buy(funded_market_id, 10_000), params, now)
        # liquidity is never stuck
        resp = core.amm.remove_liquidity(
            "lp1",
            RemoveLiquidityRequest(market_id=funded_market_id, outcome=Outcome.YES,
                                   lp_tokens=1_000_000),
            now,
        )
        assert resp.base_amount == 1_000_000

    def test_creator_cannot_cancel(
        self, core: PoolOddsCore, params: GlobalParameters, funded_market_id: str
    ) -> None:
        with pytest.raises(UnauthorizedError):
            core.admin.cancel_market(funded_market_id, "alice", params)

    def test_unknown_market(self, core: PoolOddsCore, params: GlobalParameters) -> None:
        with pytest.raises(MarketNotFoundError):
            core.admin.cancel_market("MKT-999999", params.authority, params)


class TestUpdateFeeRate:
    def test_propagates_to_pools(
        self, core: PoolOddsCore, params: GlobalParameters, funded_market_id: str, now: int
    ) -> None:
        detail = core.admin.update_market_fee_rate(
            funded_market_id, params.authority, UpdateFeeRateRequest(fee_rate=0), params
        )
        assert detail.fee_rate == 0
        assert core.amm.get_pool(funded_market_id, Outcome.NO).fee_rate == 0
        quote = core.amm.quote_trade(_buy(funded_market_id, 100_000), now)
        assert quote.amount_out == 90_909

    def test_cap(self, core: PoolOddsCore, params: GlobalParameters, funded_market_id: str) -> None:
        with pytest.raises(InvalidFeeRateError):
            core.admin.update_market_fee_rate(
                funded_market_id, params.authority, UpdateFeeRateRequest(fee_rate=1001), params
            )
        assert core.markets.get_market(funded_market_id).fee_rate == 30

    def test_non_authority(
        self, core: PoolOddsCore, params: GlobalParameters, funded_market_id: str
    ) -> None:
        with pytest.raises(UnauthorizedError):
            core.admin.update_market_fee_rate(
                funded_market_id, "alice", UpdateFeeRateRequest(fee_rate=10), params
            )


class TestStatsAndInvariants:
    def test_market_stats(
        self, core: PoolOddsCore, params: GlobalParameters, funded_market_id: str, now: int
    ) -> None:
        core.amm.execute_trade("bob", _buy(funded_market_id, 100_000), params, now)
        stats = core.admin.get_market_stats(funded_market_id)
        assert stats["status"] == "ACTIVE"
        assert stats["total_volume"] == 100_000
        assert stats["trader_count"] == 1
        assert stats["lp_count"] == 1
        assert stats["total_fees"] == 300
        assert stats["pools"]["YES"]["current_price"] == 1_209_669

    def test_verify_all_invariants_clean(
        self, core: PoolOddsCore, params: GlobalParameters, funded_market_id: str, now: int
    ) -> None:
        core.amm.execute_trade("bob", _buy(funded_market_id, 100_000), params, now)
        result = core.admin.verify_all_invariants()
        assert result == {"ok": True, "violations": []}
