"""Unit tests for Market guards, creation validation and resolution."""

from dataclasses import replace

import pytest

from src.pm_common.enums import MarketCategory, MarketStatus, Outcome, VerificationLevel
from src.pm_common.errors import (
    CannotResolveError,
    DescriptionTooLongError,
    InsufficientLiquidityError,
    InsufficientBondAmountError,
    InvalidEndTimeError,
    InvalidFeeRateError,
    InvalidMarketDurationError,
    InvalidOracleAccountError,
    InvalidOracleDataError,
    InvalidParameterError,
    MarketAlreadyResolvedError,
    MarketNotActiveError,
    MarketNotResolvedError,
    MissingOracleAccountError,
    MissingOutcomeError,
    PoolsAlreadyCreatedError,
    ProgramPausedError,
    StalePriceDataError,
    TitleTooLongError,
)
from src.pm_common.parameters import GlobalParameters
from src.pm_market.domain.lifecycle import (
    determine_winning_outcome,
    resolve,
    validate_market_creation,
)
from src.pm_market.domain.models import ManualResolution, Market, OracleResolution
from src.pm_oracle.domain.models import PriceRecord

NOW = 1_700_000_000
END = NOW + 86_400
ORACLE = "pyth-btc-usd"
TARGET = 50_000_000_000


def _market(oracle: bool = False) -> Market:
    policy = OracleResolution(ORACLE, TARGET) if oracle else ManualResolution()
    return Market(
        id="MKT-000001",
        creator="alice",
        title="BTC above 50k?",
        description="",
        category=MarketCategory.CRYPTO,
        resolution=policy,
        created_at=NOW,
        end_time=END,
        fee_rate=30,
    )


def _record(age: int, price: int = TARGET, **kwargs) -> PriceRecord:
    fields = dict(
        account=ORACLE,
        price=price,
        verification_level=VerificationLevel.FULL,
        publish_time=END - age,
    )
    fields.update(kwargs)
    return PriceRecord(**fields)


class TestGuards:
    def test_can_trade_until_end(self) -> None:
        m = _market()
        assert m.can_trade(END - 1)
        assert not m.can_trade(END)

    def test_manual_resolves_any_time(self) -> None:
        assert _market().can_resolve(NOW)

    def test_oracle_resolves_only_after_end(self) -> None:
        m = _market(oracle=True)
        assert not m.can_resolve(END - 1)
        assert m.can_resolve(END)

    def test_cancelled_cannot_trade_or_resolve(self) -> None:
        m = _market()
        m.cancel()
        assert m.status == MarketStatus.CANCELLED
        assert not m.can_trade(NOW)
        assert not m.can_resolve(END)

    def test_cancel_twice(self) -> None:
        m = _market()
        m.cancel()
        with pytest.raises(MarketNotActiveError):
            m.cancel()

    def test_bind_pools_once(self) -> None:
        m = _market()
        m.bind_pools("MKT-000001:YES", "MKT-000001:NO")
        assert m.has_pools
        assert m.pool_id_for(Outcome.NO) == "MKT-000001:NO"
        with pytest.raises(PoolsAlreadyCreatedError):
            m.bind_pools("x", "y")

    def test_update_fee_rate_bounds(self) -> None:
        m = _market()
        m.update_fee_rate(1000)
        assert m.fee_rate == 1000
        with pytest.raises(InvalidFeeRateError):
            m.update_fee_rate(1001)

    def test_record_trade_counts_new_traders(self) -> None:
        m = _market()
        m.record_trade(100, new_trader=True)
        m.record_trade(50, new_trader=False)
        m.record_trade(10, new_trader=True)
        assert m.trader_count == 2
        assert m.total_volume == 160

    def test_settlement_reserve_requires_resolution(self) -> None:
        m = _market()
        with pytest.raises(MarketNotResolvedError):
            m.fund_settlement(100)

    def test_settlement_claims_never_exceed_reserve(self) -> None:
        m = _market()
        m.mark_resolved(Outcome.YES, NOW)
        m.fund_settlement(100)
        m.pay_settlement(60)
        assert m.settlement_reserve == 40
        with pytest.raises(InsufficientLiquidityError):
            m.pay_settlement(41)
        assert m.settlement_reserve == 40


class TestOracleResolution:
    def test_fresh_price_at_target_resolves_yes(self) -> None:
        m = _market(oracle=True)
        assert resolve(m, END, price_record=_record(age=299)) == Outcome.YES
        assert m.status == MarketStatus.RESOLVED
        assert m.winning_outcome == Outcome.YES
        assert m.resolved_at == END

    def test_price_below_target_resolves_no(self) -> None:
        m = _market(oracle=True)
        assert resolve(m, END, price_record=_record(age=10, price=TARGET - 1)) == Outcome.NO

    def test_max_age_boundary_accepted(self) -> None:
        m = _market(oracle=True)
        assert determine_winning_outcome(m, END, price_record=_record(age=300)) == Outcome.YES

    def test_stale_price_rejected(self) -> None:
        m = _market(oracle=True)
        with pytest.raises(StalePriceDataError):
            resolve(m, END, price_record=_record(age=301))
        assert m.status == MarketStatus.ACTIVE
        assert m.winning_outcome is None

    def test_missing_record(self) -> None:
        with pytest.raises(MissingOracleAccountError):
            resolve(_market(oracle=True), END)

    def test_wrong_account(self) -> None:
        with pytest.raises(InvalidOracleAccountError):
            resolve(_market(oracle=True), END, price_record=_record(age=1, account="other"))

    def test_partial_verification_rejected(self) -> None:
        record = _record(age=1, verification_level=VerificationLevel.PARTIAL)
        with pytest.raises(InvalidOracleDataError):
            resolve(_market(oracle=True), END, price_record=record)

    def test_non_positive_price_rejected(self) -> None:
        with pytest.raises(InvalidOracleDataError):
            resolve(_market(oracle=True), END, price_record=_record(age=1, price=0))

    def test_wide_confidence_rejected(self) -> None:
        record = _record(age=1, confidence=TARGET // 10)
        with pytest.raises(InvalidOracleDataError):
            resolve(_market(oracle=True), END, price_record=record)

    def test_before_end_cannot_resolve(self) -> None:
        with pytest.raises(CannotResolveError):
            resolve(_market(oracle=True), END - 1, price_record=_record(age=1))


class TestManualResolution:
    def test_explicit_outcome(self) -> None:
        m = _market()
        assert resolve(m, NOW, outcome=Outcome.NO) == Outcome.NO

    def test_outcome_required(self) -> None:
        with pytest.raises(MissingOutcomeError):
            resolve(_market(), NOW)

    def test_second_resolution_rejected(self) -> None:
        m = _market()
        resolve(m, NOW, outcome=Outcome.YES)
        with pytest.raises(MarketAlreadyResolvedError):
            resolve(m, NOW + 1, outcome=Outcome.NO)
        assert m.winning_outcome == Outcome.YES

    def test_cancelled_cannot_resolve(self) -> None:
        m = _market()
        m.cancel()
        with pytest.raises(CannotResolveError):
            resolve(m, NOW, outcome=Outcome.YES)


class TestCreationValidation:
    @pytest.fixture
    def params(self) -> GlobalParameters:
        return GlobalParameters(
            authority="protocol-authority",
            protocol_fee_rate=10,
            default_market_fee_rate=30,
            min_market_duration=3600,
            max_market_duration=86_400 * 365,
            min_bond_amount=1_000,
            max_markets_per_creator=10,
        )

    def test_valid(self, params: GlobalParameters) -> None:
        validate_market_creation(params, "Title", "Desc", NOW + 3600, 1_000, NOW)

    def test_paused_checked_first(self, params: GlobalParameters) -> None:
        paused = replace(params, paused=True)
        with pytest.raises(ProgramPausedError):
            validate_market_creation(paused, "", "", NOW - 1, 0, NOW)

    def test_end_time_in_past(self, params: GlobalParameters) -> None:
        with pytest.raises(InvalidEndTimeError):
            validate_market_creation(params, "", "", NOW, 0, NOW)

    def test_duration_too_short(self, params: GlobalParameters) -> None:
        with pytest.raises(InvalidMarketDurationError):
            validate_market_creation(params, "", "", NOW + 3599, 0, NOW)

    def test_duration_too_long(self, params: GlobalParameters) -> None:
        with pytest.raises(InvalidMarketDurationError):
            validate_market_creation(params, "T", "", NOW + 86_400 * 366, 1_000, NOW)

    def test_bond_too_small(self, params: GlobalParameters) -> None:
        with pytest.raises(InsufficientBondAmountError):
            validate_market_creation(params, "", "", NOW + 3600, 999, NOW)

    def test_blank_title(self, params: GlobalParameters) -> None:
        with pytest.raises(InvalidParameterError):
            validate_market_creation(params, "   ", "", NOW + 3600, 1_000, NOW)

    def test_title_limit_counts_bytes(self, params: GlobalParameters) -> None:
        validate_market_creation(params, "a" * 64, "", NOW + 3600, 1_000, NOW)
        # 33 characters, 66 bytes
        with pytest.raises(TitleTooLongError):
            validate_market_creation(params, "é" * 33, "", NOW + 3600, 1_000, NOW)

    def test_description_too_long(self, params: GlobalParameters) -> None:
        with pytest.raises(DescriptionTooLongError):
            validate_market_creation(params, "T", "d" * 129, NOW + 3600, 1_000, NOW)
