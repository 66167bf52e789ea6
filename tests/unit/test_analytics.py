"""Tests for liquidity-split heuristics and time helpers."""

from src.pm_amm.domain.analytics import calculate_optimal_liquidity_ratio
from src.pm_common.datetime_utils import format_timestamp, time_until_end


class TestOptimalLiquidityRatio:
    def test_no_volume_is_even(self) -> None:
        assert calculate_optimal_liquidity_ratio(0, 0, 10_000) == (5000, 5000)

    def test_at_expiry_follows_volume(self) -> None:
        assert calculate_optimal_liquidity_ratio(3_000, 1_000, 0) == (7500, 2500)

    def test_full_day_pulls_to_even(self) -> None:
        assert calculate_optimal_liquidity_ratio(3_000, 1_000, 86_400) == (5000, 5000)
        assert calculate_optimal_liquidity_ratio(3_000, 1_000, 10 * 86_400) == (5000, 5000)

    def test_half_day(self) -> None:
        assert calculate_optimal_liquidity_ratio(3_000, 1_000, 43_200) == (6250, 3750)

    def test_no_heavy_volume(self) -> None:
        assert calculate_optimal_liquidity_ratio(1_000, 3_000, 43_200) == (3750, 6250)

    def test_negative_time_clamped(self) -> None:
        assert calculate_optimal_liquidity_ratio(3_000, 1_000, -50) == (7500, 2500)

    def test_sums_to_full(self) -> None:
        yes, no = calculate_optimal_liquidity_ratio(1, 2, 12_345)
        assert yes + no == 10_000


class TestTimeHelpers:
    def test_time_until_end(self) -> None:
        assert time_until_end(100, 40) == 60
        assert time_until_end(100, 140) == 0

    def test_format_timestamp(self) -> None:
        assert format_timestamp(0) == "1970-01-01T00:00:00+00:00"
