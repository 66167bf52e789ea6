"""Liquidity-split heuristics for LPs seeding a market. Reporting only."""

from src.pm_common.fixed_point import BASIS_POINTS, U64, _div_trunc

_FULL_DAY_SECONDS = 86_400
_EVEN_SPLIT_BPS = BASIS_POINTS // 2


def calculate_optimal_liquidity_ratio(
    yes_volume: int, no_volume: int, time_to_expiry: int
) -> tuple[int, int]:
    """Suggested (yes_bps, no_bps) split of new liquidity; always sums to 10_000.

    Starts from the traded-volume ratio and pulls it toward 50/50 in
    proportion to the time left, capped at one day. No volume means 50/50.
    """
    total = U64(yes_volume).add(no_volume)
    if total.value == 0:
        return _EVEN_SPLIT_BPS, _EVEN_SPLIT_BPS
    yes_ratio = U64(yes_volume).mul_div(BASIS_POINTS, total).value
    time_factor = min(max(time_to_expiry, 0), _FULL_DAY_SECONDS)
    adjustment = _div_trunc((_EVEN_SPLIT_BPS - yes_ratio) * time_factor, _FULL_DAY_SECONDS)
    adjusted_yes = yes_ratio + adjustment
    return adjusted_yes, BASIS_POINTS - adjusted_yes
