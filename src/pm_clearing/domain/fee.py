"""Fee calculation — swap fees are taken from the input amount."""

from src.pm_common.fixed_point import BASIS_POINTS, U64


def calc_fee(amount: int, fee_bps: int) -> int:
    """Truncating fee: amount x fee_bps // 10000.

    Rounds down in the trader's favour; the remainder stays in the swap input
    and therefore in the pool.
    """
    return U64(amount).mul_div(fee_bps, BASIS_POINTS).value


def fee_to_base(fee: int, input_is_base: bool, base_reserves: int, share_reserves: int) -> int:
    """Express an input-token fee in base tokens at the pre-trade spot ratio."""
    if input_is_base or fee == 0:
        return fee
    return U64(fee).mul_div(base_reserves, share_reserves).value
