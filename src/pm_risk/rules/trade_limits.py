from src.pm_common.errors import (
    PriceImpactTooHighError,
    SlippageExceededError,
    TradeAmountTooSmallError,
)


def check_trade_amount(amount_in: int, min_trade_amount: int) -> None:
    """Raise TradeAmountTooSmallError if amount_in is zero or under the minimum."""
    if amount_in <= 0 or amount_in < min_trade_amount:
        raise TradeAmountTooSmallError(amount_in, min_trade_amount)


def check_slippage(amount_out: int, min_amount_out: int) -> None:
    """A fill must return at least min_amount_out and never zero."""
    if amount_out < max(min_amount_out, 1):
        raise SlippageExceededError(amount_out, min_amount_out)


def check_price_impact(impact_bps: int, max_impact_bps: int) -> None:
    if impact_bps > max_impact_bps:
        raise PriceImpactTooHighError(impact_bps, max_impact_bps)
