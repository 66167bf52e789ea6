"""GlobalParameters — protocol-wide configuration read at validation time.

Passed explicitly into every operation that needs it and built fresh from
settings by the caller; the core never holds on to a copy between calls.
"""

from dataclasses import dataclass

from config.settings import Settings, settings
from src.pm_common.errors import (
    InsufficientBondAmountError,
    InvalidFeeRateError,
    InvalidMarketDurationError,
    InvalidParameterError,
)

MAX_FEE_RATE_BPS = 1000  # 10%


@dataclass(frozen=True)
class GlobalParameters:
    authority: str
    protocol_fee_rate: int              # bps
    default_market_fee_rate: int        # bps
    min_market_duration: int            # seconds
    max_market_duration: int            # seconds
    min_bond_amount: int
    max_markets_per_creator: int
    paused: bool = False
    max_price_impact_bps: int = 1000
    max_price_age: int = 300            # seconds
    min_trade_amount: int = 1_000

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "GlobalParameters":
        s = source or settings
        params = cls(
            authority=s.PROTOCOL_AUTHORITY,
            protocol_fee_rate=s.PROTOCOL_FEE_BPS,
            default_market_fee_rate=s.DEFAULT_MARKET_FEE_BPS,
            min_market_duration=s.MIN_MARKET_DURATION_SECONDS,
            max_market_duration=s.MAX_MARKET_DURATION_SECONDS,
            min_bond_amount=s.MIN_BOND_AMOUNT,
            max_markets_per_creator=s.MAX_MARKETS_PER_CREATOR,
            paused=s.PAUSED,
            max_price_impact_bps=s.MAX_PRICE_IMPACT_BPS,
            max_price_age=s.MAX_PRICE_AGE_SECONDS,
            min_trade_amount=s.MIN_TRADE_AMOUNT,
        )
        validate_global_parameters(params)
        return params

    def validate_market_duration(self, duration: int) -> None:
        if not (self.min_market_duration <= duration <= self.max_market_duration):
            raise InvalidMarketDurationError(duration)

    def validate_bond_amount(self, amount: int) -> None:
        if amount < self.min_bond_amount:
            raise InsufficientBondAmountError(amount, self.min_bond_amount)


def validate_global_parameters(params: GlobalParameters) -> None:
    """Reject a protocol configuration that could never admit a valid market."""
    for rate in (params.protocol_fee_rate, params.default_market_fee_rate):
        if not (0 <= rate <= MAX_FEE_RATE_BPS):
            raise InvalidFeeRateError(rate, MAX_FEE_RATE_BPS)
    if not (0 < params.min_market_duration < params.max_market_duration):
        raise InvalidMarketDurationError(params.min_market_duration)
    if params.min_bond_amount <= 0:
        raise InsufficientBondAmountError(params.min_bond_amount, 1)
    if params.max_markets_per_creator <= 0:
        raise InvalidParameterError("max_markets_per_creator must be positive")
    if not (0 < params.max_price_impact_bps <= 10_000):
        raise InvalidParameterError("max_price_impact_bps must be in (0, 10000]")
    if params.max_price_age <= 0:
        raise InvalidParameterError("max_price_age must be positive")
    if params.min_trade_amount < 0:
        raise InvalidParameterError("min_trade_amount must be >= 0")
