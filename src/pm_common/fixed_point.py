"""Overflow-checked integer arithmetic for reserve, position and fee math.

All amounts are unsigned 64-bit integers and all prices are 6-decimal fixed
point (1_000_000 == 1.0). No float, no Decimal.

U64 / I64 wrap a plain int and raise instead of wrapping around:
  - a result outside the type's range  -> MathOverflowError
  - a zero divisor                     -> DivisionByZeroError

Intermediate products in mul_div are computed at full precision (Python ints
are unbounded), so only the final quotient is range-checked.
"""

from dataclasses import dataclass
from typing import ClassVar, TypeVar, Union

from src.pm_common.errors import AppError, DivisionByZeroError, MathOverflowError

PRICE_PRECISION = 1_000_000
BASIS_POINTS = 10_000
U64_MAX = (1 << 64) - 1
I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1

_FACTOR_PRECISION = 10**18

_T = TypeVar("_T", bound="_CheckedInt")


@dataclass(frozen=True)
class _CheckedInt:
    value: int

    MIN: ClassVar[int]
    MAX: ClassVar[int]

    def __post_init__(self) -> None:
        if not (self.MIN <= self.value <= self.MAX):
            raise MathOverflowError(
                f"Math overflow: {self.value} outside {type(self).__name__} range"
            )

    def add(self: _T, other: "IntLike") -> _T:
        return type(self)(self.value + _raw(other))

    def sub(self: _T, other: "IntLike", error: AppError | None = None) -> _T:
        """Checked subtraction. `error` replaces MathOverflowError on underflow."""
        result = self.value - _raw(other)
        if result < self.MIN and error is not None:
            raise error
        return type(self)(result)

    def mul(self: _T, other: "IntLike") -> _T:
        return type(self)(self.value * _raw(other))

    def div(self: _T, other: "IntLike") -> _T:
        """Division truncating toward zero."""
        divisor = _raw(other)
        if divisor == 0:
            raise DivisionByZeroError()
        return type(self)(_div_trunc(self.value, divisor))

    def mul_div(self: _T, numerator: "IntLike", denominator: "IntLike") -> _T:
        """self * numerator / denominator with a full-precision intermediate."""
        den = _raw(denominator)
        if den == 0:
            raise DivisionByZeroError()
        return type(self)(_div_trunc(self.value * _raw(numerator), den))

    def __int__(self) -> int:
        return self.value


class U64(_CheckedInt):
    MIN = 0
    MAX = U64_MAX

    def to_i64(self) -> "I64":
        return I64(self.value)


class I64(_CheckedInt):
    MIN = I64_MIN
    MAX = I64_MAX


IntLike = Union[int, _CheckedInt]


def _raw(x: IntLike) -> int:
    return x.value if isinstance(x, _CheckedInt) else x


def _div_trunc(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def isqrt(x: int) -> int:
    """Integer square root (floor) by Newton's method. Deterministic, no float."""
    if x < 0:
        raise MathOverflowError(f"Math overflow: sqrt of negative value {x}")
    if x == 0:
        return 0
    z = x
    y = (x + 1) // 2
    while y < z:
        z = y
        y = (x // y + y) // 2
    return z


def calculate_percentage(amount: int, percentage_bps: int) -> int:
    """amount * bps / 10_000, truncating."""
    return U64(amount).mul_div(percentage_bps, BASIS_POINTS).value


def calculate_price_impact(reserve: int, trade_amount: int) -> int:
    """Trade size relative to reserve in basis points, capped at 10_000 (100%)."""
    if reserve == 0:
        return 0
    impact = U64(trade_amount).mul_div(BASIS_POINTS, reserve).value
    return min(impact, BASIS_POINTS)


def compound_interest(principal: int, rate_bps: int, periods: int) -> int:
    """principal * (1 + rate)^periods in 18-decimal fixed point, floored.

    Reporting helper only (fee projections); never used for settlement.
    """
    if periods < 0:
        raise MathOverflowError(f"Math overflow: negative period count {periods}")
    factor = (BASIS_POINTS + rate_bps) * _FACTOR_PRECISION // BASIS_POINTS
    # Anything above this bound overflows u64 once applied to principal >= 1.
    ceiling = U64_MAX * _FACTOR_PRECISION
    result = _FACTOR_PRECISION
    base = factor
    n = periods
    while n > 0:
        if n & 1:
            result = result * base // _FACTOR_PRECISION
            if result > ceiling:
                raise MathOverflowError("Math overflow: compound factor too large")
        n >>= 1
        if n:
            base = base * base // _FACTOR_PRECISION
            if base > ceiling:
                raise MathOverflowError("Math overflow: compound factor too large")
    value = U64(principal).mul_div(result, _FACTOR_PRECISION).value
    if value < principal:
        raise MathOverflowError("Math overflow: compounding decreased principal")
    return value


def price_to_display(price: int) -> str:
    """Convert a 6-decimal fixed-point value to display: 1_500_000 -> '1.500000'."""
    if price < 0:
        abs_price = -price
        return f"-{abs_price // PRICE_PRECISION:,}.{abs_price % PRICE_PRECISION:06d}"
    return f"{price // PRICE_PRECISION:,}.{price % PRICE_PRECISION:06d}"
