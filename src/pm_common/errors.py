"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Validation (malformed parameters, authorization)
  2xxx: State (operation illegal in current market/pool state)
  3xxx: Arithmetic (checked overflow, division by zero)
  4xxx: Liquidity / slippage
  5xxx: Oracle
  9xxx: System

Every error is terminal for the operation that raised it. Callers must not
retry automatically; a retried trade is a new economic decision.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Validation ---

class ProgramPausedError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Program is currently paused", 503)


class InvalidFeeRateError(AppError):
    def __init__(self, fee_rate: int, max_rate: int) -> None:
        super().__init__(1002, f"Invalid fee rate: {fee_rate}bp (max {max_rate}bp)", 422)


class InvalidMarketDurationError(AppError):
    def __init__(self, duration: int) -> None:
        super().__init__(1003, f"Invalid market duration: {duration}s", 422)


class InsufficientBondAmountError(AppError):
    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(
            1004, f"Insufficient bond amount: {amount} (minimum {minimum})", 422
        )


class InvalidParameterError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1005, f"Invalid parameter: {detail}", 422)


class TitleTooLongError(AppError):
    def __init__(self, length: int, max_length: int) -> None:
        super().__init__(1006, f"Title too long: {length} bytes (max {max_length})", 422)


class DescriptionTooLongError(AppError):
    def __init__(self, length: int, max_length: int) -> None:
        super().__init__(
            1007, f"Description too long: {length} bytes (max {max_length})", 422
        )


class InvalidEndTimeError(AppError):
    def __init__(self, end_time: int, now: int) -> None:
        super().__init__(1008, f"Invalid end time: {end_time} is not after {now}", 422)


class TooManyMarketsError(AppError):
    def __init__(self, creator: str, limit: int) -> None:
        super().__init__(1009, f"Creator {creator} reached the limit of {limit} markets", 422)


class MissingOracleDataError(AppError):
    def __init__(self) -> None:
        super().__init__(
            1010, "Oracle resolution requires oracle_account and target_price", 422
        )


class MissingOutcomeError(AppError):
    def __init__(self) -> None:
        super().__init__(1011, "Manual resolution requires an explicit outcome", 422)


class InvalidLiquidityAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1012, f"Invalid liquidity amount: {detail}", 422)


class TradeAmountTooSmallError(AppError):
    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(1013, f"Trade amount {amount} below minimum {minimum}", 422)


class UnauthorizedError(AppError):
    def __init__(self, actor: str, action: str) -> None:
        super().__init__(1014, f"{actor} is not authorized to {action}", 403)


# --- 2xxx: State ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(2001, f"Market not found: {market_id}", 404)


class MarketNotActiveError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(2002, f"Market is not active: {market_id}", 422)


class MarketAlreadyResolvedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(2003, f"Market already resolved: {market_id}", 409)


class CannotResolveError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(2004, f"Market cannot be resolved yet: {market_id}", 422)


class InvalidPoolError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2005, f"Invalid pool: {detail}", 422)


class PoolsAlreadyCreatedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(2006, f"Pools already created for market {market_id}", 409)


class PoolNotFoundError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(2007, f"Pool not found: {pool_id}", 404)


class PositionNotFoundError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2008, f"Position not found: {detail}", 404)


class NoWinningsToClaimError(AppError):
    def __init__(self, market_id: str, owner: str) -> None:
        super().__init__(2009, f"No winnings to claim for {owner} in market {market_id}", 422)


class MarketNotResolvedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(2010, f"Market not resolved: {market_id}", 422)


# --- 3xxx: Arithmetic ---

class MathOverflowError(AppError):
    def __init__(self, detail: str = "Math overflow") -> None:
        super().__init__(3001, detail, 422)


class DivisionByZeroError(AppError):
    def __init__(self, detail: str = "Division by zero") -> None:
        super().__init__(3002, detail, 422)


# --- 4xxx: Liquidity / slippage ---

class InsufficientLiquidityError(AppError):
    def __init__(self, detail: str = "Insufficient liquidity") -> None:
        super().__init__(4001, detail, 422)


class InsufficientLiquidityMintedError(AppError):
    def __init__(self) -> None:
        super().__init__(4002, "Deposit too small to mint any LP tokens", 422)


class InsufficientSharesError(AppError):
    def __init__(self, requested: int, held: int) -> None:
        super().__init__(
            4003, f"Insufficient shares: requested {requested}, held {held}", 422
        )


class SlippageExceededError(AppError):
    def __init__(self, amount_out: int, min_amount_out: int) -> None:
        super().__init__(
            4004, f"Slippage exceeded: output {amount_out} < minimum {min_amount_out}", 422
        )


class PriceImpactTooHighError(AppError):
    def __init__(self, impact_bps: int, max_bps: int) -> None:
        super().__init__(
            4005, f"Price impact too high: {impact_bps}bp (max {max_bps}bp)", 422
        )


class InsufficientLPTokensError(AppError):
    def __init__(self, requested: int, available: int) -> None:
        super().__init__(
            4006, f"Insufficient LP tokens: requested {requested}, available {available}", 422
        )


# --- 5xxx: Oracle ---

class MissingOracleAccountError(AppError):
    def __init__(self) -> None:
        super().__init__(5001, "Oracle price record is required for this market", 422)


class InvalidOracleAccountError(AppError):
    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            5002, f"Invalid oracle account: expected {expected}, got {actual}", 422
        )


class InvalidOracleDataError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(5003, f"Invalid oracle data: {detail}", 422)


class StalePriceDataError(AppError):
    def __init__(self, age: int, max_age: int) -> None:
        super().__init__(5004, f"Stale price data: {age}s old (max {max_age}s)", 422)


# --- 9xxx: System ---

class InvariantViolationError(AppError):
    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(9001, "Invariant violated: " + "; ".join(violations), 500)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal error") -> None:
        super().__init__(9002, detail, 500)
