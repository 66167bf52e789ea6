"""Global enums shared by every bounded context."""

from enum import Enum


class MarketStatus(str, Enum):
    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"
    CANCELLED = "CANCELLED"


class Outcome(str, Enum):
    YES = "YES"
    NO = "NO"


class MarketCategory(str, Enum):
    CRYPTO = "CRYPTO"
    SPORTS = "SPORTS"
    POLITICS = "POLITICS"
    WEATHER = "WEATHER"
    OTHER = "OTHER"


class ResolutionSource(str, Enum):
    ORACLE = "ORACLE"
    MANUAL = "MANUAL"


class VerificationLevel(str, Enum):
    """Oracle price record verification level. Only FULL is accepted for resolution."""
    PARTIAL = "PARTIAL"
    FULL = "FULL"


class TradeDirection(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class AssetType(str, Enum):
    """Fungible assets moved by the custodian on the core's behalf."""
    BASE = "BASE"
    YES_SHARES = "YES_SHARES"
    NO_SHARES = "NO_SHARES"
    LP_TOKENS = "LP_TOKENS"


class TransferType(str, Enum):
    # Market creation
    BOND_DEPOSIT = "BOND_DEPOSIT"
    # Trading
    TRADE_PAYMENT = "TRADE_PAYMENT"
    TRADE_SHARES_OUT = "TRADE_SHARES_OUT"
    TRADE_SHARES_IN = "TRADE_SHARES_IN"
    TRADE_PROCEEDS = "TRADE_PROCEEDS"
    # Liquidity
    LIQUIDITY_BASE_IN = "LIQUIDITY_BASE_IN"
    LIQUIDITY_SHARES_IN = "LIQUIDITY_SHARES_IN"
    LP_MINT = "LP_MINT"
    LP_BURN = "LP_BURN"
    LIQUIDITY_BASE_OUT = "LIQUIDITY_BASE_OUT"
    LIQUIDITY_SHARES_OUT = "LIQUIDITY_SHARES_OUT"
    # Settlement
    SETTLEMENT_FUNDING = "SETTLEMENT_FUNDING"
    SETTLEMENT_SHARES_IN = "SETTLEMENT_SHARES_IN"
    SETTLEMENT_PAYOUT = "SETTLEMENT_PAYOUT"
