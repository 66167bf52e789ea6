"""Domain models for pm_account — trader positions, LP positions, user rollups.

All money fields are integer base-token units; prices are 6-decimal fixed
point. Mutating methods compute every new value first and assign only once all
checks have passed, so a raised error leaves the object untouched.
"""

from dataclasses import dataclass

from src.pm_amm.domain.models import FEE_GROWTH_PRECISION
from src.pm_common.enums import Outcome
from src.pm_common.errors import (
    InsufficientLPTokensError,
    InsufficientSharesError,
    InvalidParameterError,
)
from src.pm_common.fixed_point import I64, I64_MAX, I64_MIN, PRICE_PRECISION, U64


@dataclass
class Position:
    """Share ledger for one trader, one market, one outcome."""

    owner: str
    market_id: str
    outcome: Outcome
    shares: int = 0
    average_price: int = 0      # 6 decimals, weighted cost per share
    total_invested: int = 0     # cost basis of the shares still held
    realized_pnl: int = 0       # signed, cumulative
    created_at: int = 0
    last_update: int = 0

    def update_after_trade(self, shares_delta: int, price: int, amount: int, now: int) -> int:
        """Apply a fill. Returns the realized P&L delta (0 for buys).

        Buy  (delta > 0): amount is the cost paid; average price is re-weighted.
        Sell (delta < 0): amount is the proceeds; cost basis leaves at the
        average price, and closing the whole position releases all of it.
        `price` is the pool price after the fill and does not affect the ledger.
        """
        if shares_delta == 0:
            raise InvalidParameterError("shares_delta must be non-zero")

        if shares_delta > 0:
            new_shares = U64(self.shares).add(shares_delta)
            new_total = U64(self.total_invested).add(amount)
            self.average_price = new_total.mul_div(PRICE_PRECISION, new_shares).value
            self.shares = new_shares.value
            self.total_invested = new_total.value
            self.last_update = now
            return 0

        shares_to_sell = -shares_delta
        if shares_to_sell > self.shares:
            raise InsufficientSharesError(shares_to_sell, self.shares)

        if shares_to_sell == self.shares:
            cost_basis = U64(self.total_invested)
        else:
            cost_basis = U64(shares_to_sell).mul_div(self.average_price, PRICE_PRECISION)
        pnl_delta = U64(amount).to_i64().sub(cost_basis.to_i64())
        new_realized = I64(self.realized_pnl).add(pnl_delta)
        new_shares = U64(self.shares).sub(shares_to_sell)
        new_total = U64(self.total_invested).sub(cost_basis)

        self.realized_pnl = new_realized.value
        self.shares = new_shares.value
        self.total_invested = new_total.value
        self.last_update = now
        return pnl_delta.value

    def current_value(self, current_price: int) -> int:
        return U64(self.shares).mul_div(current_price, PRICE_PRECISION).value

    def calculate_unrealized_pnl(self, current_price: int) -> int:
        if self.shares == 0:
            return 0
        value = U64(self.current_value(current_price)).to_i64()
        return value.sub(U64(self.total_invested).to_i64()).value

    def calculate_total_pnl(self, current_price: int) -> int:
        unrealized = self.calculate_unrealized_pnl(current_price)
        return I64(self.realized_pnl).add(unrealized).value


@dataclass
class LiquidityPosition:
    """One LP's claim on one pool."""

    owner: str
    pool_id: str
    lp_tokens: int = 0
    initial_base_deposit: int = 0
    initial_share_deposit: int = 0
    fees_earned: int = 0
    fee_growth_checkpoint: int = 0
    created_at: int = 0
    last_update: int = 0

    def calculate_current_value(
        self, pool_base_reserves: int, pool_share_reserves: int, pool_lp_supply: int
    ) -> tuple[int, int]:
        """(base_value, share_value) redeemable right now."""
        if pool_lp_supply == 0 or self.lp_tokens == 0:
            return 0, 0
        base_value = U64(pool_base_reserves).mul_div(self.lp_tokens, pool_lp_supply)
        share_value = U64(pool_share_reserves).mul_div(self.lp_tokens, pool_lp_supply)
        return base_value.value, share_value.value

    def calculate_impermanent_loss(
        self, current_base_value: int, current_share_value: int, current_price: int
    ) -> int:
        """LP value minus the value of simply holding the initial deposit.

        Both legs are valued at current_price; negative means a loss versus
        holding. Reporting only.
        """
        hold_value = U64(self.initial_base_deposit).add(
            U64(self.initial_share_deposit).mul_div(current_price, PRICE_PRECISION)
        )
        lp_value = U64(current_base_value).add(
            U64(current_share_value).mul_div(current_price, PRICE_PRECISION)
        )
        return lp_value.to_i64().sub(hold_value.to_i64()).value

    def accrue_fees(self, pool_fee_growth: int) -> int:
        """Credit fees accumulated since the last checkpoint. Returns the amount."""
        growth = pool_fee_growth - self.fee_growth_checkpoint
        earned = U64(self.lp_tokens * growth // FEE_GROWTH_PRECISION) if growth > 0 else U64(0)
        total = U64(self.fees_earned).add(earned)
        self.fees_earned = total.value
        self.fee_growth_checkpoint = pool_fee_growth
        return earned.value

    def record_deposit(
        self, lp_minted: int, base_deposit: int, share_deposit: int, now: int
    ) -> None:
        new_tokens = U64(self.lp_tokens).add(lp_minted)
        if self.lp_tokens == 0:
            # A fresh (or fully exited) position takes a new baseline snapshot.
            self.initial_base_deposit = base_deposit
            self.initial_share_deposit = share_deposit
        self.lp_tokens = new_tokens.value
        self.last_update = now

    def record_withdrawal(self, lp_tokens: int, now: int) -> None:
        if lp_tokens > self.lp_tokens:
            raise InsufficientLPTokensError(lp_tokens, self.lp_tokens)
        self.lp_tokens -= lp_tokens
        self.last_update = now


@dataclass
class User:
    """Aggregate trading stats for one identity."""

    authority: str
    markets_created: int = 0
    total_trades: int = 0
    total_volume: int = 0
    total_fees_paid: int = 0
    total_fees_earned: int = 0
    total_realized_pnl: int = 0
    created_at: int = 0
    last_activity: int = 0

    def update_after_trade(self, volume: int, fees: int, realized_pnl: int, now: int) -> None:
        trades = U64(self.total_trades).add(1)
        total_volume = U64(self.total_volume).add(volume)
        fees_paid = U64(self.total_fees_paid).add(fees)
        pnl = I64(self.total_realized_pnl).add(realized_pnl)
        self.total_trades = trades.value
        self.total_volume = total_volume.value
        self.total_fees_paid = fees_paid.value
        self.total_realized_pnl = pnl.value
        self.last_activity = now

    def update_after_market_creation(self, now: int) -> None:
        self.markets_created = U64(self.markets_created).add(1).value
        self.last_activity = now

    def update_after_fee_earning(self, fees: int, now: int) -> None:
        self.total_fees_earned = U64(self.total_fees_earned).add(fees).value
        self.last_activity = now

    def record_realized_pnl(self, pnl: int, now: int) -> None:
        self.total_realized_pnl = I64(self.total_realized_pnl).add(pnl).value
        self.last_activity = now

    def calculate_net_pnl(self) -> int:
        """Realized P&L plus LP fees earned minus fees paid, saturating at i64 bounds."""
        net = self.total_realized_pnl + self.total_fees_earned - self.total_fees_paid
        return max(I64_MIN, min(I64_MAX, net))

    def can_create_market(self, max_markets: int) -> bool:
        return self.markets_created < max_markets
