"""Constant-product pool — one per outcome per market.

Reserves:
  base_reserves   collateral (base token) held by the pool
  share_reserves  outcome shares held by the pool

Price is base per share in 6-decimal fixed point and is always recomputed from
reserves after a mutation; it is never set independently.

Fees are taken from the swap input and stay in the pool, so
base_reserves * share_reserves never decreases across a swap.

Fee accounting is kept in base-token terms (fees_collected, fee growth):
a share-input fee is converted at the pre-trade spot ratio.
"""

from dataclasses import dataclass

from src.pm_clearing.domain.fee import calc_fee, fee_to_base
from src.pm_common.enums import Outcome
from src.pm_common.errors import (
    InsufficientLiquidityError,
    InsufficientLiquidityMintedError,
    InsufficientLPTokensError,
    InvalidLiquidityAmountError,
)
from src.pm_common.fixed_point import (
    PRICE_PRECISION,
    U64,
    calculate_price_impact,
    isqrt,
)

# Scale for fee_growth_per_lp_token (fees per LP token, 12 decimals)
FEE_GROWTH_PRECISION = 10**12


def _price_for(base_reserves: int, share_reserves: int) -> int:
    if share_reserves == 0:
        return PRICE_PRECISION
    return U64(base_reserves).mul_div(PRICE_PRECISION, share_reserves).value


@dataclass(frozen=True)
class SwapQuote:
    """Side-effect-free quote for a single swap against one pool."""

    input_amount: int
    input_is_base: bool
    output_amount: int
    fee_amount: int         # in input-token units
    fee_in_base: int        # fee expressed in base tokens
    price_impact_bps: int
    price_before: int
    price_after: int


@dataclass
class Pool:
    id: str
    market_id: str
    outcome: Outcome
    fee_rate: int                       # bps, copied from market at creation
    base_reserves: int = 0
    share_reserves: int = 0
    lp_token_supply: int = 0
    current_price: int = PRICE_PRECISION
    volume: int = 0
    fees_collected: int = 0             # base-token terms
    fee_growth_per_lp_token: int = 0    # scaled by FEE_GROWTH_PRECISION
    last_update: int = 0

    @property
    def invariant_k(self) -> int:
        return self.base_reserves * self.share_reserves

    def calculate_price(self) -> int:
        """Base per share, 6 decimals. An empty pool reports 1.0."""
        return _price_for(self.base_reserves, self.share_reserves)

    def _reserves_for(self, input_is_base: bool) -> tuple[int, int]:
        if input_is_base:
            return self.base_reserves, self.share_reserves
        return self.share_reserves, self.base_reserves

    def calculate_fee(self, input_amount: int) -> int:
        return calc_fee(input_amount, self.fee_rate)

    def calculate_swap_output(self, input_amount: int, input_is_base: bool) -> int:
        """Constant-product output for input_amount, fee retained in the pool.

        output = output_reserve * input_after_fee / (input_reserve + input_after_fee)
        """
        input_reserve, output_reserve = self._reserves_for(input_is_base)
        if input_reserve == 0 or output_reserve == 0:
            raise InsufficientLiquidityError("Pool has no liquidity")

        fee = self.calculate_fee(input_amount)
        input_after_fee = U64(input_amount).sub(fee)
        denominator = U64(input_reserve).add(input_after_fee)
        return U64(output_reserve).mul_div(input_after_fee, denominator).value

    def quote_swap(self, input_amount: int, input_is_base: bool) -> SwapQuote:
        output = self.calculate_swap_output(input_amount, input_is_base)
        fee = self.calculate_fee(input_amount)
        if input_is_base:
            fee_in_base = fee
            new_base = self.base_reserves + input_amount
            new_share = self.share_reserves - output
        else:
            fee_in_base = fee_to_base(fee, False, self.base_reserves, self.share_reserves)
            new_base = self.base_reserves - output
            new_share = self.share_reserves + input_amount
        input_reserve, _ = self._reserves_for(input_is_base)
        price_after = _price_for(new_base, new_share)
        return SwapQuote(
            input_amount=input_amount,
            input_is_base=input_is_base,
            output_amount=output,
            fee_amount=fee,
            fee_in_base=fee_in_base,
            price_impact_bps=calculate_price_impact(input_reserve, input_amount),
            price_before=self.current_price,
            price_after=price_after,
        )

    def update_reserves_after_swap(
        self,
        input_amount: int,
        output_amount: int,
        fee_amount: int,
        input_is_base: bool,
        now: int,
    ) -> None:
        """Apply a quoted swap. Either every field changes or none does."""
        underflow = InsufficientLiquidityError(
            f"Output {output_amount} exceeds available reserve"
        )
        if input_is_base:
            base = U64(self.base_reserves).add(input_amount)
            share = U64(self.share_reserves).sub(output_amount, error=underflow)
        else:
            share = U64(self.share_reserves).add(input_amount)
            base = U64(self.base_reserves).sub(output_amount, error=underflow)

        fees_collected = U64(self.fees_collected).add(fee_amount)
        volume = U64(self.volume).add(input_amount)
        fee_growth = self.fee_growth_per_lp_token
        if self.lp_token_supply > 0:
            fee_growth += fee_amount * FEE_GROWTH_PRECISION // self.lp_token_supply
        price = _price_for(base.value, share.value)

        self.base_reserves = base.value
        self.share_reserves = share.value
        self.fees_collected = fees_collected.value
        self.volume = volume.value
        self.fee_growth_per_lp_token = fee_growth
        self.current_price = price
        self.last_update = now

    def calculate_lp_tokens(self, base_deposit: int, share_deposit: int) -> int:
        """LP tokens minted for a deposit.

        First deposit: floor(sqrt(base * share)).
        Later deposits: the smaller of the two proportional ratios; whatever the
        deposit carries beyond its limiting side accrues to existing LPs.
        """
        if self.lp_token_supply == 0:
            lp_tokens = isqrt(base_deposit * share_deposit)
            if lp_tokens == 0:
                raise InsufficientLiquidityMintedError()
            return U64(lp_tokens).value

        base_ratio = U64(base_deposit).mul_div(self.lp_token_supply, self.base_reserves)
        share_ratio = U64(share_deposit).mul_div(self.lp_token_supply, self.share_reserves)
        return min(base_ratio.value, share_ratio.value)

    def deposit_liquidity(self, base_deposit: int, share_deposit: int, now: int) -> int:
        """Mint LP tokens for a deposit and grow reserves. Returns tokens minted."""
        if base_deposit == 0 and share_deposit == 0:
            raise InvalidLiquidityAmountError("deposit is empty")
        lp_tokens = self.calculate_lp_tokens(base_deposit, share_deposit)
        if lp_tokens == 0:
            raise InsufficientLiquidityMintedError()

        base = U64(self.base_reserves).add(base_deposit)
        share = U64(self.share_reserves).add(share_deposit)
        supply = U64(self.lp_token_supply).add(lp_tokens)
        price = _price_for(base.value, share.value)

        self.base_reserves = base.value
        self.share_reserves = share.value
        self.lp_token_supply = supply.value
        self.current_price = price
        self.last_update = now
        return lp_tokens

    def calculate_withdrawal(self, lp_tokens: int) -> tuple[int, int]:
        """(base_out, share_out) redeemable for lp_tokens, floored."""
        if lp_tokens == 0:
            raise InvalidLiquidityAmountError("lp_tokens must be positive")
        if lp_tokens > self.lp_token_supply:
            raise InsufficientLPTokensError(lp_tokens, self.lp_token_supply)
        base_out = U64(self.base_reserves).mul_div(lp_tokens, self.lp_token_supply)
        share_out = U64(self.share_reserves).mul_div(lp_tokens, self.lp_token_supply)
        return base_out.value, share_out.value

    def withdraw_liquidity(self, lp_tokens: int, now: int) -> tuple[int, int]:
        """Burn lp_tokens and release the proportional reserves."""
        base_out, share_out = self.calculate_withdrawal(lp_tokens)
        underflow = InsufficientLiquidityError("Withdrawal exceeds reserves")
        base = U64(self.base_reserves).sub(base_out, error=underflow)
        share = U64(self.share_reserves).sub(share_out, error=underflow)
        supply = U64(self.lp_token_supply).sub(lp_tokens)
        price = _price_for(base.value, share.value)

        self.base_reserves = base.value
        self.share_reserves = share.value
        self.lp_token_supply = supply.value
        self.current_price = price
        self.last_update = now
        return base_out, share_out

    def release_base(self, amount: int, now: int) -> None:
        """Move base out of the reserves into market settlement.

        Used once at resolution to collateralize winning shares; the pool
        re-prices and LPs keep whatever base remains.
        """
        base = U64(self.base_reserves).sub(
            amount, error=InsufficientLiquidityError("Settlement exceeds base reserves")
        )
        price = _price_for(base.value, self.share_reserves)

        self.base_reserves = base.value
        self.current_price = price
        self.last_update = now
