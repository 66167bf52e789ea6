"""Pydantic schemas for trading and liquidity requests/responses."""

from pydantic import BaseModel, Field

from src.pm_amm.domain.models import Pool, SwapQuote
from src.pm_clearing.application.schemas import TransferOut
from src.pm_common.enums import Outcome, TradeDirection
from src.pm_common.fixed_point import U64_MAX, price_to_display

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class TradeRequest(BaseModel):
    market_id: str
    outcome: Outcome
    direction: TradeDirection
    amount_in: int = Field(
        ..., gt=0, le=U64_MAX, description="Base tokens to spend (BUY) or shares to sell (SELL)"
    )
    min_amount_out: int = Field(default=0, ge=0, le=U64_MAX)
    pool_id: str | None = Field(
        default=None, description="Optional; must match the market's pool for outcome"
    )


class AddLiquidityRequest(BaseModel):
    market_id: str
    outcome: Outcome
    base_amount: int = Field(..., ge=0, le=U64_MAX)
    share_amount: int = Field(..., ge=0, le=U64_MAX)


class RemoveLiquidityRequest(BaseModel):
    market_id: str
    outcome: Outcome
    lp_tokens: int = Field(..., gt=0, le=U64_MAX)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PoolDetail(BaseModel):
    id: str
    market_id: str
    outcome: str
    fee_rate: int
    base_reserves: int
    share_reserves: int
    lp_token_supply: int
    current_price: int
    current_price_display: str
    volume: int
    fees_collected: int
    last_update: int

    @classmethod
    def from_domain(cls, p: Pool) -> "PoolDetail":
        return cls(
            id=p.id,
            market_id=p.market_id,
            outcome=p.outcome.value,
            fee_rate=p.fee_rate,
            base_reserves=p.base_reserves,
            share_reserves=p.share_reserves,
            lp_token_supply=p.lp_token_supply,
            current_price=p.current_price,
            current_price_display=price_to_display(p.current_price),
            volume=p.volume,
            fees_collected=p.fees_collected,
            last_update=p.last_update,
        )


class TradeQuoteResponse(BaseModel):
    market_id: str
    pool_id: str
    outcome: str
    direction: str
    amount_in: int
    amount_out: int
    fee_amount: int
    fee_in_base: int
    price_impact_bps: int
    price_before: int
    price_before_display: str
    price_after: int
    price_after_display: str

    @classmethod
    def from_quote(
        cls, market_id: str, pool: Pool, direction: TradeDirection, q: SwapQuote
    ) -> "TradeQuoteResponse":
        return cls(
            market_id=market_id,
            pool_id=pool.id,
            outcome=pool.outcome.value,
            direction=direction.value,
            amount_in=q.input_amount,
            amount_out=q.output_amount,
            fee_amount=q.fee_amount,
            fee_in_base=q.fee_in_base,
            price_impact_bps=q.price_impact_bps,
            price_before=q.price_before,
            price_before_display=price_to_display(q.price_before),
            price_after=q.price_after,
            price_after_display=price_to_display(q.price_after),
        )


class TradeResponse(BaseModel):
    quote: TradeQuoteResponse
    trader: str
    position_shares: int
    realized_pnl: int
    transfers: list[TransferOut]


class LiquidityResponse(BaseModel):
    market_id: str
    pool_id: str
    provider: str
    base_amount: int
    share_amount: int
    lp_tokens: int              # minted (add) or burned (remove)
    lp_token_balance: int
    fees_accrued: int
    pool: PoolDetail
    transfers: list[TransferOut]


class LiquiditySuggestion(BaseModel):
    market_id: str
    yes_bps: int
    no_bps: int
    time_to_expiry: int


class FeeProjection(BaseModel):
    pool_id: str
    fees_collected: int
    rate_bps: int
    periods: int
    projected_fees: int
    projected_fees_display: str
