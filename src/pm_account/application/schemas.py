"""Pydantic schemas for pm_account responses."""

from pydantic import BaseModel

from src.pm_account.domain.models import LiquidityPosition, Position, User
from src.pm_clearing.application.schemas import TransferOut
from src.pm_common.fixed_point import price_to_display


class PositionSummary(BaseModel):
    owner: str
    market_id: str
    outcome: str
    shares: int
    average_price: int
    average_price_display: str
    total_invested: int
    realized_pnl: int
    current_price: int
    current_value: int
    unrealized_pnl: int
    total_pnl: int

    @classmethod
    def from_domain(cls, p: Position, current_price: int) -> "PositionSummary":
        return cls(
            owner=p.owner,
            market_id=p.market_id,
            outcome=p.outcome.value,
            shares=p.shares,
            average_price=p.average_price,
            average_price_display=price_to_display(p.average_price),
            total_invested=p.total_invested,
            realized_pnl=p.realized_pnl,
            current_price=current_price,
            current_value=p.current_value(current_price),
            unrealized_pnl=p.calculate_unrealized_pnl(current_price),
            total_pnl=p.calculate_total_pnl(current_price),
        )


class LiquidityPositionSummary(BaseModel):
    owner: str
    pool_id: str
    lp_tokens: int
    initial_base_deposit: int
    initial_share_deposit: int
    base_value: int
    share_value: int
    impermanent_loss: int
    fees_earned: int

    @classmethod
    def from_domain(
        cls,
        lp: LiquidityPosition,
        base_value: int,
        share_value: int,
        impermanent_loss: int,
    ) -> "LiquidityPositionSummary":
        return cls(
            owner=lp.owner,
            pool_id=lp.pool_id,
            lp_tokens=lp.lp_tokens,
            initial_base_deposit=lp.initial_base_deposit,
            initial_share_deposit=lp.initial_share_deposit,
            base_value=base_value,
            share_value=share_value,
            impermanent_loss=impermanent_loss,
            fees_earned=lp.fees_earned,
        )


class UserStats(BaseModel):
    authority: str
    markets_created: int
    total_trades: int
    total_volume: int
    total_volume_display: str
    total_fees_paid: int
    total_fees_earned: int
    total_realized_pnl: int
    net_pnl: int
    net_pnl_display: str
    last_activity: int

    @classmethod
    def from_domain(cls, u: User) -> "UserStats":
        net = u.calculate_net_pnl()
        return cls(
            authority=u.authority,
            markets_created=u.markets_created,
            total_trades=u.total_trades,
            total_volume=u.total_volume,
            total_volume_display=price_to_display(u.total_volume),
            total_fees_paid=u.total_fees_paid,
            total_fees_earned=u.total_fees_earned,
            total_realized_pnl=u.total_realized_pnl,
            net_pnl=net,
            net_pnl_display=price_to_display(net),
            last_activity=u.last_activity,
        )


class ClaimWinningsResponse(BaseModel):
    owner: str
    market_id: str
    outcome: str
    payout: int
    realized_pnl: int
    transfers: list[TransferOut]
