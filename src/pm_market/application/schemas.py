"""Pydantic schemas for pm_market requests and responses.

Requests reject malformed types and out-of-range integers before any domain
code runs. Byte-length limits on title/description are enforced by the domain
(they depend on UTF-8 encoding, not character count).
"""

from pydantic import BaseModel, Field

from src.pm_clearing.application.schemas import TransferOut
from src.pm_common.datetime_utils import format_timestamp
from src.pm_common.enums import MarketCategory, Outcome, ResolutionSource
from src.pm_common.errors import MissingOracleDataError
from src.pm_common.fixed_point import U64_MAX, price_to_display
from src.pm_market.domain.models import (
    ManualResolution,
    Market,
    OracleResolution,
    ResolutionPolicy,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateMarketRequest(BaseModel):
    title: str
    description: str = ""
    category: MarketCategory = MarketCategory.OTHER
    end_time: int = Field(..., ge=0, description="Unix seconds")
    bond_amount: int = Field(..., ge=0, le=U64_MAX)
    resolution_source: ResolutionSource = ResolutionSource.MANUAL
    oracle_account: str | None = None
    target_price: int | None = Field(default=None, gt=0, le=U64_MAX)

    def resolution_policy(self) -> ResolutionPolicy:
        """Build the tagged policy; an oracle source needs both oracle fields."""
        if self.resolution_source == ResolutionSource.MANUAL:
            return ManualResolution()
        if not self.oracle_account or self.target_price is None:
            raise MissingOracleDataError()
        return OracleResolution(oracle_account=self.oracle_account, target_price=self.target_price)


class ResolveMarketRequest(BaseModel):
    outcome: Outcome | None = None


class UpdateFeeRateRequest(BaseModel):
    fee_rate: int = Field(..., ge=0, le=0xFFFF, description="bps; capped at 1000 by the domain")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class MarketDetail(BaseModel):
    id: str
    creator: str
    title: str
    description: str
    category: str
    status: str
    resolution_source: str
    oracle_account: str | None
    target_price: int | None
    target_price_display: str | None
    created_at: int
    end_time: int
    end_time_display: str
    resolved_at: int | None
    winning_outcome: str | None
    yes_pool_id: str | None
    no_pool_id: str | None
    fee_rate: int
    bond_amount: int
    total_volume: int
    total_liquidity: int
    trader_count: int
    lp_count: int
    settlement_reserve: int

    @classmethod
    def from_domain(cls, m: Market) -> "MarketDetail":
        oracle = m.resolution if isinstance(m.resolution, OracleResolution) else None
        return cls(
            id=m.id,
            creator=m.creator,
            title=m.title,
            description=m.description,
            category=m.category.value,
            status=m.status.value,
            resolution_source=m.resolution.source.value,
            oracle_account=oracle.oracle_account if oracle else None,
            target_price=oracle.target_price if oracle else None,
            target_price_display=price_to_display(oracle.target_price) if oracle else None,
            created_at=m.created_at,
            end_time=m.end_time,
            end_time_display=format_timestamp(m.end_time),
            resolved_at=m.resolved_at,
            winning_outcome=m.winning_outcome.value if m.winning_outcome else None,
            yes_pool_id=m.yes_pool_id,
            no_pool_id=m.no_pool_id,
            fee_rate=m.fee_rate,
            bond_amount=m.bond_amount,
            total_volume=m.total_volume,
            total_liquidity=m.total_liquidity,
            trader_count=m.trader_count,
            lp_count=m.lp_count,
            settlement_reserve=m.settlement_reserve,
        )


class CreateMarketResponse(BaseModel):
    market: MarketDetail
    transfers: list[TransferOut]
