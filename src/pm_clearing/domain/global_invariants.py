# src/pm_clearing/domain/global_invariants.py
"""Global sweep over every stored pool, position and LP position."""
import logging

from src.pm_account.domain.models import LiquidityPosition, Position
from src.pm_amm.domain.models import Pool
from src.pm_clearing.domain.invariants import (
    verify_lp_conservation,
    verify_market_invariants,
    verify_pool_invariants,
    verify_position_invariants,
)
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


def verify_global_invariants(
    markets: list[Market],
    pools: list[Pool],
    positions: list[Position],
    lp_positions: list[LiquidityPosition],
) -> list[str]:
    """Check every entity-level invariant. Returns list of violation strings."""
    violations: list[str] = []
    for market in markets:
        violations.extend(verify_market_invariants(market))
    for pool in pools:
        violations.extend(verify_pool_invariants(pool))
        violations.extend(verify_lp_conservation(pool, lp_positions))
    for position in positions:
        violations.extend(verify_position_invariants(position))
    for msg in violations:
        logger.error(msg)
    return violations
