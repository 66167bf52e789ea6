"""Invariant verification after each mutation.

Every check returns a list of violation strings (empty means OK). Services
raise InvariantViolationError on a non-empty list before persisting anything.

INV-P1: pool price == price recomputed from reserves
INV-P2: lp_token_supply == 0  <=>  both reserves == 0
INV-P3: base_reserves * share_reserves never decreases across a swap
INV-A1: position with zero shares carries zero cost basis
INV-L1: sum of LP position tokens == pool lp_token_supply
INV-M1: winning_outcome / resolved_at set  <=>  market RESOLVED
"""

import logging

from src.pm_account.domain.models import LiquidityPosition, Position
from src.pm_amm.domain.models import Pool
from src.pm_common.errors import InvariantViolationError
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


def verify_pool_invariants(pool: Pool) -> list[str]:
    violations: list[str] = []
    expected_price = pool.calculate_price()
    if pool.current_price != expected_price:
        violations.append(
            f"INV-P1 violated: pool={pool.id} price={pool.current_price} "
            f"!= reserves price={expected_price}"
        )
    empty_supply = pool.lp_token_supply == 0
    empty_reserves = pool.base_reserves == 0 and pool.share_reserves == 0
    if empty_supply != empty_reserves:
        violations.append(
            f"INV-P2 violated: pool={pool.id} lp_supply={pool.lp_token_supply} "
            f"base={pool.base_reserves} share={pool.share_reserves}"
        )
    return violations


def verify_swap_invariant(k_before: int, pool: Pool) -> list[str]:
    k_after = pool.invariant_k
    if k_after < k_before:
        return [f"INV-P3 violated: pool={pool.id} k {k_before} -> {k_after}"]
    return []


def verify_position_invariants(position: Position) -> list[str]:
    if position.shares == 0 and position.total_invested != 0:
        return [
            f"INV-A1 violated: {position.owner}/{position.market_id}/"
            f"{position.outcome.value} shares=0 total_invested={position.total_invested}"
        ]
    return []


def verify_lp_conservation(pool: Pool, lp_positions: list[LiquidityPosition]) -> list[str]:
    held = sum(lp.lp_tokens for lp in lp_positions if lp.pool_id == pool.id)
    if held != pool.lp_token_supply:
        return [
            f"INV-L1 violated: pool={pool.id} lp_supply={pool.lp_token_supply} "
            f"!= held by positions={held}"
        ]
    return []


def verify_market_invariants(market: Market) -> list[str]:
    violations: list[str] = []
    resolved_fields = market.winning_outcome is not None and market.resolved_at is not None
    if resolved_fields != market.is_resolved:
        violations.append(
            f"INV-M1 violated: market={market.id} status={market.status.value} "
            f"winning_outcome={market.winning_outcome} resolved_at={market.resolved_at}"
        )
    return violations


def raise_on_violations(violations: list[str]) -> None:
    if violations:
        for v in violations:
            logger.error(v)
        raise InvariantViolationError(violations)
