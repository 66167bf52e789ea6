"""Settlement payout — one winning share redeems one base unit."""

from src.pm_account.domain.models import Position
from src.pm_common.enums import Outcome


def calculate_payout(position: Position, winning_outcome: Outcome) -> int:
    if position.outcome != winning_outcome:
        return 0
    return position.shares


def calculate_settlement_funding(
    positions: list[Position], winning_outcome: Outcome, available_base: int
) -> int:
    """Base to set aside at resolution: every outstanding winning share, capped
    by what the winning pool actually holds."""
    outstanding = sum(calculate_payout(p, winning_outcome) for p in positions)
    return min(outstanding, available_base)
