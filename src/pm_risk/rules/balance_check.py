from src.pm_account.domain.models import Position
from src.pm_common.errors import InsufficientSharesError


def check_share_balance(position: Position | None, shares_to_sell: int) -> None:
    """Raise InsufficientSharesError before any pool mutation if the seller is short."""
    held = position.shares if position is not None else 0
    if shares_to_sell > held:
        raise InsufficientSharesError(shares_to_sell, held)
