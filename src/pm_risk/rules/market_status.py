from src.pm_common.enums import Outcome
from src.pm_common.errors import InvalidPoolError, MarketNotActiveError, PoolNotFoundError
from src.pm_market.domain.models import Market


def check_market_tradable(market: Market, now: int) -> None:
    if not market.can_trade(now):
        raise MarketNotActiveError(market.id)


def check_pool_binding(market: Market, outcome: Outcome, pool_id: str | None = None) -> str:
    """Return the market's pool id for outcome; a mismatching pool_id is rejected."""
    bound = market.pool_id_for(outcome)
    if bound is None:
        raise PoolNotFoundError(f"{market.id}:{outcome.value}")
    if pool_id is not None and pool_id != bound:
        raise InvalidPoolError(f"{pool_id} is not the {outcome.value} pool of {market.id}")
    return bound
