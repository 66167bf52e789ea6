"""Market creation validation and the resolution algorithm."""

from src.pm_common.enums import Outcome
from src.pm_common.errors import (
    CannotResolveError,
    DescriptionTooLongError,
    InvalidEndTimeError,
    InvalidParameterError,
    MarketAlreadyResolvedError,
    MissingOutcomeError,
    ProgramPausedError,
    TitleTooLongError,
)
from src.pm_common.parameters import GlobalParameters
from src.pm_market.domain.models import (
    MAX_DESCRIPTION_BYTES,
    MAX_TITLE_BYTES,
    Market,
    OracleResolution,
)
from src.pm_oracle.domain.models import PriceRecord, validate_price_record


def validate_text(title: str, description: str) -> None:
    """Byte-length limits are on the UTF-8 encoding, not the character count."""
    if not title.strip():
        raise InvalidParameterError("title must not be blank")
    title_len = len(title.encode("utf-8"))
    if title_len > MAX_TITLE_BYTES:
        raise TitleTooLongError(title_len, MAX_TITLE_BYTES)
    desc_len = len(description.encode("utf-8"))
    if desc_len > MAX_DESCRIPTION_BYTES:
        raise DescriptionTooLongError(desc_len, MAX_DESCRIPTION_BYTES)


def validate_market_creation(
    params: GlobalParameters,
    title: str,
    description: str,
    end_time: int,
    bond_amount: int,
    now: int,
) -> None:
    """Checks that need nothing but the request and the protocol parameters."""
    if params.paused:
        raise ProgramPausedError()
    if end_time <= now:
        raise InvalidEndTimeError(end_time, now)
    params.validate_market_duration(end_time - now)
    params.validate_bond_amount(bond_amount)
    validate_text(title, description)


def determine_winning_outcome(
    market: Market,
    now: int,
    price_record: PriceRecord | None = None,
    outcome: Outcome | None = None,
    max_price_age: int = 300,
) -> Outcome:
    """Pick the winner without touching the market.

    Oracle: YES iff the verified, fresh observed price >= target price.
    Manual: the resolver's explicit outcome.
    """
    if market.is_resolved:
        raise MarketAlreadyResolvedError(market.id)
    if not market.can_resolve(now):
        raise CannotResolveError(market.id)

    policy = market.resolution
    if isinstance(policy, OracleResolution):
        observed = validate_price_record(
            price_record, policy.oracle_account, now, max_age=max_price_age
        )
        return Outcome.YES if observed >= policy.target_price else Outcome.NO

    if outcome is None:
        raise MissingOutcomeError()
    return outcome


def resolve(
    market: Market,
    now: int,
    price_record: PriceRecord | None = None,
    outcome: Outcome | None = None,
    max_price_age: int = 300,
) -> Outcome:
    winner = determine_winning_outcome(market, now, price_record, outcome, max_price_age)
    market.mark_resolved(winner, now)
    return winner
