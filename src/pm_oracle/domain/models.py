"""Oracle price records and their admission checks.

The core never fetches or caches price data; the caller supplies the record
it read for the market's configured oracle account.
"""

from dataclasses import dataclass

from src.pm_common.enums import VerificationLevel
from src.pm_common.errors import (
    InvalidOracleAccountError,
    InvalidOracleDataError,
    MissingOracleAccountError,
    StalePriceDataError,
)

MAX_PRICE_AGE_SECONDS = 300


@dataclass(frozen=True)
class PriceRecord:
    account: str
    price: int
    verification_level: VerificationLevel
    publish_time: int               # Unix seconds
    confidence: int | None = None   # same units as price, when the feed reports it


def validate_price_record(
    record: PriceRecord | None,
    expected_account: str,
    now: int,
    max_age: int = MAX_PRICE_AGE_SECONDS,
) -> int:
    """Return the record's price once it is proven usable for resolution.

    Checks, in order: present, right account, fully verified, positive price,
    confidence interval under 10% of price (if reported), fresh enough.
    """
    if record is None:
        raise MissingOracleAccountError()
    if record.account != expected_account:
        raise InvalidOracleAccountError(expected_account, record.account)
    if record.verification_level != VerificationLevel.FULL:
        raise InvalidOracleDataError(
            f"verification level {record.verification_level.value} is not FULL"
        )
    if record.price <= 0:
        raise InvalidOracleDataError(f"non-positive price {record.price}")
    if record.confidence is not None and record.confidence * 10 >= record.price:
        raise InvalidOracleDataError(
            f"confidence {record.confidence} too wide for price {record.price}"
        )
    age = now - record.publish_time
    if age > max_age:
        raise StalePriceDataError(age, max_age)
    return record.price
