"""Transfer instructions handed to the custodian.

The core never moves value. Every mutating operation returns the list of
transfers the custodian must apply for the operation to take effect.
"""

from dataclasses import dataclass
from typing import Protocol

from src.pm_common.enums import AssetType, Outcome, TransferType


@dataclass(frozen=True)
class LedgerTransfer:
    transfer_type: TransferType
    asset: AssetType
    from_account: str
    to_account: str
    amount: int


class CustodianProtocol(Protocol):
    def apply(self, transfers: list[LedgerTransfer]) -> None: ...


def share_asset(outcome: Outcome) -> AssetType:
    return AssetType.YES_SHARES if outcome == Outcome.YES else AssetType.NO_SHARES


def bond_account(market_id: str) -> str:
    return f"BOND:{market_id}"


def settlement_account(market_id: str) -> str:
    return f"SETTLEMENT:{market_id}"


class RecordingCustodian:
    """In-memory custodian: keeps every applied transfer in order."""

    def __init__(self) -> None:
        self.applied: list[LedgerTransfer] = []

    def apply(self, transfers: list[LedgerTransfer]) -> None:
        self.applied.extend(transfers)

    def net_amount(self, account: str, asset: AssetType) -> int:
        """Signed net flow into account for one asset."""
        total = 0
        for t in self.applied:
            if t.asset != asset:
                continue
            if t.to_account == account:
                total += t.amount
            if t.from_account == account:
                total -= t.amount
        return total
