"""Pydantic schema for transfer instructions returned to callers."""

from pydantic import BaseModel

from src.pm_clearing.domain.transfers import LedgerTransfer


class TransferOut(BaseModel):
    transfer_type: str
    asset: str
    from_account: str
    to_account: str
    amount: int

    @classmethod
    def from_domain(cls, t: LedgerTransfer) -> "TransferOut":
        return cls(
            transfer_type=t.transfer_type.value,
            asset=t.asset.value,
            from_account=t.from_account,
            to_account=t.to_account,
            amount=t.amount,
        )
