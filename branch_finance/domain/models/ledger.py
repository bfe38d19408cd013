"""Domain models for the append-only branch ledger."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class LedgerEntryType(str, Enum):
    """Direction of a ledger row relative to its branch."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


@dataclass(frozen=True)
class LedgerMetadata:
    """Tags linking a ledger row back to its originating transfer."""

    transfer_id: str | None = None
    transfer_type: str | None = None
    batch_approval: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "transferId": self.transfer_id,
            "transferType": self.transfer_type,
            "batchApproval": self.batch_approval,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "LedgerMetadata":
        raw = raw or {}
        return cls(
            transfer_id=raw.get("transferId"),
            transfer_type=raw.get("transferType"),
            batch_approval=bool(raw.get("batchApproval", False)),
        )


@dataclass(frozen=True)
class LedgerTransaction:
    """Immutable record of money moving in or out of one branch."""

    id: str
    reference_id: str
    branch_id: str
    type: LedgerEntryType
    category: str
    amount: Decimal
    currency: str
    date: datetime
    description: str | None = None
    payment_method: str | None = None
    metadata: LedgerMetadata = field(default_factory=LedgerMetadata)

    @property
    def signed_amount(self) -> Decimal:
        """Return the amount as seen by the branch (expenses negative)."""
        if self.type is LedgerEntryType.EXPENSE:
            return -self.amount
        return self.amount


__all__ = ["LedgerEntryType", "LedgerMetadata", "LedgerTransaction"]
