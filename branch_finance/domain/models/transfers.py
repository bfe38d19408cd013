"""Domain models for inter-branch transfers."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class TransferStatus(str, Enum):
    """Lifecycle states of a branch transfer."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    COMPLETED = "COMPLETED"


class TransferAction(str, Enum):
    """Actions that move a transfer between states."""

    APPROVE = "approve"
    REJECT = "reject"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Branch:
    """Branch reference resolved from the branch directory."""

    id: str
    name: str
    code: str
    currency: str


@dataclass(frozen=True)
class TransferMetadata:
    """Versioned side-record attached to a transfer.

    Attributes:
        version: Schema version of the side-record.
        approval_comments: Comments left by the approver.
        rejection_comments: Comments left alongside a rejection.
        completion_comments: Comments left by the completer.
        batch_approval: Whether the last decision came from a batch run.
    """

    version: int = 1
    approval_comments: str | None = None
    rejection_comments: str | None = None
    completion_comments: str | None = None
    batch_approval: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "approvalComments": self.approval_comments,
            "rejectionComments": self.rejection_comments,
            "completionComments": self.completion_comments,
            "batchApproval": self.batch_approval,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> "TransferMetadata":
        raw = raw or {}
        return cls(
            version=int(raw.get("version", 1)),
            approval_comments=raw.get("approvalComments"),
            rejection_comments=raw.get("rejectionComments"),
            completion_comments=raw.get("completionComments"),
            batch_approval=bool(raw.get("batchApproval", False)),
        )


@dataclass(frozen=True)
class BranchTransfer:
    """Requested fund movement between two branches."""

    id: str
    reference_id: str
    from_branch_id: str
    to_branch_id: str
    amount: Decimal
    currency: str
    status: TransferStatus
    requested_by: str
    created_at: datetime
    description: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None
    completed_at: datetime | None = None
    metadata: TransferMetadata = field(default_factory=TransferMetadata)


@dataclass(frozen=True)
class TransferView:
    """Transfer joined with its resolved branches for listings."""

    transfer: BranchTransfer
    from_branch: Branch | None
    to_branch: Branch | None


@dataclass(frozen=True)
class TransferStats:
    """Transfer counts per status."""

    pending: int = 0
    approved: int = 0
    rejected: int = 0
    completed: int = 0


@dataclass(frozen=True)
class TransferListing:
    """Result of a transfer listing query."""

    transfers: list[TransferView]
    stats: TransferStats


__all__ = [
    "TransferStatus",
    "TransferAction",
    "Branch",
    "TransferMetadata",
    "BranchTransfer",
    "TransferView",
    "TransferStats",
    "TransferListing",
]
