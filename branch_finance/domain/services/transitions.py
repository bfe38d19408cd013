"""Transfer state machine rules."""

from branch_finance.domain.errors import InvalidStateTransition
from branch_finance.domain.models import TransferAction, TransferStatus

ALLOWED_TRANSITIONS = {
    TransferStatus.PENDING: frozenset(
        {TransferStatus.APPROVED, TransferStatus.REJECTED}
    ),
    TransferStatus.APPROVED: frozenset({TransferStatus.COMPLETED}),
    TransferStatus.REJECTED: frozenset(),
    TransferStatus.COMPLETED: frozenset(),
}

ACTION_TARGETS = {
    TransferAction.APPROVE: TransferStatus.APPROVED,
    TransferAction.REJECT: TransferStatus.REJECTED,
    TransferAction.COMPLETE: TransferStatus.COMPLETED,
}


def target_status(action: TransferAction) -> TransferStatus:
    return ACTION_TARGETS[action]


def ensure_transition(
    current: TransferStatus,
    target: TransferStatus,
) -> None:
    """Raise InvalidStateTransition unless ``current -> target`` is legal.

    Args:
        current: Status read from storage.
        target: Status the caller wants to write.

    Raises:
        InvalidStateTransition: If the transition is not allowed.
    """
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStateTransition(
            f"Cannot move transfer from {current.value} to {target.value}"
        )


__all__ = [
    "ALLOWED_TRANSITIONS",
    "ACTION_TARGETS",
    "target_status",
    "ensure_transition",
]
