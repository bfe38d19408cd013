"""Pure authorization rules for transfer actions."""

from collections.abc import Iterable

from branch_finance.domain.constants import (
    APPROVE_TRANSFERS,
    COMPLETE_TRANSFERS,
    REJECT_TRANSFERS,
)
from branch_finance.domain.models import (
    Actor,
    BranchTransfer,
    TransferAction,
)

ACTION_CAPABILITIES = {
    TransferAction.APPROVE: APPROVE_TRANSFERS,
    TransferAction.REJECT: REJECT_TRANSFERS,
    TransferAction.COMPLETE: COMPLETE_TRANSFERS,
}


def required_capability(action: TransferAction) -> str:
    return ACTION_CAPABILITIES[action]


def branch_for_action(action: TransferAction, transfer: BranchTransfer) -> str:
    """Return the branch whose permissions govern the action.

    Rejections are decided by the source branch; approvals and completions
    by the destination branch.
    """
    if action is TransferAction.REJECT:
        return transfer.from_branch_id
    return transfer.to_branch_id


def is_global_admin(actor: Actor, admin_roles: Iterable[str]) -> bool:
    return actor.role in tuple(admin_roles)


__all__ = [
    "ACTION_CAPABILITIES",
    "required_capability",
    "branch_for_action",
    "is_global_admin",
]
