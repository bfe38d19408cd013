"""Authorization of branch-scoped transfer and budget actions."""

from collections.abc import Iterable

from branch_finance.application.ports.directories import PermissionStorePort
from branch_finance.domain.constants import (
    APPROVE_TRANSFERS,
    DEFAULT_ADMIN_ROLES,
    MANAGE_BUDGETS,
)
from branch_finance.domain.errors import AuthorizationError
from branch_finance.domain.models import Actor, BranchTransfer, TransferAction
from branch_finance.domain.policies import (
    branch_for_action,
    is_global_admin,
    required_capability,
)
from branch_finance.infrastructure.logging.logger import get_app_logger


class AuthorizationResolver:
    """Decide whether an actor may act on a branch.

    Global admin roles pass unconditionally. Everyone else needs an active
    BranchPermission on the governing branch carrying the capability.
    """

    def __init__(
        self,
        permission_store: PermissionStorePort,
        admin_roles: Iterable[str] = DEFAULT_ADMIN_ROLES,
        logger=None,
    ) -> None:
        """Initialize the resolver.

        Args:
            permission_store: Port providing per-branch capability grants.
            admin_roles: Global roles allowed to do everything.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._permission_store = permission_store
        self._admin_roles = tuple(admin_roles)
        self._logger = logger or get_app_logger()

    def is_admin(self, actor: Actor) -> bool:
        return is_global_admin(actor, self._admin_roles)

    async def allow(
        self,
        actor: Actor,
        action: TransferAction,
        transfer: BranchTransfer,
    ) -> bool:
        """Return whether the actor may apply ``action`` to ``transfer``."""
        if self.is_admin(actor):
            return True
        branch_id = branch_for_action(action, transfer)
        return await self._has_capability(
            actor,
            branch_id,
            required_capability(action),
        )

    async def require(
        self,
        actor: Actor,
        action: TransferAction,
        transfer: BranchTransfer,
    ) -> None:
        """Raise AuthorizationError unless :meth:`allow` passes."""
        if not await self.allow(actor, action, transfer):
            self._logger.warning(
                f"Denied {action.value} on transfer {transfer.id} "
                f"for user {actor.id}"
            )
            raise AuthorizationError(
                f"Not allowed to {action.value} this transfer"
            )

    async def can_request_from(self, actor: Actor, branch_id: str) -> bool:
        """Return whether the actor may move money out of a branch.

        Any active grant on the branch, or membership of it, is enough.
        """
        if self.is_admin(actor) or actor.home_branch_id == branch_id:
            return True
        permission = await self._permission_store.get_permission(
            actor.id,
            branch_id,
        )
        return permission is not None and permission.is_active

    async def can_manage_budgets(self, actor: Actor, branch_id: str) -> bool:
        if self.is_admin(actor) or actor.home_branch_id == branch_id:
            return True
        return await self._has_capability(actor, branch_id, MANAGE_BUDGETS)

    async def approvable_branch_ids(self, actor: Actor) -> list[str] | None:
        """Return branches whose transfers the actor may approve.

        Returns:
            list[str] | None: Branch ids, or None for global admins who
            may approve everywhere.
        """
        if self.is_admin(actor):
            return None
        permissions = await self._permission_store.list_permissions(actor.id)
        return sorted(
            permission.branch_id
            for permission in permissions
            if permission.grants(APPROVE_TRANSFERS)
        )

    async def _has_capability(
        self,
        actor: Actor,
        branch_id: str,
        capability: str,
    ) -> bool:
        permission = await self._permission_store.get_permission(
            actor.id,
            branch_id,
        )
        if permission is None:
            return False
        return permission.grants(capability)


__all__ = ["AuthorizationResolver"]
