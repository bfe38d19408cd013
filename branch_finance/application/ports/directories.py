"""Ports for external collaborators: branches, permissions and time."""

from datetime import date, datetime
from typing import Protocol

from branch_finance.domain.models import Branch, BranchPermission


class BranchDirectoryPort(Protocol):
    """Port resolving branch ids to branch references."""

    async def get_branch(self, branch_id: str) -> Branch | None:
        """Return the branch or None when unknown."""


class PermissionStorePort(Protocol):
    """Port exposing per-(user, branch) capability grants."""

    async def get_permission(
        self,
        user_id: str,
        branch_id: str,
    ) -> BranchPermission | None:
        """Return the grant for the pair, active or not."""

    async def list_permissions(self, user_id: str) -> list[BranchPermission]:
        """Return every grant held by the user."""


class TimeSourcePort(Protocol):
    """Port providing the current time."""

    def now(self) -> datetime:
        """Return the current naive UTC timestamp."""

    def today(self) -> date:
        """Return the current date."""


__all__ = ["BranchDirectoryPort", "PermissionStorePort", "TimeSourcePort"]
