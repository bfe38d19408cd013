"""Domain models for actors and branch-scoped permissions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Actor:
    """Authenticated caller with a global role."""

    id: str
    role: str
    home_branch_id: str | None = None


@dataclass(frozen=True)
class BranchPermission:
    """Capability grant for one (user, branch) pair."""

    user_id: str
    branch_id: str
    capabilities: frozenset[str]
    is_active: bool = True

    def grants(self, capability: str) -> bool:
        return self.is_active and capability in self.capabilities


__all__ = ["Actor", "BranchPermission"]
