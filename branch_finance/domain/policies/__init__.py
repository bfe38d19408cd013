"""Domain policies package."""

from .authorization import (
    branch_for_action,
    is_global_admin,
    required_capability,
)

__all__ = ["branch_for_action", "is_global_admin", "required_capability"]
