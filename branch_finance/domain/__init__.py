"""Domain package for transfer, ledger and budget rules."""

from .constants import (
    BUDGET_LEDGER_CATEGORIES,
    DEFAULT_ADMIN_ROLES,
    DEFAULT_CRITICAL_THRESHOLD,
    DEFAULT_WARNING_THRESHOLD,
)
from .errors import (
    AuthenticationError,
    AuthorizationError,
    BranchFinanceError,
    ConcurrentUpdateError,
    InvalidStateTransition,
    NotFoundError,
    PartialBatchFailure,
    StorageError,
    ValidationError,
)
from .models import (
    Actor,
    BranchBudget,
    BranchTransfer,
    LedgerTransaction,
    TransferStatus,
)

__all__ = [
    "BUDGET_LEDGER_CATEGORIES",
    "DEFAULT_ADMIN_ROLES",
    "DEFAULT_CRITICAL_THRESHOLD",
    "DEFAULT_WARNING_THRESHOLD",
    "AuthenticationError",
    "AuthorizationError",
    "BranchFinanceError",
    "ConcurrentUpdateError",
    "InvalidStateTransition",
    "NotFoundError",
    "PartialBatchFailure",
    "StorageError",
    "ValidationError",
    "Actor",
    "BranchBudget",
    "BranchTransfer",
    "LedgerTransaction",
    "TransferStatus",
]
