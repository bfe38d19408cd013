"""Port grouping repository writes into one atomic unit."""

from collections.abc import Callable
from typing import Protocol

from branch_finance.application.ports.budget_repository import (
    BudgetRepositoryPort,
)
from branch_finance.application.ports.ledger_repository import (
    LedgerRepositoryPort,
)
from branch_finance.application.ports.transfer_repository import (
    TransferRepositoryPort,
)


class UnitOfWorkPort(Protocol):
    """Async context manager committing on success, rolling back on error.

    Repositories exposed here share one transaction for the lifetime of
    the ``async with`` block.
    """

    transfers: TransferRepositoryPort
    ledger: LedgerRepositoryPort
    budgets: BudgetRepositoryPort

    async def __aenter__(self) -> "UnitOfWorkPort":
        """Open the transaction."""

    async def __aexit__(self, exc_type, exc, tb) -> None:
        """Commit, or roll back when the block raised."""


UnitOfWorkFactory = Callable[[], UnitOfWorkPort]


__all__ = ["UnitOfWorkPort", "UnitOfWorkFactory"]
