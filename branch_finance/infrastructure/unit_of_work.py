"""SQLAlchemy unit of work sharing one transaction across repositories."""

from sqlalchemy.exc import SQLAlchemyError

from branch_finance.application.ports.database import DatabaseEnginePort
from branch_finance.application.ports.unit_of_work import UnitOfWorkPort
from branch_finance.domain.errors import StorageError
from branch_finance.infrastructure.budget_repository import (
    SqlAlchemyBudgetRepository,
)
from branch_finance.infrastructure.ledger_repository import (
    SqlAlchemyLedgerRepository,
)
from branch_finance.infrastructure.transfer_repository import (
    SqlAlchemyTransferRepository,
)


class SqlAlchemyUnitOfWork(UnitOfWorkPort):
    """Open ``engine.begin()`` and bind every repository to it.

    The transaction commits when the block exits cleanly and rolls back
    when it raises, so a transfer's status and its ledger rows are written
    together or not at all.
    """

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        self._db_port = db_port
        self._transaction = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self._transaction = self._db_port.get_engine().begin()
        try:
            conn = await self._transaction.__aenter__()
        except SQLAlchemyError as exc:
            self._transaction = None
            raise StorageError("Could not open a database transaction") from exc
        self.transfers = SqlAlchemyTransferRepository(conn)
        self.ledger = SqlAlchemyLedgerRepository(conn)
        self.budgets = SqlAlchemyBudgetRepository(conn)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        transaction, self._transaction = self._transaction, None
        try:
            await transaction.__aexit__(exc_type, exc, tb)
        except SQLAlchemyError as commit_exc:
            raise StorageError("Could not commit the transaction") from commit_exc


__all__ = ["SqlAlchemyUnitOfWork"]
