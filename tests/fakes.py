"""In-memory fakes of the application ports used across the tests."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from decimal import Decimal

from branch_finance.domain.models import (
    Branch,
    BranchBudget,
    BranchPermission,
    BranchTransfer,
    BudgetCategory,
    LedgerEntryType,
    LedgerMetadata,
    LedgerTransaction,
    TransferStatus,
)
from branch_finance.domain.services import matches_period


@dataclass
class InMemoryStore:
    """State shared by every unit of work opened on it."""

    transfers: dict = field(default_factory=dict)
    ledger: list = field(default_factory=list)
    budgets: dict = field(default_factory=dict)


class InMemoryTransferRepository:
    def __init__(self, store: InMemoryStore, undo: list) -> None:
        self._store = store
        self._undo = undo

    async def get(self, transfer_id):
        return self._store.transfers.get(transfer_id)

    async def add(self, transfer):
        self._store.transfers[transfer.id] = transfer
        self._undo.append(lambda: self._store.transfers.pop(transfer.id))

    async def update_if_status(self, transfer, expected_status):
        current = self._store.transfers.get(transfer.id)
        if current is None or current.status is not expected_status:
            return False
        self._store.transfers[transfer.id] = transfer
        self._undo.append(
            lambda: self._store.transfers.__setitem__(current.id, current)
        )
        return True

    async def delete_if_status(self, transfer_id, expected_status):
        current = self._store.transfers.get(transfer_id)
        if current is None or current.status is not expected_status:
            return False
        del self._store.transfers[transfer_id]
        self._undo.append(
            lambda: self._store.transfers.__setitem__(current.id, current)
        )
        return True

    async def list_transfers(
        self,
        statuses=None,
        branch_id=None,
        to_branch_ids=None,
        limit=None,
    ):
        rows = list(self._store.transfers.values())
        if statuses is not None:
            rows = [t for t in rows if t.status in statuses]
        if branch_id is not None:
            rows = [
                t
                for t in rows
                if branch_id in (t.from_branch_id, t.to_branch_id)
            ]
        if to_branch_ids is not None:
            rows = [t for t in rows if t.to_branch_id in to_branch_ids]
        rows.sort(key=lambda t: t.created_at, reverse=True)
        rows.sort(key=lambda t: t.status.value)
        return rows[:limit] if limit is not None else rows

    async def count_by_status(self, branch_id=None):
        counts = {}
        for transfer in await self.list_transfers(branch_id=branch_id):
            counts[transfer.status] = counts.get(transfer.status, 0) + 1
        return counts


class InMemoryLedgerRepository:
    def __init__(self, store: InMemoryStore, undo: list) -> None:
        self._store = store
        self._undo = undo

    async def add_many(self, entries):
        self._store.ledger.extend(entries)
        self._undo.append(lambda: self._drop(entries))

    def _drop(self, entries):
        added = {id(entry) for entry in entries}
        self._store.ledger[:] = [
            entry for entry in self._store.ledger if id(entry) not in added
        ]

    async def find_by_transfer(self, transfer_id):
        return [
            entry
            for entry in self._store.ledger
            if entry.metadata.transfer_id == transfer_id
        ]

    async def fetch_entries(
        self,
        entry_type,
        categories,
        start,
        end,
        branch_id=None,
    ):
        return [
            entry
            for entry in self._store.ledger
            if entry.type is entry_type
            and entry.category in categories
            and start <= entry.date < end
            and (branch_id is None or entry.branch_id == branch_id)
        ]


class InMemoryBudgetRepository:
    def __init__(self, store: InMemoryStore, undo: list) -> None:
        self._store = store
        self._undo = undo

    async def get(self, budget_id):
        return self._store.budgets.get(budget_id)

    async def add(self, budget):
        self._store.budgets[budget.id] = budget
        self._undo.append(lambda: self._store.budgets.pop(budget.id))

    async def find_duplicate(self, branch_id, period, category):
        for budget in self._store.budgets.values():
            if (
                budget.branch_id == branch_id
                and matches_period(budget.period, period)
                and budget.category.value == category
            ):
                return budget
        return None

    async def list_active(self, branch_id=None):
        return [
            budget
            for budget in self._store.budgets.values()
            if budget.status == "ACTIVE"
            and (branch_id is None or budget.branch_id == branch_id)
        ]

    async def list_for_period(self, period, branch_id=None):
        return [
            budget
            for budget in await self.list_active(branch_id)
            if matches_period(budget.period, period)
        ]

    async def list_budgets(
        self,
        year,
        branch_id=None,
        quarter=None,
        month=None,
        category=None,
    ):
        rows = [
            budget
            for budget in self._store.budgets.values()
            if budget.year == year
            and (branch_id is None or budget.branch_id == branch_id)
            and (quarter is None or budget.quarter == quarter)
            and (month is None or budget.month == month)
            and (category is None or budget.category.value == category)
        ]
        rows.sort(
            key=lambda b: (
                b.branch_id,
                b.quarter or 0,
                b.month or 0,
                b.category.value,
            )
        )
        return rows

    async def update_spending(
        self,
        budget_id,
        spent,
        remaining,
        metadata,
        updated_at,
        expected_revision,
    ):
        return self._replace(
            budget_id,
            expected_revision,
            spent=spent,
            remaining=remaining,
            metadata=metadata,
            updated_at=updated_at,
        )

    async def update_metadata(
        self,
        budget_id,
        metadata,
        updated_at,
        expected_revision,
    ):
        return self._replace(
            budget_id,
            expected_revision,
            metadata=metadata,
            updated_at=updated_at,
        )

    async def update_details(self, budget, expected_revision):
        return self._replace(
            budget.id,
            expected_revision,
            allocated=budget.allocated,
            remaining=budget.remaining,
            description=budget.description,
            status=budget.status,
            approved_by=budget.approved_by,
            approved_at=budget.approved_at,
            updated_at=budget.updated_at,
        )

    async def delete_if_revision(self, budget_id, expected_revision):
        current = self._store.budgets.get(budget_id)
        if current is None or current.revision != expected_revision:
            return False
        del self._store.budgets[budget_id]
        self._undo.append(
            lambda: self._store.budgets.__setitem__(budget_id, current)
        )
        return True

    def _replace(self, budget_id, expected_revision, **changes):
        current = self._store.budgets.get(budget_id)
        if current is None or current.revision != expected_revision:
            return False
        self._store.budgets[budget_id] = replace(
            current,
            revision=current.revision + 1,
            **changes,
        )
        self._undo.append(
            lambda: self._store.budgets.__setitem__(budget_id, current)
        )
        return True


class InMemoryUnitOfWork:
    """Unit of work undoing its own writes when the block raises."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._undo = []

    async def __aenter__(self):
        self._undo = []
        self.transfers = InMemoryTransferRepository(self._store, self._undo)
        self.ledger = InMemoryLedgerRepository(self._store, self._undo)
        self.budgets = InMemoryBudgetRepository(self._store, self._undo)
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is not None:
            for undo in reversed(self._undo):
                undo()
        self._undo = []


class FakeBranchDirectory:
    def __init__(self, *branches: Branch) -> None:
        self._branches = {branch.id: branch for branch in branches}

    async def get_branch(self, branch_id):
        return self._branches.get(branch_id)


class FakePermissionStore:
    def __init__(self, *permissions: BranchPermission) -> None:
        self._permissions = list(permissions)

    async def get_permission(self, user_id, branch_id):
        for permission in self._permissions:
            if (
                permission.user_id == user_id
                and permission.branch_id == branch_id
            ):
                return permission
        return None

    async def list_permissions(self, user_id):
        return [p for p in self._permissions if p.user_id == user_id]


class FixedTimeSource:
    def __init__(self, now: datetime) -> None:
        self.current = now

    def now(self):
        return self.current

    def today(self):
        return self.current.date()

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


def uow_factory_for(store: InMemoryStore):
    return lambda: InMemoryUnitOfWork(store)


def make_branch(branch_id: str, currency: str = "EGP") -> Branch:
    return Branch(
        id=branch_id,
        name=f"Branch {branch_id}",
        code=branch_id.upper(),
        currency=currency,
    )


def make_transfer(
    transfer_id: str,
    from_branch_id: str = "a",
    to_branch_id: str = "b",
    amount: str = "100.00",
    status: TransferStatus = TransferStatus.PENDING,
    created_at: datetime = datetime(2024, 3, 1, 9, 0),
) -> BranchTransfer:
    return BranchTransfer(
        id=transfer_id,
        reference_id=f"TRF-{transfer_id}",
        from_branch_id=from_branch_id,
        to_branch_id=to_branch_id,
        amount=Decimal(amount),
        currency="EGP",
        status=status,
        requested_by="requester",
        created_at=created_at,
    )


def make_budget(
    budget_id: str,
    branch_id: str = "a",
    year: int = 2024,
    month: int | None = 3,
    quarter: int | None = None,
    category: BudgetCategory = BudgetCategory.EXPENSE,
    allocated: str = "10000",
    spent: str = "0",
) -> BranchBudget:
    allocated_value = Decimal(allocated)
    spent_value = Decimal(spent)
    return BranchBudget(
        id=budget_id,
        branch_id=branch_id,
        year=year,
        quarter=quarter,
        month=month,
        category=category,
        allocated=allocated_value,
        spent=spent_value,
        remaining=max(Decimal("0"), allocated_value - spent_value),
        currency="EGP",
        status="ACTIVE",
        updated_at=datetime(2024, 1, 1),
    )


def make_entry(
    entry_id: str,
    branch_id: str = "a",
    entry_type: LedgerEntryType = LedgerEntryType.EXPENSE,
    category: str = "OPERATIONAL",
    amount: str = "100",
    at: datetime = datetime(2024, 3, 10),
) -> LedgerTransaction:
    return LedgerTransaction(
        id=entry_id,
        reference_id=f"REF-{entry_id}",
        branch_id=branch_id,
        type=entry_type,
        category=category,
        amount=Decimal(amount),
        currency="EGP",
        date=at,
        metadata=LedgerMetadata(),
    )
