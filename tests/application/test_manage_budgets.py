"""Tests for listing, reading, editing and deleting budgets."""

import asyncio
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from branch_finance.application.use_cases import (
    AuthorizationResolver,
    DeleteBudgetUseCase,
    GetBudgetUseCase,
    ListBudgetsUseCase,
    UpdateBudgetUseCase,
)
from branch_finance.domain.errors import (
    AuthorizationError,
    InvalidStateTransition,
    NotFoundError,
    ValidationError,
)
from branch_finance.domain.models import Actor, BudgetCategory
from tests.fakes import (
    FakeBranchDirectory,
    FakePermissionStore,
    FixedTimeSource,
    InMemoryStore,
    make_branch,
    make_budget,
    uow_factory_for,
)

NOW = datetime(2024, 3, 20, 8, 0)
ADMIN = Actor(id="admin", role="ADMIN")
STAFF = Actor(id="u1", role="STAFF", home_branch_id="a")


def _authorization():
    return AuthorizationResolver(FakePermissionStore(), logger=MagicMock())


def _seeded_store():
    store = InMemoryStore()
    store.budgets["m3"] = make_budget("m3", quarter=1)
    store.budgets["m4"] = make_budget("m4", month=4, quarter=2)
    store.budgets["inc"] = make_budget(
        "inc",
        branch_id="b",
        quarter=1,
        category=BudgetCategory.INCOME,
    )
    store.budgets["old"] = make_budget("old", year=2023, quarter=1)
    return store


def _update(store):
    return UpdateBudgetUseCase(
        uow_factory_for(store),
        _authorization(),
        FixedTimeSource(NOW),
        logger=MagicMock(),
    )


def _delete(store):
    return DeleteBudgetUseCase(
        uow_factory_for(store),
        _authorization(),
        logger=MagicMock(),
    )


def test_list_defaults_to_current_year_and_attaches_branches():
    store = _seeded_store()
    use_case = ListBudgetsUseCase(
        uow_factory_for(store),
        FakeBranchDirectory(make_branch("a"), make_branch("b")),
        FixedTimeSource(NOW),
        logger=MagicMock(),
    )

    views = asyncio.run(use_case.execute(ADMIN))
    first_quarter = asyncio.run(use_case.execute(ADMIN, quarter=1))
    income = asyncio.run(use_case.execute(ADMIN, category="INCOME"))
    older = asyncio.run(use_case.execute(ADMIN, year=2023, branch_id="a"))

    assert [view.budget.id for view in views] == ["m3", "m4", "inc"]
    assert views[2].branch.name == "Branch b"
    assert [view.budget.id for view in first_quarter] == ["m3", "inc"]
    assert [view.budget.id for view in income] == ["inc"]
    assert [view.budget.id for view in older] == ["old"]


@pytest.mark.parametrize(
    "filters",
    [{"month": 13}, {"quarter": 0}, {"category": "BONUS"}],
)
def test_list_rejects_invalid_filters(filters):
    use_case = ListBudgetsUseCase(
        uow_factory_for(InMemoryStore()),
        FakeBranchDirectory(),
        FixedTimeSource(NOW),
        logger=MagicMock(),
    )

    with pytest.raises(ValidationError):
        asyncio.run(use_case.execute(ADMIN, **filters))


def test_get_returns_budget_with_branch_or_not_found():
    store = _seeded_store()
    use_case = GetBudgetUseCase(
        uow_factory_for(store),
        FakeBranchDirectory(make_branch("a")),
    )

    view = asyncio.run(use_case.execute("m3"))

    assert view.budget.id == "m3"
    assert view.branch.id == "a"
    with pytest.raises(NotFoundError):
        asyncio.run(use_case.execute("missing"))


def test_new_allocation_recomputes_remaining_from_spent():
    """Allocation below what was spent leaves nothing remaining."""
    store = InMemoryStore()
    store.budgets["b1"] = make_budget("b1", allocated="10000", spent="9600")

    updated = asyncio.run(
        _update(store).execute(
            ADMIN,
            "b1",
            allocated="9000",
            description="Trimmed",
        )
    )

    stored = store.budgets["b1"]
    assert stored.allocated == Decimal("9000")
    assert stored.spent == Decimal("9600")
    assert stored.remaining == Decimal("0")
    assert stored.description == "Trimmed"
    assert stored.updated_at == NOW
    assert stored.revision == 1
    assert updated == stored


def test_approve_activates_and_records_approver():
    store = InMemoryStore()
    store.budgets["b1"] = make_budget("b1")
    asyncio.run(_update(store).execute(ADMIN, "b1", status="draft"))
    assert store.budgets["b1"].status == "DRAFT"

    asyncio.run(_update(store).execute(ADMIN, "b1", approve=True))

    stored = store.budgets["b1"]
    assert stored.status == "ACTIVE"
    assert stored.approved_by == "admin"
    assert stored.approved_at == NOW
    assert stored.revision == 2


@pytest.mark.parametrize(
    "changes, message",
    [
        ({}, "Nothing to update"),
        ({"status": "PAUSED"}, "Unknown budget status"),
        ({"allocated": "-1"}, "cannot be negative"),
        ({"allocated": "10.005"}, "two decimal places"),
        ({"status": "ACTIVE", "approve": True}, "while approving"),
    ],
)
def test_invalid_updates_write_nothing(changes, message):
    store = InMemoryStore()
    store.budgets["b1"] = make_budget("b1")

    with pytest.raises(ValidationError, match=message):
        asyncio.run(_update(store).execute(ADMIN, "b1", **changes))

    assert store.budgets["b1"].revision == 0


def test_update_requires_budget_rights_on_the_branch():
    store = InMemoryStore()
    store.budgets["own"] = make_budget("own", branch_id="a")
    store.budgets["other"] = make_budget("other", branch_id="b")

    asyncio.run(_update(store).execute(STAFF, "own", description="Mine"))
    with pytest.raises(AuthorizationError):
        asyncio.run(
            _update(store).execute(STAFF, "other", description="Theirs")
        )
    with pytest.raises(NotFoundError):
        asyncio.run(_update(store).execute(ADMIN, "missing", approve=True))

    assert store.budgets["own"].description == "Mine"
    assert store.budgets["other"].description is None


def test_delete_is_refused_once_spending_is_recorded():
    store = InMemoryStore()
    store.budgets["spent"] = make_budget("spent", spent="0.01")
    store.budgets["fresh"] = make_budget("fresh")

    with pytest.raises(InvalidStateTransition):
        asyncio.run(_delete(store).execute(ADMIN, "spent"))
    asyncio.run(_delete(store).execute(ADMIN, "fresh"))

    assert set(store.budgets) == {"spent"}


def test_delete_is_limited_to_administrators():
    store = InMemoryStore()
    store.budgets["b1"] = make_budget("b1", branch_id="a")

    with pytest.raises(AuthorizationError):
        asyncio.run(_delete(store).execute(STAFF, "b1"))
    with pytest.raises(NotFoundError):
        asyncio.run(_delete(store).execute(ADMIN, "missing"))

    assert "b1" in store.budgets
