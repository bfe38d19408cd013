"""CLI adapter recomputing budget spend from the ledger.

Usage::

    python -m branch_finance.adapters.recompute_budgets_cli [BUDGET_ID ...]

Without ids every ACTIVE budget is recomputed. The exit code is 1 when
any budget failed.
"""

import argparse
import asyncio
import sys

from branch_finance.domain.errors import PartialBatchFailure
from branch_finance.domain.models import Actor, BatchOutcome
from branch_finance.infrastructure.container import build_container
from branch_finance.infrastructure.logging.logger import get_app_logger

SYSTEM_ACTOR_ID = "system"


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Recompute branch budget spend from the ledger."
    )
    parser.add_argument("budget_ids", nargs="*", help="Budgets to recompute")
    return parser.parse_args(argv)


async def _run(container, budget_ids: list[str]) -> BatchOutcome:
    try:
        if not budget_ids:
            async with container.uow_factory() as uow:
                budgets = await uow.budgets.list_active()
            budget_ids = [budget.id for budget in budgets]
        actor = Actor(
            id=SYSTEM_ACTOR_ID,
            role=container.settings.admin_roles[0],
        )
        return await container.aggregator.recompute_many(budget_ids, actor)
    finally:
        await container.db_port.get_engine().dispose()


def main(argv: list[str] | None = None) -> int:
    """Recompute the requested budgets and print a summary."""
    args = _parse_args(argv)
    logger = get_app_logger()
    container = build_container()
    outcome = asyncio.run(_run(container, list(args.budget_ids)))
    summary = outcome.summary
    print(
        f"Recomputed {summary.successful} budgets "
        f"({summary.failed} failed, {summary.skipped} skipped)."
    )
    try:
        outcome.raise_for_failures()
    except PartialBatchFailure as exc:
        for failure in exc.failures:
            logger.error(f"Budget {failure.id}: {failure.error}")
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
