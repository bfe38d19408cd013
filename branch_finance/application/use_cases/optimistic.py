"""Retry helper for budget writes guarded by the row revision."""

from collections.abc import Awaitable, Callable
from typing import TypeVar

from branch_finance.domain.constants import BUDGET_WRITE_ATTEMPTS
from branch_finance.domain.errors import ConcurrentUpdateError

T = TypeVar("T")


async def retry_on_conflict(
    operation: Callable[[], Awaitable[T]],
    logger,
    attempts: int = BUDGET_WRITE_ATTEMPTS,
) -> T:
    """Run ``operation`` again while it loses compare-and-set races.

    ``operation`` must open its own unit of work and re-read what it
    writes, so each attempt starts from the committed state.

    Raises:
        ConcurrentUpdateError: If every attempt lost its race.
    """
    for attempt in range(1, attempts):
        try:
            return await operation()
        except ConcurrentUpdateError as exc:
            logger.warning(f"{exc.message}; retrying ({attempt}/{attempts})")
    return await operation()
