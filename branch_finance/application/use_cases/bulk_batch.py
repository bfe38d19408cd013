"""Partial-failure-tolerant execution of one action over many ids."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from branch_finance.domain.errors import BranchFinanceError
from branch_finance.domain.models import (
    BatchItemError,
    BatchItemResult,
    BatchOutcome,
)
from branch_finance.infrastructure.logging.logger import get_app_logger

ItemHandler = Callable[[str], Awaitable[Any]]

UNEXPECTED_ITEM_ERROR = "Unexpected error while processing item"


class BulkBatchProcessor:
    """Run a handler for each id with isolated outcomes.

    A handler returning ``None`` marks the item as skipped. Any exception,
    including a per-item timeout, marks only that item as failed.
    """

    def __init__(
        self,
        concurrency: int = 10,
        item_timeout: float | None = None,
        logger=None,
    ) -> None:
        """Initialize the processor.

        Args:
            concurrency: Maximum number of items handled at once.
            item_timeout: Optional per-item timeout in seconds.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._concurrency = concurrency
        self._item_timeout = item_timeout
        self._logger = logger or get_app_logger()

    async def run(
        self,
        ids: Sequence[str],
        handler: ItemHandler,
        label: str = "batch",
    ) -> BatchOutcome:
        """Apply ``handler`` to every id.

        Args:
            ids: Entity ids, processed independently.
            handler: Coroutine function taking one id.
            label: Name used in log lines.

        Returns:
            BatchOutcome: Results, errors and skipped ids in input order.
        """
        semaphore = asyncio.Semaphore(self._concurrency)
        outcomes = await asyncio.gather(
            *(self._process(item_id, handler, semaphore) for item_id in ids)
        )
        results = []
        errors = []
        skipped = []
        for item_id, outcome in zip(ids, outcomes):
            if isinstance(outcome, BatchItemError):
                errors.append(outcome)
            elif outcome is None:
                skipped.append(item_id)
            else:
                results.append(BatchItemResult(id=item_id, entity=outcome))
        outcome = BatchOutcome(results=results, errors=errors, skipped=skipped)
        summary = outcome.summary
        self._logger.info(
            f"{label}: {summary.successful} succeeded, {summary.failed} failed, "
            f"{summary.skipped} skipped of {summary.total}"
        )
        return outcome

    async def _process(
        self,
        item_id: str,
        handler: ItemHandler,
        semaphore: asyncio.Semaphore,
    ):
        async with semaphore:
            try:
                if self._item_timeout is None:
                    return await handler(item_id)
                return await asyncio.wait_for(
                    handler(item_id),
                    timeout=self._item_timeout,
                )
            except asyncio.TimeoutError:
                self._logger.warning(
                    f"Item {item_id} timed out after {self._item_timeout}s"
                )
                return BatchItemError(
                    id=item_id,
                    error=f"Timed out after {self._item_timeout} seconds",
                )
            except BranchFinanceError as exc:
                self._logger.warning(f"Item {item_id} failed: {exc.message}")
                return BatchItemError(id=item_id, error=exc.message)
            except Exception:
                self._logger.exception(f"Unexpected failure for item {item_id}")
                return BatchItemError(id=item_id, error=UNEXPECTED_ITEM_ERROR)


__all__ = ["BulkBatchProcessor", "ItemHandler", "UNEXPECTED_ITEM_ERROR"]
