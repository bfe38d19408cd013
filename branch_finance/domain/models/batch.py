"""Domain models for bulk batch outcomes."""

from dataclasses import dataclass, field
from typing import Any

from branch_finance.domain.errors import PartialBatchFailure


@dataclass(frozen=True)
class BatchItemResult:
    """Successful outcome for one id."""

    id: str
    entity: Any
    status: str = "success"


@dataclass(frozen=True)
class BatchItemError:
    """Failure for one id; the message is safe to show to callers."""

    id: str
    error: str


@dataclass(frozen=True)
class BatchSummary:
    """Counts for a batch run."""

    total: int
    successful: int
    failed: int
    skipped: int = 0


@dataclass(frozen=True)
class BatchOutcome:
    """Independent per-item outcomes of a bulk action, in input order."""

    results: list[BatchItemResult] = field(default_factory=list)
    errors: list[BatchItemError] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def summary(self) -> BatchSummary:
        return BatchSummary(
            total=len(self.results) + len(self.errors) + len(self.skipped),
            successful=len(self.results),
            failed=len(self.errors),
            skipped=len(self.skipped),
        )

    def raise_for_failures(self) -> None:
        """Raise PartialBatchFailure when any item failed."""
        if self.errors:
            raise PartialBatchFailure(
                f"{len(self.errors)} of {self.summary.total} items failed",
                failures=list(self.errors),
            )


__all__ = [
    "BatchItemResult",
    "BatchItemError",
    "BatchSummary",
    "BatchOutcome",
]
