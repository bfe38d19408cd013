"""Error taxonomy for the branch finance domain.

Each error carries the status code the API adapter reports for it, so the
mapping survives whatever transport sits on top.
"""


class BranchFinanceError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BranchFinanceError):
    """Input rejected before anything was written. Never retried."""

    status_code = 400


class AuthenticationError(BranchFinanceError):
    """No authenticated actor was supplied."""

    status_code = 401


class AuthorizationError(BranchFinanceError):
    """The actor is authenticated but lacks the capability."""

    status_code = 403


class NotFoundError(BranchFinanceError):
    """An id did not resolve to an entity."""

    status_code = 404


class InvalidStateTransition(BranchFinanceError):
    """The requested action is illegal for the entity's current status."""

    status_code = 400


class ConcurrentUpdateError(InvalidStateTransition):
    """A compare-and-set write lost to a concurrent writer of the same row."""


class StorageError(BranchFinanceError):
    """Transient persistence failure; retrying the item is safe."""

    status_code = 500


class PartialBatchFailure(BranchFinanceError):
    """Some items of a batch failed; the rest were applied."""

    status_code = 200

    def __init__(self, message: str, failures: list) -> None:
        super().__init__(message)
        self.failures = failures


__all__ = [
    "BranchFinanceError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "InvalidStateTransition",
    "ConcurrentUpdateError",
    "StorageError",
    "PartialBatchFailure",
]
