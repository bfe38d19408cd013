"""Translation of SQLAlchemy failures into domain storage errors."""

import functools

from sqlalchemy.exc import SQLAlchemyError

from branch_finance.domain.errors import StorageError
from branch_finance.infrastructure.logging.logger import get_app_logger


def wrap_storage_errors(func):
    """Re-raise SQLAlchemyError from an async method as StorageError."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as exc:
            get_app_logger().error(f"Storage failure in {func.__qualname__}: {exc}")
            raise StorageError(
                f"Storage failure while running {func.__name__}"
            ) from exc

    return wrapper


__all__ = ["wrap_storage_errors"]
