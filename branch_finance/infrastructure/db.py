"""Database infrastructure for the branch finance services.

This module exposes concrete helpers to create and reuse the SQLAlchemy
async engine connected to the branch finance database. It belongs to the
infrastructure layer because it deals with external systems.
"""

import os
from typing import Optional

import dotenv
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from branch_finance.application.ports.database import DatabaseEnginePort


def _get_env_var(name: str) -> str:
    """Read an environment variable or raise a descriptive error.

    Args:
        name: Name of the environment variable to read.

    Returns:
        str: The raw value of the environment variable.

    Raises:
        RuntimeError: If the environment variable is missing or empty.
    """
    dotenv.load_dotenv()
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}")
    return value


def _create_engine(db_url: str) -> AsyncEngine:
    """Create a configured async engine.

    Args:
        db_url: Fully qualified async database URL, for example
            ``postgresql+asyncpg://...`` or ``sqlite+aiosqlite:///...``.

    Returns:
        AsyncEngine: Engine with health checks enabled and a small pool
        for server databases.
    """
    if make_url(db_url).get_backend_name() == "sqlite":
        return create_async_engine(db_url, pool_pre_ping=True)
    return create_async_engine(
        db_url,
        pool_size=5,
        max_overflow=5,
        pool_pre_ping=True,
    )


_engine: Optional[AsyncEngine] = None


def get_engine() -> AsyncEngine:
    """Get a singleton async engine for the branch finance database.

    Returns:
        AsyncEngine: Lazily initialized engine.
    """
    global _engine
    if _engine is None:
        _engine = _create_engine(_get_env_var("BRANCH_FINANCE_DB_URL"))
    return _engine


class SqlAlchemyDatabaseEngineAdapter(DatabaseEnginePort):
    """DatabaseEnginePort implementation backed by SQLAlchemy.

    The adapter hides configuration details (environment variables, pooling)
    behind the port. Passing ``db_url`` bypasses the shared singleton.
    """

    def __init__(self, db_url: str | None = None) -> None:
        self._engine = _create_engine(db_url) if db_url else None

    def get_engine(self) -> AsyncEngine:
        """Get the engine for the branch finance database."""
        if self._engine is not None:
            return self._engine
        return get_engine()


__all__ = ["get_engine", "SqlAlchemyDatabaseEngineAdapter"]
