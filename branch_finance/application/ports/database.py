"""Database port for the branch finance store.

Infrastructure implementations provide the concrete async engine so use
cases and repositories never read configuration themselves.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncEngine


class DatabaseEnginePort(Protocol):
    """Port exposing the async engine for the branch finance database."""

    def get_engine(self) -> AsyncEngine:
        """Get the engine for the branch finance database.

        Returns:
            AsyncEngine: SQLAlchemy async engine.
        """


__all__ = ["DatabaseEnginePort"]
