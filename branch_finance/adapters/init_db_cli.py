"""CLI adapter creating the branch finance tables.

Reads ``BRANCH_FINANCE_DB_URL`` through the database adapter and creates
every missing table. Existing tables are left untouched.
"""

import asyncio

from branch_finance.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from branch_finance.infrastructure.logging.logger import get_app_logger
from branch_finance.infrastructure.schema import create_schema


async def _run(adapter) -> None:
    engine = adapter.get_engine()
    try:
        await create_schema(engine)
    finally:
        await engine.dispose()


def main() -> None:
    """Create the schema on the configured database."""
    logger = get_app_logger()
    adapter = SqlAlchemyDatabaseEngineAdapter()
    asyncio.run(_run(adapter))
    logger.info("Branch finance schema is up to date.")
    print("Branch finance schema is up to date.")


if __name__ == "__main__":  # pragma: no cover
    main()
