"""SQLAlchemy adapters for the branch directory and permission store."""

from sqlalchemy import select

from branch_finance.application.ports.database import DatabaseEnginePort
from branch_finance.application.ports.directories import (
    BranchDirectoryPort,
    PermissionStorePort,
)
from branch_finance.domain.models import Branch, BranchPermission
from branch_finance.infrastructure.schema import branch_permissions, branches
from branch_finance.infrastructure.storage_errors import wrap_storage_errors


def _permission_from_row(row) -> BranchPermission:
    data = row._mapping
    return BranchPermission(
        user_id=data["user_id"],
        branch_id=data["branch_id"],
        capabilities=frozenset(data["capabilities"] or ()),
        is_active=bool(data["is_active"]),
    )


class SqlAlchemyBranchDirectory(BranchDirectoryPort):
    """Branch lookups, each on its own short-lived connection."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        self._db_port = db_port

    @wrap_storage_errors
    async def get_branch(self, branch_id: str) -> Branch | None:
        engine = self._db_port.get_engine()
        async with engine.connect() as conn:
            result = await conn.execute(
                select(branches).where(branches.c.id == branch_id)
            )
            row = result.first()
        if row is None:
            return None
        return Branch(
            id=row.id,
            name=row.name,
            code=row.code,
            currency=row.currency,
        )


class SqlAlchemyPermissionStore(PermissionStorePort):
    """Per-(user, branch) capability grants stored as JSON lists."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        self._db_port = db_port

    @wrap_storage_errors
    async def get_permission(
        self,
        user_id: str,
        branch_id: str,
    ) -> BranchPermission | None:
        engine = self._db_port.get_engine()
        async with engine.connect() as conn:
            result = await conn.execute(
                select(branch_permissions).where(
                    branch_permissions.c.user_id == user_id,
                    branch_permissions.c.branch_id == branch_id,
                )
            )
            row = result.first()
        return _permission_from_row(row) if row is not None else None

    @wrap_storage_errors
    async def list_permissions(self, user_id: str) -> list[BranchPermission]:
        engine = self._db_port.get_engine()
        async with engine.connect() as conn:
            result = await conn.execute(
                select(branch_permissions)
                .where(branch_permissions.c.user_id == user_id)
                .order_by(branch_permissions.c.branch_id)
            )
            rows = result.all()
        return [_permission_from_row(row) for row in rows]


__all__ = ["SqlAlchemyBranchDirectory", "SqlAlchemyPermissionStore"]
