from typing import Any, Dict, Type

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from bastion.domain.principal import GlobalScope, TenantScope

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


async def insert_ignore(
    session: AsyncSession, model: Type[SQLModel], values: Dict[str, Any]
) -> bool:
    """
    INSERT ... ON CONFLICT DO NOTHING in a single statement.

    Column defaults declared with default_factory are not applied by Core
    inserts, so callers pass every value explicitly.

    Returns:
        True if a row was inserted, False if it already existed
    """
    dialect = session.bind.dialect.name
    dialect_insert = _DIALECT_INSERTS.get(dialect)
    if dialect_insert is None:
        raise NotImplementedError(f"Conflict-ignore insert not supported on {dialect}")

    stmt = dialect_insert(model.__table__).values(**values).on_conflict_do_nothing()
    result = await session.execute(stmt)
    return result.rowcount > 0


def tenant_filter(column, scope: GlobalScope | TenantScope):
    """Rows owned by the scope's tenant plus global rows (tenant_id IS NULL)"""
    if isinstance(scope, TenantScope):
        return (column == scope.tenant_id) | (column.is_(None))
    return column.is_(None)
