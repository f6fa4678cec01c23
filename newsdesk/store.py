"""
Dialect-aware statements the ORM does not express portably.

Both helpers compile to a single ``INSERT ... ON CONFLICT`` statement, so
the store (not the application) arbitrates between concurrent writers.
PostgreSQL is the production database and SQLite backs the test suite;
both share the ``ON CONFLICT`` syntax.
"""
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.errors import StoreError

_INSERT_BUILDERS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _insert_for(db: AsyncSession, model):
    dialect = db.bind.dialect.name
    try:
        builder = _INSERT_BUILDERS[dialect]
    except KeyError:
        raise StoreError(f"Unsupported database dialect: {dialect}") from None
    return builder(model)


async def insert_ignore(db: AsyncSession, model, **values) -> bool:
    """
    Insert a row unless one with the same primary key exists.

    Returns True when a row was inserted, False when it already existed.
    """
    stmt = _insert_for(db, model).values(**values).on_conflict_do_nothing()
    result = await db.execute(stmt)
    return result.rowcount == 1


async def upsert_increment(db: AsyncSession, model, column: str, keys: dict) -> None:
    """
    Add one to *column* of the row identified by *keys*, creating the row
    with the value 1 when it does not exist yet.
    """
    target = getattr(model, column)
    stmt = _insert_for(db, model).values(**keys, **{column: 1})
    stmt = stmt.on_conflict_do_update(
        index_elements=list(keys),
        set_={column: target + 1},
    )
    await db.execute(stmt)
