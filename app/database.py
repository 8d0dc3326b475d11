from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import get_settings


class Base(DeclarativeBase):
    pass


def make_sessionmaker(database_url: str, **engine_kwargs) -> async_sessionmaker:
    engine = create_async_engine(database_url, echo=False, **engine_kwargs)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


_settings = get_settings()
async_session: Optional[async_sessionmaker] = (
    make_sessionmaker(_settings.database_url) if _settings.database_url else None
)


def get_sessionmaker() -> Optional[async_sessionmaker]:
    """Storage handle, or None when no database is bound"""
    return async_session


async def create_tables(engine: AsyncEngine, tables=None):
    # create_all checks for existence first, so this is safe to repeat
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, tables=tables)


async def init_db():
    if async_session is None:
        return
    import app.models  # noqa: F401  register tables on Base.metadata

    await create_tables(async_session.kw["bind"])


def upsert(engine: AsyncEngine, table, values: dict, index_elements: list, update_columns: list):
    """INSERT ... ON CONFLICT DO UPDATE for the engine's dialect"""
    if engine.dialect.name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    else:
        from sqlalchemy.dialects.sqlite import insert
    stmt = insert(table).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=index_elements,
        set_={col: stmt.excluded[col] for col in update_columns},
    )
