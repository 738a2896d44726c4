from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lending_admin.core.settings import settings
from lending_admin.db.url import normalize_database_url


def engine_options() -> dict[str, Any]:
    options: dict[str, Any] = {
        "future": True,
        "echo": False,
        "pool_pre_ping": True,
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
    }
    if settings.database_pgbouncer:
        options["connect_args"] = {"statement_cache_size": 0, "prepared_statement_cache_size": 0}
    return options


engine = create_async_engine(normalize_database_url(settings.database_url), **engine_options())
# Mutations read back the committed entity to build the response
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
