import asyncio
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from lending_admin import models  # noqa: F401
from lending_admin.core.settings import settings
from lending_admin.db.base import Base
from lending_admin.db.session import engine_options
from lending_admin.db.url import normalize_database_url

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# Same comparison rules offline and online so autogenerate sees CHECK and default drift
_CONFIGURE_OPTIONS: dict[str, Any] = {
    "target_metadata": target_metadata,
    "compare_type": True,
    "compare_server_default": True,
}


def migration_url() -> str:
    """The app's DATABASE_URL (env or .env) wins over alembic.ini's sqlalchemy.url."""
    raw = settings.database_url or config.get_main_option("sqlalchemy.url") or ""
    return normalize_database_url(raw)


def run_migrations_offline() -> None:
    context.configure(
        url=migration_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_CONFIGURE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection) -> None:
    context.configure(connection=connection, **_CONFIGURE_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    # NullPool: one short-lived connection per run; keep PgBouncer connect args
    connect_args = engine_options().get("connect_args", {})
    connectable = create_async_engine(migration_url(), poolclass=pool.NullPool, connect_args=connect_args)
    try:
        async with connectable.connect() as connection:
            await connection.run_sync(_run_with_connection)
    finally:
        await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
