"""Alembic environment — runs Gatherwise migrations through the async engine.

Design Decisions:
    - DATABASE_URL wins over alembic.ini and is coerced to the asyncpg driver like Settings does
    - app.models is imported for its side effect: every table must be on Base.metadata
      before autogenerate compares
    - compare_type on: column type changes show up in autogenerated revisions
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from alembic import context

import app.models  # noqa: F401
from app.config import Settings
from app.db.base import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    from_env = os.environ.get("DATABASE_URL")
    if from_env:
        return Settings.convert_postgres_url(from_env)
    return config.get_main_option("sqlalchemy.url")


def _migrate(**options) -> None:
    context.configure(target_metadata=Base.metadata, compare_type=True, **options)
    with context.begin_transaction():
        context.run_migrations()


def _migrate_on(connection: Connection) -> None:
    _migrate(connection=connection)


async def _migrate_online() -> None:
    engine = create_async_engine(_database_url(), poolclass=NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate_on)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _migrate(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
else:
    asyncio.run(_migrate_online())
