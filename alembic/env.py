"""Alembic environment — runs migrations with the application's own database settings.

Design Decisions:
    - DATABASE_URL and DATABASE_SEARCH_PATH read through app.config Settings,
      so migrations hit the same database and schema as the running API
    - NullPool: one short-lived connection per migration run
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from app.config import get_settings
from app.db.base import Base
import app.models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

settings = get_settings()


def _connect_args() -> dict:
    if settings.database_search_path and settings.database_url.startswith(
        "postgresql+asyncpg",
    ):
        return {"server_settings": {"search_path": settings.database_search_path}}
    return {}


def _apply(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=Base.metadata)
    with context.begin_transaction():
        context.run_migrations()


async def _migrate() -> None:
    engine = create_async_engine(
        settings.database_url,
        poolclass=pool.NullPool,
        connect_args=_connect_args(),
    )
    async with engine.connect() as connection:
        await connection.run_sync(_apply)
    await engine.dispose()


if context.is_offline_mode():
    context.configure(
        url=settings.database_url,
        target_metadata=Base.metadata,
        literal_binds=True,
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    asyncio.run(_migrate())
