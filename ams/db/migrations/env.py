"""Alembic environment for the AMS schema.

Migrations are raw SQL (no autogenerate). The target database is the one the
service itself would use: ``-x dsn=...`` wins, then ``storage.dsn`` from the
active ``AMS_ENV`` settings, then the DSN environment variables.

    alembic upgrade head
    AMS_ENV=staging alembic upgrade head
    alembic -x dsn=postgresql://localhost/ams_test upgrade head
"""

import asyncio
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from ams.config import get_settings
from ams.db.pool import resolve_dsn

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def database_url() -> str:
    """Async SQLAlchemy URL for the target database."""
    dsn = context.get_x_argument(as_dictionary=True).get("dsn")
    if not dsn:
        dsn = resolve_dsn(get_settings().storage)

    scheme, sep, rest = dsn.partition("://")
    if scheme in ("postgres", "postgresql"):
        return f"postgresql+asyncpg{sep}{rest}"
    return dsn


def _configure(**options: Any) -> None:
    # pgmq queue creation and table DDL run per revision
    context.configure(target_metadata=None, transaction_per_migration=True, **options)


def run_offline() -> None:
    """Print the SQL instead of executing it (``alembic upgrade head --sql``)."""
    _configure(url=database_url(), literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def _run_with_connection(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_online() -> None:
    engine = create_async_engine(database_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_with_connection)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    asyncio.run(run_online())
