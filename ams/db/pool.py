"""PostgreSQL connection pool management.

One pool is shared by every PostgreSQL store in the process.
"""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import asyncpg

from ams.config.models.storage import StorageConfig
from ams.db.errors import ConnectionError
from ams.observability.logging import get_logger

logger = get_logger(__name__)


def resolve_dsn(config: StorageConfig | None = None) -> str:
    """Pick the PostgreSQL DSN for the store.

    Order: ``storage.dsn``, AMS_DATABASE_URL, DATABASE_URL, then a DSN built
    from the POSTGRES_* variables with local defaults.
    """
    if config is not None and config.dsn:
        return config.dsn

    dsn = os.environ.get("AMS_DATABASE_URL") or os.environ.get("DATABASE_URL")
    if dsn:
        return dsn

    host = os.environ.get("POSTGRES_HOST", "localhost")
    port = os.environ.get("POSTGRES_PORT", "5432")
    user = os.environ.get("POSTGRES_USER", "postgres")
    password = os.environ.get("POSTGRES_PASSWORD", "postgres")
    database = os.environ.get("POSTGRES_DB", "postgres")

    return f"postgresql://{user}:{password}@{host}:{port}/{database}"


class PostgresPool:
    """Manages an asyncpg connection pool.

    Usage:
        pool = PostgresPool.from_config(settings.storage)
        await pool.connect()
        try:
            async with pool.acquire() as conn:
                await conn.fetch("SELECT ...")
        finally:
            await pool.close()
    """

    def __init__(
        self,
        dsn: str | None = None,
        min_size: int = 2,
        max_size: int = 10,
        max_inactive_connection_lifetime: float = 300.0,
        command_timeout: float = 15.0,
    ) -> None:
        self._dsn = dsn or resolve_dsn()
        self._min_size = min_size
        self._max_size = max_size
        self._max_inactive_connection_lifetime = max_inactive_connection_lifetime
        self._command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_config(cls, config: StorageConfig) -> "PostgresPool":
        return cls(
            dsn=resolve_dsn(config),
            min_size=config.min_pool_size,
            max_size=config.max_pool_size,
            max_inactive_connection_lifetime=config.max_inactive_connection_lifetime,
            command_timeout=config.command_timeout,
        )

    async def connect(self) -> None:
        """Initialize the connection pool."""
        if self._pool is not None:
            return

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
                max_inactive_connection_lifetime=self._max_inactive_connection_lifetime,
                command_timeout=self._command_timeout,
            )
            logger.info(
                "postgres_pool_connected",
                min_size=self._min_size,
                max_size=self._max_size,
            )
        except Exception as e:
            logger.error("postgres_pool_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}", cause=e) from e

    async def close(self) -> None:
        """Close the connection pool gracefully."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            logger.info("postgres_pool_closed")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection, connecting lazily on first use."""
        if self._pool is None:
            await self.connect()

        async with self._pool.acquire() as connection:
            yield connection

    async def health_check(self) -> bool:
        """Return True when the pool answers ``SELECT 1``."""
        if self._pool is None:
            return False

        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            return True
        except Exception as e:
            logger.warning("postgres_health_check_failed", error=str(e))
            return False

    @property
    def is_connected(self) -> bool:
        return self._pool is not None
