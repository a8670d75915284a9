"""PostgreSQL implementation of VersionStore.

Versions live in ``af_versions`` with primary key ``(template_id, version)``;
the unique violation on a second insert is reported as ConflictError.
"""

import json

import asyncpg
from pydantic import TypeAdapter

from ams.db.errors import ConflictError, ConnectionError
from ams.db.pool import PostgresPool
from ams.migration.models import MigrationEdge
from ams.observability.logging import get_logger
from ams.templates.cache import ContentCache
from ams.templates.models import TemplateVersion
from ams.templates.store import VersionStore

logger = get_logger(__name__)

_EDGES_ADAPTER = TypeAdapter(list[MigrationEdge])

_VERSION_COLUMNS = """
    template_id, version, af_source, checksum, is_latest,
    migrations, published_by, published_at
"""


class PostgresVersionStore(VersionStore):
    """PostgreSQL implementation of VersionStore."""

    def __init__(self, pool: PostgresPool, cache: ContentCache | None = None) -> None:
        super().__init__(cache)
        self._pool = pool

    async def ensure_template(self, template_id: str) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    "INSERT INTO af_templates (id) VALUES ($1) ON CONFLICT (id) DO NOTHING",
                    template_id,
                )
        except Exception as e:
            logger.error("postgres_ensure_template_error", template_id=template_id, error=str(e))
            raise ConnectionError(f"Failed to ensure template: {e}", cause=e) from e

    async def insert_version(self, record: TemplateVersion) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO af_versions (
                        template_id, version, af_source, checksum, is_latest,
                        migrations, published_by, published_at
                    ) VALUES ($1, $2, $3, $4, $5, $6::jsonb, $7, $8)
                    """,
                    record.template_id,
                    record.version,
                    record.content,
                    record.checksum,
                    record.is_latest,
                    json.dumps(
                        _EDGES_ADAPTER.dump_python(record.migrations, mode="json", by_alias=True)
                    ),
                    record.published_by,
                    record.published_at,
                )
        except asyncpg.UniqueViolationError as e:
            raise ConflictError(
                f"Version {record.version} of {record.template_id} exists", cause=e
            ) from e
        except Exception as e:
            logger.error(
                "postgres_insert_version_error",
                template_id=record.template_id,
                version=record.version,
                error=str(e),
            )
            raise ConnectionError(f"Failed to insert version: {e}", cause=e) from e

    async def clear_latest(self, template_id: str, keep_version: str) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    UPDATE af_versions
                    SET is_latest = (version = $2)
                    WHERE template_id = $1
                      AND is_latest IS DISTINCT FROM (version = $2)
                    """,
                    template_id,
                    keep_version,
                )
        except Exception as e:
            logger.error("postgres_clear_latest_error", template_id=template_id, error=str(e))
            raise ConnectionError(f"Failed to update latest flag: {e}", cause=e) from e

    async def get_version(self, template_id: str, version: str) -> TemplateVersion | None:
        return await self._fetch_one(
            f"SELECT {_VERSION_COLUMNS} FROM af_versions WHERE template_id = $1 AND version = $2",
            template_id,
            version,
        )

    async def get_latest(self, template_id: str) -> TemplateVersion | None:
        return await self._fetch_one(
            f"SELECT {_VERSION_COLUMNS} FROM af_versions WHERE template_id = $1 AND is_latest",
            template_id,
        )

    async def list_versions(self, template_id: str) -> list[str]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    "SELECT version FROM af_versions WHERE template_id = $1",
                    template_id,
                )
                return [row["version"] for row in rows]
        except Exception as e:
            logger.error("postgres_list_versions_error", template_id=template_id, error=str(e))
            raise ConnectionError(f"Failed to list versions: {e}", cause=e) from e

    async def _fetch_one(self, query: str, *args) -> TemplateVersion | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(query, *args)
        except Exception as e:
            logger.error("postgres_get_version_error", template_id=args[0], error=str(e))
            raise ConnectionError(f"Failed to get version: {e}", cause=e) from e

        if row is None:
            return None
        migrations = row["migrations"]
        if isinstance(migrations, str):
            migrations = json.loads(migrations)
        return TemplateVersion(
            template_id=row["template_id"],
            version=row["version"],
            content=row["af_source"],
            checksum=row["checksum"],
            is_latest=row["is_latest"],
            migrations=_EDGES_ADAPTER.validate_python(migrations or []),
            published_by=row["published_by"],
            published_at=row["published_at"],
        )
