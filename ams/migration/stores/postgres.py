"""PostgreSQL implementation of MigrationAttemptStore.

Attempts are written to ``agent_migrations`` and never updated.
"""

import json

from pydantic import TypeAdapter

from ams.db.errors import ConnectionError
from ams.db.pool import PostgresPool
from ams.migration.models import (
    AttemptStatus,
    DiffEntry,
    MigrationAttempt,
    MigrationStep,
)
from ams.migration.store import MigrationAttemptStore
from ams.observability.logging import get_logger

logger = get_logger(__name__)

_PLAN_ADAPTER = TypeAdapter(list[MigrationStep])
_DIFF_ADAPTER = TypeAdapter(list[DiffEntry])


class PostgresMigrationAttemptStore(MigrationAttemptStore):
    """PostgreSQL implementation of MigrationAttemptStore."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def record(self, attempt: MigrationAttempt) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO agent_migrations (
                        id, agent_id, from_version, to_version, dry_run,
                        plan, diff, status, error, created_at
                    ) VALUES ($1, $2, $3, $4, $5, $6::jsonb, $7::jsonb, $8, $9, $10)
                    """,
                    attempt.id,
                    attempt.agent_id,
                    attempt.from_version,
                    attempt.to_version,
                    attempt.dry_run,
                    json.dumps(_PLAN_ADAPTER.dump_python(attempt.plan, mode="json")),
                    json.dumps([entry.to_display() for entry in attempt.diff]),
                    attempt.status.value,
                    attempt.error,
                    attempt.created_at,
                )
                logger.debug(
                    "migration_attempt_recorded",
                    attempt_id=str(attempt.id),
                    agent_id=attempt.agent_id,
                    status=attempt.status.value,
                )
        except Exception as e:
            logger.error(
                "postgres_record_attempt_error",
                agent_id=attempt.agent_id,
                error=str(e),
            )
            raise ConnectionError(f"Failed to record migration attempt: {e}", cause=e) from e

    async def list_for_agent(
        self,
        agent_id: str,
        *,
        limit: int = 50,
    ) -> list[MigrationAttempt]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT id, agent_id, from_version, to_version, dry_run,
                           plan, diff, status, error, created_at
                    FROM agent_migrations
                    WHERE agent_id = $1
                    ORDER BY created_at DESC
                    LIMIT $2
                    """,
                    agent_id,
                    limit,
                )
                return [self._row_to_attempt(row) for row in rows]
        except Exception as e:
            logger.error("postgres_list_attempts_error", agent_id=agent_id, error=str(e))
            raise ConnectionError(f"Failed to list migration attempts: {e}", cause=e) from e

    def _row_to_attempt(self, row) -> MigrationAttempt:
        plan = row["plan"]
        diff = row["diff"]
        if isinstance(plan, str):
            plan = json.loads(plan)
        if isinstance(diff, str):
            diff = json.loads(diff)
        return MigrationAttempt(
            id=row["id"],
            agent_id=row["agent_id"],
            from_version=row["from_version"],
            to_version=row["to_version"],
            dry_run=row["dry_run"],
            plan=_PLAN_ADAPTER.validate_python(plan or []),
            diff=_DIFF_ADAPTER.validate_python(diff or []),
            status=AttemptStatus(row["status"]),
            error=row["error"],
            created_at=row["created_at"],
        )
