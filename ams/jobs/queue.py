"""Deferred upgrade queue.

Non-dry-run upgrades may be enqueued instead of applied inline. Each job
carries the precomputed config and diff so a worker can apply it without
re-planning. ``PgmqUpgradeQueue`` uses the pgmq extension over the shared
asyncpg pool.
"""

import json
import re
from abc import ABC, abstractmethod
from itertools import count
from typing import Any

from pydantic import BaseModel, Field

from ams.config.models.upstream import QueueConfig
from ams.db.errors import ConnectionError
from ams.db.pool import PostgresPool
from ams.migration.models import DiffEntry, MigrationStep
from ams.observability.logging import get_logger

logger = get_logger(__name__)

QUEUE_NAME_PATTERN = re.compile(r"^[a-z_][a-z0-9_]*$")


class UpgradeJob(BaseModel):
    """Payload of a queued upgrade."""

    agent_id: str
    user_id: str
    from_version: str
    to_version: str
    plan: list[MigrationStep] = Field(default_factory=list)
    config: dict[str, Any] = Field(default_factory=dict)
    diff: list[DiffEntry] = Field(default_factory=list)


class QueuedJob(BaseModel):
    """A job read back from the queue."""

    job_id: str
    read_count: int = 0
    job: UpgradeJob


class UpgradeQueue(ABC):
    """Queue of upgrade jobs awaiting a worker."""

    @abstractmethod
    async def enqueue(self, job: UpgradeJob) -> str:
        """Enqueue a job, returning its id."""
        pass

    @abstractmethod
    async def read(self, limit: int | None = None) -> list[QueuedJob]:
        """Read up to ``limit`` visible jobs, hiding them for the visibility timeout."""
        pass

    @abstractmethod
    async def ack(self, job_id: str) -> None:
        """Remove a finished job."""
        pass

    @abstractmethod
    async def requeue_stalled(self) -> int:
        """Move jobs that stalled past their visibility timeout to the dead-letter queue."""
        pass


class InMemoryUpgradeQueue(UpgradeQueue):
    """In-memory queue for testing and development.

    Jobs read but never acked count as stalled on the next
    ``requeue_stalled`` call.
    """

    def __init__(self, batch_size: int = 100) -> None:
        self._ids = count(1)
        self._batch_size = batch_size
        self._visible: dict[str, QueuedJob] = {}
        self._in_flight: dict[str, QueuedJob] = {}
        self.dead_letter: list[QueuedJob] = []

    async def enqueue(self, job: UpgradeJob) -> str:
        job_id = str(next(self._ids))
        self._visible[job_id] = QueuedJob(job_id=job_id, job=job)
        return job_id

    async def read(self, limit: int | None = None) -> list[QueuedJob]:
        batch = list(self._visible.values())[: limit or self._batch_size]
        for queued in batch:
            del self._visible[queued.job_id]
            queued = queued.model_copy(update={"read_count": queued.read_count + 1})
            self._in_flight[queued.job_id] = queued
        return [self._in_flight[q.job_id] for q in batch]

    async def ack(self, job_id: str) -> None:
        self._in_flight.pop(job_id, None)
        self._visible.pop(job_id, None)

    async def requeue_stalled(self) -> int:
        stalled = list(self._in_flight.values())
        self._in_flight.clear()
        self.dead_letter.extend(stalled)
        return len(stalled)

    @property
    def pending(self) -> list[UpgradeJob]:
        return [q.job for q in self._visible.values()]


class PgmqUpgradeQueue(UpgradeQueue):
    """pgmq-backed queue.

    A message that was read but never deleted before its visibility timeout
    expired is stalled; ``requeue_stalled`` forwards those to
    ``<name>_deadletter``. Queue names are plain identifiers since pgmq
    derives table names from them.
    """

    def __init__(
        self,
        pool: PostgresPool,
        name: str = "upgrade_jobs",
        visibility_timeout_seconds: int = 600,
        batch_size: int = 100,
    ) -> None:
        if not QUEUE_NAME_PATTERN.match(name):
            raise ValueError(f"Invalid queue name: {name!r}")
        self._pool = pool
        self._name = name
        self._vt = visibility_timeout_seconds
        self._batch_size = batch_size

    @classmethod
    def from_config(cls, pool: PostgresPool, config: QueueConfig) -> "PgmqUpgradeQueue":
        return cls(
            pool,
            name=config.name,
            visibility_timeout_seconds=config.visibility_timeout_seconds,
            batch_size=config.batch_size,
        )

    @property
    def dead_letter_name(self) -> str:
        return f"{self._name}_deadletter"

    async def enqueue(self, job: UpgradeJob) -> str:
        try:
            async with self._pool.acquire() as conn:
                msg_id = await conn.fetchval(
                    "SELECT pgmq.send($1, $2::jsonb)",
                    self._name,
                    job.model_dump_json(),
                )
        except Exception as e:
            logger.error("pgmq_enqueue_error", queue=self._name, error=str(e))
            raise ConnectionError(f"Failed to enqueue upgrade job: {e}", cause=e) from e

        logger.info(
            "upgrade_job_enqueued",
            queue=self._name,
            job_id=msg_id,
            agent_id=job.agent_id,
        )
        return str(msg_id)

    async def read(self, limit: int | None = None) -> list[QueuedJob]:
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(
                    "SELECT msg_id, read_ct, message FROM pgmq.read($1, $2, $3)",
                    self._name,
                    self._vt,
                    limit or self._batch_size,
                )
        except Exception as e:
            logger.error("pgmq_read_error", queue=self._name, error=str(e))
            raise ConnectionError(f"Failed to read upgrade jobs: {e}", cause=e) from e

        return [
            QueuedJob(
                job_id=str(row["msg_id"]),
                read_count=row["read_ct"],
                job=UpgradeJob.model_validate(self._decode(row["message"])),
            )
            for row in rows
        ]

    async def ack(self, job_id: str) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.fetchval("SELECT pgmq.delete($1, $2::bigint)", self._name, int(job_id))
        except Exception as e:
            logger.error("pgmq_ack_error", queue=self._name, job_id=job_id, error=str(e))
            raise ConnectionError(f"Failed to ack upgrade job: {e}", cause=e) from e

    async def requeue_stalled(self) -> int:
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    rows = await conn.fetch(
                        f"""
                        SELECT msg_id, message
                        FROM pgmq.q_{self._name}
                        WHERE read_ct > 0 AND vt <= NOW()
                        ORDER BY msg_id
                        LIMIT $1
                        FOR UPDATE SKIP LOCKED
                        """,
                        self._batch_size,
                    )
                    for row in rows:
                        await conn.fetchval(
                            "SELECT pgmq.send($1, $2::jsonb)",
                            self.dead_letter_name,
                            json.dumps(self._decode(row["message"])),
                        )
                        await conn.fetchval(
                            "SELECT pgmq.delete($1, $2::bigint)",
                            self._name,
                            row["msg_id"],
                        )
        except Exception as e:
            logger.error("pgmq_requeue_stalled_error", queue=self._name, error=str(e))
            raise ConnectionError(f"Failed to requeue stalled jobs: {e}", cause=e) from e

        if rows:
            logger.warning(
                "upgrade_jobs_dead_lettered",
                queue=self._name,
                dead_letter=self.dead_letter_name,
                count=len(rows),
            )
        return len(rows)

    @staticmethod
    def _decode(message: Any) -> dict[str, Any]:
        if isinstance(message, str):
            return json.loads(message)
        return dict(message)
