"""PostgreSQL implementation of DedupStore.

The primary key on ``request_dedup.idempotency_key`` makes the insert the
single point of arbitration between concurrent first uses.
"""

from ams.db.errors import ConnectionError, StoreError
from ams.db.pool import PostgresPool
from ams.idempotency.models import DedupRecord
from ams.idempotency.store import DedupStore
from ams.observability.logging import get_logger

logger = get_logger(__name__)


class PostgresDedupStore(DedupStore):
    """Dedup records in ``request_dedup``."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def insert_if_absent(self, key: str, fingerprint: str) -> tuple[DedupRecord, bool]:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    INSERT INTO request_dedup (idempotency_key, checksum)
                    VALUES ($1, $2)
                    ON CONFLICT (idempotency_key) DO NOTHING
                    RETURNING idempotency_key, checksum, created_at
                    """,
                    key,
                    fingerprint,
                )
                inserted = row is not None
                if row is None:
                    row = await conn.fetchrow(
                        """
                        SELECT idempotency_key, checksum, created_at
                        FROM request_dedup
                        WHERE idempotency_key = $1
                        """,
                        key,
                    )
        except Exception as e:
            logger.error("postgres_dedup_insert_error", error=str(e))
            raise ConnectionError(f"Failed to record idempotency key: {e}", cause=e) from e

        if row is None:
            raise StoreError(f"Dedup record for {key} vanished after conflict")

        return (
            DedupRecord(
                idempotency_key=row["idempotency_key"],
                fingerprint=row["checksum"],
                created_at=row["created_at"],
            ),
            inserted,
        )
