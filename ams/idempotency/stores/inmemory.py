"""In-memory implementation of DedupStore."""

import asyncio

from ams.idempotency.models import DedupRecord
from ams.idempotency.store import DedupStore


class InMemoryDedupStore(DedupStore):
    """In-memory dedup records for testing and development."""

    def __init__(self) -> None:
        self._records: dict[str, DedupRecord] = {}
        self._lock = asyncio.Lock()

    async def insert_if_absent(self, key: str, fingerprint: str) -> tuple[DedupRecord, bool]:
        async with self._lock:
            candidate = DedupRecord(idempotency_key=key, fingerprint=fingerprint)
            stored = self._records.setdefault(key, candidate)
            return stored, stored is candidate
