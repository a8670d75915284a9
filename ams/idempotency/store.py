"""DedupStore abstract interface."""

from abc import ABC, abstractmethod

from ams.idempotency.models import DedupRecord


class DedupStore(ABC):
    """Storage for first-use records of idempotency keys."""

    @abstractmethod
    async def insert_if_absent(self, key: str, fingerprint: str) -> tuple[DedupRecord, bool]:
        """Atomically record ``key`` unless it already exists.

        Returns:
            The stored record and whether this call created it. Of several
            concurrent calls with one fresh key, exactly one gets True.
        """
        pass
