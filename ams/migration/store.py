"""MigrationAttemptStore abstract interface."""

from abc import ABC, abstractmethod

from ams.migration.models import MigrationAttempt


class MigrationAttemptStore(ABC):
    """Append-only audit log of migration attempts."""

    @abstractmethod
    async def record(self, attempt: MigrationAttempt) -> None:
        """Persist an attempt. Records are never updated afterwards."""
        pass

    @abstractmethod
    async def list_for_agent(
        self,
        agent_id: str,
        *,
        limit: int = 50,
    ) -> list[MigrationAttempt]:
        """List attempts for an instance, most recent first."""
        pass
