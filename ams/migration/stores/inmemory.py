"""In-memory implementation of MigrationAttemptStore."""

from ams.migration.models import MigrationAttempt
from ams.migration.store import MigrationAttemptStore


class InMemoryMigrationAttemptStore(MigrationAttemptStore):
    """In-memory audit log for testing and development."""

    def __init__(self) -> None:
        self._attempts: list[MigrationAttempt] = []

    async def record(self, attempt: MigrationAttempt) -> None:
        self._attempts.append(attempt)

    async def list_for_agent(
        self,
        agent_id: str,
        *,
        limit: int = 50,
    ) -> list[MigrationAttempt]:
        results = [a for a in self._attempts if a.agent_id == agent_id]
        results.sort(key=lambda a: a.created_at, reverse=True)
        return results[:limit]
