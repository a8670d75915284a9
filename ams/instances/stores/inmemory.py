"""In-memory implementations of InstanceStore and ProfileStore."""

from ams.db.errors import NotFoundError
from ams.instances.models import AgentInstance, UserProfile, utc_now
from ams.instances.store import InstanceStore, ProfileStore


class InMemoryInstanceStore(InstanceStore):
    """In-memory implementation of InstanceStore for testing and development."""

    def __init__(self) -> None:
        self._instances: dict[str, AgentInstance] = {}

    async def get(self, agent_id: str) -> AgentInstance | None:
        return self._instances.get(agent_id)

    async def save(self, instance: AgentInstance) -> None:
        self._instances[instance.agent_id] = instance

    async def update_version(self, agent_id: str, version: str) -> None:
        instance = self._instances.get(agent_id)
        if instance is None:
            raise NotFoundError(f"Instance {agent_id} not found")
        self._instances[agent_id] = instance.model_copy(
            update={"version": version, "updated_at": utc_now()}
        )


class InMemoryProfileStore(ProfileStore):
    """In-memory implementation of ProfileStore for testing and development."""

    def __init__(self) -> None:
        self._profiles: dict[str, UserProfile] = {}

    async def get(self, user_id: str) -> UserProfile | None:
        return self._profiles.get(user_id)

    async def link_agent(self, user_id: str, agent_id: str) -> None:
        existing = self._profiles.get(user_id)
        if existing is None:
            self._profiles[user_id] = UserProfile(id=user_id, letta_agent_id=agent_id)
        else:
            self._profiles[user_id] = existing.model_copy(
                update={"letta_agent_id": agent_id, "updated_at": utc_now()}
            )
