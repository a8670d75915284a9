"""InstanceStore and ProfileStore abstract interfaces."""

from abc import ABC, abstractmethod

from ams.instances.models import AgentInstance, UserProfile


class InstanceStore(ABC):
    """Persistence for live agent instances."""

    @abstractmethod
    async def get(self, agent_id: str) -> AgentInstance | None:
        """Get an instance by remote agent id."""
        pass

    @abstractmethod
    async def save(self, instance: AgentInstance) -> None:
        """Insert or replace an instance record."""
        pass

    @abstractmethod
    async def update_version(self, agent_id: str, version: str) -> None:
        """Advance the stored template version of an instance."""
        pass


class ProfileStore(ABC):
    """Persistence for owner profiles."""

    @abstractmethod
    async def get(self, user_id: str) -> UserProfile | None:
        pass

    @abstractmethod
    async def link_agent(self, user_id: str, agent_id: str) -> None:
        """Record ``agent_id`` on the owner's profile, creating it if absent."""
        pass
