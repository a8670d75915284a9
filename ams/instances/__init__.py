"""Live agent instances: models, stores, remote API and orchestration."""

from ams.instances.client import (
    InMemoryInstanceAPI,
    InstanceAPI,
    LettaInstanceAPI,
    UpstreamError,
)
from ams.instances.models import (
    AgentInstance,
    CreateInstanceRequest,
    CreateInstanceResult,
    UpgradeInstanceRequest,
    UserProfile,
)
from ams.instances.store import InstanceStore, ProfileStore

__all__ = [
    "AgentInstance",
    "CreateInstanceRequest",
    "CreateInstanceResult",
    "InMemoryInstanceAPI",
    "InstanceAPI",
    "InstanceStore",
    "LettaInstanceAPI",
    "ProfileStore",
    "UpgradeInstanceRequest",
    "UpstreamError",
    "UserProfile",
]
