"""Instance and owner profile models."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class AgentInstance(BaseModel):
    """A live agent created from a specific template version.

    ``version`` is advanced only by a successful, non-dry-run upgrade.
    """

    agent_id: str
    user_id: str
    template_id: str
    version: str
    variables: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class UserProfile(BaseModel):
    """Owner profile; instance creation records the new agent id here."""

    id: str
    email: str | None = None
    letta_agent_id: str | None = None
    agent_status: str | None = "active"
    name: str | None = None
    created_at: datetime | None = Field(default_factory=utc_now)
    updated_at: datetime | None = Field(default_factory=utc_now)


class CreateInstanceRequest(BaseModel):
    """Create a live agent from a template version."""

    template_id: str = Field(..., min_length=1)
    version: str | None = None
    use_latest: bool = False
    variables: dict[str, Any] = Field(default_factory=dict)
    agent_name: str | None = None


class UpgradeInstanceRequest(BaseModel):
    """Move a live agent to another template version.

    ``use_latest`` defaults to true when no ``target_version`` is given.
    """

    target_version: str | None = None
    use_latest: bool | None = None
    dry_run: bool = True
    use_queue: bool = False

    @property
    def selects_latest(self) -> bool:
        if self.use_latest is None:
            return self.target_version is None
        return self.use_latest


class CreateInstanceResult(BaseModel):
    """The remote agent handle and the checksum of the template it came from."""

    agent: dict[str, Any]
    template_checksum: str
