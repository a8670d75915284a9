"""Agent endpoint request and response models."""

from typing import Any

from pydantic import BaseModel, Field

from ams.instances.models import (
    CreateInstanceRequest,
    CreateInstanceResult,
    UpgradeInstanceRequest,
    UserProfile,
)
from ams.migration.dispatcher import DispatchOutcome
from ams.migration.models import AttemptStatus


class CreateAgentRequest(CreateInstanceRequest):
    """Request body for creating an agent from a template."""


class CreateAgentResponse(CreateInstanceResult):
    """Created remote agent and the checksum of its template version."""


class UpgradeAgentRequest(UpgradeInstanceRequest):
    """Request body for upgrading an agent. Dry-run by default."""


class UpgradeAgentResponse(BaseModel):
    """Result of an upgrade request."""

    status: AttemptStatus
    dry_run: bool
    queued: bool = False
    job_id: str | None = None
    attempt_id: str
    agent_id: str
    from_version: str
    to_version: str
    plan: list[dict[str, Any]] = Field(default_factory=list)
    diff: list[dict[str, Any]] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    agent: dict[str, Any] | None = None

    @classmethod
    def from_outcome(cls, outcome: DispatchOutcome) -> "UpgradeAgentResponse":
        return cls(
            status=outcome.status,
            dry_run=outcome.status == AttemptStatus.DRY_RUN,
            queued=outcome.status == AttemptStatus.QUEUED,
            job_id=outcome.job_id,
            attempt_id=str(outcome.attempt_id),
            agent_id=outcome.agent_id,
            from_version=outcome.from_version,
            to_version=outcome.to_version,
            plan=[step.model_dump(mode="json") for step in outcome.plan],
            diff=[entry.to_display() for entry in outcome.diff],
            warnings=outcome.warnings,
            agent=outcome.agent,
        )


class ProfileResponse(BaseModel):
    profile: UserProfile | None = None
