"""Upgrade dispatch: record a dry-run, enqueue, or apply synchronously.

Every call writes exactly one MigrationAttempt. Audit writes are
best-effort; a store failure there is logged and never changes the
outcome returned to the caller.
"""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from ams.db.errors import StoreError
from ams.errors import ErrorKind, Failure
from ams.instances.client import InstanceAPI, UpstreamError
from ams.instances.models import AgentInstance
from ams.instances.store import InstanceStore
from ams.jobs.queue import UpgradeJob, UpgradeQueue
from ams.migration.models import (
    AttemptStatus,
    DiffEntry,
    DryRunResult,
    MigrationAttempt,
    MigrationStep,
)
from ams.migration.store import MigrationAttemptStore
from ams.observability.logging import get_logger
from ams.observability.metrics import UPGRADE_ATTEMPTS, UPGRADE_PLAN_STEPS

logger = get_logger(__name__)


class DispatchRequest(BaseModel):
    """Everything the dispatcher needs to finish one upgrade."""

    instance: AgentInstance
    to_version: str
    plan: list[MigrationStep] = Field(default_factory=list)
    result: DryRunResult
    dry_run: bool = True
    use_queue: bool = False


class DispatchOutcome(BaseModel):
    """What happened to an upgrade request."""

    status: AttemptStatus
    attempt_id: UUID
    agent_id: str
    from_version: str
    to_version: str
    plan: list[MigrationStep] = Field(default_factory=list)
    diff: list[DiffEntry] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    job_id: str | None = None
    agent: dict[str, Any] | None = None


class UpgradeDispatcher:
    """Decides the final action for a planned upgrade and audits it."""

    def __init__(
        self,
        instance_store: InstanceStore,
        attempt_store: MigrationAttemptStore,
        instance_api: InstanceAPI,
        queue: UpgradeQueue | None = None,
    ) -> None:
        self._instances = instance_store
        self._attempts = attempt_store
        self._api = instance_api
        self._queue = queue

    async def dispatch(self, request: DispatchRequest) -> DispatchOutcome | Failure:
        """Finish an upgrade according to its flags.

        - ``dry_run``: audit only, no instance mutation.
        - ``use_queue``: enqueue the precomputed config and return the job id.
        - otherwise: push the config to the remote API, then advance the
          stored version. An upstream failure is audited as ``failed`` and
          leaves the version untouched.
        """
        instance = request.instance
        UPGRADE_PLAN_STEPS.observe(len(request.plan))

        if request.dry_run:
            attempt = await self._record(request, AttemptStatus.DRY_RUN)
            return self._outcome(request, attempt)

        if request.use_queue:
            if self._queue is None:
                return Failure.of(
                    ErrorKind.VALIDATION_ERROR,
                    "Upgrade queue is not configured",
                    agent_id=instance.agent_id,
                )
            job_id = await self._queue.enqueue(
                UpgradeJob(
                    agent_id=instance.agent_id,
                    user_id=instance.user_id,
                    from_version=instance.version,
                    to_version=request.to_version,
                    plan=request.plan,
                    config=request.result.updated_config,
                    diff=request.result.diff,
                )
            )
            attempt = await self._record(request, AttemptStatus.QUEUED)
            return self._outcome(request, attempt, job_id=job_id)

        try:
            agent = await self._api.update(instance.agent_id, request.result.updated_config)
        except UpstreamError as e:
            logger.warning(
                "upgrade_apply_failed",
                agent_id=instance.agent_id,
                from_version=instance.version,
                to_version=request.to_version,
                status=e.status,
                error=e.message,
            )
            await self._record(request, AttemptStatus.FAILED, error=e.message)
            return e.to_failure()

        await self._instances.update_version(instance.agent_id, request.to_version)
        attempt = await self._record(request, AttemptStatus.APPLIED)
        logger.info(
            "upgrade_applied",
            agent_id=instance.agent_id,
            from_version=instance.version,
            to_version=request.to_version,
        )
        return self._outcome(request, attempt, agent=agent)

    async def _record(
        self,
        request: DispatchRequest,
        status: AttemptStatus,
        error: str | None = None,
    ) -> MigrationAttempt:
        attempt = MigrationAttempt(
            agent_id=request.instance.agent_id,
            from_version=request.instance.version,
            to_version=request.to_version,
            dry_run=request.dry_run,
            plan=request.plan,
            diff=request.result.diff,
            status=status,
            error=error,
        )
        UPGRADE_ATTEMPTS.labels(status=status.value).inc()
        try:
            await self._attempts.record(attempt)
        except StoreError as e:
            logger.error(
                "migration_audit_write_failed",
                agent_id=attempt.agent_id,
                status=status.value,
                error=str(e),
            )
        return attempt

    @staticmethod
    def _outcome(
        request: DispatchRequest,
        attempt: MigrationAttempt,
        *,
        job_id: str | None = None,
        agent: dict[str, Any] | None = None,
    ) -> DispatchOutcome:
        return DispatchOutcome(
            status=attempt.status,
            attempt_id=attempt.id,
            agent_id=attempt.agent_id,
            from_version=attempt.from_version,
            to_version=attempt.to_version,
            plan=request.plan,
            diff=request.result.diff,
            warnings=request.result.warnings,
            job_id=job_id,
            agent=agent,
        )
