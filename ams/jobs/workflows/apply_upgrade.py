"""Apply queued upgrade workflow.

Consumes jobs enqueued by the dispatcher and applies each one through the
dispatcher's synchronous path. A job whose instance has moved on from the
job's ``from_version`` is skipped without writing anything. Pushing the
same target config twice is harmless, so a job retried after a visibility
timeout is safe to re-run.
"""

from dataclasses import dataclass, field

from ams.errors import is_failure
from ams.instances.store import InstanceStore
from ams.jobs.queue import QueuedJob, UpgradeJob, UpgradeQueue
from ams.migration.dispatcher import DispatchRequest, UpgradeDispatcher
from ams.migration.models import DryRunResult
from ams.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ApplyUpgradeOutput:
    """Output from applying one queued upgrade."""

    agent_id: str
    status: str  # applied | skipped | failed
    to_version: str
    error: str | None = None


@dataclass
class DrainQueueOutput:
    """Output from draining one batch of the queue."""

    processed: int = 0
    applied: int = 0
    skipped: int = 0
    failed: int = 0
    results: list[ApplyUpgradeOutput] = field(default_factory=list)


class ApplyQueuedUpgradeWorkflow:
    """Workflow that applies deferred upgrades."""

    WORKFLOW_NAME = "apply-queued-upgrade"

    def __init__(
        self,
        instance_store: InstanceStore,
        dispatcher: UpgradeDispatcher,
    ) -> None:
        self._instances = instance_store
        self._dispatcher = dispatcher

    async def run(self, job: UpgradeJob) -> ApplyUpgradeOutput:
        """Apply a single job.

        Args:
            job: Queued upgrade carrying the precomputed config

        Returns:
            ApplyUpgradeOutput with status applied, skipped or failed
        """
        instance = await self._instances.get(job.agent_id)
        if instance is None:
            logger.warning("queued_upgrade_instance_missing", agent_id=job.agent_id)
            return ApplyUpgradeOutput(
                agent_id=job.agent_id,
                status="skipped",
                to_version=job.to_version,
                error="Instance not found",
            )

        if instance.version != job.from_version:
            logger.info(
                "queued_upgrade_stale",
                agent_id=job.agent_id,
                expected_version=job.from_version,
                actual_version=instance.version,
            )
            return ApplyUpgradeOutput(
                agent_id=job.agent_id,
                status="skipped",
                to_version=job.to_version,
                error=f"Instance is at {instance.version}, expected {job.from_version}",
            )

        outcome = await self._dispatcher.dispatch(
            DispatchRequest(
                instance=instance,
                to_version=job.to_version,
                plan=job.plan,
                result=DryRunResult(updated_config=job.config, diff=job.diff),
                dry_run=False,
                use_queue=False,
            )
        )
        if is_failure(outcome):
            return ApplyUpgradeOutput(
                agent_id=job.agent_id,
                status="failed",
                to_version=job.to_version,
                error=outcome.message,
            )

        return ApplyUpgradeOutput(
            agent_id=job.agent_id,
            status="applied",
            to_version=job.to_version,
        )

    async def drain(self, queue: UpgradeQueue, limit: int | None = None) -> DrainQueueOutput:
        """Read one batch from ``queue`` and run every job in it.

        Applied and skipped jobs are acked. Failed jobs are left in flight so
        they become visible again after the visibility timeout.
        """
        output = DrainQueueOutput()
        batch: list[QueuedJob] = await queue.read(limit)

        for queued in batch:
            result = await self.run(queued.job)
            output.processed += 1
            output.results.append(result)

            if result.status == "failed":
                output.failed += 1
                continue

            if result.status == "applied":
                output.applied += 1
            else:
                output.skipped += 1
            await queue.ack(queued.job_id)

        logger.info(
            "upgrade_queue_drained",
            processed=output.processed,
            applied=output.applied,
            skipped=output.skipped,
            failed=output.failed,
        )
        return output
