"""Background upgrade jobs.

Deferred upgrades are enqueued by the dispatcher and applied by
``ApplyQueuedUpgradeWorkflow`` (see ``ams.jobs.workflows``).

Usage:
    from ams.jobs import InMemoryUpgradeQueue, PgmqUpgradeQueue

    queue = PgmqUpgradeQueue.from_config(pool, settings.queue)
"""

from ams.jobs.queue import (
    InMemoryUpgradeQueue,
    PgmqUpgradeQueue,
    QueuedJob,
    UpgradeJob,
    UpgradeQueue,
)

__all__ = [
    "InMemoryUpgradeQueue",
    "PgmqUpgradeQueue",
    "QueuedJob",
    "UpgradeJob",
    "UpgradeQueue",
]
