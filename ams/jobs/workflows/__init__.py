"""Upgrade job workflows."""

from ams.jobs.workflows.apply_upgrade import (
    ApplyQueuedUpgradeWorkflow,
    ApplyUpgradeOutput,
    DrainQueueOutput,
)

__all__ = [
    "ApplyQueuedUpgradeWorkflow",
    "ApplyUpgradeOutput",
    "DrainQueueOutput",
]
