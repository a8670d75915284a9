"""Migration planning, dry-run simulation and upgrade dispatch.

Usage:
    from ams.migration import plan, simulate

    steps = plan("1.0.0", "1.1.0", graph)
    if not is_failure(steps):
        result = simulate(steps, current_config, endpoint)
"""

from ams.migration.dry_run import simulate
from ams.migration.models import (
    AttemptStatus,
    DiffEntry,
    DryRunResult,
    MigrationAttempt,
    MigrationEdge,
    MigrationGraph,
    MigrationStep,
    PatchStep,
    ScriptStep,
)
from ams.migration.planner import plan
from ams.migration.store import MigrationAttemptStore

__all__ = [
    "AttemptStatus",
    "DiffEntry",
    "DryRunResult",
    "MigrationAttempt",
    "MigrationAttemptStore",
    "MigrationEdge",
    "MigrationGraph",
    "MigrationStep",
    "PatchStep",
    "ScriptStep",
    "plan",
    "simulate",
]
