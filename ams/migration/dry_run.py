"""Dry-run simulation of a migration plan against a configuration snapshot."""

import copy
from typing import Any

from ams.errors import ErrorKind, Failure, is_failure
from ams.migration.models import (
    DiffEntry,
    DryRunResult,
    MigrationStep,
    PatchStep,
    ScriptStep,
)
from ams.migration.patch import apply_patch
from ams.observability.logging import get_logger

logger = get_logger(__name__)

# Remote config fields that always route through the billing proxy
ENDPOINT_FIELDS: tuple[str, ...] = ("model_endpoint", "embedding_endpoint")


def script_warning(step: ScriptStep) -> str:
    return f"Script step executed in dry-run only: {step.description or 'no description'}"


def simulate(
    plan: list[MigrationStep],
    current_config: dict[str, Any],
    endpoint_override: str,
) -> DryRunResult | Failure:
    """Apply ``plan`` to a copy of ``current_config`` and report the changes.

    Patch steps run through the structural patch interpreter. Script steps
    are never executed; each one adds a warning and leaves the working copy
    untouched. After all steps the endpoint fields are forced to
    ``endpoint_override`` and an explicit diff entry records each override.

    The input config is never mutated, and the same inputs always produce
    the same result.

    Returns:
        DryRunResult, or the INVALID_PATCH Failure of the first operation
        that could not be applied.
    """
    working: dict[str, Any] = copy.deepcopy(current_config)
    diff: list[DiffEntry] = []
    warnings: list[str] = []

    for index, step in enumerate(plan):
        if isinstance(step, ScriptStep):
            warnings.append(script_warning(step))
            continue

        if isinstance(step, PatchStep):
            result = apply_patch(working, step.operations)
            if is_failure(result):
                logger.info(
                    "dry_run_patch_failed",
                    step_index=index,
                    reason=result.message,
                )
                result.details["step_index"] = index
                return result
            patched, applied = result
            if not isinstance(patched, dict):
                return Failure.of(
                    ErrorKind.INVALID_PATCH,
                    "Patch must leave the configuration an object",
                    step_index=index,
                )
            working = patched
            diff.extend(applied)

    for field in ENDPOINT_FIELDS:
        working[field] = endpoint_override
        diff.append(DiffEntry(op="set", path=f"/{field}", value=endpoint_override))

    return DryRunResult(updated_config=working, diff=diff, warnings=warnings)
