"""Migration path planning over a template's declared migration edges."""

from ams.errors import ErrorKind, Failure
from ams.migration.models import MigrationGraph, MigrationStep
from ams.observability.logging import get_logger

logger = get_logger(__name__)


def plan(
    from_version: str,
    to_version: str,
    graph: MigrationGraph,
) -> list[MigrationStep] | Failure:
    """Compute the ordered steps that move an instance between versions.

    Walks the single outgoing edge of each version starting at
    ``from_version`` and concatenates step lists until ``to_version`` is
    reached. ``from_version == to_version`` is a no-op upgrade and always
    yields an empty plan. The walk never searches for alternate paths.

    Returns:
        Ordered steps, or a Failure of kind CIRCULAR_PATH when a version
        is revisited before reaching the target, or NO_PATH when a version
        on the way has no outgoing edge.
    """
    steps: list[MigrationStep] = []
    visited: set[str] = set()
    current = from_version

    while current != to_version:
        if current in visited:
            logger.warning(
                "migration_plan_circular",
                from_version=from_version,
                to_version=to_version,
                revisited=current,
            )
            return Failure.of(
                ErrorKind.CIRCULAR_PATH,
                "Circular migration plan detected",
                from_version=from_version,
                to_version=to_version,
                revisited=current,
            )
        visited.add(current)

        edge = graph.outgoing(current)
        if edge is None:
            return Failure.of(
                ErrorKind.NO_PATH,
                f"No migration step found from {current} towards {to_version}",
                from_version=from_version,
                to_version=to_version,
                stuck_at=current,
            )

        steps.extend(edge.steps)
        current = edge.to_version

    logger.debug(
        "migration_plan_computed",
        from_version=from_version,
        to_version=to_version,
        hops=len(visited),
        steps=len(steps),
    )
    return steps
