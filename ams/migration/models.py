"""Migration models: steps, edges, the version graph, diffs and audit records."""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from ams.errors import ErrorKind, Failure


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class AttemptStatus(str, Enum):
    """Final status of one planning/apply cycle."""

    DRY_RUN = "dry_run"
    APPLIED = "applied"
    QUEUED = "queued"
    FAILED = "failed"


class PatchStep(BaseModel):
    """Structural patch applied to the instance configuration."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["patch"] = "patch"
    operations: list[dict[str, Any]] = Field(default_factory=list)
    description: str | None = None


class ScriptStep(BaseModel):
    """Opaque script descriptor. Never executed; surfaced as a dry-run warning."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["script"] = "script"
    descriptor: dict[str, Any] = Field(default_factory=dict)
    description: str | None = None


MigrationStep = Annotated[PatchStep | ScriptStep, Field(discriminator="kind")]


class MigrationEdge(BaseModel):
    """A declared transformation from one template version to another."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_version: str = Field(..., alias="from")
    to_version: str = Field(..., alias="to")
    steps: list[MigrationStep] = Field(default_factory=list)


class MigrationGraph:
    """Migration edges keyed by origin version.

    A template may declare at most one outgoing edge per version, so a
    planner lookup is a single dict access.
    """

    def __init__(self, edges: dict[str, MigrationEdge] | None = None) -> None:
        self._edges: dict[str, MigrationEdge] = dict(edges or {})

    @classmethod
    def from_edges(cls, edges: list[MigrationEdge]) -> "MigrationGraph | Failure":
        """Build a graph, rejecting two edges that share an origin."""
        by_origin: dict[str, MigrationEdge] = {}
        for edge in edges:
            if edge.from_version in by_origin:
                return Failure.of(
                    ErrorKind.VALIDATION_ERROR,
                    f"Multiple migrations declared from {edge.from_version}",
                    from_version=edge.from_version,
                )
            by_origin[edge.from_version] = edge
        return cls(by_origin)

    def outgoing(self, version: str) -> MigrationEdge | None:
        return self._edges.get(version)

    def __len__(self) -> int:
        return len(self._edges)

    def __contains__(self, version: object) -> bool:
        return version in self._edges


class DiffEntry(BaseModel):
    """One change applied during a dry-run, suitable for display."""

    model_config = ConfigDict(populate_by_name=True)

    op: str
    path: str
    value: Any = None
    from_path: str | None = Field(default=None, alias="from")

    def to_display(self) -> dict[str, Any]:
        exclude = {"value"} if self.op in ("remove", "move") else set()
        if self.from_path is None:
            exclude.add("from_path")
        return self.model_dump(by_alias=True, exclude=exclude, mode="json")


class DryRunResult(BaseModel):
    """Outcome of simulating a plan against a configuration snapshot."""

    updated_config: dict[str, Any]
    diff: list[DiffEntry] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class MigrationAttempt(BaseModel):
    """Append-only audit record of one planning/apply cycle."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    agent_id: str
    from_version: str
    to_version: str
    dry_run: bool
    plan: list[MigrationStep] = Field(default_factory=list)
    diff: list[DiffEntry] = Field(default_factory=list)
    status: AttemptStatus
    error: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
