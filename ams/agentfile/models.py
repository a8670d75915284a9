"""Agent File document models.

Agent Files are authored as JSON or YAML. Fields are optional at the model
level so that missing values surface as validation report entries rather
than parse errors.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ams.migration.models import MigrationEdge, MigrationStep, PatchStep, ScriptStep

_DOCUMENT_CONFIG = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class TemplateInfo(BaseModel):
    model_config = _DOCUMENT_CONFIG

    id: str | None = None
    name: str | None = None
    version: str | None = None
    description: str | None = None


class CompatInfo(BaseModel):
    """Runtime compatibility hints. Informational only."""

    model_config = _DOCUMENT_CONFIG

    letta_min: str | None = None
    models: list[str] | None = None
    embeddings: list[str] | None = None
    mcp: list[str] | None = None


class EngineInfo(BaseModel):
    model_config = _DOCUMENT_CONFIG

    model: str | None = None
    embedding: str | None = None
    hyperparams: dict[str, Any] | None = None


class PersonaInfo(BaseModel):
    model_config = _DOCUMENT_CONFIG

    system_prompt: str | None = None
    variables_schema: dict[str, Any] | None = None

    @property
    def required_variables(self) -> list[str]:
        required = (self.variables_schema or {}).get("required") or []
        return [str(name) for name in required]


class ScriptSpec(BaseModel):
    model_config = _DOCUMENT_CONFIG

    language: str = "js"
    code: str | None = None


class MigrationStepSpec(BaseModel):
    """A migration step as written in an Agent File."""

    model_config = _DOCUMENT_CONFIG

    type: str
    description: str | None = None
    patch: Any = None
    script: ScriptSpec | None = None

    def to_step(self) -> MigrationStep:
        """Normalise into the tagged step used by the planner."""
        if self.type == "script":
            descriptor = self.script.model_dump() if self.script else {}
            return ScriptStep(descriptor=descriptor, description=self.description)
        operations = self.patch or []
        if isinstance(operations, dict):
            operations = [operations]
        return PatchStep(operations=list(operations), description=self.description)


class MigrationSpec(BaseModel):
    """A declared migration between two template versions."""

    model_config = ConfigDict(
        extra="allow",
        coerce_numbers_to_str=True,
        populate_by_name=True,
    )

    from_version: str | None = Field(default=None, alias="from")
    to_version: str | None = Field(default=None, alias="to")
    steps: list[MigrationStepSpec] = Field(default_factory=list)

    @property
    def label(self) -> str:
        return f"{self.from_version}->{self.to_version}"

    def to_edge(self) -> MigrationEdge:
        return MigrationEdge(
            from_version=self.from_version or "",
            to_version=self.to_version or "",
            steps=[step.to_step() for step in self.steps],
        )


class AgentFile(BaseModel):
    """A parsed Agent File."""

    model_config = _DOCUMENT_CONFIG

    af_version: str | None = None
    template: TemplateInfo = Field(default_factory=TemplateInfo)
    compat: CompatInfo | None = None
    engine: EngineInfo = Field(default_factory=EngineInfo)
    persona: PersonaInfo = Field(default_factory=PersonaInfo)
    memory_layout: Any = None
    tools: Any = None
    init_messages: Any = None
    migrations: list[MigrationSpec] | None = None

    def migration_edges(self) -> list[MigrationEdge]:
        return [spec.to_edge() for spec in self.migrations or []]


class ParsedAgentFile(BaseModel):
    """Raw content together with its parsed document and source format."""

    raw: str
    agent_file: AgentFile
    format: Literal["json", "yaml"]


class ValidationReport(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
