"""Agent File parsing, validation and remote config construction."""

import hashlib
import json
from typing import Any

import yaml
from pydantic import ValidationError

from ams.agentfile.models import AgentFile, ParsedAgentFile, ValidationReport
from ams.agentfile.semver import is_valid
from ams.errors import ErrorKind, Failure
from ams.observability.logging import get_logger

logger = get_logger(__name__)


def checksum(raw: str) -> str:
    """SHA-256 hex digest of the raw Agent File text."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def parse_agent_file(raw: str) -> ParsedAgentFile | Failure:
    """Parse raw JSON or YAML into an AgentFile.

    JSON is tried first; anything that is not JSON is read as YAML with
    ``yaml.safe_load``. The document must be a mapping.
    """
    if not raw or not raw.strip():
        return Failure.of(ErrorKind.VALIDATION_ERROR, "Empty body")

    fmt = "json"
    try:
        document: Any = json.loads(raw)
    except ValueError:
        fmt = "yaml"
        try:
            document = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            return Failure.of(
                ErrorKind.VALIDATION_ERROR,
                "Invalid Agent File content",
                reason=str(e),
            )

    if not isinstance(document, dict):
        return Failure.of(ErrorKind.VALIDATION_ERROR, "Invalid Agent File content")

    try:
        agent_file = AgentFile.model_validate(document)
    except ValidationError as e:
        return Failure.of(
            ErrorKind.VALIDATION_ERROR,
            "Invalid Agent File content",
            errors=[
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ],
        )

    return ParsedAgentFile(raw=raw, agent_file=agent_file, format=fmt)


def _is_operation(operation: Any) -> bool:
    return (
        isinstance(operation, dict)
        and isinstance(operation.get("op"), str)
        and isinstance(operation.get("path"), str)
    )


def validate_agent_file(agent_file: AgentFile) -> ValidationReport:
    """Check required fields, version syntax and declared migrations."""
    errors: list[str] = []

    if not agent_file.af_version:
        errors.append("af_version is required")
    if not agent_file.template.id:
        errors.append("template.id is required")
    if not agent_file.template.version:
        errors.append("template.version is required")
    if not agent_file.persona.system_prompt:
        errors.append("persona.system_prompt is required")
    if not agent_file.engine.model:
        errors.append("engine.model is required")
    if not agent_file.engine.embedding:
        errors.append("engine.embedding is required")

    version = agent_file.template.version
    if version and not is_valid(version):
        errors.append(f"template.version {version} is not valid SemVer")

    origins: set[str] = set()
    for migration in agent_file.migrations or []:
        if not migration.from_version or not migration.to_version:
            errors.append("Migration entries must include from and to versions")
        elif migration.from_version in origins:
            errors.append(f"Multiple migrations declared from {migration.from_version}")
        else:
            origins.add(migration.from_version)

        for step in migration.steps:
            if step.type == "json_patch":
                if not step.patch:
                    errors.append(f"Migration {migration.label} missing patch")
                elif not isinstance(step.patch, list | dict):
                    errors.append(f"Migration {migration.label} patch must be a list of operations")
                else:
                    operations = [step.patch] if isinstance(step.patch, dict) else step.patch
                    for index, operation in enumerate(operations):
                        if not _is_operation(operation):
                            errors.append(
                                f"Migration {migration.label} patch operation {index} must be "
                                "an object with string op and path"
                            )
            elif step.type == "script":
                if not step.script or not step.script.code:
                    errors.append(f"Migration {migration.label} missing script")
            else:
                errors.append(f"Migration {migration.label} has unknown step type {step.type}")

    return ValidationReport(valid=not errors, errors=errors)


def validate_variables(agent_file: AgentFile, variables: dict[str, Any]) -> Failure | None:
    """Check that every variable the persona requires was supplied."""
    missing = [name for name in agent_file.persona.required_variables if name not in variables]
    if missing:
        return Failure.of(
            ErrorKind.VALIDATION_ERROR,
            f"Missing required variables: {', '.join(missing)}",
            missing=missing,
        )
    return None


def build_agent_config(
    agent_file: AgentFile,
    endpoint: str,
    name: str | None = None,
) -> dict[str, Any]:
    """Build the remote agent config for a new instance.

    Model and embedding traffic both route through ``endpoint``.
    """
    config: dict[str, Any] = {
        "model": agent_file.engine.model,
        "embedding": agent_file.engine.embedding,
        "model_endpoint": endpoint,
        "embedding_endpoint": endpoint,
        "hyperparams": agent_file.engine.hyperparams or {},
        "system_prompt": agent_file.persona.system_prompt,
        "tools": agent_file.tools if agent_file.tools is not None else [],
        "init_messages": agent_file.init_messages if agent_file.init_messages is not None else [],
    }
    if name:
        config["name"] = name
    return config
