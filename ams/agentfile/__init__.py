"""Agent File documents: models, parsing, validation and SemVer rules.

Usage:
    from ams.agentfile import parse_agent_file, validate_agent_file

    parsed = parse_agent_file(raw)
    if not is_failure(parsed):
        report = validate_agent_file(parsed.agent_file)
"""

from ams.agentfile.models import (
    AgentFile,
    MigrationSpec,
    MigrationStepSpec,
    ParsedAgentFile,
    ValidationReport,
)
from ams.agentfile.parser import (
    build_agent_config,
    checksum,
    parse_agent_file,
    validate_agent_file,
    validate_variables,
)
from ams.agentfile.semver import SemVer, SemverAssessment, assess

__all__ = [
    "AgentFile",
    "MigrationSpec",
    "MigrationStepSpec",
    "ParsedAgentFile",
    "SemVer",
    "SemverAssessment",
    "ValidationReport",
    "assess",
    "build_agent_config",
    "checksum",
    "parse_agent_file",
    "validate_agent_file",
    "validate_variables",
]
