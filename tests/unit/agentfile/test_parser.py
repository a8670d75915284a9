"""Unit tests for Agent File parsing and validation."""

import json

import pytest

from ams.agentfile.models import AgentFile
from ams.agentfile.parser import (
    build_agent_config,
    checksum,
    parse_agent_file,
    validate_agent_file,
    validate_variables,
)
from ams.errors import ErrorKind, is_failure
from ams.migration.models import PatchStep, ScriptStep
from tests.factories import AgentFileFactory, patch_migration, script_migration


class TestParseAgentFile:
    """Tests for parse_agent_file."""

    def test_parses_json(self) -> None:
        parsed = parse_agent_file(AgentFileFactory.json())

        assert not is_failure(parsed)
        assert parsed.format == "json"
        assert parsed.agent_file.template.id == "support-bot"

    def test_parses_yaml(self) -> None:
        parsed = parse_agent_file(AgentFileFactory.yaml(version="2.1.0"))

        assert not is_failure(parsed)
        assert parsed.format == "yaml"
        assert parsed.agent_file.template.version == "2.1.0"

    def test_empty_body_fails(self) -> None:
        result = parse_agent_file("   \n")

        assert is_failure(result)
        assert result.kind == ErrorKind.VALIDATION_ERROR
        assert result.message == "Empty body"

    def test_non_mapping_document_fails(self) -> None:
        result = parse_agent_file("- just\n- a list\n")

        assert is_failure(result)
        assert result.message == "Invalid Agent File content"

    def test_malformed_yaml_fails(self) -> None:
        result = parse_agent_file("template: [unclosed")

        assert is_failure(result)
        assert result.kind == ErrorKind.VALIDATION_ERROR

    def test_unknown_fields_preserved(self) -> None:
        raw = json.dumps({**AgentFileFactory.create(), "x_custom": {"a": 1}})
        parsed = parse_agent_file(raw)

        assert parsed.agent_file.model_extra["x_custom"] == {"a": 1}

    def test_checksum_is_sha256_of_raw_text(self) -> None:
        assert len(checksum("abc")) == 64
        assert checksum("abc") != checksum("abd")


class TestValidateAgentFile:
    """Tests for validate_agent_file."""

    def test_valid_document(self) -> None:
        report = validate_agent_file(AgentFile.model_validate(AgentFileFactory.create()))

        assert report.valid
        assert report.errors == []

    def test_missing_required_fields(self) -> None:
        report = validate_agent_file(AgentFile.model_validate({}))

        assert not report.valid
        assert report.errors == [
            "af_version is required",
            "template.id is required",
            "template.version is required",
            "persona.system_prompt is required",
            "engine.model is required",
            "engine.embedding is required",
        ]

    def test_invalid_semver(self) -> None:
        report = validate_agent_file(
            AgentFile.model_validate(AgentFileFactory.create(version="1.0"))
        )

        assert "template.version 1.0 is not valid SemVer" in report.errors

    def test_migration_without_endpoints(self) -> None:
        document = AgentFileFactory.create(migrations=[{"steps": []}])
        report = validate_agent_file(AgentFile.model_validate(document))

        assert "Migration entries must include from and to versions" in report.errors

    def test_patch_step_without_patch(self) -> None:
        document = AgentFileFactory.create(
            migrations=[{"from": "1.0.0", "to": "1.1.0", "steps": [{"type": "json_patch"}]}]
        )
        report = validate_agent_file(AgentFile.model_validate(document))

        assert "Migration 1.0.0->1.1.0 missing patch" in report.errors

    @pytest.mark.parametrize(
        "patch",
        [
            ["not-an-op"],
            [{"op": "add", "path": "/a", "value": 1}, 42],
            [{"op": ["add"], "path": "/a"}],
            {"op": "remove", "path": 7},
        ],
    )
    def test_malformed_patch_operation(self, patch) -> None:
        document = AgentFileFactory.create(
            migrations=[
                {"from": "1.0.0", "to": "1.1.0", "steps": [{"type": "json_patch", "patch": patch}]}
            ]
        )
        report = validate_agent_file(AgentFile.model_validate(document))

        assert not report.valid
        assert any("patch operation" in error for error in report.errors)

    def test_script_step_without_code(self) -> None:
        document = AgentFileFactory.create(
            migrations=[{"from": "1.0.0", "to": "1.1.0", "steps": [{"type": "script"}]}]
        )
        report = validate_agent_file(AgentFile.model_validate(document))

        assert "Migration 1.0.0->1.1.0 missing script" in report.errors

    def test_unknown_step_type(self) -> None:
        document = AgentFileFactory.create(
            migrations=[{"from": "1.0.0", "to": "1.1.0", "steps": [{"type": "sql"}]}]
        )
        report = validate_agent_file(AgentFile.model_validate(document))

        assert "Migration 1.0.0->1.1.0 has unknown step type sql" in report.errors

    def test_two_migrations_from_same_version(self) -> None:
        document = AgentFileFactory.create(
            migrations=[
                patch_migration("1.0.0", "1.1.0", {"op": "add", "path": "/a", "value": 1}),
                patch_migration("1.0.0", "1.2.0", {"op": "add", "path": "/b", "value": 2}),
            ]
        )
        report = validate_agent_file(AgentFile.model_validate(document))

        assert "Multiple migrations declared from 1.0.0" in report.errors


class TestMigrationEdges:
    def test_steps_normalised(self) -> None:
        document = AgentFileFactory.create(
            migrations=[
                patch_migration("1.0.0", "1.1.0", {"op": "add", "path": "/a", "value": 1}),
                script_migration("1.1.0", "1.2.0", description="rename memory blocks"),
            ]
        )
        edges = AgentFile.model_validate(document).migration_edges()

        assert [(e.from_version, e.to_version) for e in edges] == [
            ("1.0.0", "1.1.0"),
            ("1.1.0", "1.2.0"),
        ]
        assert isinstance(edges[0].steps[0], PatchStep)
        assert edges[0].steps[0].operations == [{"op": "add", "path": "/a", "value": 1}]
        assert isinstance(edges[1].steps[0], ScriptStep)
        assert edges[1].steps[0].description == "rename memory blocks"

    def test_single_operation_patch_wrapped(self) -> None:
        document = AgentFileFactory.create(
            migrations=[
                {
                    "from": "1.0.0",
                    "to": "1.1.0",
                    "steps": [{"type": "json_patch", "patch": {"op": "remove", "path": "/a"}}],
                }
            ]
        )
        edge = AgentFile.model_validate(document).migration_edges()[0]

        assert edge.steps[0].operations == [{"op": "remove", "path": "/a"}]


class TestVariablesAndConfig:
    def test_missing_required_variables(self) -> None:
        agent_file = AgentFile.model_validate(
            AgentFileFactory.create(required_variables=["company", "region"])
        )
        result = validate_variables(agent_file, {"company": "Acme"})

        assert is_failure(result)
        assert result.message == "Missing required variables: region"
        assert result.details["missing"] == ["region"]

    def test_all_variables_present(self) -> None:
        agent_file = AgentFile.model_validate(
            AgentFileFactory.create(required_variables=["company"])
        )

        assert validate_variables(agent_file, {"company": "Acme"}) is None

    def test_build_agent_config_routes_through_endpoint(self) -> None:
        agent_file = AgentFile.model_validate(AgentFileFactory.create())
        config = build_agent_config(agent_file, "https://proxy/u1", name="helper")

        assert config["model"] == "openai/gpt-4o-mini"
        assert config["model_endpoint"] == "https://proxy/u1"
        assert config["embedding_endpoint"] == "https://proxy/u1"
        assert config["tools"] == ["web_search"]
        assert config["name"] == "helper"
