"""Unit tests for dry-run simulation."""

import copy

from ams.errors import ErrorKind, is_failure
from ams.migration.dry_run import ENDPOINT_FIELDS, simulate
from ams.migration.models import PatchStep, ScriptStep

ENDPOINT = "https://billing.example.com/api/v1/agents/user-1/messages"


def _config() -> dict:
    return {
        "id": "agent-1",
        "model": "openai/gpt-4o-mini",
        "model_endpoint": "https://old",
        "embedding_endpoint": "https://old",
        "tools": ["web_search"],
    }


class TestSimulate:
    """Tests for simulate()."""

    def test_empty_plan_only_overrides_endpoints(self) -> None:
        result = simulate([], _config(), ENDPOINT)

        assert not is_failure(result)
        assert result.updated_config["model_endpoint"] == ENDPOINT
        assert result.updated_config["embedding_endpoint"] == ENDPOINT
        assert [(d.op, d.path) for d in result.diff] == [
            ("set", "/model_endpoint"),
            ("set", "/embedding_endpoint"),
        ]
        assert result.warnings == []

    def test_patch_steps_applied_before_override(self) -> None:
        plan = [
            PatchStep(
                operations=[
                    {"op": "replace", "path": "/model", "value": "openai/gpt-4o"},
                    {"op": "add", "path": "/tools/-", "value": "calculator"},
                ]
            )
        ]

        result = simulate(plan, _config(), ENDPOINT)

        assert result.updated_config["model"] == "openai/gpt-4o"
        assert result.updated_config["tools"] == ["web_search", "calculator"]
        assert [d.path for d in result.diff] == [
            "/model",
            "/tools/-",
            "/model_endpoint",
            "/embedding_endpoint",
        ]

    def test_patch_cannot_escape_endpoint_override(self) -> None:
        plan = [
            PatchStep(
                operations=[{"op": "replace", "path": "/model_endpoint", "value": "https://evil"}]
            )
        ]

        result = simulate(plan, _config(), ENDPOINT)

        assert result.updated_config["model_endpoint"] == ENDPOINT

    def test_script_steps_warn_and_do_not_change_config(self) -> None:
        plan = [ScriptStep(description="rebuild memory"), ScriptStep()]

        result = simulate(plan, _config(), ENDPOINT)

        assert result.warnings == [
            "Script step executed in dry-run only: rebuild memory",
            "Script step executed in dry-run only: no description",
        ]
        expected = {**_config(), **{field: ENDPOINT for field in ENDPOINT_FIELDS}}
        assert result.updated_config == expected

    def test_input_not_mutated(self) -> None:
        config = _config()
        snapshot = copy.deepcopy(config)

        simulate([PatchStep(operations=[{"op": "remove", "path": "/tools"}])], config, ENDPOINT)

        assert config == snapshot

    def test_deterministic(self) -> None:
        plan = [PatchStep(operations=[{"op": "add", "path": "/x", "value": {"n": 1}}])]

        first = simulate(plan, _config(), ENDPOINT)
        second = simulate(plan, _config(), ENDPOINT)

        assert first == second

    def test_invalid_patch_reports_step(self) -> None:
        plan = [
            PatchStep(operations=[{"op": "add", "path": "/a", "value": 1}]),
            PatchStep(operations=[{"op": "remove", "path": "/does/not/exist"}]),
        ]

        result = simulate(plan, _config(), ENDPOINT)

        assert is_failure(result)
        assert result.kind == ErrorKind.INVALID_PATCH
        assert result.details["step_index"] == 1
        assert result.details["operation_index"] == 0

    def test_non_string_pointers_fail_as_invalid_patch(self) -> None:
        plan = [
            PatchStep(operations=[{"op": "move", "from": 5, "path": "/model"}]),
        ]

        result = simulate(plan, _config(), ENDPOINT)

        assert is_failure(result)
        assert result.kind == ErrorKind.INVALID_PATCH
        assert result.details["step_index"] == 0

    def test_replacing_root_with_non_object_fails(self) -> None:
        plan = [PatchStep(operations=[{"op": "replace", "path": "", "value": [1, 2]}])]

        result = simulate(plan, _config(), ENDPOINT)

        assert is_failure(result)
        assert result.kind == ErrorKind.INVALID_PATCH
