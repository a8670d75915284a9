"""Unit tests for the structural patch interpreter."""

import pytest

from ams.errors import ErrorKind, is_failure
from ams.migration.patch import PatchError, apply_patch, parse_pointer, resolve


class TestPointer:
    def test_root(self) -> None:
        assert parse_pointer("") == []

    def test_escapes(self) -> None:
        assert parse_pointer("/a~1b/c~0d") == ["a/b", "c~d"]

    def test_must_start_with_slash(self) -> None:
        with pytest.raises(PatchError):
            parse_pointer("a/b")

    def test_resolve_nested(self) -> None:
        assert resolve({"a": [{"b": 3}]}, "/a/0/b") == 3

    def test_resolve_missing(self) -> None:
        with pytest.raises(PatchError):
            resolve({"a": {}}, "/a/b")


class TestApplyPatch:
    """Tests for apply_patch."""

    def test_add_member(self) -> None:
        doc, diff = apply_patch({"a": 1}, [{"op": "add", "path": "/b", "value": 2}])

        assert doc == {"a": 1, "b": 2}
        assert [(d.op, d.path, d.value) for d in diff] == [("add", "/b", 2)]

    def test_add_appends_to_array(self) -> None:
        doc, _ = apply_patch({"tools": ["a"]}, [{"op": "add", "path": "/tools/-", "value": "b"}])

        assert doc == {"tools": ["a", "b"]}

    def test_add_inserts_into_array(self) -> None:
        doc, _ = apply_patch({"l": [1, 3]}, [{"op": "add", "path": "/l/1", "value": 2}])

        assert doc == {"l": [1, 2, 3]}

    def test_remove(self) -> None:
        doc, diff = apply_patch({"a": 1, "b": 2}, [{"op": "remove", "path": "/a"}])

        assert doc == {"b": 2}
        assert diff[0].op == "remove"

    def test_replace(self) -> None:
        doc, _ = apply_patch(
            {"engine": {"model": "x"}},
            [{"op": "replace", "path": "/engine/model", "value": "y"}],
        )

        assert doc == {"engine": {"model": "y"}}

    def test_move(self) -> None:
        doc, diff = apply_patch({"a": {"x": 1}}, [{"op": "move", "from": "/a/x", "path": "/y"}])

        assert doc == {"a": {}, "y": 1}
        assert diff[0].from_path == "/a/x"

    def test_copy(self) -> None:
        doc, _ = apply_patch({"a": [1]}, [{"op": "copy", "from": "/a", "path": "/b"}])

        assert doc == {"a": [1], "b": [1]}
        doc["b"].append(2)
        assert doc["a"] == [1]

    def test_test_op_passes_without_diff(self) -> None:
        doc, diff = apply_patch({"a": 1}, [{"op": "test", "path": "/a", "value": 1}])

        assert doc == {"a": 1}
        assert diff == []

    @pytest.mark.parametrize(
        ("actual", "expected"),
        [
            (1, True),
            (0, False),
            ([1], [True]),
            ({"flag": True}, {"flag": 1}),
        ],
    )
    def test_test_op_distinguishes_booleans_from_numbers(self, actual, expected) -> None:
        result = apply_patch({"a": actual}, [{"op": "test", "path": "/a", "value": expected}])

        assert is_failure(result)
        assert result.kind == ErrorKind.INVALID_PATCH

    def test_test_op_compares_containers(self) -> None:
        doc, _ = apply_patch(
            {"a": {"tools": ["x", 1.0], "on": False}},
            [{"op": "test", "path": "/a", "value": {"on": False, "tools": ["x", 1]}}],
        )

        assert doc == {"a": {"tools": ["x", 1.0], "on": False}}

    def test_operations_apply_in_order(self) -> None:
        doc, diff = apply_patch(
            {},
            [
                {"op": "add", "path": "/a", "value": {}},
                {"op": "add", "path": "/a/b", "value": 1},
                {"op": "replace", "path": "/a/b", "value": 2},
            ],
        )

        assert doc == {"a": {"b": 2}}
        assert len(diff) == 3

    def test_input_not_mutated(self) -> None:
        original = {"a": {"b": 1}}

        apply_patch(original, [{"op": "replace", "path": "/a/b", "value": 2}])

        assert original == {"a": {"b": 1}}

    @pytest.mark.parametrize(
        "operation",
        [
            {"op": "remove", "path": "/missing"},
            {"op": "replace", "path": "/missing", "value": 1},
            {"op": "add", "path": "/missing/child", "value": 1},
            {"op": "add", "path": "/l/5", "value": 1},
            {"op": "add", "path": "/l/01", "value": 1},
            {"op": "test", "path": "/a", "value": 2},
            {"op": "move", "from": "/a", "path": "/a/b"},
            {"op": "copy", "path": "/b"},
            {"op": "add", "path": "/b"},
            {"op": "frobnicate", "path": "/a"},
            {"path": "/a"},
            {"op": ["add"], "path": "/b", "value": 1},
            {"op": "add", "path": 7, "value": 1},
            {"op": "move", "from": 5, "path": "/b"},
            {"op": "move", "from": "/a", "path": 7},
            {"op": "copy", "from": ["/a"], "path": "/b"},
            {"op": "add", "path": "/l/\u0660", "value": 1},
        ],
    )
    def test_invalid_operations_fail(self, operation: dict) -> None:
        result = apply_patch({"a": 1, "l": []}, [operation])

        assert is_failure(result)
        assert result.kind == ErrorKind.INVALID_PATCH
        assert result.details["operation_index"] == 0

    def test_failure_reports_offending_index(self) -> None:
        result = apply_patch(
            {"a": 1},
            [
                {"op": "add", "path": "/b", "value": 2},
                {"op": "remove", "path": "/nope"},
            ],
        )

        assert is_failure(result)
        assert result.details["operation_index"] == 1
        assert result.details["operation"] == {"op": "remove", "path": "/nope"}


class TestDiffDisplay:
    def test_null_value_kept_for_add(self) -> None:
        _, diff = apply_patch({}, [{"op": "add", "path": "/x", "value": None}])

        assert diff[0].to_display() == {"op": "add", "path": "/x", "value": None}

    def test_remove_has_no_value(self) -> None:
        _, diff = apply_patch({"x": 1}, [{"op": "remove", "path": "/x"}])

        assert diff[0].to_display() == {"op": "remove", "path": "/x"}

    def test_move_shows_source(self) -> None:
        _, diff = apply_patch({"x": 1}, [{"op": "move", "from": "/x", "path": "/y"}])

        assert diff[0].to_display() == {"op": "move", "path": "/y", "from": "/x"}
