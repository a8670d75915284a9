"""Unit tests for migration path planning."""

from ams.errors import ErrorKind, is_failure
from ams.migration.models import MigrationEdge, MigrationGraph, PatchStep, ScriptStep
from ams.migration.planner import plan


def _edge(from_version: str, to_version: str, *steps) -> MigrationEdge:
    return MigrationEdge(from_version=from_version, to_version=to_version, steps=list(steps))


def _graph(*edges: MigrationEdge) -> MigrationGraph:
    graph = MigrationGraph.from_edges(list(edges))
    assert not is_failure(graph)
    return graph


def _add(path: str, value) -> PatchStep:
    return PatchStep(operations=[{"op": "add", "path": path, "value": value}])


class TestPlan:
    """Tests for plan()."""

    def test_same_version_is_empty_plan(self) -> None:
        assert plan("1.0.0", "1.0.0", _graph()) == []

    def test_single_hop(self) -> None:
        step = _add("/a", 1)
        result = plan("1.0.0", "1.1.0", _graph(_edge("1.0.0", "1.1.0", step)))

        assert result == [step]

    def test_multi_hop_concatenates_steps_in_order(self) -> None:
        first, second, third = _add("/a", 1), _add("/b", 2), ScriptStep(description="reindex")
        graph = _graph(
            _edge("1.0.0", "1.1.0", first),
            _edge("1.1.0", "2.0.0", second, third),
        )

        assert plan("1.0.0", "2.0.0", graph) == [first, second, third]

    def test_edge_without_steps_still_advances(self) -> None:
        graph = _graph(_edge("1.0.0", "1.0.1"), _edge("1.0.1", "1.1.0", _add("/a", 1)))

        result = plan("1.0.0", "1.1.0", graph)

        assert not is_failure(result)
        assert len(result) == 1

    def test_missing_edge_is_no_path(self) -> None:
        graph = _graph(_edge("1.0.0", "1.1.0", _add("/a", 1)))

        result = plan("1.0.0", "2.0.0", graph)

        assert is_failure(result)
        assert result.kind == ErrorKind.NO_PATH
        assert result.details["stuck_at"] == "1.1.0"

    def test_no_edges_at_all_is_no_path(self) -> None:
        result = plan("1.0.0", "1.1.0", _graph())

        assert is_failure(result)
        assert result.kind == ErrorKind.NO_PATH

    def test_cycle_is_circular_path(self) -> None:
        graph = _graph(_edge("1.0.0", "1.1.0"), _edge("1.1.0", "1.0.0"))

        result = plan("1.0.0", "2.0.0", graph)

        assert is_failure(result)
        assert result.kind == ErrorKind.CIRCULAR_PATH

    def test_self_loop_is_circular_path(self) -> None:
        result = plan("1.0.0", "2.0.0", _graph(_edge("1.0.0", "1.0.0")))

        assert is_failure(result)
        assert result.kind == ErrorKind.CIRCULAR_PATH

    def test_downgrade_without_edges_is_no_path(self) -> None:
        graph = _graph(_edge("1.0.0", "1.1.0"))

        result = plan("1.1.0", "1.0.0", graph)

        assert is_failure(result)
        assert result.kind == ErrorKind.NO_PATH


class TestMigrationGraph:
    def test_duplicate_origin_rejected(self) -> None:
        result = MigrationGraph.from_edges([_edge("1.0.0", "1.1.0"), _edge("1.0.0", "1.2.0")])

        assert is_failure(result)
        assert result.kind == ErrorKind.VALIDATION_ERROR

    def test_edges_parse_from_aliases(self) -> None:
        edge = MigrationEdge.model_validate(
            {"from": "1.0.0", "to": "1.1.0", "steps": [{"kind": "patch", "operations": []}]}
        )
        graph = _graph(edge)

        assert "1.0.0" in graph
        assert graph.outgoing("1.0.0").to_version == "1.1.0"
        assert graph.outgoing("1.1.0") is None
