"""Tests for the Reverse-Delete trace engine."""

import pytest

from mstep.algorithm import StepKind, final_tree, mst_edges, mst_weight, run_reverse_delete
from mstep.algorithm.reverse_delete import format_weight, sort_edges_descending
from mstep.graph import Edge, is_connected
from tests.core.graph_test_helpers import (
    edge_labels,
    make_graph,
    path_graph,
    square_with_diagonal,
    triangle,
)


def decisions(steps):
    """(kind, edge label) pairs for KEEP/DELETE steps."""
    return [
        (step.kind, str(step.edge))
        for step in steps
        if step.kind in (StepKind.KEEP, StepKind.DELETE)
    ]


class TestTriangle:
    """A-B:3, B-C:4, A-C:5."""

    def test_decisions(self):
        steps = run_reverse_delete(triangle())
        assert decisions(steps) == [
            (StepKind.DELETE, "A-C"),
            (StepKind.KEEP, "B-C"),
            (StepKind.KEEP, "A-B"),
        ]

    def test_step_sequence(self):
        steps = run_reverse_delete(triangle())
        assert [s.kind for s in steps] == [
            StepKind.CONSIDER,
            StepKind.CONSIDER,
            StepKind.DELETE,
            StepKind.CONSIDER,
            StepKind.KEEP,
            StepKind.CONSIDER,
            StepKind.KEEP,
            StepKind.COMPLETE,
        ]
        assert [s.number for s in steps] == list(range(8))

    def test_mst_weight(self):
        steps = run_reverse_delete(triangle())
        assert mst_weight(steps) == 7
        assert edge_labels(final_tree(steps)) == ["A-B", "B-C"]
        assert [str(e) for e in mst_edges(steps)] == ["A-B", "B-C"]

    def test_explanations(self):
        steps = run_reverse_delete(triangle())
        assert steps[0].explanation == (
            "Starting Reverse-Delete algorithm. We'll process edges in descending order of weight."
        )
        assert steps[1].explanation == "Considering edge A-C with weight 5 (heaviest remaining)."
        assert steps[2].explanation.startswith("Removing edge A-C (weight 5).")
        assert steps[4].explanation.startswith("Keeping edge B-C (weight 4).")
        assert steps[-1].explanation == (
            "Algorithm complete! The MST has 2 edges with total weight 7."
        )

    def test_intro_step_points_at_heaviest_edge(self):
        steps = run_reverse_delete(triangle())
        assert steps[0].edge == Edge("A", "C", 5)
        assert len(steps[0].snapshot.edges) == 3

    def test_complete_step_has_no_edge(self):
        steps = run_reverse_delete(triangle())
        assert steps[-1].edge is None
        assert steps[-1].is_terminal


class TestSnapshots:
    """Each step carries its own copy of the working graph."""

    def test_snapshot_after_delete(self):
        steps = run_reverse_delete(triangle())
        assert edge_labels(steps[1].snapshot) == ["A-B", "B-C", "A-C"]
        assert edge_labels(steps[2].snapshot) == ["A-B", "B-C"]

    def test_snapshots_are_not_shared(self):
        steps = run_reverse_delete(triangle())
        steps[3].snapshot.edges.clear()
        assert len(steps[4].snapshot.edges) == 2

    def test_input_graph_untouched(self):
        graph = triangle()
        run_reverse_delete(graph)
        assert graph == triangle()


class TestSpanningTreeProperties:
    @pytest.mark.parametrize("factory", [triangle, square_with_diagonal, path_graph])
    def test_final_tree_spans(self, factory):
        graph = factory()
        steps = run_reverse_delete(graph)
        tree = steps[-1].snapshot
        assert len(tree.edges) == len(graph.vertices) - 1
        assert is_connected(tree)

    def test_square_mst_weight(self):
        assert mst_weight(run_reverse_delete(square_with_diagonal())) == 6

    def test_tree_input_keeps_everything(self):
        steps = run_reverse_delete(path_graph())
        assert all(kind == StepKind.KEEP for kind, _ in decisions(steps))
        assert mst_weight(steps) == 10


class TestEdgeCases:
    def test_no_edges_gives_empty_trace(self):
        assert run_reverse_delete(make_graph("A")) == []
        assert final_tree([]) is None
        assert mst_edges([]) == []
        assert mst_weight([]) == 0

    def test_single_edge(self):
        steps = run_reverse_delete(make_graph("AB", [("A", "B", 1)]))
        assert [s.kind for s in steps] == [
            StepKind.CONSIDER,
            StepKind.CONSIDER,
            StepKind.KEEP,
            StepKind.COMPLETE,
        ]

    def test_ties_processed_in_input_order(self):
        graph = make_graph("ABC", [("A", "B", 2), ("B", "C", 2), ("A", "C", 2)])
        steps = run_reverse_delete(graph)
        assert decisions(steps) == [
            (StepKind.DELETE, "A-B"),
            (StepKind.KEEP, "B-C"),
            (StepKind.KEEP, "A-C"),
        ]

    def test_fractional_weights_formatted(self):
        graph = make_graph("AB", [("A", "B", 2.5)])
        steps = run_reverse_delete(graph)
        assert "weight 2.5" in steps[1].explanation


class TestHelpers:
    def test_sort_is_stable(self):
        edges = [Edge("A", "B", 1), Edge("C", "D", 3), Edge("E", "F", 1)]
        assert [str(e) for e in sort_edges_descending(edges)] == ["C-D", "A-B", "E-F"]

    @pytest.mark.parametrize("w,expected", [(3, "3"), (3.0, "3"), (2.5, "2.5"), (0, "0")])
    def test_format_weight(self, w, expected):
        assert format_weight(w) == expected

    def test_step_to_dict(self):
        step = run_reverse_delete(triangle())[2]
        data = step.to_dict()
        assert data["type"] == "delete"
        assert data["edge"] == {"u": "A", "v": "C", "w": 5}
        assert data["stepNumber"] == 2
        assert len(data["snapshot"]["edges"]) == 2
