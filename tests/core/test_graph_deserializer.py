"""Tests for loading graph documents."""

import json

import pytest

from mstep.graph import Edge, Position
from mstep.graph.deserializer import (
    GraphFormatError,
    load_document,
    load_file,
    loads_document,
)
from tests.core.graph_test_helpers import FIXTURES_DIR, triangle


class TestAcceptedShapes:
    def test_wrapped_file(self):
        document = load_file(FIXTURES_DIR / "triangle.json")
        assert document.graph == triangle()
        assert document.positions["C"] == Position(200, 250)
        assert not document.legacy

    def test_legacy_file_matches_wrapped(self):
        wrapped = load_file(FIXTURES_DIR / "triangle.json")
        legacy = load_file(FIXTURES_DIR / "triangle_legacy.json")
        assert legacy.legacy
        assert legacy.graph == wrapped.graph
        assert legacy.positions == wrapped.positions

    def test_positions_optional(self):
        document = load_document({"graph": {"vertices": ["A"], "edges": []}})
        assert document.positions == {}

    def test_null_positions(self):
        document = load_document({"vertices": ["A"], "edges": [], "positions": None})
        assert document.positions == {}


class TestWeights:
    def test_missing_weight_becomes_none(self):
        document = load_document({"vertices": ["A", "B"], "edges": [{"u": "A", "v": "B"}]})
        assert document.graph.edges == [Edge("A", "B", None)]

    @pytest.mark.parametrize("raw", [None, "3", True, [1]])
    def test_unusable_weight_becomes_none(self, raw):
        document = load_document(
            {"vertices": ["A", "B"], "edges": [{"u": "A", "v": "B", "w": raw}]}
        )
        assert document.graph.edges[0].w is None

    def test_semantic_problems_load_normally(self):
        document = load_document(
            {"vertices": ["A"], "edges": [{"u": "A", "v": "Z", "w": -4}]}
        )
        assert document.graph.edges == [Edge("A", "Z", -4)]


class TestFormatErrors:
    def test_malformed_json(self):
        with pytest.raises(GraphFormatError, match="Invalid JSON"):
            loads_document("{not json")

    def test_not_an_object(self):
        with pytest.raises(GraphFormatError):
            load_document(["A", "B"])

    def test_unrecognized_shape(self):
        with pytest.raises(GraphFormatError, match="Invalid graph format"):
            load_document({"nodes": []})

    def test_missing_edges(self):
        with pytest.raises(GraphFormatError, match="'edges'"):
            load_document({"graph": {"vertices": ["A"]}})

    def test_vertices_not_a_list(self):
        with pytest.raises(GraphFormatError, match="must be a list"):
            load_document({"vertices": "AB", "edges": []})

    def test_edge_missing_endpoint(self):
        with pytest.raises(GraphFormatError, match="missing required field 'v'"):
            load_file(FIXTURES_DIR / "malformed.json")

    def test_edge_not_an_object(self):
        with pytest.raises(GraphFormatError, match="must be an object"):
            load_document({"vertices": ["A"], "edges": [["A", "B", 1]]})

    def test_duplicate_vertex_label(self):
        with pytest.raises(GraphFormatError, match="Duplicate vertex"):
            load_document({"vertices": ["A", "A"], "edges": []})

    def test_positions_not_an_object(self):
        with pytest.raises(GraphFormatError, match="'positions'"):
            load_document({"vertices": ["A"], "edges": [], "positions": [1, 2]})

    def test_position_without_numbers(self):
        with pytest.raises(GraphFormatError, match="numeric"):
            load_document({"vertices": ["A"], "edges": [], "positions": {"A": {"x": "1"}}})

    def test_format_error_is_value_error(self):
        assert issubclass(GraphFormatError, ValueError)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_file(tmp_path / "nope.json")

    def test_loads_round_trip_of_dumped_json(self):
        text = json.dumps({"vertices": ["A"], "edges": []})
        assert loads_document(text).graph.vertices == ["A"]
