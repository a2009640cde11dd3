"""Graph deserialization - Load graph documents from JSON.

Accepted document shapes:

    {"graph": {"vertices": [...], "edges": [...]}, "positions": {...}}

and the legacy shape without the ``graph`` wrapper:

    {"vertices": [...], "edges": [...], "positions": {...}}

Structural problems with the document itself (bad JSON, missing or
mistyped fields) raise GraphFormatError. Problems with the graph it
describes (negative weights, dangling endpoints, ...) are not checked
here; the validation engine reports them once the graph is loaded.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mstep.graph.model import Graph, Position
from mstep.graph.relations import Edge


class GraphFormatError(ValueError):
    """Raised when a graph document cannot be parsed."""


@dataclass
class GraphDocument:
    """A graph plus the vertex positions saved alongside it.

    Attributes:
        graph: The loaded graph.
        positions: Vertex positions; may be empty or partial.
        legacy: True if the document used the unwrapped legacy shape.
    """

    graph: Graph
    positions: dict[str, Position] = field(default_factory=dict)
    legacy: bool = False


def _parse_weight(raw: Any) -> float | None:
    """Coerce a raw JSON weight; unusable values become None."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if isinstance(raw, float) and math.isnan(raw):
        return None
    return raw


def _parse_edge(raw: Any, index: int) -> Edge:
    if not isinstance(raw, dict):
        raise GraphFormatError(f"Edge {index} must be an object, got {type(raw).__name__}")
    for key in ("u", "v"):
        if key not in raw:
            raise GraphFormatError(f"Edge {index} is missing required field '{key}'")
        if not isinstance(raw[key], str):
            raise GraphFormatError(f"Edge {index} field '{key}' must be a string")
    return Edge(raw["u"], raw["v"], _parse_weight(raw.get("w")))


def _parse_graph(raw: dict[str, Any]) -> Graph:
    for key in ("vertices", "edges"):
        if key not in raw:
            raise GraphFormatError(f"Graph is missing required field '{key}'")
        if not isinstance(raw[key], list):
            raise GraphFormatError(f"Graph field '{key}' must be a list")

    vertices: list[str] = []
    for label in raw["vertices"]:
        if not isinstance(label, str):
            raise GraphFormatError(f"Vertex labels must be strings, got {label!r}")
        if label in vertices:
            raise GraphFormatError(f"Duplicate vertex label: {label}")
        vertices.append(label)

    edges = [_parse_edge(item, i) for i, item in enumerate(raw["edges"])]
    return Graph(vertices=vertices, edges=edges)


def _parse_positions(raw: Any) -> dict[str, Position]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise GraphFormatError("'positions' must be an object")

    positions: dict[str, Position] = {}
    for label, coords in raw.items():
        if not isinstance(coords, dict):
            raise GraphFormatError(f"Position for '{label}' must be an object")
        x, y = coords.get("x"), coords.get("y")
        if isinstance(x, bool) or isinstance(y, bool):
            raise GraphFormatError(f"Position for '{label}' must have numeric x and y")
        if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
            raise GraphFormatError(f"Position for '{label}' must have numeric x and y")
        positions[label] = Position(float(x), float(y))
    return positions


def load_document(data: Any) -> GraphDocument:
    """Build a GraphDocument from decoded JSON data.

    Args:
        data: The decoded JSON value (normally a dict).

    Returns:
        GraphDocument with graph and positions.

    Raises:
        GraphFormatError: If the data is not a recognizable graph document.
    """
    if not isinstance(data, dict):
        raise GraphFormatError("Graph document must be a JSON object")

    if isinstance(data.get("graph"), dict):
        graph = _parse_graph(data["graph"])
        legacy = False
    elif "vertices" in data and "edges" in data:
        graph = _parse_graph(data)
        legacy = True
    else:
        raise GraphFormatError("Invalid graph format: expected 'graph' or 'vertices'/'edges'")

    positions = _parse_positions(data.get("positions"))
    return GraphDocument(graph=graph, positions=positions, legacy=legacy)


def loads_document(text: str) -> GraphDocument:
    """Parse a graph document from a JSON string.

    Raises:
        GraphFormatError: On malformed JSON or an unrecognizable document.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise GraphFormatError(f"Invalid JSON: {e}") from e
    return load_document(data)


def load_file(path: Path | str) -> GraphDocument:
    """Read and parse a graph document file.

    Raises:
        GraphFormatError: On malformed content.
        OSError: If the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8")
    return loads_document(text)
