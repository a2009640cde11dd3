"""Graph model - Vertices, edges and node positions.

This module provides the core value types and the primitives every
other layer is built on:
- Graph: ordered vertex labels plus a list of edges
- Position: canvas coordinates of a vertex
- is_connected / clone_graph / remove_edge / next_vertex_label

Graph values are never shared between the session, its history and the
algorithm trace. Every primitive that "changes" a graph returns a new
one; ``clone_graph`` is the isolation point.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from mstep.graph.relations import Edge, edges_equal

# Default grid used for vertices that have no explicit position
GRID_ORIGIN_X = 300.0
GRID_ORIGIN_Y = 200.0
GRID_SPACING = 200.0
GRID_COLUMNS = 4


@dataclass(frozen=True)
class Position:
    """Canvas coordinates of a vertex."""

    x: float
    y: float

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass
class Graph:
    """An undirected weighted graph.

    Attributes:
        vertices: Unique vertex labels in insertion order.
        edges: Edges in insertion order. Duplicates, self-loops and
            dangling endpoints are representable; validation reports them.
    """

    vertices: list[str] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def iter_edges(self) -> Iterator[Edge]:
        """Iterate over edges in insertion order."""
        yield from self.edges

    def vertex_count(self) -> int:
        return len(self.vertices)

    def edge_count(self) -> int:
        return len(self.edges)

    def has_vertex(self, label: str) -> bool:
        return label in self.vertices

    def find_edge(self, u: str, v: str) -> Edge | None:
        """Return the first edge joining ``u`` and ``v`` in either order."""
        for edge in self.edges:
            if edge.connects(u, v):
                return edge
        return None

    def has_edge(self, u: str, v: str) -> bool:
        return self.find_edge(u, v) is not None

    def clone(self) -> Graph:
        """Create a deep copy of this graph."""
        return clone_graph(self)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the ``{"vertices", "edges"}`` interchange shape."""
        return {
            "vertices": list(self.vertices),
            "edges": [edge.to_dict() for edge in self.edges],
        }


def clone_graph(graph: Graph) -> Graph:
    """Return a deep copy of ``graph``.

    Edges are frozen, so copying the containers is enough to guarantee
    that no mutable structure is shared with the source.
    """
    return Graph(
        vertices=list(graph.vertices),
        edges=[Edge(e.u, e.v, e.w) for e in graph.edges],
    )


def remove_edge(graph: Graph, edge: Edge) -> Graph:
    """Return a new graph without any edge equal to ``edge``.

    Equality ignores orientation and weight, so every parallel copy of the
    pair is dropped. ``graph`` is left untouched.
    """
    return Graph(
        vertices=list(graph.vertices),
        edges=[e for e in graph.edges if not edges_equal(e, edge)],
    )


def add_edge(graph: Graph, edge: Edge) -> Graph:
    """Return a new graph with ``edge`` appended."""
    return Graph(vertices=list(graph.vertices), edges=[*graph.edges, edge])


def edges_for_vertex(graph: Graph, vertex: str) -> list[Edge]:
    """Return every edge incident to ``vertex``."""
    return [e for e in graph.edges if e.touches(vertex)]


def is_connected(graph: Graph) -> bool:
    """Check whether every vertex is reachable from the first one.

    Graphs with zero or one vertex are connected. Edge endpoints that are
    not in ``vertices`` are ignored rather than treated as errors.
    """
    if len(graph.vertices) <= 1:
        return True

    adjacency: dict[str, list[str]] = {v: [] for v in graph.vertices}
    for edge in graph.edges:
        if edge.u in adjacency and edge.v in adjacency:
            adjacency[edge.u].append(edge.v)
            adjacency[edge.v].append(edge.u)

    start = graph.vertices[0]
    visited = {start}
    stack = [start]
    while stack:
        current = stack.pop()
        for neighbor in adjacency[current]:
            if neighbor not in visited:
                visited.add(neighbor)
                stack.append(neighbor)

    return len(visited) == len(adjacency)


def total_weight(edges: Iterable[Edge]) -> float:
    """Sum the weights of ``edges``, treating missing weights as zero."""
    return sum(e.w for e in edges if e.has_weight())


def next_vertex_label(graph: Graph) -> str:
    """Generate the next free vertex label.

    Single-letter labels run A..Z. Once Z is taken the generator falls
    back to ``A<count>`` where count is the number of vertices, bumped
    until it no longer collides with an existing label.

    Examples:
        >>> next_vertex_label(Graph())
        'A'
        >>> next_vertex_label(Graph(vertices=["A", "C"]))
        'D'
    """
    letters = sorted(label for label in graph.vertices if len(label) == 1 and "A" <= label <= "Z")
    if not letters:
        return "A"

    candidate = chr(ord(letters[-1]) + 1)
    if candidate <= "Z":
        return candidate

    count = len(graph.vertices)
    existing = set(graph.vertices)
    while f"A{count}" in existing:
        count += 1
    return f"A{count}"


def default_position(index: int) -> Position:
    """Grid position for the ``index``-th vertex (four per row)."""
    return Position(
        x=GRID_ORIGIN_X + (index % GRID_COLUMNS) * GRID_SPACING,
        y=GRID_ORIGIN_Y + (index // GRID_COLUMNS) * GRID_SPACING,
    )


def default_positions(vertices: Iterable[str]) -> dict[str, Position]:
    """Grid positions for ``vertices`` in order."""
    return {label: default_position(i) for i, label in enumerate(vertices)}
