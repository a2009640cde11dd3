"""Graph validation - Structural checks run before the algorithm may start.

Checks, in the order they are applied:
- empty: a graph without vertices cannot be spanned
- duplicate_edge: the same vertex pair appears more than once
- self_loop: an edge starts and ends at the same vertex
- missing_weight / negative_weight: the edge weight is unusable
- dangling_reference: an edge endpoint is not a vertex of the graph
- disconnected: not every vertex is reachable (only checked on an
  otherwise clean graph, where connectivity is meaningful)

Problems are reported as ValidationError values, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from mstep.graph.model import Graph, is_connected
from mstep.graph.relations import Edge


class ErrorKind(Enum):
    """Kinds of structural problems a graph can have."""

    DUPLICATE_EDGE = "duplicate_edge"
    SELF_LOOP = "self_loop"
    MISSING_WEIGHT = "missing_weight"
    NEGATIVE_WEIGHT = "negative_weight"
    DISCONNECTED = "disconnected"
    DANGLING_REFERENCE = "dangling_reference"


@dataclass(frozen=True)
class ValidationError:
    """A structural problem found during validation.

    Attributes:
        kind: The check that failed.
        message: Human-readable description.
        edge: The offending edge, when the problem is edge-specific.
        vertex: The offending vertex, when the problem names one.
    """

    kind: ErrorKind
    message: str
    edge: Edge | None = None
    vertex: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.kind.value, "message": self.message}
        if self.edge is not None:
            result["edge"] = self.edge.to_dict()
        if self.vertex is not None:
            result["vertex"] = self.vertex
        return result

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


def validate_graph(graph: Graph) -> list[ValidationError]:
    """Run every structural check over ``graph``.

    All checks run and all problems are collected, except that an empty
    graph stops after its own error and connectivity is only tested when
    no other problem was found.

    Args:
        graph: The graph to check. It is not modified.

    Returns:
        List of ValidationError objects in check order (empty if valid).
    """
    errors: list[ValidationError] = []

    if not graph.vertices:
        errors.append(
            ValidationError(
                kind=ErrorKind.DISCONNECTED,
                message="Graph must have at least one vertex",
            )
        )
        return errors

    # Duplicate edges: the first occurrence of a pair is never flagged
    seen: set[tuple[str, str]] = set()
    for edge in graph.edges:
        if (edge.u, edge.v) in seen or (edge.v, edge.u) in seen:
            errors.append(
                ValidationError(
                    kind=ErrorKind.DUPLICATE_EDGE,
                    message=f"Duplicate edge found: {edge.u}-{edge.v}",
                    edge=edge,
                )
            )
        else:
            seen.add((edge.u, edge.v))
            seen.add((edge.v, edge.u))

    for edge in graph.edges:
        if edge.u == edge.v:
            errors.append(
                ValidationError(
                    kind=ErrorKind.SELF_LOOP,
                    message=f"Self-loop detected at vertex {edge.u}",
                    edge=edge,
                    vertex=edge.u,
                )
            )

    for edge in graph.edges:
        if not edge.has_weight():
            errors.append(
                ValidationError(
                    kind=ErrorKind.MISSING_WEIGHT,
                    message=f"Missing weight for edge {edge.u}-{edge.v}",
                    edge=edge,
                )
            )
        elif edge.w < 0:
            errors.append(
                ValidationError(
                    kind=ErrorKind.NEGATIVE_WEIGHT,
                    message=f"Negative weight found for edge {edge.u}-{edge.v}: {edge.w}",
                    edge=edge,
                )
            )

    known = set(graph.vertices)
    for edge in graph.edges:
        for endpoint in (edge.u, edge.v):
            if endpoint not in known:
                errors.append(
                    ValidationError(
                        kind=ErrorKind.DANGLING_REFERENCE,
                        message=f"Edge {edge.u}-{edge.v} references non-existent vertex: {endpoint}",
                        edge=edge,
                        vertex=endpoint,
                    )
                )

    if not errors and not is_connected(graph):
        errors.append(
            ValidationError(
                kind=ErrorKind.DISCONNECTED,
                message="Graph is not connected. All vertices must be reachable from each other.",
            )
        )

    return errors


def is_valid_graph(graph: Graph) -> bool:
    """Check if ``graph`` passes every validation check."""
    return not validate_graph(graph)
