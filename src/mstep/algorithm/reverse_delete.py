"""Reverse-Delete - Minimum spanning tree by deleting the heaviest edges first.

Algorithm:
1. Sort the edges by weight, heaviest first. The sort is stable, so
   edges of equal weight are processed in input order.
2. For each edge, tentatively remove it. If the graph stays connected
   the edge is redundant and is deleted; otherwise it is kept.
3. What remains is a minimum spanning tree of the (connected) input.

``run_reverse_delete`` records every decision as a Step carrying a
snapshot of the working graph, so the run can be replayed one decision
at a time. The trace is built eagerly and never changes afterwards.

The caller is responsible for validating the graph first; on an invalid
graph the trace is meaningless.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from mstep.graph.model import Graph, clone_graph, is_connected, remove_edge, total_weight
from mstep.graph.relations import Edge, edges_equal

logger = logging.getLogger(__name__)


class StepKind(Enum):
    """Kinds of trace entries."""

    CONSIDER = "consider"
    KEEP = "keep"
    DELETE = "delete"
    COMPLETE = "complete"


@dataclass(frozen=True)
class Step:
    """One decision of a Reverse-Delete run.

    Attributes:
        kind: What happened at this step.
        edge: The edge the step is about. ``None`` for the final
            COMPLETE step, which is not about any single edge.
        explanation: Human-readable narration of the step.
        snapshot: The working graph *after* this step's effect. Owned by
            the step; never shared with the session or another step.
        number: Zero-based position in the trace.
    """

    kind: StepKind
    edge: Edge | None
    explanation: str
    snapshot: Graph
    number: int

    @property
    def is_terminal(self) -> bool:
        return self.kind == StepKind.COMPLETE

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "edge": self.edge.to_dict() if self.edge is not None else None,
            "explanation": self.explanation,
            "snapshot": self.snapshot.to_dict(),
            "stepNumber": self.number,
        }


def format_weight(w: float | None) -> str:
    """Render a weight without a trailing ``.0`` for whole numbers."""
    if isinstance(w, float) and w.is_integer():
        return str(int(w))
    return str(w)


def sort_edges_descending(edges: list[Edge]) -> list[Edge]:
    """Return ``edges`` sorted heaviest first, ties kept in input order."""
    return sorted(edges, key=lambda e: e.w, reverse=True)


class _TraceRecorder:
    """Collects steps, numbering them and snapshotting the graph."""

    def __init__(self) -> None:
        self.steps: list[Step] = []

    def record(self, kind: StepKind, edge: Edge | None, explanation: str, graph: Graph) -> None:
        self.steps.append(
            Step(
                kind=kind,
                edge=edge,
                explanation=explanation,
                snapshot=clone_graph(graph),
                number=len(self.steps),
            )
        )


def run_reverse_delete(graph: Graph) -> list[Step]:
    """Run Reverse-Delete on ``graph`` and return the full trace.

    Args:
        graph: A validated, connected graph. It is not modified.

    Returns:
        Ordered list of steps. Empty when the graph has no edges.
    """
    if not graph.edges:
        return []

    # sorted() is stable, which gives the input-order tie-break
    ordered = sort_edges_descending(graph.edges)
    working = clone_graph(graph)
    trace = _TraceRecorder()

    trace.record(
        StepKind.CONSIDER,
        ordered[0],
        "Starting Reverse-Delete algorithm. We'll process edges in descending order of weight.",
        working,
    )

    for edge in ordered:
        if not any(edges_equal(e, edge) for e in working.edges):
            continue

        label = f"{edge.u}-{edge.v}"
        weight = format_weight(edge.w)

        trace.record(
            StepKind.CONSIDER,
            edge,
            f"Considering edge {label} with weight {weight} (heaviest remaining).",
            working,
        )

        without = remove_edge(working, edge)
        if not is_connected(without):
            trace.record(
                StepKind.KEEP,
                edge,
                f"Keeping edge {label} (weight {weight}). Removing it would disconnect "
                "the graph, so it's part of the MST.",
                working,
            )
        else:
            working = without
            trace.record(
                StepKind.DELETE,
                edge,
                f"Removing edge {label} (weight {weight}). Graph remains connected, "
                "so this edge is not needed for the MST.",
                working,
            )

    mst_total = format_weight(total_weight(working.edges))
    trace.record(
        StepKind.COMPLETE,
        None,
        f"Algorithm complete! The MST has {len(working.edges)} edges with total weight {mst_total}.",
        working,
    )

    logger.debug(
        "Reverse-Delete produced %d steps: %d of %d edges kept",
        len(trace.steps),
        len(working.edges),
        len(graph.edges),
    )
    return trace.steps


def final_tree(steps: list[Step]) -> Graph | None:
    """Return the spanning tree a trace ends with, or None for an empty trace."""
    if not steps:
        return None
    return clone_graph(steps[-1].snapshot)


def mst_weight(steps: list[Step]) -> float:
    """Total weight of the spanning tree a trace ends with."""
    tree = final_tree(steps)
    if tree is None:
        return 0
    return total_weight(tree.edges)


def mst_edges(steps: list[Step]) -> list[Edge]:
    """Edges of the spanning tree a trace ends with (empty for an empty trace)."""
    tree = final_tree(steps)
    return list(tree.edges) if tree is not None else []
