"""Graph Serialization - Export graphs, traces and errors.

This module provides functions to serialize graphs (with positions),
algorithm traces and validation errors to JSON-compatible dicts and
plain text.

Exported graph documents always use the wrapped shape
``{"graph": {...}, "positions": {...}}``.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from mstep.graph.model import Graph, Position

if TYPE_CHECKING:
    from mstep.algorithm.reverse_delete import Step
    from mstep.validation.rules import ValidationError


def serialize_positions(positions: Mapping[str, Position]) -> dict[str, dict[str, float]]:
    """Serialize vertex positions to ``{label: {"x", "y"}}``."""
    return {label: pos.to_dict() for label, pos in positions.items()}


def export_document(graph: Graph, positions: Mapping[str, Position]) -> dict[str, Any]:
    """Serialize a graph and its positions to the interchange shape.

    Args:
        graph: The graph to export.
        positions: Vertex positions to export alongside it.

    Returns:
        Dict with ``graph`` and ``positions`` keys.
    """
    return {
        "graph": graph.to_dict(),
        "positions": serialize_positions(positions),
    }


def dumps_document(graph: Graph, positions: Mapping[str, Position]) -> str:
    """Serialize a graph document to an indented JSON string."""
    return json.dumps(export_document(graph, positions), indent=2)


def serialize_step(step: Step) -> dict[str, Any]:
    """Serialize a single trace step."""
    return step.to_dict()


def serialize_trace(steps: Sequence[Step]) -> list[dict[str, Any]]:
    """Serialize a whole trace in order."""
    return [serialize_step(step) for step in steps]


def serialize_errors(errors: Sequence[ValidationError]) -> list[dict[str, Any]]:
    """Serialize validation errors in order."""
    return [error.to_dict() for error in errors]


def format_step(step: Step) -> str:
    """One-line text rendering of a step for terminal output."""
    edge = f" {step.edge.u}-{step.edge.v}" if step.edge is not None else ""
    return f"{step.number:>3}  {step.kind.value.upper():<8}{edge:<10} {step.explanation}"


def format_trace(steps: Sequence[Step]) -> str:
    """Text rendering of a whole trace, one step per line."""
    return "\n".join(format_step(step) for step in steps)
