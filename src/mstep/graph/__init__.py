"""Graph module - Core graph data structures.

Exports:
- Edge: Undirected weighted edge
- Graph: Ordered vertices plus edges
- Position: Vertex canvas coordinates
- edges_equal, is_connected, clone_graph, remove_edge, next_vertex_label:
  the primitives the validation, algorithm and session layers share

Note: JSON import/export lives in mstep.graph.serialize and
mstep.graph.deserializer.
"""

from mstep.graph.model import (
    Graph,
    Position,
    add_edge,
    clone_graph,
    default_position,
    default_positions,
    edges_for_vertex,
    is_connected,
    next_vertex_label,
    remove_edge,
    total_weight,
)
from mstep.graph.relations import Edge, edges_equal

__all__ = [
    "Edge",
    "Graph",
    "Position",
    "edges_equal",
    "is_connected",
    "clone_graph",
    "remove_edge",
    "add_edge",
    "edges_for_vertex",
    "next_vertex_label",
    "total_weight",
    "default_position",
    "default_positions",
]
