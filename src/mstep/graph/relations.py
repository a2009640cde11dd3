"""Relations - Weighted undirected edges.

This module defines the edge value used throughout mstep:
- Edge: An unordered vertex pair with a numeric weight
- edges_equal: Orientation-independent edge identity
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Edge:
    """An undirected weighted edge.

    ``Edge("A", "B", 3)`` and ``Edge("B", "A", 3)`` denote the same edge.
    Self-loops and missing weights are representable so that imported
    data can be validated rather than rejected at construction time.

    Attributes:
        u: First endpoint label.
        v: Second endpoint label.
        w: Edge weight. ``None`` means the weight is missing.
    """

    u: str
    v: str
    w: float | None = None

    @property
    def key(self) -> frozenset[str]:
        """Orientation-independent endpoint key."""
        return frozenset((self.u, self.v))

    def connects(self, u: str, v: str) -> bool:
        """Check whether this edge joins ``u`` and ``v`` in either order."""
        return (self.u == u and self.v == v) or (self.u == v and self.v == u)

    def touches(self, vertex: str) -> bool:
        """Check whether ``vertex`` is one of the endpoints."""
        return self.u == vertex or self.v == vertex

    def has_weight(self) -> bool:
        """True if the weight is a real number (not None, not NaN)."""
        if self.w is None or isinstance(self.w, bool):
            return False
        if not isinstance(self.w, (int, float)):
            return False
        return not math.isnan(self.w)

    def with_weight(self, w: float | None) -> Edge:
        """Return a copy of this edge carrying a new weight."""
        return Edge(self.u, self.v, w)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the ``{"u", "v", "w"}`` interchange shape."""
        return {"u": self.u, "v": self.v, "w": self.w}

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.u}-{self.v}"


def edges_equal(e1: Edge, e2: Edge) -> bool:
    """Check whether two edges join the same endpoints, ignoring weight."""
    return e1.connects(e2.u, e2.v)
