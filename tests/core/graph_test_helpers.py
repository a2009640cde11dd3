"""Test helpers for graph, trace and playback tests.

This module provides small graph factories and a manually driven timer so
that tests can describe graphs compactly and step playback by hand.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path

from mstep.graph import Edge, Graph

# === Constants ===

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures" / "graphs"

# === Graph Factories ===


def make_graph(
    vertices: Iterable[str] | str,
    edges: Iterable[tuple] = (),
) -> Graph:
    """Build a Graph from labels and ``(u, v, w)`` / ``(u, v)`` tuples.

    Args:
        vertices: Vertex labels; a string is split into single letters.
        edges: Edge tuples. A two-tuple creates an edge with no weight.
    """
    edge_list = [Edge(*spec) for spec in edges]
    return Graph(vertices=list(vertices), edges=edge_list)


def triangle() -> Graph:
    """A-B:3, B-C:4, A-C:5. The MST keeps A-B and B-C (weight 7)."""
    return make_graph("ABC", [("A", "B", 3), ("B", "C", 4), ("A", "C", 5)])


def square_with_diagonal() -> Graph:
    """Four-cycle plus one diagonal: MST weight 1 + 2 + 3 = 6."""
    return make_graph(
        "ABCD",
        [
            ("A", "B", 1),
            ("B", "C", 2),
            ("C", "D", 3),
            ("D", "A", 4),
            ("A", "C", 5),
        ],
    )


def path_graph() -> Graph:
    """A tree already: every edge must be kept."""
    return make_graph("ABCD", [("A", "B", 2), ("B", "C", 7), ("C", "D", 1)])


def edge_labels(graph: Graph) -> list[str]:
    """Edges of ``graph`` as ``"u-v"`` strings in order."""
    return [str(edge) for edge in graph.edges]


# === Manual Timer ===


class ManualTimer:
    """Timer stand-in that only fires when the test says so."""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.callback()


class ManualTimerFactory:
    """Records every timer Playback creates."""

    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def __call__(self, interval: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> ManualTimer:
        return self.timers[-1]

    def pending(self) -> list[ManualTimer]:
        """Timers that were started and not cancelled."""
        return [t for t in self.timers if t.started and not t.cancelled]

    def fire_pending(self) -> None:
        """Fire the single live timer, as the timer thread would."""
        live = self.pending()
        assert len(live) == 1, f"expected one live timer, found {len(live)}"
        live[0].cancelled = True
        live[0].fire()
