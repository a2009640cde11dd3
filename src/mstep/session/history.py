"""History types for undo/redo.

This module provides the snapshot entry recorded before every graph edit
and the linear undo/redo stack built on top of it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime

from mstep.graph.model import Graph, Position, clone_graph


@dataclass(frozen=True)
class HistoryEntry:
    """Snapshot of the editable session state.

    Records everything an undo or redo has to restore. The graph is a
    private deep copy; positions are immutable values in a private dict.

    Attributes:
        graph: Graph snapshot.
        positions: Vertex position snapshot.
        operation: Name of the edit that followed this snapshot.
        timestamp: When the snapshot was taken.
    """

    graph: Graph
    positions: Mapping[str, Position]
    operation: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def capture(
        cls,
        graph: Graph,
        positions: Mapping[str, Position],
        operation: str = "",
    ) -> HistoryEntry:
        """Snapshot ``graph`` and ``positions`` without aliasing either."""
        return cls(graph=clone_graph(graph), positions=dict(positions), operation=operation)

    def copy(self) -> HistoryEntry:
        """An independent entry with the same contents."""
        return replace(self, graph=clone_graph(self.graph), positions=dict(self.positions))

    def restore(self) -> tuple[Graph, dict[str, Position]]:
        """Return fresh copies of the stored graph and positions."""
        return clone_graph(self.graph), dict(self.positions)

    def __str__(self) -> str:
        """Human-readable representation."""
        return (
            f"{self.operation or 'snapshot'}"
            f"({len(self.graph.vertices)} vertices, {len(self.graph.edges)} edges)"
        )


class History:
    """Linear undo/redo history of session snapshots.

    New edits push onto the undo stack and discard the redo stack, so
    there is never more than one future to redo into.

    Example:
        >>> history = History()
        >>> history.push(HistoryEntry.capture(Graph(), {}))
        >>> history.can_undo()
        True
    """

    def __init__(self) -> None:
        """Initialize empty undo and redo stacks."""
        self._undo: list[HistoryEntry] = []
        self._redo: list[HistoryEntry] = []

    def push(self, entry: HistoryEntry) -> None:
        """Record the state before a new edit and drop the redo stack.

        Args:
            entry: Snapshot of the state the edit is about to replace.
        """
        self._undo.append(entry)
        self._redo.clear()

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self, current: HistoryEntry) -> HistoryEntry | None:
        """Step back one edit.

        Args:
            current: Snapshot of the present state, kept for redo.

        Returns:
            The snapshot to restore, or None if there is nothing to undo.
        """
        if not self._undo:
            return None
        self._redo.append(current)
        return self._undo.pop()

    def redo(self, current: HistoryEntry) -> HistoryEntry | None:
        """Step forward one undone edit.

        Args:
            current: Snapshot of the present state, kept for undo.

        Returns:
            The snapshot to restore, or None if there is nothing to redo.
        """
        if not self._redo:
            return None
        self._undo.append(current)
        return self._redo.pop()

    def clear_redo(self) -> None:
        """Drop the redo stack without recording anything."""
        self._redo.clear()

    def iter_undo(self) -> Iterator[HistoryEntry]:
        """Iterate over copies of the undo entries, oldest first."""
        for entry in self._undo:
            yield entry.copy()

    def iter_redo(self) -> Iterator[HistoryEntry]:
        """Iterate over copies of the redo entries, next-to-redo first."""
        for entry in reversed(self._redo):
            yield entry.copy()

    def undo_depth(self) -> int:
        return len(self._undo)

    def redo_depth(self) -> int:
        return len(self._redo)

    def clear(self) -> None:
        """Drop both stacks."""
        self._undo.clear()
        self._redo.clear()
