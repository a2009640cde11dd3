"""Session - The editing and playback state machine.

A Session owns the one authoritative graph and its vertex positions,
the undo/redo history, the current validation errors and the active
algorithm trace with its cursor.

States:
- Editing: no trace. Edits push history; undo/redo are available.
- Viewing-Trace: a trace exists and the cursor points into it. Any edit
  first clears the trace (without pushing history); undo/redo are
  disabled.

Every edit builds a brand-new graph and position map and swaps it in;
nothing handed out by the session, stored in history or captured in a
trace snapshot is ever modified afterwards. Edits that violate a
precondition (duplicate label, duplicate edge, self-loop, unknown vertex
or edge) are rejected silently: no state change, no history entry.
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, TypeVar

from mstep.algorithm.reverse_delete import Step, StepKind, run_reverse_delete
from mstep.graph.deserializer import GraphDocument, loads_document
from mstep.graph.model import (
    Graph,
    Position,
    clone_graph,
    default_position,
    next_vertex_label,
)
from mstep.graph.relations import Edge
from mstep.graph.serialize import dumps_document, export_document
from mstep.session.history import History, HistoryEntry
from mstep.session.playback import PlaySpeed, Playback, TimerFactory
from mstep.validation.rules import ValidationError, validate_graph

if TYPE_CHECKING:
    from mstep.config import ConfigLoader

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _synchronized(method: F) -> F:
    """Run a Session method under the session lock."""

    @functools.wraps(method)
    def wrapper(self: Session, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def _copy_step(step: Step) -> Step:
    """A Step whose snapshot shares nothing with the stored trace."""
    return replace(step, snapshot=clone_graph(step.snapshot))


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a session edit.

    Attributes:
        applied: False if the edit was rejected and nothing changed.
        errors: Validation errors for the graph after the edit.
        trace_cleared: True if an active trace was discarded by the edit.
    """

    applied: bool
    errors: list[ValidationError] = field(default_factory=list)
    trace_cleared: bool = False

    def __bool__(self) -> bool:
        return self.applied


class Session:
    """Interactive graph editing session.

    Args:
        intervals: Seconds between steps per playback speed tier.
        timer_factory: Timer factory for playback (tests inject one).
        default_speed: Initial playback speed tier.

    Example:
        >>> session = Session()
        >>> _ = session.add_vertex()
        >>> _ = session.add_vertex()
        >>> _ = session.add_edge("A", "B", 1)
        >>> len(session.run())
        4
    """

    def __init__(
        self,
        intervals: Mapping[PlaySpeed, float] | None = None,
        timer_factory: TimerFactory | None = None,
        default_speed: PlaySpeed = PlaySpeed.NORMAL,
    ) -> None:
        self._lock = threading.RLock()
        self._graph = Graph()
        self._positions: dict[str, Position] = {}
        self._history = History()
        self._steps: list[Step] = []
        self._cursor = 0
        self._errors = validate_graph(self._graph)
        self._playback = Playback(
            advance=self.next_step,
            has_next=self.has_next_step,
            lock=self._lock,
            intervals=intervals,
            timer_factory=timer_factory,
            speed=default_speed,
        )

    @classmethod
    def from_config(
        cls,
        config: ConfigLoader,
        timer_factory: TimerFactory | None = None,
    ) -> Session:
        """Create a session using the ``[playback]`` config section."""
        intervals = {speed: float(config.get(f"playback.{speed.value}")) for speed in PlaySpeed}
        default_speed = PlaySpeed.parse(config.get("playback.default_speed", "normal"))
        return cls(intervals=intervals, timer_factory=timer_factory, default_speed=default_speed)

    # ─────────────────────────────────────────────────────────────────
    # Read access (always copies)
    # ─────────────────────────────────────────────────────────────────

    @property
    def graph(self) -> Graph:
        """A private copy of the current graph."""
        return clone_graph(self._graph)

    @property
    def positions(self) -> dict[str, Position]:
        """A private copy of the current vertex positions."""
        return dict(self._positions)

    @property
    def errors(self) -> list[ValidationError]:
        """Validation errors for the current graph."""
        return list(self._errors)

    @property
    def is_valid(self) -> bool:
        return not self._errors

    @property
    def steps(self) -> tuple[Step, ...]:
        """Copies of the active trace (empty when editing)."""
        return tuple(_copy_step(step) for step in self._steps)

    @property
    def has_trace(self) -> bool:
        return bool(self._steps)

    @property
    def step_count(self) -> int:
        return len(self._steps)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current_step(self) -> Step | None:
        """The step under the cursor, or None when no trace is active."""
        if not self._steps:
            return None
        return _copy_step(self._steps[self._cursor])

    @property
    def is_complete(self) -> bool:
        """True when the cursor sits on the final COMPLETE step."""
        step = self.current_step
        return step is not None and step.kind == StepKind.COMPLETE

    @property
    def playback(self) -> Playback:
        return self._playback

    @property
    def is_playing(self) -> bool:
        return self._playback.is_playing

    @_synchronized
    def undo_depth(self) -> int:
        """Number of edits that undo could step back through."""
        return self._history.undo_depth()

    @_synchronized
    def redo_depth(self) -> int:
        return self._history.redo_depth()

    # ─────────────────────────────────────────────────────────────────
    # Internal state transitions
    # ─────────────────────────────────────────────────────────────────

    def _clear_trace(self) -> None:
        self._playback.pause()
        self._steps = []
        self._cursor = 0

    def _commit(
        self,
        operation: str,
        graph: Graph,
        positions: dict[str, Position],
    ) -> MutationResult:
        """Swap in a new graph and positions following the edit contract."""
        trace_cleared = bool(self._steps)
        if trace_cleared:
            # History is suspended while a trace is active
            self._history.clear_redo()
        else:
            self._history.push(HistoryEntry.capture(self._graph, self._positions, operation))

        self._graph = graph
        self._positions = positions
        self._clear_trace()
        self._errors = validate_graph(self._graph)

        logger.debug(
            "%s applied: %d vertices, %d edges, %d validation errors%s",
            operation,
            len(graph.vertices),
            len(graph.edges),
            len(self._errors),
            " (trace cleared)" if trace_cleared else "",
        )
        return MutationResult(applied=True, errors=list(self._errors), trace_cleared=trace_cleared)

    def _reject(self, operation: str, reason: str) -> MutationResult:
        logger.debug("%s rejected: %s", operation, reason)
        return MutationResult(applied=False, errors=list(self._errors))

    def _restore(self, entry: HistoryEntry) -> None:
        self._graph, self._positions = entry.restore()
        self._clear_trace()
        self._errors = validate_graph(self._graph)

    # ─────────────────────────────────────────────────────────────────
    # Graph edits
    # ─────────────────────────────────────────────────────────────────

    @_synchronized
    def add_vertex(
        self,
        label: str | None = None,
        position: Position | None = None,
    ) -> MutationResult:
        """Add a vertex, generating the next free label if none is given."""
        new_label = label or next_vertex_label(self._graph)
        if new_label in self._graph.vertices:
            return self._reject("add_vertex", f"vertex {new_label} already exists")

        graph = Graph(
            vertices=[*self._graph.vertices, new_label],
            edges=list(self._graph.edges),
        )
        positions = dict(self._positions)
        positions[new_label] = position or default_position(len(self._graph.vertices))
        return self._commit(f"add_vertex({new_label})", graph, positions)

    @_synchronized
    def remove_vertex(self, label: str) -> MutationResult:
        """Remove a vertex together with every edge incident to it."""
        if label not in self._graph.vertices:
            return self._reject("remove_vertex", f"vertex {label} does not exist")

        graph = Graph(
            vertices=[v for v in self._graph.vertices if v != label],
            edges=[e for e in self._graph.edges if not e.touches(label)],
        )
        positions = {k: p for k, p in self._positions.items() if k != label}
        return self._commit(f"remove_vertex({label})", graph, positions)

    @_synchronized
    def add_edge(self, u: str, v: str, w: float | None) -> MutationResult:
        """Add the edge ``u-v`` with weight ``w``."""
        if u == v:
            return self._reject("add_edge", f"self-loop at {u}")
        if self._graph.has_edge(u, v):
            return self._reject("add_edge", f"edge {u}-{v} already exists")

        graph = Graph(
            vertices=list(self._graph.vertices),
            edges=[*self._graph.edges, Edge(u, v, w)],
        )
        return self._commit(f"add_edge({u}-{v})", graph, dict(self._positions))

    @_synchronized
    def remove_edge(self, u: str, v: str) -> MutationResult:
        """Remove the edge joining ``u`` and ``v`` (either orientation)."""
        if not self._graph.has_edge(u, v):
            return self._reject("remove_edge", f"edge {u}-{v} does not exist")

        graph = Graph(
            vertices=list(self._graph.vertices),
            edges=[e for e in self._graph.edges if not e.connects(u, v)],
        )
        return self._commit(f"remove_edge({u}-{v})", graph, dict(self._positions))

    @_synchronized
    def update_edge_weight(self, u: str, v: str, w: float | None) -> MutationResult:
        """Change the weight of the edge joining ``u`` and ``v``."""
        if not self._graph.has_edge(u, v):
            return self._reject("update_edge_weight", f"edge {u}-{v} does not exist")

        graph = Graph(
            vertices=list(self._graph.vertices),
            edges=[e.with_weight(w) if e.connects(u, v) else e for e in self._graph.edges],
        )
        return self._commit(f"update_edge_weight({u}-{v})", graph, dict(self._positions))

    @_synchronized
    def replace_graph(
        self,
        graph: Graph,
        positions: Mapping[str, Position] | None = None,
    ) -> MutationResult:
        """Replace the whole graph, e.g. when importing a document.

        Positions for vertices not in ``positions`` fall back to the
        default grid; positions for unknown labels are dropped.
        """
        new_graph = clone_graph(graph)
        given = positions or {}
        new_positions = {
            label: given.get(label) or default_position(i)
            for i, label in enumerate(new_graph.vertices)
        }
        return self._commit("replace_graph", new_graph, new_positions)

    def load_document(self, document: GraphDocument) -> MutationResult:
        """Replace the graph with a loaded document's graph and positions."""
        return self.replace_graph(document.graph, document.positions)

    def import_json(self, text: str) -> MutationResult:
        """Parse and load a JSON graph document.

        Raises:
            GraphFormatError: If the document is malformed. The session is
                left untouched.
        """
        document = loads_document(text)
        return self.load_document(document)

    @_synchronized
    def move_vertex(
        self,
        label: str,
        position: Position,
        record_history: bool = True,
    ) -> MutationResult:
        """Reposition a vertex.

        Args:
            label: Vertex to move.
            position: New position.
            record_history: False for intermediate drag updates, which
                neither push history nor clear the trace.
        """
        if label not in self._graph.vertices:
            return self._reject("move_vertex", f"vertex {label} does not exist")

        positions = dict(self._positions)
        positions[label] = position
        if not record_history:
            self._positions = positions
            return MutationResult(applied=True, errors=list(self._errors))
        return self._commit(f"move_vertex({label})", clone_graph(self._graph), positions)

    @_synchronized
    def apply_layout(self, positions: Mapping[str, Position]) -> MutationResult:
        """Reposition many vertices at once as a single undoable edit."""
        if not self._graph.vertices:
            return self._reject("apply_layout", "graph has no vertices")

        new_positions = dict(self._positions)
        for label, position in positions.items():
            if label in self._graph.vertices:
                new_positions[label] = position
        return self._commit("apply_layout", clone_graph(self._graph), new_positions)

    @_synchronized
    def clear(self) -> MutationResult:
        """Start over with an empty graph, dropping history and trace."""
        trace_cleared = bool(self._steps)
        self._clear_trace()
        self._history.clear()
        self._graph = Graph()
        self._positions = {}
        self._errors = validate_graph(self._graph)
        logger.debug("Session cleared")
        return MutationResult(applied=True, errors=list(self._errors), trace_cleared=trace_cleared)

    # ─────────────────────────────────────────────────────────────────
    # Undo / redo
    # ─────────────────────────────────────────────────────────────────

    @_synchronized
    def can_undo(self) -> bool:
        return self._history.can_undo() and not self._steps

    @_synchronized
    def can_redo(self) -> bool:
        return self._history.can_redo() and not self._steps

    @_synchronized
    def undo(self) -> bool:
        """Restore the state before the most recent edit.

        Returns:
            True if a state was restored, False if nothing happened.
        """
        if not self.can_undo():
            logger.debug("undo ignored: %s", "trace active" if self._steps else "no history")
            return False
        entry = self._history.undo(HistoryEntry.capture(self._graph, self._positions, "undo"))
        if entry is None:
            return False
        self._restore(entry)
        logger.debug("Undid %s", entry)
        return True

    @_synchronized
    def redo(self) -> bool:
        """Re-apply the most recently undone edit.

        Returns:
            True if a state was restored, False if nothing happened.
        """
        if not self.can_redo():
            logger.debug("redo ignored: %s", "trace active" if self._steps else "nothing to redo")
            return False
        entry = self._history.redo(HistoryEntry.capture(self._graph, self._positions, "redo"))
        if entry is None:
            return False
        self._restore(entry)
        logger.debug("Redid %s", entry)
        return True

    # ─────────────────────────────────────────────────────────────────
    # Algorithm and cursor
    # ─────────────────────────────────────────────────────────────────

    @_synchronized
    def run(self) -> list[Step] | None:
        """Run Reverse-Delete on the current graph.

        Returns:
            The new trace, or None if the graph has validation errors.
            A graph without edges yields an empty trace.
        """
        if self._errors:
            logger.debug("run rejected: %d validation errors", len(self._errors))
            return None

        self._clear_trace()
        self._steps = run_reverse_delete(clone_graph(self._graph))
        self._cursor = 0
        logger.info(
            "Reverse-Delete run on %d vertices / %d edges: %d steps",
            len(self._graph.vertices),
            len(self._graph.edges),
            len(self._steps),
        )
        return [_copy_step(step) for step in self._steps]

    @_synchronized
    def has_next_step(self) -> bool:
        return self._cursor < len(self._steps) - 1

    @_synchronized
    def next_step(self) -> bool:
        """Move the cursor forward. Returns False at the last step."""
        if not self.has_next_step():
            return False
        self._cursor += 1
        return True

    @_synchronized
    def previous_step(self) -> bool:
        """Move the cursor back. Returns False at the first step."""
        if self._cursor <= 0:
            return False
        self._cursor -= 1
        return True

    @_synchronized
    def go_to_step(self, index: int) -> bool:
        """Jump to ``index`` and pause playback. Out-of-range is ignored."""
        if not 0 <= index < len(self._steps):
            return False
        self._cursor = index
        self._playback.pause()
        return True

    @_synchronized
    def reset_steps(self) -> None:
        """Rewind the cursor to the first step and pause playback."""
        self._cursor = 0
        self._playback.pause()

    # ─────────────────────────────────────────────────────────────────
    # Playback
    # ─────────────────────────────────────────────────────────────────

    def play(self, speed: str | PlaySpeed | None = None) -> bool:
        """Start auto-advancing through the trace."""
        return self._playback.play(speed)

    def pause(self) -> None:
        """Stop auto-advancing. Safe to call when not playing."""
        self._playback.pause()

    def toggle_play(self) -> bool:
        return self._playback.toggle()

    def set_play_speed(self, speed: str | PlaySpeed) -> None:
        self._playback.set_speed(speed)

    # ─────────────────────────────────────────────────────────────────
    # Export
    # ─────────────────────────────────────────────────────────────────

    @_synchronized
    def export_state(self) -> dict[str, Any]:
        """Deep-copied snapshot of the editable state.

        Returns:
            Dict with a ``graph`` (Graph) and ``positions`` (label to
            Position) that share nothing with the session.
        """
        return {"graph": clone_graph(self._graph), "positions": dict(self._positions)}

    @_synchronized
    def export_document(self) -> dict[str, Any]:
        """Serialize graph and positions to the wrapped interchange shape."""
        return export_document(self._graph, self._positions)

    @_synchronized
    def export_json(self) -> str:
        return dumps_document(self._graph, self._positions)
