"""Session operations for the REST API.

Each function takes the Session plus already-decoded parameters and
returns a JSON-compatible dict with a ``success`` flag. The Flask routes
in ``mstep.server.app`` only unpack requests and pick status codes.
"""

from __future__ import annotations

from typing import Any

from mstep.graph.deserializer import GraphFormatError, _parse_weight, load_document
from mstep.graph.model import Position
from mstep.graph.serialize import serialize_errors, serialize_positions, serialize_step
from mstep.session.controller import MutationResult, Session


def _get_state(session: Session) -> dict[str, Any]:
    """Full view of the session for the front-end."""
    step = session.current_step
    return {
        "graph": session.graph.to_dict(),
        "positions": serialize_positions(session.positions),
        "errors": serialize_errors(session.errors),
        "can_undo": session.can_undo(),
        "can_redo": session.can_redo(),
        "can_run": session.is_valid,
        "trace": {
            "active": session.has_trace,
            "length": session.step_count,
            "cursor": session.cursor,
            "current": serialize_step(step) if step is not None else None,
            "complete": session.is_complete,
        },
        "playback": {
            "playing": session.is_playing,
            "speed": session.playback.speed.value,
        },
    }


def _mutation_response(session: Session, result: MutationResult, message: str) -> dict[str, Any]:
    response: dict[str, Any] = {
        "success": result.applied,
        "errors": serialize_errors(result.errors),
        "trace_cleared": result.trace_cleared,
        "can_undo": session.can_undo(),
        "can_redo": session.can_redo(),
    }
    if result.applied:
        response["message"] = message
    else:
        response["error"] = f"Rejected: {message}"
    return response


def _parse_position(data: dict[str, Any]) -> Position:
    try:
        return Position(float(data["x"]), float(data["y"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError("position requires numeric 'x' and 'y'") from e


def _mutate_add_vertex(
    session: Session,
    label: str | None = None,
    position: dict[str, Any] | None = None,
) -> dict[str, Any]:
    if label is not None and not isinstance(label, str):
        return {"success": False, "error": "'label' must be a string"}
    try:
        pos = _parse_position(position) if position else None
    except ValueError as e:
        return {"success": False, "error": str(e)}
    before = set(session.graph.vertices)
    result = session.add_vertex(label, pos)
    added = [v for v in session.graph.vertices if v not in before]
    response = _mutation_response(session, result, f"Added vertex {added[0] if added else label}")
    if added:
        response["label"] = added[0]
    return response


def _mutate_remove_vertex(session: Session, label: str) -> dict[str, Any]:
    result = session.remove_vertex(label)
    return _mutation_response(session, result, f"Removed vertex {label}")


def _mutate_move_vertex(
    session: Session,
    label: str,
    position: dict[str, Any],
    record_history: bool = True,
) -> dict[str, Any]:
    try:
        pos = _parse_position(position)
    except ValueError as e:
        return {"success": False, "error": str(e)}
    result = session.move_vertex(label, pos, record_history=record_history)
    return _mutation_response(session, result, f"Moved vertex {label}")


def _mutate_add_edge(session: Session, u: str, v: str, w: Any) -> dict[str, Any]:
    result = session.add_edge(u, v, _parse_weight(w))
    return _mutation_response(session, result, f"Added edge {u}-{v}")


def _mutate_update_edge_weight(session: Session, u: str, v: str, w: Any) -> dict[str, Any]:
    result = session.update_edge_weight(u, v, _parse_weight(w))
    return _mutation_response(session, result, f"Updated edge {u}-{v}")


def _mutate_remove_edge(session: Session, u: str, v: str) -> dict[str, Any]:
    result = session.remove_edge(u, v)
    return _mutation_response(session, result, f"Removed edge {u}-{v}")


def _mutate_replace_graph(session: Session, data: Any) -> dict[str, Any]:
    """Import a graph document; a malformed document leaves state untouched."""
    try:
        document = load_document(data)
    except GraphFormatError as e:
        return {"success": False, "error": str(e), "format_error": True}
    result = session.load_document(document)
    response = _mutation_response(session, result, "Graph replaced")
    response["legacy_format"] = document.legacy
    return response


def _mutate_apply_layout(session: Session, positions: dict[str, Any]) -> dict[str, Any]:
    if not isinstance(positions, dict):
        return {"success": False, "error": "'positions' must be an object"}
    try:
        parsed = {label: _parse_position(p) for label, p in positions.items()}
    except ValueError as e:
        return {"success": False, "error": str(e)}
    result = session.apply_layout(parsed)
    return _mutation_response(session, result, "Layout applied")


def _clear(session: Session) -> dict[str, Any]:
    result = session.clear()
    return _mutation_response(session, result, "Graph cleared")


def _undo(session: Session) -> dict[str, Any]:
    if not session.undo():
        return {"success": False, "error": "Nothing to undo"}
    return {"success": True, "message": "Undone", "errors": serialize_errors(session.errors)}


def _redo(session: Session) -> dict[str, Any]:
    if not session.redo():
        return {"success": False, "error": "Nothing to redo"}
    return {"success": True, "message": "Redone", "errors": serialize_errors(session.errors)}


def _run(session: Session) -> dict[str, Any]:
    steps = session.run()
    if steps is None:
        return {
            "success": False,
            "error": "Graph has validation errors",
            "errors": serialize_errors(session.errors),
        }
    return {
        "success": True,
        "step_count": len(steps),
        "steps": [serialize_step(step) for step in steps],
    }


def _current_step(session: Session) -> dict[str, Any]:
    step = session.current_step
    if step is None:
        return {"success": False, "error": "No active trace"}
    return {
        "success": True,
        "cursor": session.cursor,
        "length": session.step_count,
        "step": serialize_step(step),
    }


def _navigate(session: Session, action: str, index: int | None = None) -> dict[str, Any]:
    """Move the cursor: ``next``, ``previous``, ``reset`` or ``goto``."""
    if not session.has_trace:
        return {"success": False, "error": "No active trace"}
    if action == "next":
        moved = session.next_step()
    elif action == "previous":
        moved = session.previous_step()
    elif action == "reset":
        session.reset_steps()
        moved = True
    elif action == "goto":
        if index is None:
            return {"success": False, "error": "'index' is required"}
        moved = session.go_to_step(index)
    else:
        return {"success": False, "error": f"Unknown navigation action: {action}"}
    response = _current_step(session)
    response["moved"] = moved
    return response


def _play(session: Session, speed: str | None = None) -> dict[str, Any]:
    try:
        playing = session.play(speed)
    except ValueError as e:
        return {"success": False, "error": str(e)}
    return {
        "success": True,
        "playing": playing,
        "speed": session.playback.speed.value,
    }


def _pause(session: Session) -> dict[str, Any]:
    session.pause()
    return {"success": True, "playing": False}
