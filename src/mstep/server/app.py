"""mstep.server.app - Flask app factory and REST API routes.

This is a THIN REST wrapper: all logic delegates to the operation
functions in ``mstep.server.operations``, which in turn drive a single
shared Session. No graph logic is duplicated here.

State pattern:
    _state = {"session": session, "config": config, "start_time": time.time()}
"""

from __future__ import annotations

import logging
import time
from typing import Any

from flask import Flask, jsonify, request
from flask_cors import CORS

from mstep.config import ConfigLoader
from mstep.graph.serialize import serialize_errors
from mstep.server.operations import (
    _clear,
    _current_step,
    _get_state,
    _mutate_add_edge,
    _mutate_add_vertex,
    _mutate_apply_layout,
    _mutate_move_vertex,
    _mutate_remove_edge,
    _mutate_remove_vertex,
    _mutate_replace_graph,
    _mutate_update_edge_weight,
    _navigate,
    _pause,
    _play,
    _redo,
    _run,
    _undo,
)
from mstep.session.controller import Session

logger = logging.getLogger(__name__)


def _json_body() -> dict[str, Any]:
    """Request body as a dict; empty or non-object bodies become ``{}``."""
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def create_app(
    session: Session | None = None,
    config: ConfigLoader | None = None,
) -> Flask:
    """Create the Flask application with REST API routes.

    Args:
        session: Session to serve. A new one is built from ``config``
            when omitted.
        config: mstep configuration.

    Returns:
        Configured Flask application.
    """
    if config is None:
        config = ConfigLoader.from_dict({})
    if session is None:
        session = Session.from_config(config)

    app = Flask(__name__)
    CORS(app)

    # Disable browser caching so the front-end always sees live state
    @app.after_request
    def _no_cache(response):
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response

    _state: dict[str, Any] = {
        "session": session,
        "config": config,
        "start_time": time.time(),
    }

    # ─────────────────────────────────────────────────────────────────
    # Read routes
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/state")
    def api_state():
        """GET /api/state - Graph, positions, errors, history and trace summary."""
        result = _get_state(_state["session"])
        result["uptime"] = round(time.time() - _state["start_time"], 1)
        return jsonify(result)

    @app.route("/api/validate")
    def api_validate():
        """GET /api/validate - Validation errors for the current graph."""
        errors = _state["session"].errors
        return jsonify({"valid": not errors, "errors": serialize_errors(errors)})

    @app.route("/api/graph", methods=["GET"])
    def api_export_graph():
        """GET /api/graph - Export graph and positions in the wrapped format."""
        return jsonify(_state["session"].export_document())

    # ─────────────────────────────────────────────────────────────────
    # Vertex routes
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/vertices", methods=["POST"])
    def api_add_vertex():
        """POST /api/vertices - Add a vertex.

        Body: {label?, x?, y?}. Without a label the next free one is used.
        """
        data = _json_body()
        position = None
        if "x" in data or "y" in data:
            position = {"x": data.get("x"), "y": data.get("y")}
        result = _mutate_add_vertex(_state["session"], data.get("label") or None, position)
        status_code = 200 if result.get("success") else 400
        return jsonify(result), status_code

    @app.route("/api/vertices/<label>", methods=["DELETE"])
    def api_remove_vertex(label: str):
        """DELETE /api/vertices/<label> - Remove a vertex and its edges."""
        result = _mutate_remove_vertex(_state["session"], label)
        status_code = 200 if result.get("success") else 404
        return jsonify(result), status_code

    @app.route("/api/vertices/<label>/position", methods=["PUT"])
    def api_move_vertex(label: str):
        """PUT /api/vertices/<label>/position - Move a vertex.

        Body: {x, y, record_history?}. ``record_history: false`` is used for
        intermediate drag updates.
        """
        data = _json_body()
        result = _mutate_move_vertex(
            _state["session"],
            label,
            {"x": data.get("x"), "y": data.get("y")},
            record_history=bool(data.get("record_history", True)),
        )
        if result.get("success"):
            return jsonify(result)
        status_code = 404 if "errors" in result else 400
        return jsonify(result), status_code

    # ─────────────────────────────────────────────────────────────────
    # Edge routes
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/edges", methods=["POST", "PATCH", "DELETE"])
    def api_edges():
        """Edge mutations.

        POST {u, v, w} adds an edge, PATCH {u, v, w} changes its weight and
        DELETE {u, v} removes it.
        """
        data = _json_body()
        u = data.get("u", "")
        v = data.get("v", "")
        if not isinstance(u, str) or not isinstance(v, str) or not u or not v:
            return jsonify({"success": False, "error": "u and v required"}), 400

        session = _state["session"]
        if request.method == "POST":
            result = _mutate_add_edge(session, u, v, data.get("w"))
            status_code = 200 if result.get("success") else 409
        elif request.method == "PATCH":
            result = _mutate_update_edge_weight(session, u, v, data.get("w"))
            status_code = 200 if result.get("success") else 404
        else:
            result = _mutate_remove_edge(session, u, v)
            status_code = 200 if result.get("success") else 404
        return jsonify(result), status_code

    # ─────────────────────────────────────────────────────────────────
    # Whole-graph routes
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/graph", methods=["POST"])
    def api_replace_graph():
        """POST /api/graph - Import a graph document (wrapped or legacy)."""
        data = request.get_json(force=True, silent=True)
        if data is None:
            return jsonify({"success": False, "error": "Invalid JSON body"}), 400
        result = _mutate_replace_graph(_state["session"], data)
        status_code = 200 if result.get("success") else 400
        return jsonify(result), status_code

    @app.route("/api/layout", methods=["POST"])
    def api_layout():
        """POST /api/layout - Apply many vertex positions as one edit."""
        data = _json_body()
        result = _mutate_apply_layout(_state["session"], data.get("positions"))
        status_code = 200 if result.get("success") else 400
        return jsonify(result), status_code

    @app.route("/api/clear", methods=["POST"])
    def api_clear():
        """POST /api/clear - Start over with an empty graph."""
        return jsonify(_clear(_state["session"]))

    # ─────────────────────────────────────────────────────────────────
    # History routes
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/undo", methods=["POST"])
    def api_undo():
        """POST /api/undo - Undo the most recent edit."""
        result = _undo(_state["session"])
        status_code = 200 if result.get("success") else 409
        return jsonify(result), status_code

    @app.route("/api/redo", methods=["POST"])
    def api_redo():
        """POST /api/redo - Redo the most recently undone edit."""
        result = _redo(_state["session"])
        status_code = 200 if result.get("success") else 409
        return jsonify(result), status_code

    # ─────────────────────────────────────────────────────────────────
    # Algorithm routes
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/run", methods=["POST"])
    def api_run():
        """POST /api/run - Run Reverse-Delete and start a new trace."""
        result = _run(_state["session"])
        status_code = 200 if result.get("success") else 409
        return jsonify(result), status_code

    @app.route("/api/steps/current")
    def api_current_step():
        """GET /api/steps/current - The step under the cursor."""
        result = _current_step(_state["session"])
        status_code = 200 if result.get("success") else 404
        return jsonify(result), status_code

    @app.route("/api/steps/<action>", methods=["POST"])
    def api_navigate(action: str):
        """POST /api/steps/next|previous|reset|goto - Move the cursor.

        ``goto`` takes {index}.
        """
        if action not in ("next", "previous", "reset", "goto"):
            return jsonify({"success": False, "error": f"Unknown action: {action}"}), 404
        index = None
        if action == "goto":
            raw = _json_body().get("index")
            if isinstance(raw, bool) or not isinstance(raw, int):
                return jsonify({"success": False, "error": "integer 'index' required"}), 400
            index = raw
        result = _navigate(_state["session"], action, index)
        status_code = 200 if result.get("success") else 409
        return jsonify(result), status_code

    @app.route("/api/play", methods=["POST"])
    def api_play():
        """POST /api/play - Start auto-advance. Body: {speed?}."""
        result = _play(_state["session"], _json_body().get("speed"))
        status_code = 200 if result.get("success") else 400
        return jsonify(result), status_code

    @app.route("/api/pause", methods=["POST"])
    def api_pause():
        """POST /api/pause - Stop auto-advance."""
        return jsonify(_pause(_state["session"]))

    logger.debug("Created API app with %d routes", len(list(app.url_map.iter_rules())))
    return app
