"""mstep.server - Flask REST API server.

Provides a thin REST wrapper over the session operation functions,
exposing graph editing, validation and trace playback over HTTP for an
interactive front-end.
"""

from mstep.server.app import create_app

__all__ = ["create_app"]
