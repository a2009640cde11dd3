"""
mstep - Step through the Reverse-Delete minimum spanning tree algorithm

mstep validates weighted undirected graphs, records every decision the
Reverse-Delete algorithm makes as a replayable trace, and keeps an
editing session with undo/redo and timed playback behind a small REST
API and command-line interface.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mstep")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed

from mstep.algorithm import Step, StepKind, run_reverse_delete
from mstep.graph import Edge, Graph, Position, clone_graph, is_connected
from mstep.session import Session
from mstep.validation import ErrorKind, ValidationError, validate_graph

__all__ = [
    "__version__",
    "Edge",
    "Graph",
    "Position",
    "clone_graph",
    "is_connected",
    "ErrorKind",
    "ValidationError",
    "validate_graph",
    "Step",
    "StepKind",
    "run_reverse_delete",
    "Session",
]
