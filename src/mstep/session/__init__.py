"""Session module - Editing state, undo/redo history and trace playback."""

from mstep.session.controller import MutationResult, Session
from mstep.session.history import History, HistoryEntry
from mstep.session.playback import DEFAULT_INTERVALS, PlaySpeed, Playback

__all__ = [
    "Session",
    "MutationResult",
    "History",
    "HistoryEntry",
    "Playback",
    "PlaySpeed",
    "DEFAULT_INTERVALS",
]
