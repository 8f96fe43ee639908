"""
minish History Module

Bounded command history with index and prefix lookup and replay.
"""

from .store import HistoryEntry, HistoryStore, LIST_COMMAND, REPLAY_MARKER

__all__ = [
    'HistoryEntry',
    'HistoryStore',
    'LIST_COMMAND',
    'REPLAY_MARKER',
]
