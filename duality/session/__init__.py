"""
Session Module - Owns ephemeral per-session game state.

A session represents one play-through:
- Created the first time its id is referenced (or explicitly)
- Holds the current GameState and the session's dice
- Serializes operations with a per-session lock
- Destroyed explicitly or when it goes stale

Sessions are EPHEMERAL: nothing is persisted.
"""

from .manager import SessionManager, Session

__all__ = [
    "SessionManager",
    "Session",
]
