"""
Session Module - Manages ephemeral arena sessions.

A session represents one arena being set up and solved:
- Created when a caller starts working on an arena
- Holds the live arena and executed moves
- Solves snapshots of the arena on request
- Discarded when the caller is done

Sessions are EPHEMERAL: nothing is persisted.
"""

from .manager import ArenaSession, SessionManager, SessionResult

__all__ = [
    "ArenaSession",
    "SessionManager",
    "SessionResult",
]
