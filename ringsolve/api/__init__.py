"""
API Module - HTTP interface to arena sessions.

Exposes the Session API via REST. A client:
1. Creates a session
2. Places enemies and sets groups/tools
3. Asks for a solution (optimal or fast, optionally bounded)
4. Executes moves or applies the solution
5. Ends the session

All state is session-scoped. No persistent storage.
"""

from .schemas import (
    # Requests
    EditRequest,
    GroupCountRequest,
    ToolRequest,
    MoveRequest,
    SolveRequest,
    # Responses
    ArenaResponse,
    SolveResponse,
    SessionResponse,
    ErrorResponse,
    # Shared
    ArenaInfo,
    EnemyInfo,
    ErrorCode,
)
from .service import ArenaAPIService, SessionNotFound
from .app import create_app

__all__ = [
    # Requests
    "EditRequest",
    "GroupCountRequest",
    "ToolRequest",
    "MoveRequest",
    "SolveRequest",
    # Responses
    "ArenaResponse",
    "SolveResponse",
    "SessionResponse",
    "ErrorResponse",
    # Shared
    "ArenaInfo",
    "EnemyInfo",
    "ErrorCode",
    # Service
    "ArenaAPIService",
    "SessionNotFound",
    "create_app",
]
