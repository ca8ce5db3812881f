"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between HTTP clients and the
Session API. All responses include explicit types for OpenAPI schema
generation.

Error Codes:
- OCCUPIED_CELL: Edit would place an enemy on a filled cell
- INVALID_POSITION: Ring or column off the arena
- INVALID_GROUP_COUNT: Fewer groups than declared group ids
- UNKNOWN_TOOL: Tool name not recognised
- INVALID_NOTATION: Move, placement or solve text is malformed
- NO_SOLUTION_WITHIN_BOUND: Search exhausted its bound
- CANCELLED: Search was cancelled or timed out
- SESSION_NOT_FOUND: Session does not exist or has expired
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes (mirrors RingSolveError.code)."""
    OCCUPIED_CELL = "OCCUPIED_CELL"
    INVALID_POSITION = "INVALID_POSITION"
    INVALID_GROUP_COUNT = "INVALID_GROUP_COUNT"
    INVALID_EDIT = "INVALID_EDIT"
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    INVALID_NOTATION = "INVALID_NOTATION"
    INVALID_CATALOG = "INVALID_CATALOG"
    NO_SOLUTION_WITHIN_BOUND = "NO_SOLUTION_WITHIN_BOUND"
    CANCELLED = "CANCELLED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class SolveKind(str, Enum):
    OPTIMAL = "optimal"
    FAST = "fast"


# =============================================================================
# Shared Models
# =============================================================================

class EnemyInfo(BaseModel):
    """One enemy on the arena."""
    ring: int
    column: int
    requirement: str = Field(description="none, hammer, jump or spiked")
    group: Optional[int] = None


class ArenaInfo(BaseModel):
    """Snapshot of an arena."""
    enemies: list[EnemyInfo] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    group_count: Optional[int] = Field(None, description="None = automatic")
    enemy_count: int = 0


class ShapeInfo(BaseModel):
    """One attack shape of the catalog."""
    name: str
    cells: list[list[int]] = Field(description="[ring offset, column offset] pairs")
    weapon: Optional[str] = Field(None, description="None = any weapon")
    tool: Optional[str] = None
    min_count: Optional[int] = None
    ring_anchored: bool = False
    description: str = ""


class SearchStatsInfo(BaseModel):
    mode: str
    nodes: int
    depth: int
    elapsed: float
    table_hits: int = 0
    table_evictions: int = 0
    workers: int = 1


# =============================================================================
# Requests
# =============================================================================

class EditRequest(BaseModel):
    """
    Place or clear enemies on one column.

    Either ``placement`` notation ("c3 3 H") or ``column`` + ``rows``.
    """
    placement: Optional[str] = Field(None, description="Notation, e.g. 'c2 124' or 'c3 3 H'")
    column: Optional[int] = None
    rows: list[int] = Field(default_factory=list)
    requirement: Optional[str] = Field(None, description="H, J, P or a requirement name")
    group: Optional[int] = None
    clear: bool = False
    overwrite: bool = False


class GroupCountRequest(BaseModel):
    count: Optional[int] = Field(None, description="Number of groups; null for automatic")


class ToolRequest(BaseModel):
    tool: str = Field(description="hammer or iron_boots")
    present: bool = True


class MoveRequest(BaseModel):
    move: str = Field(description="Move notation, e.g. 'r1 3' or 'c4 -2'")


class SolveRequest(BaseModel):
    """
    Solve the session's arena.

    Either ``request`` notation ("solve fast in 3") or ``kind`` + ``bound``.
    """
    request: Optional[str] = Field(None, description="Notation, e.g. 'solve in 3'")
    kind: SolveKind = SolveKind.OPTIMAL
    bound: Optional[int] = Field(None, ge=0, description="Maximum number of moves")
    timeout: Optional[float] = Field(None, gt=0, description="Seconds before cancelling")
    apply: bool = Field(False, description="Execute the solution on the arena")


# =============================================================================
# Responses
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    error_code: ErrorCode
    details: Optional[dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    env: str


class CatalogResponse(BaseModel):
    name: str
    shapes: list[ShapeInfo]


class SessionResponse(BaseModel):
    """Session status."""
    session_id: str
    created_at: float
    arena: ArenaInfo
    executed_moves: list[str] = Field(default_factory=list)


class SessionListResponse(BaseModel):
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class ArenaResponse(BaseModel):
    """Result of an edit, setting change or executed move."""
    success: bool
    session_id: str
    arena: Optional[ArenaInfo] = None
    changes: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None


class SolveResponse(BaseModel):
    """Result of a solve request."""
    success: bool
    session_id: str
    mode: str
    moves: list[str] = Field(default_factory=list)
    length: int = 0
    text: str = Field("", description="Moves joined for display")
    stats: Optional[SearchStatsInfo] = None
    arena: Optional[ArenaInfo] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None
