"""
API Service - Business logic layer between the HTTP API and sessions.

The service:
1. Translates API requests (structured or notation) to Session API calls
2. Manages sessions
3. Formats SessionResults as response models

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
from typing import Any

from .. import __version__
from ..catalog import Catalog
from ..errors import RingSolveError
from ..notation import format_solution, parse_move, parse_placement, parse_solve_request
from ..search.cancellation import CancelToken
from ..search.modes import SolveMode
from ..session import ArenaSession, SessionManager, SessionResult
from .schemas import (
    ArenaInfo,
    ArenaResponse,
    CatalogResponse,
    EditRequest,
    EndSessionResponse,
    EnemyInfo,
    ErrorCode,
    GroupCountRequest,
    HealthResponse,
    MoveRequest,
    SearchStatsInfo,
    SessionListResponse,
    SessionResponse,
    ShapeInfo,
    SolveKind,
    SolveRequest,
    SolveResponse,
    ToolRequest,
)

logger = logging.getLogger(__name__)


class SessionNotFound(RingSolveError):
    code: str = "SESSION_NOT_FOUND"

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found", context={"session_id": session_id})


def _error_code(code: str | None) -> ErrorCode | None:
    if code is None:
        return None
    try:
        return ErrorCode(code)
    except ValueError:
        return ErrorCode.INTERNAL_ERROR


def _arena_info(arena: dict[str, Any] | None) -> ArenaInfo | None:
    if arena is None:
        return None
    enemies = [EnemyInfo(**enemy) for enemy in arena["enemies"]]
    return ArenaInfo(
        enemies=enemies,
        tools=arena["tools"],
        group_count=arena["group_count"],
        enemy_count=len(enemies),
    )


@dataclass
class ArenaAPIService:
    """
    Main API service.

    Usage:
        service = ArenaAPIService()
        session = service.create_session()
        service.apply_edit(session.session_id, EditRequest(placement="c2 124"))
        response = service.solve(session.session_id, SolveRequest(request="solve in 3"))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    env: str = "development"

    @property
    def catalog(self) -> Catalog:
        return self.session_manager.engine.goal_model.catalog

    def _session(self, session_id: str) -> ArenaSession:
        session = self.session_manager.get_session(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def _arena_response(self, session_id: str, result: SessionResult) -> ArenaResponse:
        return ArenaResponse(
            success=result.success,
            session_id=session_id,
            arena=_arena_info(result.arena),
            changes=result.changes,
            error=result.error,
            error_code=_error_code(result.error_code),
        )

    # -------------------------------------------------------------------------
    # Service info
    # -------------------------------------------------------------------------

    def health(self) -> HealthResponse:
        return HealthResponse(version=__version__, env=self.env)

    def get_catalog(self) -> CatalogResponse:
        return CatalogResponse(
            name=self.catalog.name,
            shapes=[ShapeInfo(**shape.to_dict()) for shape in self.catalog],
        )

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def create_session(self) -> SessionResponse:
        session = self.session_manager.create_session()
        return self.get_session(session.session_id)

    def get_session(self, session_id: str) -> SessionResponse:
        session = self._session(session_id)
        return SessionResponse(
            session_id=session.session_id,
            created_at=session.created_at,
            arena=_arena_info(session.arena.to_dict()),
            executed_moves=[str(move) for move in session.executed],
        )

    def list_sessions(self) -> SessionListResponse:
        sessions = self.session_manager.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    def end_session(self, session_id: str) -> EndSessionResponse:
        success = self.session_manager.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # -------------------------------------------------------------------------
    # Edits and moves
    # -------------------------------------------------------------------------

    def apply_edit(self, session_id: str, request: EditRequest) -> ArenaResponse:
        session = self._session(session_id)
        if request.placement is not None:
            placement = parse_placement(request.placement)
            column, rows = placement.column, placement.rows
            requirement = request.requirement or placement.requirement
        elif request.column is not None:
            column, rows, requirement = request.column, request.rows, request.requirement
        else:
            return ArenaResponse(
                success=False,
                session_id=session_id,
                error="Edit needs either 'placement' or 'column'",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        result = session.apply_edit(
            column,
            rows,
            requirement,
            group=request.group,
            clear=request.clear,
            overwrite=request.overwrite,
        )
        return self._arena_response(session_id, result)

    def set_group_count(self, session_id: str, request: GroupCountRequest) -> ArenaResponse:
        session = self._session(session_id)
        return self._arena_response(session_id, session.set_group_count(request.count))

    def set_tool(self, session_id: str, request: ToolRequest) -> ArenaResponse:
        session = self._session(session_id)
        return self._arena_response(session_id, session.set_tool(request.tool, request.present))

    def execute(self, session_id: str, request: MoveRequest) -> ArenaResponse:
        session = self._session(session_id)
        move = parse_move(request.move)
        return self._arena_response(session_id, session.execute(move))

    def clear(self, session_id: str) -> ArenaResponse:
        session = self._session(session_id)
        return self._arena_response(session_id, session.clear())

    # -------------------------------------------------------------------------
    # Solving
    # -------------------------------------------------------------------------

    def solve(self, session_id: str, request: SolveRequest) -> SolveResponse:
        """
        Solve the session's arena (blocking; CPU-bound).

        With ``apply`` set, the solution is executed on the live arena.
        """
        session = self._session(session_id)
        if request.request is not None:
            mode = parse_solve_request(request.request)
        elif request.kind is SolveKind.FAST:
            mode = SolveMode.fast_bounded(request.bound) if request.bound is not None else SolveMode.fast()
        else:
            mode = (
                SolveMode.optimal_bounded(request.bound)
                if request.bound is not None else SolveMode.optimal()
            )

        token = CancelToken(request.timeout if request.timeout else session.engine.timeout)
        result = session.solve(mode, token)
        if not result.success:
            return SolveResponse(
                success=False,
                session_id=session_id,
                mode=str(mode),
                arena=_arena_info(result.arena),
                error=result.error,
                error_code=_error_code(result.error_code),
            )

        solution = result.solution
        arena = result.arena
        if request.apply and solution.moves:
            for move in solution:
                applied = session.execute(move)
            arena = applied.arena
            logger.info(f"Session {session_id}: applied {len(solution)} move(s)")

        return SolveResponse(
            success=True,
            session_id=session_id,
            mode=str(mode),
            moves=[str(move) for move in solution],
            length=len(solution),
            text=format_solution(solution),
            stats=SearchStatsInfo(**solution.stats.to_dict()),
            arena=_arena_info(arena),
        )
