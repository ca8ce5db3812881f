"""
FastAPI Application - REST API over the Session API.

Endpoints:
    GET    /api/v1/health                     Service health
    GET    /api/v1/catalog                    Attack catalog in use
    POST   /api/v1/sessions                   Create arena session
    GET    /api/v1/sessions                   List sessions
    GET    /api/v1/sessions/{id}              Get session and arena
    DELETE /api/v1/sessions/{id}              End session
    POST   /api/v1/sessions/{id}/edits        Place or clear enemies
    PUT    /api/v1/sessions/{id}/groups       Set group count
    PUT    /api/v1/sessions/{id}/tools        Set tool availability
    POST   /api/v1/sessions/{id}/moves        Execute one move
    POST   /api/v1/sessions/{id}/clear        Reset the arena
    POST   /api/v1/sessions/{id}/solve        Solve the arena

All bodies and responses are JSON with explicit Pydantic schemas.
Domain failures come back as ErrorResponse with an ErrorCode.
"""

from typing import Union
import logging

from ..config import Settings, load_settings
from ..engine_core.goal import GoalModel
from ..errors import RingSolveError
from ..search.engine import SearchEngine
from ..session import SessionManager

logger = logging.getLogger(__name__)

# HTTP status per error code; anything else is a 400
STATUS_BY_CODE = {
    "SESSION_NOT_FOUND": 404,
    "OCCUPIED_CELL": 409,
    "NO_SOLUTION_WITHIN_BOUND": 422,
    "CANCELLED": 408,
    "INTERNAL_ERROR": 500,
}


def build_service(settings: Settings):
    """Wire catalog, engine and session manager from settings."""
    from .service import ArenaAPIService

    catalog = settings.catalog()
    engine = SearchEngine.from_settings(settings, GoalModel(catalog))
    logger.info(
        f"Catalog '{catalog.name}' ({len(catalog)} shapes), "
        f"{settings.search_workers} search worker(s)"
    )
    return ArenaAPIService(session_manager=SessionManager(engine), env=settings.env)


def create_app(service=None, settings: Settings | None = None):
    """
    Create the FastAPI application.

    Args:
        service: Optional ArenaAPIService instance (built from settings if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    from fastapi import FastAPI, Request
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse

    from .schemas import (
        ArenaResponse,
        CatalogResponse,
        EditRequest,
        EndSessionResponse,
        ErrorCode,
        ErrorResponse,
        GroupCountRequest,
        HealthResponse,
        MoveRequest,
        SessionListResponse,
        SessionResponse,
        SolveRequest,
        SolveResponse,
        ToolRequest,
    )

    settings = settings or load_settings()
    api_service = service or build_service(settings)

    app = FastAPI(
        title="Ringsolve API",
        description="""
Ring arena solver - finds the ring rotations and column shifts after
which every enemy group can be cleared in one attack.

## Error Codes

| Code | Description |
|------|-------------|
| `OCCUPIED_CELL` | Edit would place an enemy on a filled cell |
| `INVALID_POSITION` | Ring or column off the arena |
| `INVALID_GROUP_COUNT` | Fewer groups than declared group ids |
| `INVALID_NOTATION` | Malformed move, placement or solve text |
| `NO_SOLUTION_WITHIN_BOUND` | No solution within the move bound |
| `CANCELLED` | Search was cancelled or timed out |
| `SESSION_NOT_FOUND` | Session does not exist |
        """,
        version=api_service.health().version,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=STATUS_BY_CODE.get(error_code.value, 400),
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def failure_response(response: Union[ArenaResponse, SolveResponse]) -> JSONResponse:
        return make_error_response(
            response.error_code or ErrorCode.INTERNAL_ERROR,
            response.error or "Request failed",
            details={"session_id": response.session_id},
        )

    @app.exception_handler(RingSolveError)
    async def ringsolve_error_handler(request: Request, exc: RingSolveError) -> JSONResponse:
        try:
            code = ErrorCode(exc.code)
        except ValueError:
            code = ErrorCode.INTERNAL_ERROR
        return make_error_response(code, exc.message, details=exc.context or None)

    # =========================================================================
    # Service Endpoints
    # =========================================================================

    @app.get("/api/v1/health", response_model=HealthResponse, tags=["Service"])
    async def health() -> HealthResponse:
        return api_service.health()

    @app.get("/api/v1/catalog", response_model=CatalogResponse, tags=["Service"])
    async def get_catalog() -> CatalogResponse:
        """The attack shapes the goal test uses."""
        return api_service.get_catalog()

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        status_code=201,
        tags=["Sessions"],
        summary="Create a new arena session",
    )
    async def create_session() -> SessionResponse:
        return api_service.create_session()

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> SessionListResponse:
        return api_service.list_sessions()

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session and arena",
    )
    async def get_session(session_id: str) -> SessionResponse:
        return api_service.get_session(session_id)

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        return api_service.end_session(session_id)

    # =========================================================================
    # Arena Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/edits",
        response_model=ArenaResponse,
        responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
        tags=["Arena"],
        summary="Place or clear enemies on one column",
    )
    async def apply_edit(session_id: str, body: EditRequest) -> Union[ArenaResponse, JSONResponse]:
        response = api_service.apply_edit(session_id, body)
        return response if response.success else failure_response(response)

    @app.put(
        "/api/v1/sessions/{session_id}/groups",
        response_model=ArenaResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Arena"],
        summary="Set the number of enemy groups",
    )
    async def set_group_count(
        session_id: str, body: GroupCountRequest
    ) -> Union[ArenaResponse, JSONResponse]:
        response = api_service.set_group_count(session_id, body)
        return response if response.success else failure_response(response)

    @app.put(
        "/api/v1/sessions/{session_id}/tools",
        response_model=ArenaResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Arena"],
        summary="Mark a tool as available or not",
    )
    async def set_tool(session_id: str, body: ToolRequest) -> Union[ArenaResponse, JSONResponse]:
        response = api_service.set_tool(session_id, body)
        return response if response.success else failure_response(response)

    @app.post(
        "/api/v1/sessions/{session_id}/moves",
        response_model=ArenaResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Arena"],
        summary="Execute one move",
    )
    async def execute_move(session_id: str, body: MoveRequest) -> Union[ArenaResponse, JSONResponse]:
        response = api_service.execute(session_id, body)
        return response if response.success else failure_response(response)

    @app.post(
        "/api/v1/sessions/{session_id}/clear",
        response_model=ArenaResponse,
        tags=["Arena"],
        summary="Reset to an empty arena",
    )
    async def clear_arena(session_id: str) -> ArenaResponse:
        return api_service.clear(session_id)

    # Solving is CPU-bound: a plain def runs in the threadpool
    @app.post(
        "/api/v1/sessions/{session_id}/solve",
        response_model=SolveResponse,
        responses={
            408: {"model": ErrorResponse, "description": "Cancelled or timed out"},
            422: {"model": ErrorResponse, "description": "No solution within bound"},
        },
        tags=["Solving"],
        summary="Solve the arena",
    )
    def solve(session_id: str, body: SolveRequest) -> Union[SolveResponse, JSONResponse]:
        response = api_service.solve(session_id, body)
        return response if response.success else failure_response(response)

    return app


# For running directly: uvicorn ringsolve.api.app:app
app = create_app()
