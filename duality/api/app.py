"""
FastAPI Application - REST API for the orchestration bridge.

Endpoints:
    GET    /api/v1/health                          Health check
    GET    /api/v1/tools                           List tools and their schemas
    POST   /api/v1/sessions                        Create session
    GET    /api/v1/sessions                        List sessions
    DELETE /api/v1/sessions/{id}                   End session
    GET    /api/v1/sessions/{id}/state             Full JSON snapshot
    GET    /api/v1/sessions/{id}/summary           Textual digest for prompts
    POST   /api/v1/sessions/{id}/tools/{tool}      Invoke a tool

Sessions are created on first reference: calling a tool or reading the
state of an unknown id provisions the default state.

All responses are JSON with explicit Pydantic schemas. Tool arguments
are the JSON request body.
"""

from typing import Annotated, Any, Optional
import os

from .. import __version__

# Environment configuration
DUALITY_ENV = os.getenv("DUALITY_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")
DUALITY_SESSION_TTL = float(os.getenv("DUALITY_SESSION_TTL", "3600"))
DUALITY_LOG_LEVEL = os.getenv("DUALITY_LOG_LEVEL", "INFO")


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional ToolService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    from fastapi import FastAPI, Body, Query, Request
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse

    from .service import ToolService, UnknownToolError, ToolArgumentError
    from .schemas import (
        # Request models
        CreateSessionRequest,
        # Response models
        SessionResponse,
        SessionListResponse,
        EndSessionResponse,
        ToolDefinition,
        ToolListResponse,
        ToolCallResponse,
        GameStateResponse,
        StateSummaryResponse,
        ErrorResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="Duality Engine API",
        description="""
Rules engine for an LLM game master. Every rules-driven change to a
session goes through a named tool.

## Error Codes

| Code | Description |
|------|-------------|
| `VALIDATION_ERROR` | Tool arguments were rejected; nothing changed |
| `UNKNOWN_TOOL` | No tool with that name |
| `SESSION_NOT_FOUND` | Session does not exist |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or ToolService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(UnknownToolError)
    async def unknown_tool_handler(request: Request, exc: UnknownToolError):
        return make_error_response(ErrorCode.UNKNOWN_TOOL, str(exc), status_code=404)

    @app.exception_handler(ToolArgumentError)
    async def tool_argument_handler(request: Request, exc: ToolArgumentError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            str(exc),
            status_code=422,
            details={"tool": exc.tool_name, "errors": exc.errors},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        return make_error_response(ErrorCode.VALIDATION_ERROR, str(exc), status_code=422)

    def _evict_stale() -> None:
        api_service.cleanup(DUALITY_SESSION_TTL)

    def _session_response(session) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            seed=session.seed,
            created_at=session.created_at,
            operation_count=session.operation_count,
        )

    # =========================================================================
    # Tools
    # =========================================================================

    @app.get(
        "/api/v1/tools",
        response_model=ToolListResponse,
        tags=["Tools"],
        summary="List available tools",
    )
    async def list_tools() -> ToolListResponse:
        """Names, descriptions and JSON argument schemas of every tool."""
        tools = [ToolDefinition(**definition) for definition in api_service.tool_definitions()]
        return ToolListResponse(tools=tools, count=len(tools))

    @app.post(
        "/api/v1/sessions/{session_id}/tools/{tool_name}",
        response_model=ToolCallResponse,
        responses={
            404: {"model": ErrorResponse, "description": "Unknown tool"},
            422: {"model": ErrorResponse, "description": "Invalid arguments"},
        },
        tags=["Tools"],
        summary="Invoke a tool on a session",
    )
    def call_tool(
        session_id: str,
        tool_name: str,
        arguments: Annotated[Optional[dict[str, Any]], Body(description="Tool arguments")] = None,
    ) -> ToolCallResponse:
        """
        Invoke a tool. The session is created if it does not exist yet.

        On validation failure the session state is unchanged.
        """
        _evict_stale()
        result = api_service.call(session_id, tool_name, arguments or {})
        return ToolCallResponse(**result.to_dict())

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new session",
    )
    async def create_session(
        request: Annotated[Optional[CreateSessionRequest], Body()] = None,
    ) -> SessionResponse:
        """Create a session with the default state, optionally seeded."""
        _evict_stale()
        request = request or CreateSessionRequest()
        session = api_service.create_session(request.session_id, seed=request.seed)
        return _session_response(session)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(
        session_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "user_ended",
    ) -> EndSessionResponse:
        """End a session and release its state."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        tags=["Sessions"],
        summary="Get the full game state",
    )
    async def get_state(session_id: str) -> GameStateResponse:
        """Full JSON snapshot. Reading never mutates the state."""
        return GameStateResponse(session_id=session_id, state=api_service.get_state(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/summary",
        response_model=StateSummaryResponse,
        tags=["Sessions"],
        summary="Get the textual state digest",
    )
    async def get_summary(session_id: str) -> StateSummaryResponse:
        """Section-headed digest for prompt assembly."""
        return StateSummaryResponse(session_id=session_id, summary=api_service.render_state(session_id))

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="duality-engine",
            version=__version__,
            environment=DUALITY_ENV,
            active_sessions=len(api_service.list_sessions()),
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Duality Engine API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app


# For running directly: uvicorn duality.api.app:app
app = create_app()
