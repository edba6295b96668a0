"""
FastAPI Application - REST API for board front ends.

Endpoints:
    GET    /api/v1/health                         Health check
    POST   /api/v1/sessions                       Create session
    GET    /api/v1/sessions                       List sessions
    GET    /api/v1/sessions/{id}                  Get session state
    DELETE /api/v1/sessions/{id}                  End session
    POST   /api/v1/sessions/{id}/actions          Apply an editing or marble action
    POST   /api/v1/sessions/{id}/launch/{color}   Crank a lever
    POST   /api/v1/sessions/{id}/step             Move the marble one row
    POST   /api/v1/sessions/{id}/step-back        Undo one step
    POST   /api/v1/sessions/{id}/run              Run until the marble stops
    GET    /api/v1/sessions/{id}/export           Text board, URL code, snapshot
    POST   /api/v1/sessions/{id}/import/snapshot  Restore from a snapshot

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union

from .. import __version__


def create_app(service=None, settings=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from ..config import load_settings
    from .service import APIService
    from .schemas import (
        # Request models
        ActionRequest,
        CreateSessionRequest,
        RunRequest,
        SnapshotImportRequest,
        # Response models
        ActionResponse,
        EndSessionResponse,
        ErrorResponse,
        ExportResponse,
        HealthResponse,
        RunResponse,
        SessionListResponse,
        SessionResponse,
        # Enums
        ErrorCode,
    )

    settings = settings or (service.settings if service else load_settings())

    app = FastAPI(
        title="Tumble Emulator API",
        description="""
Marble computer emulator - build a board, crank a lever, watch the marbles.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `ILLEGAL_PLACEMENT` | Part cannot go on that cell |
| `RESERVOIR_EMPTY` | No marble of that color left |
| `NO_HISTORY` | Nothing to step back to |
| `SNAPSHOT_REJECTED` | Snapshot malformed or for another board size |
        """,
        version=__version__,
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

    api_service = service or APIService(settings=settings)

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Unknown sessions are 404, everything else 400."""
        status_code = 404 if error.error_code == ErrorCode.SESSION_NOT_FOUND else 400
        return JSONResponse(status_code=status_code, content=error.model_dump(mode="json"))

    def respond(response):
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Create a new session",
    )
    async def create_session(
        body: Optional[CreateSessionRequest] = None,
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new session.

        Without a board the standard 11x11 board starts from demo1,
        other sizes start empty.
        """
        return respond(api_service.create_session(body or CreateSessionRequest()))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session state",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.get_session(session_id))

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
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Board and Marble Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/actions",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Action rejected"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Board"],
        summary="Apply an editing or marble action",
    )
    async def apply_action(
        session_id: str,
        body: ActionRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Apply one action.

        **Request Body:**
        ```json
        {"action_type": "place_part", "x": 3, "y": 0, "part": "bit_left"}
        ```
        """
        return respond(api_service.apply_action(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/launch/{color}",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Marbles"],
        summary="Crank the blue or red lever",
    )
    async def launch(session_id: str, color: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.launch(session_id, color))

    @app.post(
        "/api/v1/sessions/{session_id}/step",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Marbles"],
        summary="Move the marble one row",
    )
    async def step(session_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.step(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/step-back",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Marbles"],
        summary="Undo the last step",
    )
    async def step_back(session_id: str) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.step_back(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/run",
        response_model=RunResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Marbles"],
        summary="Run until the marble stops",
    )
    async def run(
        session_id: str,
        body: Optional[RunRequest] = None,
    ) -> Union[RunResponse, JSONResponse]:
        return respond(api_service.run(session_id, body or RunRequest()))

    # =========================================================================
    # Import / Export Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/export",
        response_model=ExportResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Import/Export"],
        summary="Export the board",
    )
    async def export_board(session_id: str) -> Union[ExportResponse, JSONResponse]:
        return respond(api_service.export_board(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/import/snapshot",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
        tags=["Import/Export"],
        summary="Restore a board from a snapshot",
    )
    async def import_snapshot(
        session_id: str,
        body: SnapshotImportRequest,
    ) -> Union[SessionResponse, JSONResponse]:
        return respond(api_service.import_snapshot(session_id, body))

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
            service="tumble-emulator",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Tumble Emulator API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app
