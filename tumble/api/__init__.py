"""
API Module - HTTP interface to the emulator.

Exposes sessions over REST so a front end can:
1. Create a session with a starting board
2. Edit the board and crank levers
3. Step, step back or run the marble
4. Export and import boards

All state is session-scoped and in-memory.
"""

from .schemas import (
    # Requests
    ActionRequest,
    CreateSessionRequest,
    RunRequest,
    SnapshotImportRequest,
    # Responses
    ActionResponse,
    ErrorResponse,
    ExportResponse,
    RunResponse,
    SessionResponse,
    # Enums
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "CreateSessionRequest",
    "RunRequest",
    "SnapshotImportRequest",
    # Responses
    "ActionResponse",
    "ErrorResponse",
    "ExportResponse",
    "RunResponse",
    "SessionResponse",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
