"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a board front end and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- ILLEGAL_PLACEMENT: Part cannot go on that cell
- RESERVOIR_EMPTY: No marble of that color left
- NO_HISTORY: Nothing to step back to
- SNAPSHOT_REJECTED: Snapshot is malformed or for another board size
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class BallStatusName(str, Enum):
    """Marble status values."""
    AWAITING_LAUNCH = "awaiting_launch"
    ROLLING = "rolling"
    INTERCEPTED = "intercepted"
    BLUE_EMPTY = "blue_empty"
    RED_EMPTY = "red_empty"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ACTION = "INVALID_ACTION"
    ILLEGAL_PLACEMENT = "ILLEGAL_PLACEMENT"
    RESERVOIR_EMPTY = "RESERVOIR_EMPTY"
    NO_HISTORY = "NO_HISTORY"
    OUT_OF_BOUNDS = "OUT_OF_BOUNDS"
    NOTHING_STORED = "NOTHING_STORED"
    NOTHING_TO_TOGGLE = "NOTHING_TO_TOGGLE"
    UNKNOWN_DEMO = "UNKNOWN_DEMO"
    DEMO_UNAVAILABLE = "DEMO_UNAVAILABLE"
    MALFORMED_BOARD = "MALFORMED_BOARD"
    SNAPSHOT_REJECTED = "SNAPSHOT_REJECTED"
    HANDLER_ERROR = "HANDLER_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class BallInfo(BaseModel):
    """Where the marble is and where it is heading."""
    x: int
    y: int
    velocity_x: int
    color: str
    on_board: bool = Field(description="False while waiting above a ramp or parked")
    in_free_fall: bool = Field(False, description="Emulation is approximate here")


class ReservoirInfo(BaseModel):
    """Marbles on the top rails."""
    blue_available: int
    red_available: int
    blue_total: int
    red_total: int

    model_config = {"from_attributes": True}


class PartCountsInfo(BaseModel):
    """Part counters."""
    ramps: int = 0
    crossovers: int = 0
    interceptors: int = 0
    bits: int = 0
    gear_bits: int = 0
    gears: int = 0
    total: int = 0


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new emulator session."""
    width: Optional[int] = Field(None, description="Board width (server default if omitted)")
    height: Optional[int] = Field(None, description="Board height (server default if omitted)")
    marbles: Optional[int] = Field(None, ge=0, description="Marbles per color")
    url_code: Optional[str] = Field(None, description="Compact board code to start from")
    text: Optional[str] = Field(None, description="Text board to start from")
    demo: Optional[str] = Field(None, description="demo1, demo2, addition or nim")


class ActionRequest(BaseModel):
    """
    A single editing or marble action.

    Which fields are needed depends on action_type, e.g.
    {"action_type": "place_part", "x": 3, "y": 0, "part": "bit_left"}.
    """
    action_type: str = Field(..., description="place_part, hand_toggle, launch, step, ...")
    x: Optional[int] = None
    y: Optional[int] = None
    part: Optional[str] = Field(None, description="Part name, e.g. ramp_left or gear")
    color: Optional[str] = Field(None, description="blue or red")
    delta: Optional[int] = Field(None, description="Marbles to add (negative to remove)")
    count: Optional[int] = None
    name: Optional[str] = Field(None, description="Demo name")
    text: Optional[str] = Field(None, description="Text board or URL code")


class RunRequest(BaseModel):
    """Run the marble until it stops."""
    max_steps: int = Field(10_000, ge=1, le=1_000_000)


class SnapshotImportRequest(BaseModel):
    """Restore a board from a snapshot string."""
    snapshot: str = Field(..., description="W,H,marbles,<text board>")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Full state of a session."""
    session_id: str
    width: int
    height: int
    status: BallStatusName
    loop_state: str
    rows: list[str] = Field(default_factory=list, description="Text board, one string per row")
    ball: BallInfo
    reservoir: ReservoirInfo
    exits: list[str] = Field(default_factory=list, description="Colors in the tray, oldest first")
    counts: PartCountsInfo
    marble_default: int
    created_at: float


class ActionResponse(BaseModel):
    """Outcome of an action."""
    success: bool
    status: BallStatusName
    stopped: bool = False
    changes: list[str] = Field(default_factory=list)
    session: SessionResponse


class RunResponse(BaseModel):
    """Outcome of running until stopped."""
    steps: int
    status: BallStatusName
    stopped: bool
    exits: list[str] = Field(default_factory=list)
    session: SessionResponse


class ExportResponse(BaseModel):
    """The board in every exchange format."""
    text: str
    url_code: str
    share_query: str
    snapshot: str


class SessionListResponse(BaseModel):
    """List of active sessions."""
    sessions: list[str] = Field(default_factory=list)
    count: int = 0


class EndSessionResponse(BaseModel):
    """Response from ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
