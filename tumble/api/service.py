"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to reducer actions
2. Manages sessions
3. Exports and imports boards
4. Formats responses

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

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
    # Shared
    BallInfo,
    PartCountsInfo,
    ReservoirInfo,
    # Enums
    BallStatusName,
    ErrorCode,
)
from ..config import Settings
from ..codecs import (
    decode_snapshot,
    encode_snapshot,
    encode_text,
    encode_url,
    share_query,
)
from ..engine_core import stepper
from ..engine_core.action import Action, ActionPayload, ActionResult, ActionType
from ..engine_core.parts import PartKind
from ..engine_core.reducer import Reducer
from ..engine_core.state import MarbleColor
from ..session import Session, SessionManager


logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest(demo="demo2"))
        service.launch(session.session_id, "blue")
        service.run(session.session_id, RunRequest())
    """
    settings: Settings = field(default_factory=Settings)
    session_manager: SessionManager | None = None
    reducer: Reducer = field(default_factory=Reducer)

    def __post_init__(self):
        if self.session_manager is None:
            self.session_manager = SessionManager(speed=self.settings.speed)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse | ErrorResponse:
        """Create a new session."""
        try:
            session = self.session_manager.create_session(
                width=request.width if request.width is not None else self.settings.width,
                height=request.height if request.height is not None else self.settings.height,
                marbles=request.marbles if request.marbles is not None else self.settings.marbles,
                url_code=request.url_code,
                text=request.text,
                demo=request.demo,
            )
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.VALIDATION_ERROR)
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """End a session."""
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        """List active session IDs."""
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Actions
    # =========================================================================

    def apply_action(self, session_id: str, request: ActionRequest) -> ActionResponse | ErrorResponse:
        """Translate a request into an engine action and apply it."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        action = self._build_action(request)
        if isinstance(action, ErrorResponse):
            return action

        result = self.reducer.apply(session.simulation, action)
        return self._action_to_response(session, result)

    def launch(self, session_id: str, color: str) -> ActionResponse | ErrorResponse:
        """Crank a lever: launch and move the marble off its waiting spot."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        marble = _parse_color(color)
        if marble is None:
            return ErrorResponse(
                error=f"Unknown marble color: {color}",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        result = self.reducer.apply(session.simulation, Action.launch(marble))
        if result.success:
            step_result = self.reducer.apply(session.simulation, Action.step())
            step_result.state_changes = result.state_changes + step_result.state_changes
            result = step_result
        return self._action_to_response(session, result)

    def step(self, session_id: str) -> ActionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        result = self.reducer.apply(session.simulation, Action.step())
        return self._action_to_response(session, result)

    def step_back(self, session_id: str) -> ActionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        result = self.reducer.apply(session.simulation, Action.step_back())
        return self._action_to_response(session, result)

    def run(self, session_id: str, request: RunRequest) -> RunResponse | ErrorResponse:
        """Step until the marble stops (or max_steps)."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        results = stepper.run_until_stopped(session.simulation, request.max_steps)
        simulation = session.simulation
        return RunResponse(
            steps=len(results),
            status=BallStatusName(simulation.status.value),
            stopped=bool(results) and results[-1].stopped,
            exits=[color.value for color in simulation.exit_colors],
            session=self._session_to_response(session),
        )

    # =========================================================================
    # Import / Export
    # =========================================================================

    def export_board(self, session_id: str) -> ExportResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        simulation = session.simulation
        return ExportResponse(
            text=encode_text(simulation.board),
            url_code=encode_url(simulation.board, simulation.reservoir),
            share_query=share_query(simulation.board, simulation.reservoir),
            snapshot=encode_snapshot(simulation),
        )

    def import_snapshot(
        self, session_id: str, request: SnapshotImportRequest
    ) -> SessionResponse | ErrorResponse:
        """
        Replace the board with a snapshot.

        Snapshots for a different board size are rejected, never applied.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        simulation = session.simulation
        decoded = decode_snapshot(request.snapshot, simulation.topology)
        if not decoded.ok:
            return ErrorResponse(
                error="Snapshot rejected",
                error_code=ErrorCode.SNAPSHOT_REJECTED,
                details={"reason": decoded.reason},
            )

        simulation.undo_board = simulation.board.copy()
        simulation.board = decoded.board
        simulation.set_marble_default(decoded.marble_default)
        stepper.remove_ball(simulation)
        simulation.exit_queue = []
        return self._session_to_response(session)

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _build_action(self, request: ActionRequest) -> Action | ErrorResponse:
        try:
            action_type = ActionType(request.action_type)
        except ValueError:
            return ErrorResponse(
                error=f"Unknown action type: {request.action_type}",
                error_code=ErrorCode.VALIDATION_ERROR,
            )

        part = None
        if request.part is not None:
            try:
                part = PartKind(request.part)
            except ValueError:
                return ErrorResponse(
                    error=f"Unknown part: {request.part}",
                    error_code=ErrorCode.VALIDATION_ERROR,
                )

        color = None
        if request.color is not None:
            color = _parse_color(request.color)
            if color is None:
                return ErrorResponse(
                    error=f"Unknown marble color: {request.color}",
                    error_code=ErrorCode.VALIDATION_ERROR,
                )

        return Action(
            action_type=action_type,
            payload=ActionPayload(
                x=request.x,
                y=request.y,
                part=part,
                color=color,
                delta=request.delta,
                count=request.count,
                name=request.name,
                text=request.text,
            ),
        )

    def _action_to_response(self, session: Session, result: ActionResult) -> ActionResponse | ErrorResponse:
        if not result.success:
            return ErrorResponse(
                error=result.error or "Action failed",
                error_code=_error_code(result.error_code),
            )
        simulation = session.simulation
        return ActionResponse(
            success=True,
            status=BallStatusName(simulation.status.value),
            stopped=result.stopped,
            changes=result.state_changes,
            session=self._session_to_response(session),
        )

    def _session_to_response(self, session: Session) -> SessionResponse:
        simulation = session.simulation
        ball = simulation.ball
        reservoir = simulation.reservoir
        counts = simulation.board.counts()
        return SessionResponse(
            session_id=session.session_id,
            width=simulation.width,
            height=simulation.height,
            status=BallStatusName(simulation.status.value),
            loop_state=session.loop.state.value,
            rows=encode_text(simulation.board).splitlines(),
            ball=BallInfo(
                x=ball.x,
                y=ball.y,
                velocity_x=ball.velocity_x,
                color=ball.color.value,
                on_board=simulation.ball_on_board,
                in_free_fall=stepper.in_free_fall(simulation),
            ),
            reservoir=ReservoirInfo.model_validate(reservoir),
            exits=[color.value for color in simulation.exit_colors],
            counts=PartCountsInfo(
                ramps=counts.ramps,
                crossovers=counts.crossovers,
                interceptors=counts.interceptors,
                bits=counts.bits,
                gear_bits=counts.gear_bits,
                gears=counts.gears,
                total=counts.total,
            ),
            marble_default=simulation.marble_default,
            created_at=session.created_at,
        )

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )


def _parse_color(name: str) -> MarbleColor | None:
    try:
        return MarbleColor(name.lower())
    except ValueError:
        return None


def _error_code(code: str | None) -> ErrorCode:
    try:
        return ErrorCode(code)
    except ValueError:
        logger.warning("Unmapped engine error code %r", code)
        return ErrorCode.INTERNAL_ERROR
