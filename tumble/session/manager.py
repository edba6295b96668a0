"""
Session Manager - Creates and manages emulator sessions.

LIFECYCLE:
1. A session is created with a board size and a starting board
   (demo1 on the standard board, empty otherwise, or a code/text)
2. The user edits the board and cranks levers
3. The session ends, or goes stale and is cleaned up

PERSISTENCE RULES:
- Sessions are in-memory only
- A board outlives its session only as a text board, URL code or snapshot
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import logging
import uuid
import time

from ..engine_core.board import Board
from ..engine_core.state import DEFAULT_MARBLES, Reservoir, SimulationSession
from ..engine_core.topology import GridTopology, normalize_dimensions
from .game_loop import Speed, TickLoop


logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of an emulator session."""
    ACTIVE = "active"
    ENDED = "ended"
    ABANDONED = "abandoned"  # Cleaned up as stale


@dataclass
class Session:
    """
    One emulated board and the timer that drives it.

    The session is destroyed when it ends.
    """
    session_id: str
    simulation: SimulationSession
    loop: TickLoop
    created_at: float

    state: SessionState = SessionState.ACTIVE
    last_used_at: float = 0.0

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    def touch(self) -> None:
        self.last_used_at = time.time()


class SessionManager:
    """
    Manages emulator sessions.

    Responsibilities:
    - Create sessions with a starting board
    - Track active sessions
    - Clean up stale sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, speed: Speed = Speed.MEDIUM):
        self._sessions: dict[str, Session] = {}
        self.speed = speed

    def create_session(
        self,
        width: int = 11,
        height: int = 11,
        marbles: int = DEFAULT_MARBLES,
        url_code: str | None = None,
        text: str | None = None,
        demo: str | None = None,
    ) -> Session:
        """
        Create a new session.

        Args:
            width, height: Requested size (normalized to a supported one)
            marbles: Marbles per color on the rails
            url_code: Optional compact board code to start from
            text: Optional text board to start from
            demo: Optional demo name (standard board only)

        Returns:
            New Session with its marble parked

        Raises:
            ValueError: If the demo is unknown or not drawn for this size
        """
        from ..codecs.text import decode_text
        from ..codecs.url import decode_url
        from ..games.demos import START_DEMO, demos_available, get_demo

        width, height = normalize_dimensions(width, height)
        topology = GridTopology(width, height)
        reservoir: Reservoir | None = None

        if url_code is not None:
            decoded = decode_url(url_code, topology)
            board = decoded.board
            reservoir = decoded.reservoir()
        elif text is not None:
            board = decode_text(text, topology) or Board(topology)
        elif demo is not None:
            chosen = get_demo(demo)
            if chosen is None:
                raise ValueError(f"Unknown demo: {demo}")
            if not demos_available(topology):
                raise ValueError("Demos only exist for the 11x11 board")
            board, blue, red = chosen.load(topology)
            if chosen.url_code is not None:
                reservoir = Reservoir(blue, red, blue, red)
        elif demos_available(topology):
            board, _, _ = START_DEMO.load(topology)
        else:
            board = Board(topology)

        simulation = SimulationSession.create(topology, board, marble_default=marbles)
        if reservoir is not None:
            simulation.reservoir = reservoir

        session_id = str(uuid.uuid4())
        now = time.time()
        session = Session(
            session_id=session_id,
            simulation=simulation,
            loop=TickLoop(simulation, speed=self.speed),
            created_at=now,
            last_used_at=now,
        )
        self._sessions[session_id] = session
        logger.info("Created session %s (%dx%d)", session_id, width, height)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        session = self._sessions.get(session_id)
        if session:
            session.touch()
        return session

    def end_session(self, session_id: str, reason: str = "ended") -> bool:
        """
        End a session and drop it from memory.

        Returns False if there was no such session.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        session.loop.pause()
        if reason == "stale":
            session.state = SessionState.ABANDONED
        else:
            session.state = SessionState.ENDED
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions unused for longer than max_age.

        Returns how many were removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.last_used_at > max_age_seconds
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)
