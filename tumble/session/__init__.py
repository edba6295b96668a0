"""
Session Module - Manages in-memory emulator sessions.

A session represents one emulated board:
- Created with a starting board (demo, text or code)
- Holds the simulation state and its tick loop
- Destroyed when it ends

Sessions are EPHEMERAL: boards are kept only as exported codes.
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import TickLoop, LoopState, LoopStatus, Speed

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "TickLoop",
    "LoopState",
    "LoopStatus",
    "Speed",
]
