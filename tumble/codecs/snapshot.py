"""
State Snapshot - Board plus dimensions and marble default in one string.

    11,11,20,...)...%...
    ../.{.v.(..
    ...

The snapshot describes a starting state: while marbles are running the
board saved is the one a restart would bring back, not the half-run one.

A snapshot taken with different board dimensions is rejected (not an
error: the caller falls back to its default board).
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from ..engine_core.board import Board
from ..engine_core.state import BallStatus, SimulationSession
from ..engine_core.topology import GridTopology
from .text import encode_text, decode_text


logger = logging.getLogger(__name__)


@dataclass
class SnapshotResult:
    """Outcome of decoding a snapshot."""
    ok: bool
    board: Board | None = None
    marble_default: int | None = None
    reason: str | None = None  # "version_mismatch" or "malformed"

    @classmethod
    def rejected(cls, reason: str) -> SnapshotResult:
        return cls(ok=False, reason=reason)


def encode_snapshot(session: SimulationSession) -> str:
    board = session.board
    if session.status != BallStatus.AWAITING_LAUNCH and session.restart_board is not None:
        board = session.restart_board
    return (
        f"{session.width},{session.height},{session.marble_default},"
        f"{encode_text(board)}"
    )


def decode_snapshot(text: str, topology: GridTopology) -> SnapshotResult:
    """
    Parse a snapshot for a board of the given topology.

    Returns ok=False when the text is malformed or was saved for other
    dimensions.
    """
    fields = text.split(",")
    if len(fields) != 4:
        return SnapshotResult.rejected("malformed")

    try:
        width = int(fields[0])
        height = int(fields[1])
        marble_default = int(fields[2])
    except ValueError:
        return SnapshotResult.rejected("malformed")

    if width != topology.width or height != topology.height:
        logger.info(
            "Ignoring snapshot for a %dx%d board (current board is %dx%d)",
            width, height, topology.width, topology.height,
        )
        return SnapshotResult.rejected("version_mismatch")

    board = decode_text(fields[3], topology)
    if board is None:
        return SnapshotResult.rejected("malformed")
    return SnapshotResult(ok=True, board=board, marble_default=marble_default)
