"""
Engine Core - Deterministic board state and marble stepping.

The engine is the runtime that:
1. Classifies pins (topology)
2. Holds the parts grid (board)
3. Keeps gear networks in sync
4. Moves the marble one row per step, forward and backward
5. Applies user actions via the reducer
"""

from .parts import PartKind, GEAR_PARTS
from .topology import GridTopology, CellKind, normalize_dimensions
from .board import Board, PartCounts
from .state import (
    Ball,
    BallStatus,
    ExitRecord,
    MarbleColor,
    Reservoir,
    SimulationSession,
)
from .action import Action, ActionType, ActionPayload, ActionResult
from .reducer import Reducer, apply_action
from .stepper import StepResult, launch, step, step_backward, run_until_stopped

__all__ = [
    "PartKind",
    "GEAR_PARTS",
    "GridTopology",
    "CellKind",
    "normalize_dimensions",
    "Board",
    "PartCounts",
    "Ball",
    "BallStatus",
    "ExitRecord",
    "MarbleColor",
    "Reservoir",
    "SimulationSession",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Reducer",
    "apply_action",
    "StepResult",
    "launch",
    "step",
    "step_backward",
    "run_until_stopped",
]
