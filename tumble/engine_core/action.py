"""
Action System - Actions, payloads, and results.

Actions represent everything a user can do to a board:
1. Editing (place parts, toggle parts, erase, undo, store/recall)
2. Marbles (crank a lever, step, step back, remove, place by hand)
3. Loading (demos, text boards, URL codes)

All state changes from outside the engine flow through actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .parts import PartKind
from .state import BallStatus, MarbleColor


class ActionType(Enum):
    """Types of actions in the system."""
    # Editing
    PLACE_PART = "place_part"
    CLEAR_CELL = "clear_cell"
    HAND_TOGGLE = "hand_toggle"
    ERASE = "erase"
    UNDO = "undo"
    STORE = "store"
    RECALL = "recall"

    # Marbles
    LAUNCH = "launch"
    STEP = "step"
    STEP_BACK = "step_back"
    REMOVE_BALL = "remove_ball"
    PLACE_BALL = "place_ball"
    RESET = "reset"
    RESTART = "restart"
    ADJUST_MARBLES = "adjust_marbles"
    SET_MARBLE_DEFAULT = "set_marble_default"

    # Loading
    LOAD_DEMO = "load_demo"
    LOAD_TEXT = "load_text"
    LOAD_URL = "load_url"


# Actions that change the board layout (kept in the action history)
EDIT_ACTIONS = frozenset({
    ActionType.PLACE_PART,
    ActionType.CLEAR_CELL,
    ActionType.HAND_TOGGLE,
    ActionType.ERASE,
    ActionType.RECALL,
    ActionType.LOAD_DEMO,
    ActionType.LOAD_TEXT,
    ActionType.LOAD_URL,
})


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Different action types use different fields; validation happens in
    the reducer.
    """
    # Cell operations
    x: int | None = None
    y: int | None = None
    part: PartKind | None = None

    # Marble operations
    color: MarbleColor | None = None
    delta: int | None = None
    count: int | None = None

    # Loading
    name: str | None = None
    text: str | None = None


@dataclass
class Action:
    """
    A complete action to be applied to a session.

    Actions are:
    - Validated before application
    - Applied by the reducer
    - Logged on the session when they succeed
    """
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)

    @classmethod
    def place_part(cls, x: int, y: int, part: PartKind) -> Action:
        """Factory for drawing a part (placing it again clears the cell)."""
        return cls(
            action_type=ActionType.PLACE_PART,
            payload=ActionPayload(x=x, y=y, part=part),
        )

    @classmethod
    def clear_cell(cls, x: int, y: int) -> Action:
        return cls(action_type=ActionType.CLEAR_CELL, payload=ActionPayload(x=x, y=y))

    @classmethod
    def hand_toggle(cls, x: int, y: int) -> Action:
        """Factory for flipping a part with the hand tool."""
        return cls(action_type=ActionType.HAND_TOGGLE, payload=ActionPayload(x=x, y=y))

    @classmethod
    def launch(cls, color: MarbleColor) -> Action:
        """Factory for cranking a lever."""
        return cls(action_type=ActionType.LAUNCH, payload=ActionPayload(color=color))

    @classmethod
    def step(cls) -> Action:
        return cls(action_type=ActionType.STEP)

    @classmethod
    def step_back(cls) -> Action:
        return cls(action_type=ActionType.STEP_BACK)

    @classmethod
    def place_ball(cls, x: int, y: int, color: MarbleColor) -> Action:
        return cls(
            action_type=ActionType.PLACE_BALL,
            payload=ActionPayload(x=x, y=y, color=color),
        )

    @classmethod
    def adjust_marbles(cls, color: MarbleColor, delta: int) -> Action:
        return cls(
            action_type=ActionType.ADJUST_MARBLES,
            payload=ActionPayload(color=color, delta=delta),
        )

    @classmethod
    def set_marble_default(cls, count: int) -> Action:
        return cls(
            action_type=ActionType.SET_MARBLE_DEFAULT,
            payload=ActionPayload(count=count),
        )

    @classmethod
    def load_demo(cls, name: str) -> Action:
        return cls(action_type=ActionType.LOAD_DEMO, payload=ActionPayload(name=name))

    @classmethod
    def load_text(cls, text: str) -> Action:
        return cls(action_type=ActionType.LOAD_TEXT, payload=ActionPayload(text=text))

    @classmethod
    def load_url(cls, code: str) -> Action:
        return cls(action_type=ActionType.LOAD_URL, payload=ActionPayload(text=code))

    @classmethod
    def simple(cls, action_type: ActionType) -> Action:
        """Factory for actions without parameters (erase, undo, reset, ...)."""
        return cls(action_type=action_type)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action succeeded
    - Errors (if failed)
    - Marble status after the action
    - Human-readable changes (for UI updates)
    """
    success: bool
    error: str | None = None
    error_code: str | None = None

    status: BallStatus | None = None
    stopped: bool = False

    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def ok(
        cls,
        status: BallStatus | None = None,
        changes: list[str] | None = None,
        stopped: bool = False,
    ) -> ActionResult:
        """Create a success result."""
        return cls(
            success=True,
            status=status,
            stopped=stopped,
            state_changes=changes or [],
        )
