"""
Simulation State - Everything one emulated board needs at runtime.

Design principles:
- One explicit SimulationSession per board, no module-level globals
- Only one marble exists at a time
- Step history and exit queue make every forward step reversible
  back to the last lever pull
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
from copy import deepcopy
from enum import Enum

from .board import Board
from .topology import GridTopology


DEFAULT_MARBLES = 20


class MarbleColor(Enum):
    """Marble colors. Blue enters from the left ramp, red from the right."""
    BLUE = "blue"
    RED = "red"

    @property
    def launch_velocity(self) -> int:
        return 1 if self == MarbleColor.BLUE else -1


class BallStatus(Enum):
    """What the marble is doing."""
    AWAITING_LAUNCH = "awaiting_launch"  # crank a lever to begin
    ROLLING = "rolling"
    INTERCEPTED = "intercepted"
    BLUE_EMPTY = "blue_empty"
    RED_EMPTY = "red_empty"

    @classmethod
    def empty_for(cls, color: MarbleColor) -> BallStatus:
        return cls.BLUE_EMPTY if color == MarbleColor.BLUE else cls.RED_EMPTY


@dataclass
class Ball:
    """
    The single marble.

    y == -2 is the waiting spot above a launch ramp, y == -1 the ramp itself.
    y == H is the exit chute under the board, y == H+1 the collection tray.
    """
    x: int
    y: int
    velocity_x: int = 1
    color: MarbleColor = MarbleColor.BLUE

    @classmethod
    def at_home(cls, topology: GridTopology, color: MarbleColor) -> Ball:
        if color == MarbleColor.BLUE:
            x, y = topology.blue_home()
        else:
            x, y = topology.red_home()
        return cls(x=x, y=y, velocity_x=color.launch_velocity, color=color)

    @classmethod
    def parked(cls, topology: GridTopology) -> Ball:
        """A ball out of sight below the board (nothing rolling)."""
        return cls(x=topology.depth - 1, y=topology.height + 2)

    @property
    def position(self) -> tuple[int, int]:
        return self.x, self.y


@dataclass(frozen=True)
class ExitRecord:
    """A marble that reached the tray, and the column it landed in."""
    color: MarbleColor
    column: int


@dataclass
class Reservoir:
    """
    Marbles waiting at the top of the board.

    available: still on the top rails
    total: how many a reset puts back
    """
    blue_available: int = DEFAULT_MARBLES
    red_available: int = DEFAULT_MARBLES
    blue_total: int = DEFAULT_MARBLES
    red_total: int = DEFAULT_MARBLES

    @classmethod
    def filled(cls, count: int) -> Reservoir:
        return cls(count, count, count, count)

    def available(self, color: MarbleColor) -> int:
        if color == MarbleColor.BLUE:
            return self.blue_available
        return self.red_available

    def take(self, color: MarbleColor) -> bool:
        """Remove one marble of a color. False if there is none."""
        if self.available(color) <= 0:
            return False
        if color == MarbleColor.BLUE:
            self.blue_available -= 1
        else:
            self.red_available -= 1
        return True

    def give_back(self, color: MarbleColor) -> None:
        if color == MarbleColor.BLUE:
            self.blue_available += 1
        else:
            self.red_available += 1

    def adjust(self, color: MarbleColor, delta: int) -> bool:
        """Add or remove marbles from both the rails and the reset baseline."""
        if delta < 0 and self.available(color) + delta < 0:
            return False
        if color == MarbleColor.BLUE:
            self.blue_available += delta
            self.blue_total += delta
        else:
            self.red_available += delta
            self.red_total += delta
        return True

    def refill(self) -> None:
        self.blue_available = self.blue_total
        self.red_available = self.red_total

    @property
    def is_full(self) -> bool:
        return (
            self.blue_available == self.blue_total
            and self.red_available == self.red_total
        )


@dataclass
class SimulationSession:
    """
    Complete state of one emulated board.

    This is the canonical state that the stepper, the gear synchronizer,
    the codecs and the reducer operate on. It is mutated in place.
    """
    topology: GridTopology
    board: Board
    ball: Ball
    reservoir: Reservoir = field(default_factory=Reservoir)
    status: BallStatus = BallStatus.AWAITING_LAUNCH
    marble_default: int = DEFAULT_MARBLES

    # Reversal: one velocity per downward step since the last launch
    velocity_history: list[int] = field(default_factory=list)
    # Velocity a wall cut to 0, by history index
    wall_velocities: dict[int, int] = field(default_factory=dict)
    # Marbles that reached the tray, most recent last
    exit_queue: list[ExitRecord] = field(default_factory=list)

    # Board copies for undo / restart / store-recall
    undo_board: Board | None = None
    restart_board: Board | None = None
    stored_board: Board | None = None

    # Consecutive edits with the same tool share one undo step
    last_edit_tool: str | None = None

    # Applied editing actions
    action_history: list[Any] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        topology: GridTopology | None = None,
        board: Board | None = None,
        marble_default: int = DEFAULT_MARBLES,
    ) -> SimulationSession:
        """Fresh session with a parked ball and full reservoirs."""
        topology = topology or GridTopology()
        board = board if board is not None else Board(topology)
        return cls(
            topology=topology,
            board=board,
            ball=Ball.parked(topology),
            reservoir=Reservoir.filled(marble_default),
            marble_default=marble_default,
            undo_board=board.copy(),
            restart_board=board.copy(),
        )

    @property
    def width(self) -> int:
        return self.topology.width

    @property
    def height(self) -> int:
        return self.topology.height

    @property
    def is_rolling(self) -> bool:
        return self.status == BallStatus.ROLLING

    @property
    def ball_on_board(self) -> bool:
        """Whether the ball is drawn (launch ramp down to the tray)."""
        return -1 <= self.ball.y <= self.height

    @property
    def exit_colors(self) -> list[MarbleColor]:
        return [record.color for record in self.exit_queue]

    def set_marble_default(self, count: int) -> None:
        self.marble_default = count
        self.reservoir = Reservoir.filled(count)

    def clone(self) -> SimulationSession:
        """Deep copy the state."""
        return deepcopy(self)
