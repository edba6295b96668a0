"""
Ball Stepper - Discrete marble movement, one row per tick.

Each step moves the marble one row down and at most one column sideways,
then applies the part it lands on:

    ramp          sets direction
    bit           flips, then sends the marble the way it used to point
    gear bit      like a bit, but rotates its whole gear network
    crossover     keeps direction (straight falls resolved by marble color)
    interceptor   stops the marble
    anything else straight fall

Marbles reaching the tray release a new marble: landing left of the middle
releases blue, right releases red.

Every step records its horizontal velocity so step_backward() can walk back
as far as the last lever pull.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .parts import PartKind
from .state import (
    Ball, BallStatus, ExitRecord, MarbleColor, SimulationSession,
)
from .gears import toggle_component


logger = logging.getLogger(__name__)


@dataclass
class StepResult:
    """
    Result of a stepper operation.

    stopped means the marble will not move on a further step()
    (intercepted, out of marbles, or gone).
    """
    success: bool
    stopped: bool = False
    status: BallStatus | None = None
    events: list[str] = field(default_factory=list)
    error: str | None = None
    error_code: str | None = None

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> StepResult:
        return cls(success=False, error=error, error_code=error_code)


def launch(session: SimulationSession, color: MarbleColor) -> StepResult:
    """
    Pull a lever: put a new marble of the given color on its launch ramp.

    Replaces any marble already on the board. Does nothing if no marble of
    that color is left.
    """
    if session.reservoir.available(color) <= 0:
        return StepResult.failure(
            f"No {color.value} marbles left",
            error_code="RESERVOIR_EMPTY",
        )

    # Reversal cannot reach past a lever pull
    session.velocity_history = []
    session.wall_velocities = {}
    session.undo_board = session.board.copy()
    session.last_edit_tool = None
    if session.reservoir.is_full:
        session.restart_board = session.board.copy()

    session.ball = Ball.at_home(session.topology, color)
    session.status = BallStatus.ROLLING
    logger.info("Launched %s marble at %s", color.value, session.ball.position)
    return StepResult(
        success=True,
        status=session.status,
        events=[f"{color.value} lever cranked"],
    )


def cannot_continue(session: SimulationSession) -> bool:
    """Whether a step() would leave the marble where it is."""
    ball = session.ball
    if ball.y < -1 and session.reservoir.available(ball.color) <= 0:
        return True
    if ball.y >= session.height + 1:
        return True
    return session.board.get(ball.x, ball.y) == PartKind.INTERCEPTOR


def step(session: SimulationSession) -> StepResult:
    """Advance the marble by one row."""
    ball = session.ball
    board = session.board
    width, height = session.width, session.height
    events: list[str] = []

    if ball.y >= height + 1:
        return StepResult(success=True, stopped=True, status=session.status)

    if session.topology.in_bounds(ball.x, ball.y) and \
            board.get(ball.x, ball.y) == PartKind.INTERCEPTOR:
        session.status = BallStatus.INTERCEPTED
        return StepResult(success=True, stopped=True, status=session.status)

    # Leaving the waiting spot uses up a marble from the rails
    if ball.y == -2:
        if not session.reservoir.take(ball.color):
            session.status = BallStatus.empty_for(ball.color)
            logger.info("Out of %s marbles", ball.color.value)
            return StepResult(
                success=True,
                stopped=True,
                status=session.status,
                events=[f"{ball.color.value} marbles empty"],
            )

    # Against a wall the marble drops straight
    if (ball.velocity_x > 0 and ball.x == width - 1) or (ball.velocity_x < 0 and ball.x == 0):
        session.wall_velocities[len(session.velocity_history)] = ball.velocity_x
        ball.velocity_x = 0

    session.velocity_history.append(ball.velocity_x)
    ball.x += ball.velocity_x
    ball.y += 1

    stopped = False
    if ball.y == height + 1:
        stopped = _collect(session, events)
        ball = session.ball
    elif 0 <= ball.y < height:
        assert 0 <= ball.x < width, f"marble left the board at {ball.position}"
        stopped = _apply_part(session, events)

    if -2 < ball.y < height + 1 and not stopped:
        session.status = BallStatus.ROLLING

    return StepResult(
        success=True,
        stopped=stopped,
        status=session.status,
        events=events,
    )


def _apply_part(session: SimulationSession, events: list[str]) -> bool:
    """Apply the part under the marble. Returns True if the marble stops."""
    ball = session.ball
    board = session.board
    x, y = ball.x, ball.y
    part = board.get(x, y)

    if part == PartKind.INTERCEPTOR:
        session.status = BallStatus.INTERCEPTED
        events.append(f"intercepted at ({x}, {y})")
        logger.info("Marble intercepted at (%d, %d)", x, y)
        return True
    elif part == PartKind.RAMP_RIGHT:
        ball.velocity_x = 1
    elif part == PartKind.RAMP_LEFT:
        ball.velocity_x = -1
    elif part == PartKind.BIT_LEFT:
        board.set(x, y, PartKind.BIT_RIGHT)
        ball.velocity_x = 1
        events.append(f"bit at ({x}, {y}) flipped right")
    elif part == PartKind.BIT_RIGHT:
        board.set(x, y, PartKind.BIT_LEFT)
        ball.velocity_x = -1
        events.append(f"bit at ({x}, {y}) flipped left")
    elif part in (PartKind.GEAR_BIT_LEFT, PartKind.GEAR_BIT_RIGHT):
        ball.velocity_x = 1 if part == PartKind.GEAR_BIT_LEFT else -1
        size = toggle_component(board, x, y)
        events.append(f"gear network at ({x}, {y}) rotated ({size} parts)")
    elif part == PartKind.CROSSOVER:
        if ball.velocity_x == 0:
            ball.velocity_x = ball.color.launch_velocity
    else:
        ball.velocity_x = 0
    return False


def _collect(session: SimulationSession, events: list[str]) -> bool:
    """
    Marble reached the tray: queue it and release the next one.

    Returns True if no marble could be released.
    """
    ball = session.ball
    topology = session.topology

    # Stored as if the marble had landed at x == 0; the next marble takes its
    # place, so stepping back restarts from there
    session.velocity_history[-1] = ball.velocity_x - ball.x
    session.exit_queue.append(ExitRecord(color=ball.color, column=ball.x))
    events.append(f"{ball.color.value} marble reached the tray")

    next_color = MarbleColor.BLUE if ball.x < topology.width / 2 else MarbleColor.RED
    if session.reservoir.available(next_color) <= 0:
        session.status = BallStatus.empty_for(next_color)
        events.append(f"{next_color.value} marbles empty")
        logger.info("Run finished: out of %s marbles", next_color.value)
        return True

    session.ball = Ball.at_home(topology, next_color)
    events.append(f"{next_color.value} marble released")
    logger.debug("Recycled into %s marble", next_color.value)
    return False


def step_backward(session: SimulationSession) -> StepResult:
    """
    Undo the most recent step.

    Only reaches back to the last launch. A marble that was released by one
    reaching the tray goes back into the tray and the previous marble is
    taken out of it again.
    """
    if not session.velocity_history:
        return StepResult.failure("Nothing to step back to", error_code="NO_HISTORY")

    ball = session.ball
    height = session.height
    landed_column = None

    if ball.y == -2 or ball.y >= height + 1:
        if not session.exit_queue:
            return StepResult.failure("No marble in the tray", error_code="NO_HISTORY")
        record = session.exit_queue.pop()
        landed_column = record.column
        ball.color = record.color
        ball.x = 0
        ball.y = height + 1
    elif session.topology.in_bounds(ball.x, ball.y):
        part = session.board.get(ball.x, ball.y)
        if part in (PartKind.BIT_LEFT, PartKind.BIT_RIGHT):
            session.board.set(ball.x, ball.y, part.flipped)
        elif part in (PartKind.GEAR_BIT_LEFT, PartKind.GEAR_BIT_RIGHT):
            toggle_component(session.board, ball.x, ball.y)

    session.status = BallStatus.ROLLING
    velocity = session.velocity_history.pop()
    ball.x -= velocity
    ball.y -= 1
    if landed_column is not None:
        velocity += landed_column
    ball.velocity_x = session.wall_velocities.pop(len(session.velocity_history), velocity)

    if ball.y == -2:
        session.reservoir.give_back(ball.color)

    return StepResult(success=True, status=session.status)


def remove_ball(session: SimulationSession) -> StepResult:
    """Take the marble off the board (into the player's pocket)."""
    session.ball = Ball.parked(session.topology)
    session.velocity_history = []
    session.wall_velocities = {}
    session.status = BallStatus.AWAITING_LAUNCH
    return StepResult(success=True, stopped=True, status=session.status)


def place_ball(
    session: SimulationSession, x: int, y: int, color: MarbleColor
) -> StepResult:
    """
    Put a spare marble on a cell (or a launch ramp, y == -1).

    Its direction comes from the part it is placed on. The rails are not
    touched.
    """
    topology = session.topology
    if not (0 <= x < topology.width and -1 <= y < topology.height):
        return StepResult.failure(
            f"({x}, {y}) is not on the board", error_code="OUT_OF_BOUNDS"
        )

    if y < 0:
        part = PartKind.RAMP_RIGHT if x < topology.width / 2 else PartKind.RAMP_LEFT
    else:
        part = session.board.get(x, y)

    velocity = session.ball.velocity_x
    if part in (PartKind.RAMP_LEFT, PartKind.BIT_LEFT, PartKind.GEAR_BIT_LEFT):
        velocity = -1
    elif part in (PartKind.RAMP_RIGHT, PartKind.BIT_RIGHT, PartKind.GEAR_BIT_RIGHT):
        velocity = 1
    elif part == PartKind.CROSSOVER:
        velocity = velocity or 1
    else:
        velocity = 0

    session.ball = Ball(x=x, y=y, velocity_x=velocity, color=color)
    session.velocity_history = []
    session.wall_velocities = {}
    if part == PartKind.INTERCEPTOR:
        session.status = BallStatus.INTERCEPTED
    else:
        session.status = BallStatus.ROLLING
    return StepResult(success=True, status=session.status)


def in_free_fall(session: SimulationSession) -> bool:
    """
    Whether the marble is somewhere the emulation is only approximate.

    On a pin with nothing to guide it (or on a plain gear) a real marble
    falls freely and may bounce; the same holds for a crossover entered
    straight down.
    """
    ball = session.ball
    if not session.topology.in_bounds(ball.x, ball.y):
        return False
    if not session.topology.cell_kind(ball.x, ball.y).is_usable:
        return False
    part = session.board.get(ball.x, ball.y)
    if part == PartKind.EMPTY or part.is_gear:
        return True
    if part == PartKind.CROSSOVER:
        history = session.velocity_history
        return not history or history[-1] == 0
    return False


def run_until_stopped(session: SimulationSession, max_steps: int = 10_000) -> list[StepResult]:
    """Step synchronously until the marble stops or max_steps is reached."""
    results: list[StepResult] = []
    for _ in range(max_steps):
        result = step(session)
        results.append(result)
        if result.stopped:
            break
    return results
