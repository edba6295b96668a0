"""
Tick Loop - Drives the marble on a timer.

The loop:
1. A lever is cranked (launch + first step)
2. Every tick the marble moves one row
3. Ticks stop when the marble is intercepted or a color runs out
4. The user may pause, single-step, step back or change speed at any time

Everything runs on one asyncio event loop, so a manual step can never race
a scheduled one: at most one tick is pending, and manual steps cancel it
before they run.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable
import asyncio
import logging

from ..engine_core import stepper
from ..engine_core.state import MarbleColor, SimulationSession
from ..engine_core.stepper import StepResult


logger = logging.getLogger(__name__)


class Speed(Enum):
    """Delay between ticks."""
    SLOW = "slow"
    MEDIUM = "medium"
    FAST = "fast"
    FASTEST = "fastest"

    @property
    def milliseconds(self) -> int:
        return _DELAYS_MS[self]

    @property
    def seconds(self) -> float:
        return self.milliseconds / 1000


_DELAYS_MS = {
    Speed.SLOW: 1000,
    Speed.MEDIUM: 300,
    Speed.FAST: 100,
    Speed.FASTEST: 5,
}


class LoopState(Enum):
    """State of the tick loop."""
    IDLE = "idle"  # Nothing launched yet
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"  # Marble stopped or removed


@dataclass
class LoopStatus:
    """Snapshot of the loop for status displays."""
    state: LoopState
    speed: Speed
    steps_taken: int
    tick_pending: bool


class TickLoop:
    """
    Timer-driven stepping for one session.

    Usage:
        loop = TickLoop(session, speed=Speed.FAST)
        loop.crank(MarbleColor.BLUE)
        await loop.wait_stopped()

    Must be used from inside a running asyncio event loop.
    """

    def __init__(
        self,
        session: SimulationSession,
        speed: Speed = Speed.MEDIUM,
        on_step: Callable[[StepResult], None] | None = None,
    ):
        self.session = session
        self.speed = speed
        self.on_step = on_step
        self.state = LoopState.IDLE
        self.steps_taken = 0
        self._handle: asyncio.TimerHandle | None = None
        self._stopped: asyncio.Event | None = None

    @property
    def tick_pending(self) -> bool:
        return self._handle is not None

    def status(self) -> LoopStatus:
        return LoopStatus(
            state=self.state,
            speed=self.speed,
            steps_taken=self.steps_taken,
            tick_pending=self.tick_pending,
        )

    # =========================================================================
    # Timer control
    # =========================================================================

    def start(self) -> bool:
        """
        Arm the timer.

        Does nothing while paused or when the marble cannot move.
        Returns True if a tick was scheduled.
        """
        if self.state == LoopState.PAUSED:
            return False
        if stepper.cannot_continue(self.session):
            self._finish()
            return False
        self.state = LoopState.RUNNING
        self._arm()
        return True

    def pause(self) -> None:
        """Stop ticking. The simulation itself is left untouched."""
        self._cancel()
        self.state = LoopState.PAUSED

    def resume(self) -> bool:
        if self.state == LoopState.PAUSED:
            self.state = LoopState.IDLE
        return self.start()

    def set_speed(self, speed: Speed) -> None:
        self.speed = speed
        if self.state == LoopState.RUNNING:
            self._cancel()
            self.start()

    def stop(self) -> StepResult:
        """Cancel ticking and take the marble off the board."""
        self._cancel()
        result = stepper.remove_ball(self.session)
        self._finish()
        return result

    # =========================================================================
    # Manual stepping
    # =========================================================================

    def single_step(self) -> StepResult:
        """Pause, then move the marble one row right away."""
        self.pause()
        return self._run_step(stepper.step)

    def step_back(self) -> StepResult:
        """Pause, then undo one step."""
        self.pause()
        return self._run_step(stepper.step_backward)

    def crank(self, color: MarbleColor) -> StepResult:
        """
        Pull a lever.

        The marble moves off its waiting spot at once; the timer takes over
        from there unless the loop is paused.
        """
        self._cancel()
        result = stepper.launch(self.session, color)
        if not result.success:
            return result

        result = self._run_step(stepper.step)
        if not result.stopped:
            self.start()
        return result

    async def wait_stopped(self, timeout: float | None = None) -> bool:
        """
        Wait until the marble stops or is removed.

        Returns False on timeout.
        """
        if self.state == LoopState.STOPPED:
            return True
        try:
            await asyncio.wait_for(self._stopped_event().wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return True

    # =========================================================================
    # Internals
    # =========================================================================

    def _arm(self) -> None:
        self._cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.speed.seconds, self._tick)

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        result = self._run_step(stepper.step)
        if result.stopped:
            return
        if self.state == LoopState.RUNNING:
            self._arm()

    def _run_step(self, operation: Callable[[SimulationSession], StepResult]) -> StepResult:
        result = operation(self.session)
        if result.success:
            self.steps_taken += 1
        if self.on_step:
            self.on_step(result)
        if result.stopped:
            logger.debug(
                "Marble stopped after %d steps (%s)",
                self.steps_taken, self.session.status.value,
            )
            self._finish()
        return result

    def _finish(self) -> None:
        self._cancel()
        self.state = LoopState.STOPPED
        if self._stopped is not None:
            self._stopped.set()

    def _stopped_event(self) -> asyncio.Event:
        if self._stopped is None or self._stopped.is_set():
            self._stopped = asyncio.Event()
        return self._stopped
