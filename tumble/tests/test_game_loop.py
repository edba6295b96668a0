"""
Tests for the tick loop.

Each test drives its own event loop with asyncio.run().
"""

import asyncio

from ..engine_core.board import Board
from ..engine_core.parts import PartKind
from ..engine_core.state import BallStatus, MarbleColor, SimulationSession
from ..session.game_loop import LoopState, Speed, TickLoop


def _bit_session(topology, marbles=2):
    board = Board(topology)
    board.set(3, 0, PartKind.BIT_LEFT)
    return SimulationSession.create(topology, board, marble_default=marbles)


class TestSpeed:
    """Tests for tick speeds."""

    def test_delays(self):
        assert Speed.SLOW.milliseconds == 1000
        assert Speed.MEDIUM.milliseconds == 300
        assert Speed.FAST.milliseconds == 100
        assert Speed.FASTEST.milliseconds == 5
        assert Speed.FAST.seconds == 0.1

    def test_lookup_by_name(self):
        assert Speed("medium") == Speed.MEDIUM


class TestTickLoop:
    """Tests for timer-driven stepping."""

    def test_runs_until_out_of_marbles(self, topology):
        session = _bit_session(topology)

        async def scenario():
            loop = TickLoop(session, speed=Speed.FASTEST)
            loop.crank(MarbleColor.BLUE)
            assert loop.state == LoopState.RUNNING
            assert await loop.wait_stopped(timeout=10)
            return loop

        loop = asyncio.run(scenario())

        assert loop.state == LoopState.STOPPED
        assert not loop.tick_pending
        assert loop.steps_taken == 2 * 14
        assert session.status == BallStatus.BLUE_EMPTY
        assert session.exit_colors == [MarbleColor.BLUE, MarbleColor.BLUE]

    def test_crank_moves_marble_at_once(self, topology):
        session = _bit_session(topology)

        async def scenario():
            loop = TickLoop(session, speed=Speed.SLOW)
            loop.crank(MarbleColor.BLUE)
            position = session.ball.position
            loop.pause()
            return position

        assert asyncio.run(scenario()) == (2, -1)
        assert session.reservoir.blue_available == 1

    def test_pause_leaves_state_alone(self, topology):
        session = _bit_session(topology)

        async def scenario():
            loop = TickLoop(session, speed=Speed.FASTEST)
            loop.crank(MarbleColor.BLUE)
            loop.pause()
            position = session.ball.position
            await asyncio.sleep(0.05)
            return loop, position

        loop, position = asyncio.run(scenario())

        assert loop.state == LoopState.PAUSED
        assert not loop.tick_pending
        assert session.ball.position == position

    def test_single_step_cancels_pending_tick(self, topology):
        session = _bit_session(topology)

        async def scenario():
            loop = TickLoop(session, speed=Speed.SLOW)
            loop.crank(MarbleColor.BLUE)
            assert loop.tick_pending
            loop.single_step()
            return loop

        loop = asyncio.run(scenario())

        assert not loop.tick_pending
        assert loop.state == LoopState.PAUSED
        assert session.ball.position == (3, 0)
        assert session.board.get(3, 0) == PartKind.BIT_RIGHT

    def test_step_back(self, topology):
        session = _bit_session(topology)

        async def scenario():
            loop = TickLoop(session, speed=Speed.SLOW)
            loop.crank(MarbleColor.BLUE)
            loop.single_step()
            loop.single_step()
            return loop.step_back()

        result = asyncio.run(scenario())

        assert result.success
        assert session.ball.position == (3, 0)

    def test_resume_after_pause(self, topology):
        session = _bit_session(topology)

        async def scenario():
            loop = TickLoop(session, speed=Speed.FASTEST)
            loop.crank(MarbleColor.BLUE)
            loop.pause()
            assert loop.resume()
            assert loop.state == LoopState.RUNNING
            return await loop.wait_stopped(timeout=10)

        assert asyncio.run(scenario())
        assert session.status == BallStatus.BLUE_EMPTY

    def test_set_speed_keeps_one_tick(self, topology):
        session = _bit_session(topology)

        async def scenario():
            loop = TickLoop(session, speed=Speed.SLOW)
            loop.crank(MarbleColor.BLUE)
            loop.set_speed(Speed.FAST)
            pending = loop.tick_pending
            loop.pause()
            return loop, pending

        loop, pending = asyncio.run(scenario())

        assert pending
        assert loop.speed == Speed.FAST

    def test_stop_removes_marble(self, topology):
        session = _bit_session(topology)

        async def scenario():
            loop = TickLoop(session, speed=Speed.SLOW)
            loop.crank(MarbleColor.BLUE)
            loop.stop()
            return loop

        loop = asyncio.run(scenario())

        assert loop.state == LoopState.STOPPED
        assert not loop.tick_pending
        assert session.status == BallStatus.AWAITING_LAUNCH

    def test_start_without_marble(self, topology):
        """A parked marble cannot continue, so nothing is scheduled."""
        session = _bit_session(topology)

        async def scenario():
            loop = TickLoop(session)
            return loop, loop.start()

        loop, started = asyncio.run(scenario())

        assert not started
        assert loop.state == LoopState.STOPPED

    def test_on_step_callback(self, topology):
        session = _bit_session(topology, marbles=1)
        seen = []

        async def scenario():
            loop = TickLoop(session, speed=Speed.FASTEST, on_step=seen.append)
            loop.crank(MarbleColor.BLUE)
            await loop.wait_stopped(timeout=10)

        asyncio.run(scenario())

        assert len(seen) == 14
        assert seen[-1].stopped
