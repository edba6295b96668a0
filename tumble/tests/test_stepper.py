"""
Tests for the marble stepper.

Tests:
- Launch and the reservoir
- Part effects (ramp, bit, gear bit, crossover, interceptor)
- Recycling at the tray
- Stepping backward
"""

import pytest

from ..engine_core import stepper
from ..engine_core.parts import PartKind
from ..engine_core.state import (
    Ball, BallStatus, MarbleColor, Reservoir, SimulationSession,
)


def _steps(session, count):
    return [stepper.step(session) for _ in range(count)]


class TestLaunch:
    """Tests for cranking a lever."""

    def test_blue_starts_above_left_ramp(self, empty_session):
        result = stepper.launch(empty_session, MarbleColor.BLUE)

        assert result.success
        assert empty_session.ball.position == (1, -2)
        assert empty_session.ball.velocity_x == 1
        assert empty_session.status == BallStatus.ROLLING

    def test_red_starts_above_right_ramp(self, empty_session):
        stepper.launch(empty_session, MarbleColor.RED)

        assert empty_session.ball.position == (9, -2)
        assert empty_session.ball.velocity_x == -1

    def test_launch_does_not_use_a_marble(self, empty_session):
        """The marble only leaves the rails on its first step."""
        stepper.launch(empty_session, MarbleColor.BLUE)
        assert empty_session.reservoir.blue_available == 20

        stepper.step(empty_session)
        assert empty_session.reservoir.blue_available == 19

    def test_launch_with_empty_reservoir_changes_nothing(self, topology):
        session = SimulationSession.create(topology, marble_default=0)
        before = session.clone()

        result = stepper.launch(session, MarbleColor.BLUE)

        assert not result.success
        assert result.error_code == "RESERVOIR_EMPTY"
        assert session.ball == before.ball
        assert session.status == BallStatus.AWAITING_LAUNCH
        assert session.board == before.board

    def test_launch_saves_restart_board_when_full(self, bit_session):
        stepper.launch(bit_session, MarbleColor.BLUE)
        assert bit_session.restart_board == bit_session.board


class TestPartEffects:
    """Tests for what each part does to a marble."""

    def test_ramp_scenario(self, empty_session):
        """A left ramp under the blue ramp sends the marble left."""
        empty_session.board.set(3, 0, PartKind.RAMP_LEFT)
        stepper.launch(empty_session, MarbleColor.BLUE)

        _steps(empty_session, 2)
        assert empty_session.ball.position == (3, 0)
        assert empty_session.ball.velocity_x == -1

        stepper.step(empty_session)
        assert empty_session.ball.position == (2, 1)
        # Empty pin: straight down from here
        assert empty_session.ball.velocity_x == 0

    def test_bit_flips_and_deflects(self, bit_session):
        stepper.launch(bit_session, MarbleColor.BLUE)
        _steps(bit_session, 2)

        assert bit_session.board.get(3, 0) == PartKind.BIT_RIGHT
        assert bit_session.ball.velocity_x == 1

    def test_two_marbles_flip_bit_there_and_back(self, bit_session):
        stepper.launch(bit_session, MarbleColor.BLUE)

        # First marble: 14 steps from the waiting spot to the tray
        _steps(bit_session, 14)
        assert bit_session.board.get(3, 0) == PartKind.BIT_RIGHT
        assert bit_session.exit_colors == [MarbleColor.BLUE]

        _steps(bit_session, 14)
        assert bit_session.board.get(3, 0) == PartKind.BIT_LEFT
        assert bit_session.exit_colors == [MarbleColor.BLUE, MarbleColor.BLUE]

    def test_gear_bit_turns_whole_network(self, gear_session):
        stepper.launch(gear_session, MarbleColor.BLUE)
        _steps(gear_session, 3)

        assert gear_session.ball.position == (4, 1)
        assert gear_session.ball.velocity_x == 1
        assert gear_session.board.get(4, 1) == PartKind.GEAR_BIT_RIGHT
        assert gear_session.board.get(4, 2) == PartKind.GEAR_TURNED
        assert gear_session.board.get(4, 3) == PartKind.GEAR_BIT_RIGHT

    def test_crossover_keeps_direction(self, empty_session):
        empty_session.board.set(3, 0, PartKind.CROSSOVER)
        stepper.launch(empty_session, MarbleColor.BLUE)
        _steps(empty_session, 3)

        assert empty_session.ball.position == (4, 1)

    def test_crossover_straight_fall_uses_color(self, empty_session):
        """A marble dropping straight onto a crossover goes its color's way."""
        empty_session.board.set(2, 3, PartKind.CROSSOVER)
        empty_session.ball = Ball(x=2, y=2, velocity_x=0, color=MarbleColor.RED)
        empty_session.status = BallStatus.ROLLING

        stepper.step(empty_session)
        assert empty_session.ball.velocity_x == -1

    def test_interceptor_stops_marble(self, empty_session):
        empty_session.board.set(3, 0, PartKind.INTERCEPTOR)
        stepper.launch(empty_session, MarbleColor.BLUE)

        results = _steps(empty_session, 2)
        assert results[-1].stopped
        assert empty_session.status == BallStatus.INTERCEPTED

        again = stepper.step(empty_session)
        assert again.stopped
        assert empty_session.ball.position == (3, 0)
        assert stepper.cannot_continue(empty_session)

    def test_wall_stops_sideways_motion(self, empty_session):
        empty_session.board.set(10, 3, PartKind.RAMP_RIGHT)
        empty_session.ball = Ball(x=10, y=3, velocity_x=1)
        empty_session.status = BallStatus.ROLLING

        stepper.step(empty_session)
        assert empty_session.ball.position == (10, 4)

    def test_back_from_wall_restores_velocity(self, empty_session):
        empty_session.board.set(10, 3, PartKind.RAMP_RIGHT)
        stepper.place_ball(empty_session, 10, 3, MarbleColor.BLUE)
        assert empty_session.ball.velocity_x == 1

        stepper.step(empty_session)
        assert empty_session.ball.velocity_x == 0

        assert stepper.step_backward(empty_session).success
        assert empty_session.ball.position == (10, 3)
        assert empty_session.ball.velocity_x == 1
        assert empty_session.wall_velocities == {}


class TestRecycle:
    """Tests for marbles reaching the tray."""

    def test_left_landing_releases_blue(self, empty_session):
        stepper.launch(empty_session, MarbleColor.BLUE)
        results = _steps(empty_session, 14)

        assert not results[-1].stopped
        assert empty_session.exit_colors == [MarbleColor.BLUE]
        assert empty_session.ball.position == (1, -2)
        assert empty_session.ball.color == MarbleColor.BLUE

    def test_right_landing_releases_red(self, empty_session):
        stepper.launch(empty_session, MarbleColor.RED)
        _steps(empty_session, 14)

        assert empty_session.exit_colors == [MarbleColor.RED]
        assert empty_session.ball.position == (9, -2)
        assert empty_session.ball.velocity_x == -1

    def test_run_until_out_of_marbles(self, bit_session):
        stepper.launch(bit_session, MarbleColor.BLUE)
        results = stepper.run_until_stopped(bit_session)

        assert len(results) == 20 * 14
        assert results[-1].stopped
        assert bit_session.status == BallStatus.BLUE_EMPTY
        assert bit_session.exit_colors == [MarbleColor.BLUE] * 20
        assert bit_session.reservoir.blue_available == 0

    def test_empty_rail_at_waiting_spot(self, empty_session):
        """Without a marble on the rail the waiting marble never leaves."""
        stepper.launch(empty_session, MarbleColor.BLUE)
        empty_session.reservoir.blue_available = 0

        result = stepper.step(empty_session)

        assert result.stopped
        assert empty_session.status == BallStatus.BLUE_EMPTY
        assert empty_session.ball.position == (1, -2)
        assert empty_session.velocity_history == []


class TestStepBackward:
    """Tests for reversing steps."""

    def test_nothing_to_step_back(self, empty_session):
        result = stepper.step_backward(empty_session)
        assert not result.success
        assert result.error_code == "NO_HISTORY"

    def test_back_over_bit(self, bit_session):
        stepper.launch(bit_session, MarbleColor.BLUE)
        _steps(bit_session, 3)

        # Back on the bit: still flipped, as it was right after landing there
        stepper.step_backward(bit_session)
        assert bit_session.ball.position == (3, 0)
        assert bit_session.board.get(3, 0) == PartKind.BIT_RIGHT

        stepper.step_backward(bit_session)
        assert bit_session.ball.position == (2, -1)
        assert bit_session.board.get(3, 0) == PartKind.BIT_LEFT

    @pytest.mark.parametrize("count", [1, 3, 14, 15, 20, 28, 35])
    def test_forward_then_backward_restores_everything(self, gear_session, count):
        """N steps forward and N back, through recycles, bits and gear bits."""
        stepper.launch(gear_session, MarbleColor.BLUE)
        board = gear_session.board.copy()
        ball = Ball(**vars(gear_session.ball))
        reservoir = Reservoir(**vars(gear_session.reservoir))

        _steps(gear_session, count)
        for _ in range(count):
            assert stepper.step_backward(gear_session).success

        assert gear_session.board == board
        assert gear_session.ball == ball
        assert gear_session.reservoir == reservoir
        assert gear_session.exit_queue == []
        assert gear_session.velocity_history == []

    def test_back_out_of_tray_restores_velocity(self, gear_session):
        """The first marble lands in column 5 moving straight down."""
        stepper.launch(gear_session, MarbleColor.BLUE)
        _steps(gear_session, 14)
        assert gear_session.exit_queue[-1].column == 5
        assert gear_session.ball.position == (1, -2)

        stepper.step_backward(gear_session)

        assert gear_session.ball.position == (5, 11)
        assert gear_session.ball.velocity_x == 0
        assert gear_session.exit_queue == []


class TestRemoveAndPlace:
    """Tests for taking the marble off and putting one on by hand."""

    def test_remove_ball(self, bit_session):
        stepper.launch(bit_session, MarbleColor.BLUE)
        _steps(bit_session, 4)

        stepper.remove_ball(bit_session)

        assert bit_session.status == BallStatus.AWAITING_LAUNCH
        assert bit_session.velocity_history == []
        assert not bit_session.ball_on_board

    def test_place_ball_takes_part_direction(self, empty_session):
        empty_session.board.set(3, 2, PartKind.RAMP_LEFT)
        result = stepper.place_ball(empty_session, 3, 2, MarbleColor.RED)

        assert result.success
        assert empty_session.ball.velocity_x == -1
        assert empty_session.status == BallStatus.ROLLING

    def test_place_ball_on_launch_ramp(self, empty_session):
        stepper.place_ball(empty_session, 8, -1, MarbleColor.RED)
        assert empty_session.ball.velocity_x == -1

    def test_place_ball_off_board(self, empty_session):
        result = stepper.place_ball(empty_session, 3, 11, MarbleColor.BLUE)
        assert not result.success
        assert result.error_code == "OUT_OF_BOUNDS"

    def test_free_fall_on_empty_pin(self, empty_session):
        stepper.place_ball(empty_session, 3, 2, MarbleColor.BLUE)
        assert stepper.in_free_fall(empty_session)

        empty_session.board.set(3, 2, PartKind.RAMP_LEFT)
        assert not stepper.in_free_fall(empty_session)
