"""
Pytest fixtures for Tumble tests.
"""

import pytest

from ..engine_core.board import Board
from ..engine_core.parts import PartKind
from ..engine_core.state import SimulationSession
from ..engine_core.topology import GridTopology


@pytest.fixture
def topology() -> GridTopology:
    """The standard 11x11 board."""
    return GridTopology()


@pytest.fixture
def empty_board(topology) -> Board:
    return Board(topology)


@pytest.fixture
def empty_session(topology) -> SimulationSession:
    """Session on an empty standard board with 20 marbles per color."""
    return SimulationSession.create(topology)


@pytest.fixture
def bit_session(topology) -> SimulationSession:
    """
    A single bit pointing left right under the blue launch ramp.

    Blue marbles reach it on their second step.
    """
    board = Board(topology)
    board.set(3, 0, PartKind.BIT_LEFT)
    return SimulationSession.create(topology, board)


@pytest.fixture
def gear_session(topology) -> SimulationSession:
    """
    Bit at (3, 0) feeding a gear network at (4, 1)-(4, 2)-(4, 3).

    The first blue marble flips the bit right, turns the gear bits and
    lands in column 5; the second one flips the bit back and lands in
    column 2.
    """
    board = Board(topology)
    board.set(3, 0, PartKind.BIT_LEFT)
    board.set(4, 1, PartKind.GEAR_BIT_LEFT)
    board.set(4, 2, PartKind.GEAR)
    board.set(4, 3, PartKind.GEAR_BIT_LEFT)
    return SimulationSession.create(topology, board)
