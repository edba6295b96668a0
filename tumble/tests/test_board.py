"""
Tests for the board model and gear networks.
"""

from ..engine_core.board import Board
from ..engine_core.gears import component, normalize_component, toggle_component
from ..engine_core.parts import PartKind
from ..engine_core.topology import GridTopology


class TestBoard:
    """Tests for placing and reading parts."""

    def test_new_board_is_empty(self, empty_board):
        assert list(empty_board.parts()) == []
        assert empty_board.counts().total == 0

    def test_set_and_get(self, empty_board):
        assert empty_board.set(3, 0, PartKind.BIT_RIGHT)
        assert empty_board.get(3, 0) == PartKind.BIT_RIGHT

    def test_set_rejects_illegal_part(self, empty_board):
        """A ramp does not fit on a gear pin; the cell stays empty."""
        assert not empty_board.set(2, 0, PartKind.RAMP_LEFT)
        assert empty_board.get(2, 0) == PartKind.EMPTY

    def test_set_rejects_out_of_play(self, empty_board):
        assert not empty_board.set(0, 0, PartKind.GEAR)
        assert not empty_board.set(5, 0, PartKind.RAMP_LEFT)

    def test_off_grid_reads_empty(self, empty_board):
        assert empty_board.get(-1, 0) == PartKind.EMPTY
        assert empty_board.get(3, 11) == PartKind.EMPTY
        assert not empty_board.set(3, 11, PartKind.RAMP_LEFT)

    def test_copy_is_independent(self, empty_board):
        empty_board.set(3, 0, PartKind.RAMP_LEFT)
        clone = empty_board.copy()
        clone.set(3, 0, PartKind.RAMP_RIGHT)

        assert empty_board.get(3, 0) == PartKind.RAMP_LEFT
        assert clone != empty_board

    def test_equality(self, topology):
        a, b = Board(topology), Board(topology)
        assert a == b
        a.set(7, 0, PartKind.CROSSOVER)
        assert a != b

    def test_same_layout_ignores_gear_rotation(self, topology):
        a, b = Board(topology), Board(topology)
        a.set(4, 2, PartKind.GEAR)
        b.set(4, 2, PartKind.GEAR_TURNED)

        assert a != b
        assert a.same_layout(b)

        b.set(4, 2, PartKind.EMPTY)
        assert not a.same_layout(b)

    def test_same_layout_needs_same_parts(self, topology):
        a, b = Board(topology), Board(topology)
        a.set(3, 0, PartKind.BIT_LEFT)
        b.set(3, 0, PartKind.BIT_RIGHT)
        assert not a.same_layout(b)
        assert not a.same_layout(Board(GridTopology(15, 11)))

    def test_counts(self, empty_board):
        empty_board.set(3, 0, PartKind.RAMP_LEFT)
        empty_board.set(7, 0, PartKind.RAMP_RIGHT)
        empty_board.set(2, 1, PartKind.BIT_LEFT)
        empty_board.set(4, 1, PartKind.GEAR_BIT_RIGHT)
        empty_board.set(4, 2, PartKind.GEAR)
        empty_board.set(6, 2, PartKind.GEAR_TURNED)
        empty_board.set(6, 1, PartKind.CROSSOVER)
        empty_board.set(8, 1, PartKind.INTERCEPTOR)

        counts = empty_board.counts()
        assert counts.ramps == 2
        assert counts.bits == 1
        assert counts.gear_bits == 1
        assert counts.gears == 2
        assert counts.crossovers == 1
        assert counts.interceptors == 1
        assert counts.total == 8

    def test_clear(self, empty_board):
        empty_board.set(3, 0, PartKind.RAMP_LEFT)
        empty_board.clear()
        assert empty_board.counts().total == 0


class TestGearNetworks:
    """Tests for floodfill, rotation and repair of gear networks."""

    def _network(self, board):
        board.set(3, 2, PartKind.GEAR_BIT_LEFT)
        board.set(4, 2, PartKind.GEAR)
        board.set(5, 2, PartKind.GEAR_BIT_RIGHT)
        # Not adjacent to the network
        board.set(7, 2, PartKind.GEAR_BIT_LEFT)

    def test_component(self, empty_board):
        self._network(empty_board)
        members = component(empty_board, 3, 2)
        assert sorted(members) == [(3, 2), (4, 2), (5, 2)]

    def test_component_of_lone_cell(self, empty_board):
        """The seed is always part of its own component."""
        assert component(empty_board, 3, 0) == [(3, 0)]

    def test_toggle_flips_every_member(self, empty_board):
        self._network(empty_board)
        size = toggle_component(empty_board, 4, 2)

        assert size == 3
        assert empty_board.get(3, 2) == PartKind.GEAR_BIT_RIGHT
        assert empty_board.get(4, 2) == PartKind.GEAR_TURNED
        assert empty_board.get(5, 2) == PartKind.GEAR_BIT_LEFT
        assert empty_board.get(7, 2) == PartKind.GEAR_BIT_LEFT

    def test_toggle_twice_restores_board(self, empty_board):
        self._network(empty_board)
        before = empty_board.copy()

        toggle_component(empty_board, 3, 2)
        toggle_component(empty_board, 3, 2)

        assert empty_board == before

    def test_normalize_follows_seed(self, empty_board):
        self._network(empty_board)
        changed = normalize_component(empty_board, 3, 2)

        assert changed == 1
        assert empty_board.get(5, 2) == PartKind.GEAR_BIT_LEFT
        assert empty_board.get(4, 2) == PartKind.GEAR

    def test_normalize_is_idempotent(self, empty_board):
        self._network(empty_board)
        normalize_component(empty_board, 5, 2)
        after_first = empty_board.copy()

        assert normalize_component(empty_board, 5, 2) == 0
        assert empty_board == after_first
        assert empty_board.get(3, 2) == PartKind.GEAR_BIT_RIGHT
