"""
Tests for board topology.

Tests:
- Dimension normalization
- Cell classification on the standard board
- Mirror symmetry
- Launch positions
"""

import pytest

from ..engine_core.parts import PartKind
from ..engine_core.topology import GridTopology, CellKind, normalize_dimensions


class TestNormalizeDimensions:
    """Tests for coercing requested sizes."""

    def test_standard_size_unchanged(self):
        assert normalize_dimensions(11, 11) == (11, 11)

    def test_width_rounded_up_to_4k_plus_3(self):
        assert normalize_dimensions(12, 11) == (15, 11)
        assert normalize_dimensions(4, 11) == (7, 11)

    def test_height_rounded_up_to_odd(self):
        assert normalize_dimensions(11, 10) == (11, 11)

    def test_capped_at_27(self):
        assert normalize_dimensions(100, 100) == (27, 27)

    def test_negative_values(self):
        """Negative width becomes 3, negative height the default."""
        assert normalize_dimensions(-5, -4) == (3, 11)


class TestCellKind:
    """Tests for pin classification on the 11x11 board."""

    @pytest.mark.parametrize("x, y", [(0, 0), (1, 0), (0, 1), (10, 0), (9, 0), (10, 1)])
    def test_top_corners_out_of_play(self, topology, x, y):
        assert topology.cell_kind(x, y) == CellKind.OUT_OF_PLAY

    def test_top_center_out_of_play(self, topology):
        """Between the two launch ramps there is no pin."""
        assert topology.cell_kind(5, 0) == CellKind.OUT_OF_PLAY

    def test_bottom_row_only_center(self, topology):
        usable = [x for x in range(11) if topology.cell_kind(x, 10).is_usable]
        assert usable == [5]

    def test_parity(self, topology):
        """Equal coordinate parity is a gear pin, unequal a full pin."""
        assert topology.cell_kind(2, 0) == CellKind.GEAR_PIN
        assert topology.cell_kind(3, 0) == CellKind.FULL_PIN
        assert topology.cell_kind(4, 2) == CellKind.GEAR_PIN
        assert topology.cell_kind(5, 2) == CellKind.FULL_PIN

    @pytest.mark.parametrize("x, y", [(2, 3), (8, 3), (2, 7), (8, 7)])
    def test_marked_pins_accept_every_part(self, topology, x, y):
        kind = topology.cell_kind(x, y)
        assert kind == CellKind.MARKED_PIN
        assert kind.accepts_all_parts
        assert kind.allows(PartKind.RAMP_RIGHT)

    def test_marked_pins_only_on_standard_board(self):
        assert GridTopology(15, 11).cell_kind(2, 3) == CellKind.FULL_PIN

    def test_gear_pin_only_allows_gears(self):
        assert CellKind.GEAR_PIN.allows(PartKind.GEAR)
        assert CellKind.GEAR_PIN.allows(PartKind.EMPTY)
        assert not CellKind.GEAR_PIN.allows(PartKind.GEAR_BIT_LEFT)
        assert not CellKind.GEAR_PIN.allows(PartKind.RAMP_LEFT)

    def test_out_of_play_allows_nothing(self):
        assert CellKind.OUT_OF_PLAY.allows(PartKind.EMPTY)
        assert not CellKind.OUT_OF_PLAY.allows(PartKind.GEAR)

    @pytest.mark.parametrize("width, height", [(11, 11), (15, 9), (7, 5), (27, 27), (3, 3)])
    def test_mirror_symmetry(self, width, height):
        """cell_kind(x, y) == cell_kind(W-1-x, y) for every cell."""
        topology = GridTopology(width, height)
        for y in range(height):
            for x in range(width):
                assert topology.cell_kind(x, y) == topology.cell_kind(width - 1 - x, y)


class TestLaunchPositions:
    """Tests for where marbles wait before entering."""

    def test_standard_board(self, topology):
        assert topology.depth == 2
        assert topology.blue_home() == (1, -2)
        assert topology.red_home() == (9, -2)

    def test_wide_board(self):
        topology = GridTopology(15, 11)
        assert topology.blue_home() == (2, -2)
        assert topology.red_home() == (12, -2)

    def test_coordinates_are_usable(self, topology):
        coordinates = list(topology.coordinates())
        assert (5, 0) not in coordinates
        assert (3, 0) in coordinates
        assert coordinates == sorted(coordinates, key=lambda c: (c[1], c[0]))
