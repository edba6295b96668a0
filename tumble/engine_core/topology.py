"""
Grid Topology - Which coordinates of the board are pins, and what kind.

The board is a W x H grid, but not every coordinate is usable:
- the top-left and top-right corners are cut away next to the launch ramps
- a triangle at the top center, between the two launch ramps, is cut away
- the bottom row only has the single center exit pin

Usable pins come in two interleaved diamond grids: full pins accept every
part, gear pins (equal coordinate parity) only accept a gear.

The topology never changes once W and H are fixed.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .parts import PartKind


DEFAULT_WIDTH = 11
DEFAULT_HEIGHT = 11
MAX_DIMENSION = 27


class CellKind(Enum):
    """Classification of a grid coordinate."""
    OUT_OF_PLAY = "out_of_play"
    FULL_PIN = "full_pin"
    GEAR_PIN = "gear_pin"
    MARKED_PIN = "marked_pin"  # full pin drawn as a "virtual" pin on 11x11 boards

    @property
    def is_usable(self) -> bool:
        return self != CellKind.OUT_OF_PLAY

    @property
    def accepts_all_parts(self) -> bool:
        return self in (CellKind.FULL_PIN, CellKind.MARKED_PIN)

    @property
    def placeholder(self) -> str:
        """Text character used for an empty cell of this kind."""
        return _PLACEHOLDERS[self]

    def allows(self, part: PartKind) -> bool:
        """Whether this cell may hold the given part."""
        if self == CellKind.OUT_OF_PLAY:
            return part == PartKind.EMPTY
        if self == CellKind.GEAR_PIN:
            return part.allowed_on_gear_pin
        return True


_PLACEHOLDERS = {
    CellKind.OUT_OF_PLAY: " ",
    CellKind.GEAR_PIN: ".",
    CellKind.FULL_PIN: "v",
    CellKind.MARKED_PIN: "V",
}

PLACEHOLDER_CHARS = frozenset(_PLACEHOLDERS.values())

_MARKED_PINS = frozenset({(2, 3), (8, 3), (2, 7), (8, 7)})


def normalize_dimensions(width: int, height: int) -> tuple[int, int]:
    """
    Coerce requested board dimensions to supported ones.

    Width must be of the form 4k+3 so both launch ramps sit on pins;
    height must be odd. Both are capped at MAX_DIMENSION.
    """
    if (width & 3) != 3:
        width |= 3
    if width < 0:
        width = 3
    width = min(width, MAX_DIMENSION)

    if (height & 1) != 1:
        height |= 1
    if height < 0:
        height = DEFAULT_HEIGHT
    height = min(height, MAX_DIMENSION)
    return width, height


@dataclass(frozen=True)
class GridTopology:
    """Shape of the board: dimensions and per-cell pin classification."""
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT

    @property
    def depth(self) -> int:
        """Horizontal offset of the launch ramps from the board edges."""
        return self.width // 4

    @property
    def center(self) -> int:
        """Column of the bottom exit."""
        return (self.width - 1) // 2

    @property
    def is_canonical(self) -> bool:
        return self.width == DEFAULT_WIDTH and self.height == DEFAULT_HEIGHT

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell_kind(self, x: int, y: int) -> CellKind:
        """Classify a coordinate inside the grid."""
        w, h, d = self.width, self.height, self.depth
        if x + y < d:
            return CellKind.OUT_OF_PLAY
        if (w - 1 - x) + y < d:
            return CellKind.OUT_OF_PLAY
        if x - y - d > 2 and (w - x) - d - 1 - y > 2:
            return CellKind.OUT_OF_PLAY
        if x != self.center and y >= h - 1:
            return CellKind.OUT_OF_PLAY
        if self.is_canonical and (x, y) in _MARKED_PINS:
            return CellKind.MARKED_PIN
        if x % 2 == y % 2:
            return CellKind.GEAR_PIN
        return CellKind.FULL_PIN

    def coordinates(self) -> Iterator[tuple[int, int]]:
        """All usable coordinates, row by row."""
        for y in range(self.height):
            for x in range(self.width):
                if self.cell_kind(x, y).is_usable:
                    yield x, y

    def blue_home(self) -> tuple[int, int]:
        """Start position of a blue marble (above the left launch ramp)."""
        return self.depth - 1, -2

    def red_home(self) -> tuple[int, int]:
        """Start position of a red marble (above the right launch ramp)."""
        return self.width - self.depth, -2
