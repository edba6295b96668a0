"""
Board Model - Mutable grid of parts laid over a GridTopology.

Invariant: every cell holds a part that is legal for its cell kind.
set() refuses anything else, so the invariant can only be broken by
writing to the grid directly, which nothing outside this module does.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator

from .parts import PartKind
from .topology import GridTopology, CellKind


@dataclass(frozen=True)
class PartCounts:
    """Number of parts of each family on a board."""
    ramps: int = 0
    crossovers: int = 0
    interceptors: int = 0
    bits: int = 0
    gear_bits: int = 0
    gears: int = 0

    @property
    def total(self) -> int:
        return (
            self.ramps + self.crossovers + self.interceptors
            + self.bits + self.gear_bits + self.gears
        )


class Board:
    """
    H rows x W columns of PartKind.

    Usage:
        board = Board(GridTopology())
        board.set(3, 0, PartKind.BIT_RIGHT)
        board.get(3, 0)  # PartKind.BIT_RIGHT
    """

    def __init__(self, topology: GridTopology):
        self.topology = topology
        self._cells: list[list[PartKind]] = []
        self.clear()

    @property
    def width(self) -> int:
        return self.topology.width

    @property
    def height(self) -> int:
        return self.topology.height

    def clear(self) -> None:
        """Reset every cell to empty."""
        self._cells = [
            [PartKind.EMPTY for _ in range(self.width)]
            for _ in range(self.height)
        ]

    def get(self, x: int, y: int) -> PartKind:
        """Part at (x, y). Coordinates off the grid read as empty."""
        if not self.topology.in_bounds(x, y):
            return PartKind.EMPTY
        return self._cells[y][x]

    def cell_kind(self, x: int, y: int) -> CellKind:
        return self.topology.cell_kind(x, y)

    def can_place(self, x: int, y: int, part: PartKind) -> bool:
        if not self.topology.in_bounds(x, y):
            return False
        return self.topology.cell_kind(x, y).allows(part)

    def set(self, x: int, y: int, part: PartKind) -> bool:
        """
        Put a part on a cell.

        Returns False (and changes nothing) if the part is not legal there.
        """
        if not self.can_place(x, y, part):
            return False
        self._cells[y][x] = part
        return True

    def rows(self) -> list[list[PartKind]]:
        """Copy of the grid, row-major."""
        return [row.copy() for row in self._cells]

    def parts(self) -> Iterator[tuple[int, int, PartKind]]:
        """Non-empty cells as (x, y, part)."""
        for y, row in enumerate(self._cells):
            for x, part in enumerate(row):
                if part != PartKind.EMPTY:
                    yield x, y, part

    def counts(self) -> PartCounts:
        """Count parts per family (the editor's counters)."""
        tally = {
            "ramps": 0, "crossovers": 0, "interceptors": 0,
            "bits": 0, "gear_bits": 0, "gears": 0,
        }
        for _, _, part in self.parts():
            if part in (PartKind.RAMP_LEFT, PartKind.RAMP_RIGHT):
                tally["ramps"] += 1
            elif part == PartKind.CROSSOVER:
                tally["crossovers"] += 1
            elif part == PartKind.INTERCEPTOR:
                tally["interceptors"] += 1
            elif part in (PartKind.BIT_LEFT, PartKind.BIT_RIGHT):
                tally["bits"] += 1
            elif part in (PartKind.GEAR_BIT_LEFT, PartKind.GEAR_BIT_RIGHT):
                tally["gear_bits"] += 1
            elif part.is_gear:
                tally["gears"] += 1
        return PartCounts(**tally)

    def copy(self) -> Board:
        clone = Board(self.topology)
        clone._cells = self.rows()
        return clone

    def __eq__(self, other):
        if not isinstance(other, Board):
            return False
        return self.topology == other.topology and self._cells == other._cells

    def same_layout(self, other: Board) -> bool:
        """
        Equality up to plain gear rotation.

        GEAR and GEAR_TURNED only differ in how a gear is drawn, and the URL
        code writes both as the same letter, so a board read back from a
        URL code has the same layout but not necessarily the same gears.
        """
        if self.topology != other.topology:
            return False
        for row, other_row in zip(self._cells, other._cells):
            for part, other_part in zip(row, other_row):
                if part == other_part:
                    continue
                if not (part.is_gear and other_part.is_gear):
                    return False
        return True

    def __repr__(self) -> str:
        return f"Board({self.width}x{self.height}, parts={self.counts().total})"
