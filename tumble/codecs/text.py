"""
Text Codec - Boards as ASCII art.

    ...)...%...
    ../.{.v.(..
    .%.{*%.%.).

Empty cells are written with the placeholder of their cell kind
(' ' out of play, '.' gear pin, 'v' full pin, 'V' marked pin). On input
every placeholder is read as empty, whatever cell it sits on, and '%' is
accepted for a right ramp so boards can be written in string literals.
"""

from __future__ import annotations

from ..engine_core.board import Board
from ..engine_core.parts import PartKind
from ..engine_core.topology import GridTopology


def encode_text(board: Board) -> str:
    """H lines of W characters, each ending in a newline."""
    topology = board.topology
    lines = []
    for y in range(topology.height):
        chars = []
        for x in range(topology.width):
            part = board.get(x, y)
            if part == PartKind.EMPTY:
                chars.append(topology.cell_kind(x, y).placeholder)
            else:
                chars.append(part.symbol)
        lines.append("".join(chars) + "\n")
    return "".join(lines)


def decode_text(text: str, topology: GridTopology) -> Board | None:
    """
    Parse a text board.

    Control characters (newlines, and anything else below ' ') are skipped
    before each row. Unknown characters, missing characters at the end, and
    parts that are not allowed on their cell all come out as empty cells.

    Returns None for empty input.
    """
    if not text:
        return None

    board = Board(topology)
    pos = 0
    for y in range(topology.height):
        while pos < len(text) and ord(text[pos]) < 32:
            pos += 1
        for x in range(topology.width):
            char = text[pos] if pos < len(text) else ""
            pos += 1
            part = PartKind.from_symbol(char)
            if part is None:
                continue
            # Illegal for this cell: fall back to the cell's empty state
            board.set(x, y, part)
    return board
