"""
URL Codec - Compact board code for share links.

One character per used cell, row by row:

    full pins       l r 0 1 a b c x i   (ramp, bit, gear bit, gear,
                                         crossover, interceptor)
                    e                   empty
    gear pins       g                   gear, nothing at all otherwise
    out of play     nothing

Runs of nine 'e' are shortened to 'z', then runs of three to 'f'.
Both gear renderings are written as a gear, so a decoded board matches the
original up to gear rotation (Board.same_layout).
A trailing "_<blue>_<red>" gives the marble counts when they are not 20/20.

Example (the nim board):
    1i10eerrlfrxfelbfrbglfbgrfbgblfxlflrfr_15_0
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from ..engine_core.board import Board
from ..engine_core.parts import PartKind
from ..engine_core.state import Reservoir
from ..engine_core.topology import GridTopology, CellKind, DEFAULT_WIDTH, DEFAULT_HEIGHT


logger = logging.getLogger(__name__)

URL_DEFAULT_MARBLES = 20

GEAR_PIN_LETTER = "g"

_RUNS = (("z", 9), ("f", 3))

_BY_LETTER = {
    "l": PartKind.RAMP_LEFT,
    "r": PartKind.RAMP_RIGHT,
    "0": PartKind.BIT_LEFT,
    "1": PartKind.BIT_RIGHT,
    "a": PartKind.GEAR_BIT_LEFT,
    "b": PartKind.GEAR_BIT_RIGHT,
    "c": PartKind.GEAR,
    "x": PartKind.CROSSOVER,
    "i": PartKind.INTERCEPTOR,
    "e": PartKind.EMPTY,
}


@dataclass
class UrlBoard:
    """A decoded URL code: the board and the marble counts it carried."""
    board: Board
    blue: int = URL_DEFAULT_MARBLES
    red: int = URL_DEFAULT_MARBLES

    def reservoir(self) -> Reservoir:
        return Reservoir(
            blue_available=self.blue,
            red_available=self.red,
            blue_total=self.blue,
            red_total=self.red,
        )


def encode_url(board: Board, reservoir: Reservoir | None = None) -> str:
    """Board (and optionally marble counts) to a URL code."""
    topology = board.topology
    chars = []
    for x, y in topology.coordinates():
        part = board.get(x, y)
        if topology.cell_kind(x, y) == CellKind.GEAR_PIN:
            if part.is_gear:
                chars.append(GEAR_PIN_LETTER)
            continue
        chars.append(part.url_letter)

    code = "".join(chars)
    for letter, length in _RUNS:
        code = code.replace("e" * length, letter)

    if reservoir is not None and (
        reservoir.blue_available != URL_DEFAULT_MARBLES
        or reservoir.red_available != URL_DEFAULT_MARBLES
    ):
        code += f"_{reservoir.blue_available}_{reservoir.red_available}"
    return code


def decode_url(code: str, topology: GridTopology) -> UrlBoard:
    """
    URL code to board.

    Never fails: characters beyond the board are ignored, missing ones
    leave cells empty, and unknown letters read as empty.
    """
    fields = code.split("_")
    body = fields[0]
    blue = _parse_count(fields[1]) if len(fields) > 1 else URL_DEFAULT_MARBLES
    red = _parse_count(fields[2]) if len(fields) > 2 else URL_DEFAULT_MARBLES

    for letter, length in _RUNS:
        body = body.replace(letter, "e" * length)

    board = Board(topology)
    pos = 0
    for x, y in topology.coordinates():
        char = body[pos] if pos < len(body) else ""
        if topology.cell_kind(x, y) == CellKind.GEAR_PIN:
            # Gear pins only take up a character when they hold a gear
            if char == GEAR_PIN_LETTER:
                board.set(x, y, PartKind.GEAR)
                pos += 1
            continue
        board.set(x, y, _BY_LETTER.get(char, PartKind.EMPTY))
        pos += 1

    if pos < len(body):
        logger.debug("Ignored %d surplus characters in board code", len(body) - pos)
    return UrlBoard(board=board, blue=blue, red=red)


def share_query(board: Board, reservoir: Reservoir | None = None) -> str:
    """Query string of a share link: board code plus non-default size."""
    query = f"board={encode_url(board, reservoir)}"
    if board.width != DEFAULT_WIDTH:
        query += f"&w={board.width}"
    if board.height != DEFAULT_HEIGHT:
        query += f"&h={board.height}"
    return query


def _parse_count(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        return URL_DEFAULT_MARBLES
