"""
Demo Boards - Ready-made machines for the standard 11x11 board.

demo1     blue, blue, red pattern (the board a new session starts with)
demo2     blue, blue, red, red, ... pattern
addition  adds the left 3-bit number into the right 4-bit number
nim       single-pile nim against the machine (15 blue, 0 red marbles)

Bits pointing left are 0, right are 1; in each number the topmost bit has
value 1. Crank the blue lever to run any of them.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..engine_core.board import Board
from ..engine_core.topology import GridTopology
from ..codecs.text import decode_text
from ..codecs.url import decode_url, URL_DEFAULT_MARBLES


@dataclass(frozen=True)
class Demo:
    """A named demo board, in text or URL form."""
    name: str
    description: str
    text: str | None = None
    url_code: str | None = None

    def load(self, topology: GridTopology) -> tuple[Board, int, int]:
        """Returns (board, blue marbles, red marbles)."""
        if self.url_code is not None:
            decoded = decode_url(self.url_code, topology)
            return decoded.board, decoded.blue, decoded.red
        board = decode_text(self.text or "", topology)
        if board is None:
            board = Board(topology)
        return board, URL_DEFAULT_MARBLES, URL_DEFAULT_MARBLES


DEMO1 = Demo(
    name="demo1",
    description="bbrbbbbrbbbbbbbb example. Crank blue lever to run it",
    text="""
...)...%...
../.{.v.(..
.%.{*%.%.).
v.%.).%.%._
.v./.{.%.%.
v.%.{*%.%./
.v.%.).%.x.
v.v./.{.x./
.v.%.{*x./.
v.v.%./.%.v
...../.....
""",
)

DEMO2 = Demo(
    name="demo2",
    description="bbrrbbrrbbrr.... example. Crank blue lever to run it",
    text="""
...)...(...
..%.%././..
.v.%.x./.v.
v.v./.%.v.v
.v.%.v./.v.
v.v./.%.v.v
.v.%.v./.v.
v.v./.%.v.v
.v.%.v./.v.
v.v./.%.v.v
.....v.....
""",
)

ADDITION = Demo(
    name="addition",
    description=(
        "Binary addition of the left 3-bit number to the right 4-bit number; "
        "the result is stored in the right number"
    ),
    text="""
...)...)...
.././.%.%..
.%.(.v.(./.
v././.%.%.v
.%.(.v.(./.
v././.%.%.v
.%.%.v.(./.
v.%.%././.v
.v.%._./.v.
v.v.%./.v.v
.....x.....
""",
)

NIM = Demo(
    name="nim",
    description=(
        "Single-pile nim: take 1-3 blue marbles per turn, whoever takes the "
        "last one wins. Gears pointing right means it is your turn"
    ),
    url_code="1i10eerrlfrxfelbfrbglfbgrfbgblfxlflrfr_15_0",
)

DEMOS: dict[str, Demo] = {demo.name: demo for demo in (DEMO1, DEMO2, ADDITION, NIM)}

START_DEMO = DEMO1


def get_demo(name: str) -> Demo | None:
    return DEMOS.get(name)


def demos_available(topology: GridTopology) -> bool:
    """Demos are drawn for the standard board only."""
    return topology.is_canonical
