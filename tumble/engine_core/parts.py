"""
Parts - The part kinds that can sit on a pin.

Every kind carries its two textual encodings:
- symbol: the native one-character form used in text boards
- url_letter: the letter used by the compact URL code (full pins only)

Plain gears have two renderings (GEAR / GEAR_TURNED) that behave the same;
toggling a gear network swaps them so a renderer can show rotation.
"""

from __future__ import annotations
from enum import Enum


class PartKind(Enum):
    """Parts that can occupy a cell."""
    EMPTY = "empty"
    RAMP_LEFT = "ramp_left"
    RAMP_RIGHT = "ramp_right"
    BIT_LEFT = "bit_left"
    BIT_RIGHT = "bit_right"
    GEAR_BIT_LEFT = "gear_bit_left"
    GEAR_BIT_RIGHT = "gear_bit_right"
    GEAR = "gear"
    GEAR_TURNED = "gear_turned"
    CROSSOVER = "crossover"
    INTERCEPTOR = "interceptor"

    @property
    def symbol(self) -> str:
        """Native text symbol. Empty cells are written as topology placeholders."""
        return _SYMBOLS[self]

    @property
    def url_letter(self) -> str:
        return _URL_LETTERS[self]

    @property
    def is_gear_capable(self) -> bool:
        """Parts that mesh into a gear network."""
        return self in GEAR_PARTS

    @property
    def is_gear(self) -> bool:
        return self in (PartKind.GEAR, PartKind.GEAR_TURNED)

    @property
    def allowed_on_gear_pin(self) -> bool:
        return self in (PartKind.EMPTY, PartKind.GEAR, PartKind.GEAR_TURNED)

    @property
    def flipped(self) -> PartKind:
        """Mirror image (left <-> right). Symmetric parts map to themselves."""
        return _FLIPPED.get(self, self)

    @classmethod
    def from_symbol(cls, char: str) -> PartKind | None:
        """Parse a native symbol. Returns None for placeholders and unknowns."""
        return _BY_SYMBOL.get(char)


GEAR_PARTS = frozenset({
    PartKind.GEAR_BIT_LEFT,
    PartKind.GEAR_BIT_RIGHT,
    PartKind.GEAR,
    PartKind.GEAR_TURNED,
})

_SYMBOLS = {
    PartKind.EMPTY: " ",
    PartKind.RAMP_LEFT: "/",
    PartKind.RAMP_RIGHT: "\\",
    PartKind.BIT_LEFT: "(",
    PartKind.BIT_RIGHT: ")",
    PartKind.GEAR_BIT_LEFT: "{",
    PartKind.GEAR_BIT_RIGHT: "}",
    PartKind.GEAR: "*",
    PartKind.GEAR_TURNED: "+",
    PartKind.CROSSOVER: "x",
    PartKind.INTERCEPTOR: "_",
}

_URL_LETTERS = {
    PartKind.EMPTY: "e",
    PartKind.RAMP_LEFT: "l",
    PartKind.RAMP_RIGHT: "r",
    PartKind.BIT_LEFT: "0",
    PartKind.BIT_RIGHT: "1",
    PartKind.GEAR_BIT_LEFT: "a",
    PartKind.GEAR_BIT_RIGHT: "b",
    PartKind.GEAR: "c",
    PartKind.GEAR_TURNED: "c",
    PartKind.CROSSOVER: "x",
    PartKind.INTERCEPTOR: "i",
}

# '%' stands in for a backslash where one is awkward to write
_BY_SYMBOL = {sym: kind for kind, sym in _SYMBOLS.items() if kind != PartKind.EMPTY}
_BY_SYMBOL["%"] = PartKind.RAMP_RIGHT

_FLIPPED = {
    PartKind.RAMP_LEFT: PartKind.RAMP_RIGHT,
    PartKind.RAMP_RIGHT: PartKind.RAMP_LEFT,
    PartKind.BIT_LEFT: PartKind.BIT_RIGHT,
    PartKind.BIT_RIGHT: PartKind.BIT_LEFT,
    PartKind.GEAR_BIT_LEFT: PartKind.GEAR_BIT_RIGHT,
    PartKind.GEAR_BIT_RIGHT: PartKind.GEAR_BIT_LEFT,
    PartKind.GEAR: PartKind.GEAR_TURNED,
    PartKind.GEAR_TURNED: PartKind.GEAR,
}
