"""
Gear Network Synchronizer - Floodfill over meshed gears.

Gears, and gear bits, that touch horizontally or vertically form a component
that always rotates together. Passing a marble through any gear bit of a
component flips every member at once.

A component whose gear bits point different ways would be jammed on the real
board. normalize_component() repairs that when a part is placed; nothing
checks it at runtime.
"""

from __future__ import annotations

from .board import Board
from .parts import PartKind


_NEIGHBOURS = ((1, 0), (0, 1), (-1, 0), (0, -1))


def component(board: Board, x0: int, y0: int) -> list[tuple[int, int]]:
    """
    Cells in the gear component containing (x0, y0).

    The seed is always included. Visitation order is not meaningful.
    """
    width = board.width
    stack = [(x0, y0)]
    seen = {y0 * width + x0}
    members: list[tuple[int, int]] = []

    while stack:
        x, y = stack.pop()
        members.append((x, y))
        for dx, dy in _NEIGHBOURS:
            x2, y2 = x + dx, y + dy
            if not board.topology.in_bounds(x2, y2):
                continue
            if not board.get(x2, y2).is_gear_capable:
                continue
            key = y2 * width + x2
            if key in seen:
                continue
            seen.add(key)
            stack.append((x2, y2))

    return members


def toggle_component(board: Board, x0: int, y0: int) -> int:
    """
    Rotate the component at (x0, y0): every member flips orientation.

    Applying it twice restores the board. Returns the component size.
    """
    members = component(board, x0, y0)
    for x, y in members:
        part = board.get(x, y)
        if part.is_gear_capable:
            board.set(x, y, part.flipped)
    return len(members)


def normalize_component(board: Board, x0: int, y0: int) -> int:
    """
    Make every gear bit in the component point the same way.

    The direction is taken from (x0, y0) when it is a gear bit, otherwise
    from the first gear bit found. Plain gears have no direction and are
    left alone. Returns the number of cells changed.
    """
    members = component(board, x0, y0)
    target = board.get(x0, y0)
    if target not in (PartKind.GEAR_BIT_LEFT, PartKind.GEAR_BIT_RIGHT):
        target = None

    changed = 0
    for x, y in members:
        part = board.get(x, y)
        if part not in (PartKind.GEAR_BIT_LEFT, PartKind.GEAR_BIT_RIGHT):
            continue
        if target is None:
            target = part
        if part != target:
            board.set(x, y, target)
            changed += 1
    return changed
