"""
Games module - Ready-made boards.

Demo machines for the standard 11x11 board, loadable by name.
"""

from .demos import Demo, DEMOS, START_DEMO, get_demo, demos_available

__all__ = [
    "Demo",
    "DEMOS",
    "START_DEMO",
    "get_demo",
    "demos_available",
]
