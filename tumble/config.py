"""
Configuration - Settings read from the environment.

    TUMBLE_WIDTH       board width (normalized to 4k+3, at most 27)
    TUMBLE_HEIGHT      board height (normalized to odd, at most 27)
    TUMBLE_MARBLES     marbles per color on the rails
    TUMBLE_SPEED       tick speed: slow, medium, fast or fastest
    TUMBLE_LOG_LEVEL   logging level name
    ALLOWED_ORIGINS    comma separated CORS origins for the API
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
import os

from .engine_core.state import DEFAULT_MARBLES
from .engine_core.topology import DEFAULT_HEIGHT, DEFAULT_WIDTH, normalize_dimensions
from .session.game_loop import Speed


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the API server and the CLI."""
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    marbles: int = DEFAULT_MARBLES
    speed: Speed = Speed.MEDIUM
    log_level: str = "INFO"
    allowed_origins: tuple[str, ...] = ("*",)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default


def _speed_env(name: str, default: Speed) -> Speed:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return Speed(raw.strip().lower())
    except ValueError:
        logger.warning("Ignoring %s=%r: unknown speed", name, raw)
        return default


def load_settings() -> Settings:
    """Read settings from the environment, falling back to defaults."""
    width, height = normalize_dimensions(
        _int_env("TUMBLE_WIDTH", DEFAULT_WIDTH),
        _int_env("TUMBLE_HEIGHT", DEFAULT_HEIGHT),
    )
    marbles = max(0, _int_env("TUMBLE_MARBLES", DEFAULT_MARBLES))
    origins = tuple(
        origin.strip()
        for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
        if origin.strip()
    )
    return Settings(
        width=width,
        height=height,
        marbles=marbles,
        speed=_speed_env("TUMBLE_SPEED", Speed.MEDIUM),
        log_level=os.getenv("TUMBLE_LOG_LEVEL", "INFO").upper(),
        allowed_origins=origins or ("*",),
    )
