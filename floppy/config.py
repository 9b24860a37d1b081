from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# --- Configuration Constants ---
SCREEN_WIDTH, SCREEN_HEIGHT = 480, 700
FPS = 60
GROUND_HEIGHT = 120
GROUND_LEVEL = SCREEN_HEIGHT - GROUND_HEIGHT
GROUND_SCROLL_SPEED = 2

# Physics is expressed per simulation tick (1/FPS seconds)
BIRD_START_X, BIRD_START_Y = round(SCREEN_WIDTH * 0.25), round(SCREEN_HEIGHT * 0.4)
BIRD_W, BIRD_H = 34, 24
GRAVITY, FLAP_STRENGTH = 0.55, -9.5
MAX_FALL_SPEED = 12
CEILING = -20
MIN_ROTATION, MAX_ROTATION = -30, 90
CRASH_SPIN = 6

PIPE_WIDTH = 78
PIPE_SPAWN_OFFSET = 40
PIPE_MARGIN_TOP = 60
PIPE_MARGIN_TOTAL = 200
PIPE_DESPAWN_X = -40

LEADERBOARD_SIZE = 20
LEADERBOARD_SHOWN = 5
NAME_MAX_LEN = 12
DEFAULT_NAME = "Anon"

DEFAULT_VOLUME = 0.28
MAX_CATCHUP_TICKS = 5

WHITE, BLACK, RED, SKY = (255,)*3, (0,)*3, (255, 107, 107), (112, 197, 206)
PIPE_GREEN, PIPE_CAP, HILL = (59, 164, 74), (42, 143, 59), (163, 224, 122)
GROUND, GROUND_TILE, HUD_INK = (215, 155, 92), (184, 127, 78), (8, 51, 68)
BIRD_BODY, BIRD_WING = (255, 211, 77), (255, 159, 28)


@dataclass(frozen=True)
class Difficulty:
    name: str
    gap: int
    speed: float
    spawn: int


DIFFICULTIES = {
    "easy": Difficulty("easy", gap=190, speed=1.8, spawn=125),
    "normal": Difficulty("normal", gap=160, speed=2.2, spawn=110),
    "hard": Difficulty("hard", gap=140, speed=2.8, spawn=95),
}
DEFAULT_DIFFICULTY = "normal"


def get_difficulty(name: str) -> Difficulty:
    """Look up a preset by name. Unknown names raise KeyError."""
    try:
        return DIFFICULTIES[name]
    except KeyError:
        raise KeyError(f"unknown difficulty {name!r}; expected one of {sorted(DIFFICULTIES)}") from None


@dataclass
class GameConfig:
    difficulty: str = DEFAULT_DIFFICULTY
    seed: int | None = None
    state_dir: Path | None = None
    volume: float = DEFAULT_VOLUME
    muted: bool = False
    smoke_frames: int = 0


def state_dir() -> Path:
    """
    Directory for the persisted store.

    Override for tests/dev via `FLOPPY_STATE_DIR`.
    """

    override = os.environ.get("FLOPPY_STATE_DIR")
    if override:
        return Path(override)
    return Path.home() / ".floppy"
