from __future__ import annotations

import os
import random

import pytest

# Headless SDL for the window/audio tests; must be set before pygame opens anything.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from floppy.scoreboard import KeyValueStore, Scoreboard
from floppy.session import GameSession


@pytest.fixture
def scoreboard() -> Scoreboard:
    return Scoreboard(KeyValueStore(None))


@pytest.fixture
def session(scoreboard: Scoreboard) -> GameSession:
    return GameSession(scoreboard, "normal", random.Random(1234))
