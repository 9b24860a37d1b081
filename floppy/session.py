from __future__ import annotations

import enum
import random

from floppy.config import DEFAULT_DIFFICULTY, GROUND_LEVEL, get_difficulty
from floppy.physics import Bird
from floppy.pipes import PipeStream
from floppy.scoreboard import Scoreboard


class Mode(enum.Enum):
    MENU = "menu"
    PLAYING = "playing"
    PAUSED = "paused"
    CRASHED = "crashed"


class Event(enum.Enum):
    FLAP = "flap"
    SCORE = "score"
    HIT = "hit"
    MUSIC_START = "music_start"
    MUSIC_STOP = "music_stop"


class GameSession:
    """
    All state of one game window: the mode, the body, the obstacle stream and
    the score of the current run.

    Input handlers and `update()` only mutate this object. Audio and rendering
    read from it; sound cues are queued in `events` and drained by the caller.
    """

    def __init__(self, scoreboard: Scoreboard, difficulty=DEFAULT_DIFFICULTY, rng: random.Random | None = None):
        self.scoreboard = scoreboard
        self._difficulty = get_difficulty(difficulty)
        self.bird = Bird()
        self.stream = PipeStream(self._difficulty, rng)
        self.mode = Mode.MENU
        self.score = 0
        self.best = scoreboard.best
        self.tick = 0
        self.landed = False
        self.new_record = False
        self.pending_score: int | None = None
        self.events: list[Event] = []

    @property
    def difficulty(self):
        return self._difficulty

    @property
    def pipes(self):
        return self.stream.pipes

    def drain_events(self) -> list[Event]:
        out, self.events = self.events, []
        return out

    # --- Input ---

    def flap(self):
        if self.mode == Mode.MENU:
            self.start()
        if self.mode == Mode.PLAYING:
            self.bird.flap()
            self.events.append(Event.FLAP)
        elif self.mode == Mode.CRASHED and self.landed:
            self.to_menu()

    def toggle_pause(self):
        if self.mode == Mode.PLAYING:
            self.mode = Mode.PAUSED
            self.events.append(Event.MUSIC_STOP)
        elif self.mode == Mode.PAUSED:
            self.mode = Mode.PLAYING
            self.events.append(Event.MUSIC_START)

    def select_difficulty(self, name) -> bool:
        """Difficulty is chosen from the menu and applies to the whole next run."""
        preset = get_difficulty(name)
        if self.mode != Mode.MENU:
            return False
        self._difficulty = preset
        self.stream.reset(preset)
        return True

    def submit_name(self, name):
        if self.pending_score is None:
            return None
        entry = self.scoreboard.add(name, self.pending_score)
        self.pending_score = None
        return entry

    def skip_name(self):
        self.pending_score = None

    # --- Transitions ---

    def start(self):
        self.mode = Mode.PLAYING
        self.score = 0
        self.landed = self.new_record = False
        self.pending_score = None
        self.bird.reset()
        self.stream.reset(self._difficulty)
        self.events.append(Event.MUSIC_START)

    def crash(self):
        self.mode = Mode.CRASHED
        self.landed = self.bird.bottom >= GROUND_LEVEL
        self.events += [Event.HIT, Event.MUSIC_STOP]
        self.new_record = self.scoreboard.record_best(self.score)
        self.best = self.scoreboard.best

    def to_menu(self):
        self.mode = Mode.MENU
        self.events.append(Event.MUSIC_STOP)
        if self.scoreboard.qualifies(self.score):
            self.pending_score = self.score

    def flush_best(self):
        """Keep the score of a run that is abandoned mid-flight."""
        if self.mode in (Mode.PLAYING, Mode.PAUSED) and self.scoreboard.record_best(self.score):
            self.best = self.scoreboard.best

    # --- Simulation ---

    def update(self):
        self.tick += 1
        if self.mode == Mode.PLAYING:
            self._update_playing()
        elif self.mode == Mode.MENU:
            self.bird.hover(self.tick)
        elif self.mode == Mode.CRASHED and not self.landed:
            self.landed = self.bird.fall(GROUND_LEVEL)

    def _update_playing(self):
        bird = self.bird
        bird.step()

        for _ in range(self.stream.advance(bird.x)):
            self.score += 1
            self.events.append(Event.SCORE)

        hit_pipe = self.stream.collides(bird.box)
        if bird.bottom >= GROUND_LEVEL:
            bird.land(GROUND_LEVEL)
            self.crash()
        elif hit_pipe:
            self.crash()
