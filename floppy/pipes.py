from __future__ import annotations

import random
from dataclasses import dataclass

from floppy.config import (
    PIPE_DESPAWN_X,
    PIPE_MARGIN_TOP,
    PIPE_MARGIN_TOTAL,
    PIPE_SPAWN_OFFSET,
    PIPE_WIDTH,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    Difficulty,
)
from floppy.physics import Box


@dataclass
class Pipe:
    x: float
    top: int
    bottom: int
    passed: bool = False

    @property
    def right(self):
        return self.x + PIPE_WIDTH

    @property
    def top_box(self) -> Box:
        return Box(self.x, 0, PIPE_WIDTH, self.top)

    @property
    def bottom_box(self) -> Box:
        return Box(self.x, SCREEN_HEIGHT - self.bottom, PIPE_WIDTH, self.bottom)

    def hits(self, box: Box) -> bool:
        return box.overlaps(self.top_box) or box.overlaps(self.bottom_box)


def make_pipe(top, gap, x=SCREEN_WIDTH + PIPE_SPAWN_OFFSET) -> Pipe:
    bottom = SCREEN_HEIGHT - top - gap
    if top < 0 or bottom < 0:
        raise ValueError(f"gap {gap} at top={top} does not fit a {SCREEN_HEIGHT}px field")
    return Pipe(x, top, bottom)


class PipeStream:
    """Spawns, scrolls and retires the obstacles of one run."""

    def __init__(self, difficulty: Difficulty, rng: random.Random | None = None):
        self.difficulty = difficulty
        self.rng = rng or random.Random()
        self.pipes: list[Pipe] = []
        self.frame = 0

    def reset(self, difficulty: Difficulty | None = None):
        if difficulty is not None:
            self.difficulty = difficulty
        self.pipes.clear()
        self.frame = 0

    def random_top(self):
        span = SCREEN_HEIGHT - self.difficulty.gap - PIPE_MARGIN_TOTAL
        # Round half up so the margins hold at both ends of the range
        return int(self.rng.random() * span + PIPE_MARGIN_TOP + 0.5)

    def spawn(self, top=None) -> Pipe:
        pipe = make_pipe(self.random_top() if top is None else top, self.difficulty.gap)
        self.pipes.append(pipe)
        return pipe

    def advance(self, bird_x) -> int:
        """Move one tick. Returns how many pipes the body cleared this tick."""
        self.frame += 1
        if self.frame % self.difficulty.spawn == 0:
            self.spawn()

        cleared = 0
        for p in self.pipes:
            p.x -= self.difficulty.speed
            if not p.passed and p.right < bird_x:
                p.passed = True
                cleared += 1
        self.pipes = [p for p in self.pipes if p.right >= PIPE_DESPAWN_X]
        return cleared

    def collides(self, box: Box) -> bool:
        return any(p.hits(box) for p in self.pipes)
