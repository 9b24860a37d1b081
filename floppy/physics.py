from __future__ import annotations

import math
from dataclasses import dataclass

from floppy.config import (
    BIRD_H,
    BIRD_START_X,
    BIRD_START_Y,
    BIRD_W,
    CEILING,
    CRASH_SPIN,
    FLAP_STRENGTH,
    GRAVITY,
    MAX_FALL_SPEED,
    MAX_ROTATION,
    MIN_ROTATION,
)


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    w: float
    h: float

    def overlaps(self, other: Box) -> bool:
        # Touching edges count as a hit
        return not (
            self.x + self.w < other.x
            or self.x > other.x + other.w
            or self.y + self.h < other.y
            or self.y > other.y + other.h
        )


def clamp(v, lo, hi):
    return max(lo, min(hi, v))


class Bird:
    def __init__(self, x=BIRD_START_X, y=BIRD_START_Y):
        self.x, self.y = x, y
        self.w, self.h = BIRD_W, BIRD_H
        self.gravity, self.flap_power, self.max_fall = GRAVITY, FLAP_STRENGTH, MAX_FALL_SPEED
        self.vy = self.rotation = 0

    def reset(self):
        self.x, self.y = BIRD_START_X, BIRD_START_Y
        self.vy = self.rotation = 0

    @property
    def box(self) -> Box:
        return Box(self.x, self.y, self.w, self.h)

    @property
    def bottom(self):
        return self.y + self.h

    def flap(self):
        self.vy = self.flap_power

    def step(self):
        """Advance one playing tick. Rotation is cosmetic and never feeds collision."""
        self.vy = min(self.vy + self.gravity, self.max_fall)
        self.y += self.vy
        self.rotation = clamp(self.vy * 3 + 5, MIN_ROTATION, MAX_ROTATION)
        if self.y < CEILING:
            self.y, self.vy = CEILING, 0

    def fall(self, ground):
        """Crashed tumble. Returns True once the body rests on the ground line."""
        if self.bottom >= ground:
            self.y = ground - self.h
            return True
        self.vy += self.gravity
        self.y += self.vy
        self.rotation = min(MAX_ROTATION, self.rotation + CRASH_SPIN)
        if self.bottom >= ground:
            self.y = ground - self.h
            return True
        return False

    def land(self, ground):
        self.y = ground - self.h

    def hover(self, tick):
        wave = math.sin(tick * 0.08)
        self.y = round(BIRD_START_Y + wave * 10)
        self.rotation = wave * 6
