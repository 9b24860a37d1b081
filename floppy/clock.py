from __future__ import annotations

from floppy.config import FPS, MAX_CATCHUP_TICKS


class FixedStepScheduler:
    """
    Turns variable frame times into whole simulation ticks.

    The simulation always advances in steps of `1 / rate` seconds. When a
    frame arrives late, at most `max_ticks` steps are run and the remaining
    backlog is dropped so a long stall never turns into a fast-forward.
    """

    def __init__(self, rate=FPS, max_ticks=MAX_CATCHUP_TICKS):
        if rate <= 0:
            raise ValueError("rate must be positive")
        self.step = 1.0 / rate
        self.max_ticks = max_ticks
        self.accumulator = 0.0
        self.ticks = 0

    def advance(self, dt) -> int:
        self.accumulator += max(0.0, dt)
        n = int(self.accumulator / self.step + 1e-9)
        if n > self.max_ticks:
            n, self.accumulator = self.max_ticks, 0.0
        else:
            self.accumulator = max(0.0, self.accumulator - n * self.step)
        self.ticks += n
        return n

    def run(self, dt, tick) -> int:
        n = self.advance(dt)
        for _ in range(n):
            tick()
        return n
