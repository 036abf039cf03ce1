"""Utilities for keeping fixed physics timesteps."""
from __future__ import annotations

import math
import time
from dataclasses import dataclass, field


@dataclass
class FrameTimer:
    """High resolution timer based on :func:`time.perf_counter`."""

    max_delta: float = 0.25
    last_time: float = field(default_factory=time.perf_counter)

    def tick(self) -> float:
        now = time.perf_counter()
        dt = now - self.last_time
        self.last_time = now
        return min(max(dt, 0.0), self.max_delta)


@dataclass
class FixedStepAccumulator:
    """Accumulates frame time and releases it in whole fixed steps.

    The remainder below one step carries over to the next frame. When a frame
    needs more than ``max_substeps`` steps the excess backlog is dropped.
    """

    step: float
    max_substeps: int
    value: float = 0.0

    def accrue(self, delta: float) -> None:
        if delta > 0.0:
            self.value += delta

    def clear(self) -> None:
        self.value = 0.0

    @property
    def alpha(self) -> float:
        return self.value / self.step

    def consume(self) -> int:
        # Tolerate float error so 0.1 / 0.02 still yields five steps.
        steps_needed = int(math.floor(self.value / self.step + 1e-9))
        if steps_needed <= 0:
            return 0
        steps_to_run = min(steps_needed, self.max_substeps)
        self.value = max(0.0, self.value - steps_to_run * self.step)
        if steps_needed > self.max_substeps:
            self.value = min(self.value, self.step * 0.5)
        return steps_to_run


__all__ = ["FixedStepAccumulator", "FrameTimer"]
