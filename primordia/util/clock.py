"""A clock that supplies elapsed scene time to particle fields."""

import time
from collections.abc import Callable

from primordia.types import ElapsedTime


class ElapsedClock:
    """Track monotonic elapsed time with pause, scaling and seeking.

    Particle fields are pure functions of elapsed time, so the host only
    needs to hand them ``clock.tick()`` once per frame. Seeking simply moves
    the elapsed value; nothing else has to be replayed.
    """

    def __init__(self, time_source: Callable[[], float] = time.perf_counter) -> None:
        self._time_source = time_source
        self.last_time = time_source()
        self.elapsed: ElapsedTime = ElapsedTime(0.0)
        self.time_scale = 1.0
        self.paused = False

    def tick(self) -> ElapsedTime:
        """Advance by the real time since the last tick and return elapsed time.

        Real time that passes while paused is discarded.
        """
        current_time = self._time_source()
        delta = max(0.0, current_time - self.last_time)
        self.last_time = current_time
        if not self.paused:
            self.elapsed = ElapsedTime(self.elapsed + delta * self.time_scale)
        return self.elapsed

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        # Drop the time spent paused.
        self.last_time = self._time_source()
        self.paused = False

    def seek(self, elapsed: float) -> None:
        """Jump to an absolute elapsed time (seconds, must be >= 0)."""
        if elapsed < 0:
            raise ValueError(f"Cannot seek to negative time {elapsed}")
        self.elapsed = ElapsedTime(elapsed)
        self.last_time = self._time_source()
