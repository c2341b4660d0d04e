"""Sample statistics for live metrics."""

import abc

import numpy as np

PERCENTILES = (50, 95, 99)


class StatsVar(abc.ABC):
    """Percentile summary over some window of recorded samples."""

    @abc.abstractmethod
    def record(self, value: float) -> None:
        pass

    @abc.abstractmethod
    def window(self) -> np.ndarray:
        """Samples currently in the window, oldest first."""

    @property
    def sample_count(self) -> int:
        return int(self.window().size)

    def get_percentiles(self) -> tuple[float, float, float]:
        """(p50, p95, p99), or zeros before the first sample."""
        values = self.window()
        if values.size == 0:
            return (0.0, 0.0, 0.0)
        return tuple(float(p) for p in np.percentile(values, PERCENTILES))

    @property
    def p50(self) -> float:
        return self.get_percentiles()[0]

    def summary(self) -> str:
        return " ".join(
            f"p{rank}={value:.2f}"
            for rank, value in zip(PERCENTILES, self.get_percentiles(), strict=True)
        )


class MostRecentNVar(StatsVar):
    """Keeps the last ``num_samples`` values in a fixed ring buffer."""

    def __init__(self, num_samples: int = 1000) -> None:
        if num_samples <= 0:
            raise ValueError(f"num_samples must be positive, got {num_samples}")
        self._ring = np.zeros(num_samples, dtype=np.float32)
        self._next = 0
        self._full = False

    def record(self, value: float) -> None:
        self._ring[self._next] = value
        self._next += 1
        if self._next == self._ring.size:
            self._next = 0
            self._full = True

    def window(self) -> np.ndarray:
        if not self._full:
            return self._ring[: self._next]
        # Once wrapped, the oldest sample sits at the write position.
        return np.roll(self._ring, -self._next)

    def reset(self) -> None:
        self._next = 0
        self._full = False
