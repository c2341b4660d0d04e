"""Runtime-inspectable values and frame-time metrics.

Effects expose tunables (e.g. the playback speed of every field) and timing
metrics (e.g. the CPU cost of a frame's recompute) through one global
registry, so a debug overlay or a log dump can list them without knowing
which module owns what:

    live_variable_registry.register(
        "effects.time_scale",
        lambda: clock.time_scale,
        set_time_scale,
        value_range=(0.0, 4.0),
    )

    live_variable_registry.register_metric("time.effects.recompute_ms")
    with record_time_live_variable("time.effects.recompute_ms"):
        scene_fields_recompute()
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from time import perf_counter
from typing import Any

from primordia.types import FloatRange

from .metrics import MostRecentNVar, StatsVar


@dataclass
class LiveVariable:
    """One named value, either a writable tunable or a read-only metric."""

    name: str
    description: str
    getter: Callable[[], Any]
    setter: Callable[[Any], None] | None = None
    stats_var: StatsVar | None = None
    metric: bool = False
    value_range: FloatRange | None = None

    def get_value(self) -> Any:
        return self.getter()

    def set_value(self, value: Any) -> bool:
        """Write ``value`` through the setter, clamped to ``value_range``.

        Returns:
            False if the variable is read-only.
        """
        if self.setter is None:
            return False
        if self.value_range is not None:
            low, high = self.value_range
            value = min(max(value, low), high)
        self.setter(value)
        return True

    def record_value(self, value: float) -> None:
        """Add a sample to the stats tracker, if there is one."""
        if self.stats_var is not None:
            self.stats_var.record(value)

    def has_stats(self) -> bool:
        return self.stats_var is not None

    def supports_slider(self) -> bool:
        """Whether a UI can offer a bounded slider for this variable."""
        return (
            not self.metric and self.setter is not None and self.value_range is not None
        )


class LiveVariableRegistry:
    """Name-indexed collection of ``LiveVariable`` objects.

    Recording to an unknown metric raises ``KeyError`` while ``strict`` is
    true. Test fixtures that empty the registry turn ``strict`` off so that
    timing blocks in code under test don't fail for lack of a registration.
    """

    def __init__(self) -> None:
        self._variables: dict[str, LiveVariable] = {}
        self.strict: bool = True

    def _add(self, variable: LiveVariable) -> LiveVariable:
        if variable.name in self._variables:
            raise ValueError(f"Live variable '{variable.name}' already registered")
        self._variables[variable.name] = variable
        return variable

    def register(
        self,
        name: str,
        getter: Callable[[], Any],
        setter: Callable[[Any], None] | None = None,
        *,
        description: str = "",
        value_range: FloatRange | None = None,
    ) -> LiveVariable:
        """Expose a value. Raises ValueError if ``name`` is taken."""
        return self._add(
            LiveVariable(
                name=name,
                description=description,
                getter=getter,
                setter=setter,
                value_range=value_range,
            )
        )

    def register_metric(
        self,
        name: str,
        description: str = "",
        num_samples: int = 1000,
    ) -> LiveVariable:
        """Create a metric that keeps the last ``num_samples`` recorded values.

        Reading the metric returns a percentile summary string.
        """
        stats = MostRecentNVar(num_samples)

        def summary() -> str:
            if stats.sample_count == 0:
                return "No samples"
            return stats.summary()

        return self._add(
            LiveVariable(
                name=name,
                description=description,
                getter=summary,
                setter=stats.record,
                stats_var=stats,
                metric=True,
            )
        )

    def unregister(self, name: str) -> None:
        """Forget ``name``. Unknown names are ignored."""
        self._variables.pop(name, None)

    def get_variable(self, name: str) -> LiveVariable | None:
        return self._variables.get(name)

    def get_all_variables(self) -> list[LiveVariable]:
        """Tunables first, then metrics, each group sorted by name."""
        return sorted(self._variables.values(), key=lambda v: (v.metric, v.name))

    def snapshot(self) -> dict[str, str]:
        """Current value of every variable, formatted for logs."""
        return {v.name: str(v.get_value()) for v in self.get_all_variables()}

    def record_metric(self, name: str, value: float) -> None:
        """Add a sample to the metric ``name``.

        Raises:
            KeyError: If ``name`` is unknown or isn't a metric.
        """
        variable = self._variables.get(name)
        if variable is None:
            raise KeyError(f"Metric '{name}' is not registered")
        if not variable.has_stats():
            raise KeyError(f"Variable '{name}' is not a metric")
        variable.record_value(value)


live_variable_registry = LiveVariableRegistry()


@contextmanager
def record_time_live_variable(metric_name: str) -> Iterator[None]:
    """Time the enclosed block and record it, in milliseconds, to a metric.

    Unregistered metrics raise ``KeyError`` in strict mode and are skipped
    otherwise.
    """
    start = perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (perf_counter() - start) * 1000
        if (
            live_variable_registry.strict
            or live_variable_registry.get_variable(metric_name) is not None
        ):
            live_variable_registry.record_metric(metric_name, elapsed_ms)
