"""A particle field: N base positions, one motion kernel, one output sink.

Usage:
    cfg = ParticleFieldConfig(
        count=150,
        distribution=SolidSphere(radius=7.0),
        motion=OscillatoryDrift(speed=0.8),
    )
    field = ParticleField(cfg, rng=rng.get("effects.ambient_dust"))

    # Once per rendered frame
    field.recompute(elapsed_time)
    if field.sink.dirty:
        upload(field.sink)
        field.sink.mark_clean()

Base positions are sampled once per configuration and never touched again.
Every frame is derived from them and the elapsed time alone, so calling
``recompute(t)`` twice with the same ``t`` gives bit-identical output.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from primordia import colors, config
from primordia.types import ColorRGBA

from .distributions import (
    DistributionSpec,
    sample,
    validate_count,
    validate_distribution,
)
from .errors import ConfigurationError
from .motion import (
    KernelWorkspace,
    MotionSpec,
    evaluate_into,
    has_orientation,
    orientation_into,
    validate_motion,
)
from .sinks import ParticleSink, SinkKind, create_sink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticleFieldConfig:
    """Everything needed to build a particle field.

    Attributes:
        count: Number of particles.
        distribution: Where base positions are sampled from.
        motion: Kernel applied every frame.
        size: Rendered particle size (scene units), passed through to the
            renderer.
        color: Rendered RGBA color, passed through to the renderer.
        sink: Buffer shape to publish into.
        initial_motion: Kernel for the pose written at construction, before
            the first frame. Defaults to ``motion``.
        name: Label used in logs.
    """

    count: int
    distribution: DistributionSpec
    motion: MotionSpec
    size: float = 0.1
    color: ColorRGBA = colors.WHITE
    sink: SinkKind = SinkKind.POINTS
    initial_motion: MotionSpec | None = None
    name: str = "particles"


def validate_config(cfg: ParticleFieldConfig) -> None:
    """Raise ConfigurationError if ``cfg`` can't be built."""
    validate_count(cfg.count)
    validate_distribution(cfg.distribution)
    validate_motion(cfg.motion)
    if cfg.initial_motion is not None:
        validate_motion(cfg.initial_motion)
    if not math.isfinite(cfg.size) or cfg.size < 0:
        raise ConfigurationError(
            f"size must be finite and non-negative, got {cfg.size}"
        )
    if len(cfg.color) != 4 or not all(0.0 <= c <= 1.0 for c in cfg.color):
        raise ConfigurationError(
            f"color must be RGBA floats in [0, 1], got {cfg.color}"
        )
    if not isinstance(cfg.sink, SinkKind):
        raise ConfigurationError(f"Unknown sink kind: {cfg.sink!r}")


class _FieldState:
    """Arrays that belong to one configuration of a field."""

    def __init__(self, base: np.ndarray, sink: ParticleSink) -> None:
        count = len(base)
        base.flags.writeable = False
        self.base = base
        self.base_cols = (base[:, 0], base[:, 1], base[:, 2])
        self.current = np.zeros((count, 3), dtype=np.float64)
        self.current_cols = (
            self.current[:, 0],
            self.current[:, 1],
            self.current[:, 2],
        )
        self.angles = np.zeros((2, count), dtype=np.float64)
        self.angle_x, self.angle_y = self.angles
        self.workspace = KernelWorkspace(count)
        self.sink = sink
        # Whether the sink holds rotations from an earlier write.
        self.rotated = False


class ParticleField:
    """Owns base positions and publishes per-frame positions into a sink.

    A field is not reentrant: ``recompute`` and ``reconfigure`` must not run
    at the same time. Separate fields share nothing and can be recomputed in
    any order.
    """

    def __init__(
        self,
        cfg: ParticleFieldConfig,
        rng: np.random.Generator | None = None,
        sink: ParticleSink | None = None,
    ) -> None:
        """
        Build the field and write its initial pose.

        Args:
            cfg: Field configuration.
            rng: Random source for sampling base positions. A fresh unseeded
                Generator is used if omitted.
            sink: Buffer to publish into. Must match ``cfg.count`` and
                ``cfg.sink``. Allocated from the config if omitted.

        Raises:
            ConfigurationError: If the config or supplied sink is invalid.
        """
        validate_config(cfg)
        _check_sink(cfg, sink)
        self._rng = rng if rng is not None else np.random.default_rng()

        base = sample(cfg.distribution, cfg.count, self._rng)
        self.config = cfg
        self._state = _FieldState(
            base, sink if sink is not None else create_sink(cfg.sink, cfg.count)
        )
        self._write_initial_pose()
        logger.debug(
            f"Built particle field '{cfg.name}': {cfg.count} particles, "
            f"{type(cfg.distribution).__name__} -> {type(cfg.motion).__name__}"
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def count(self) -> int:
        return self.config.count

    @property
    def sink(self) -> ParticleSink:
        return self._state.sink

    @property
    def base_positions(self) -> np.ndarray:
        """Read-only ``(count, 3)`` array of base positions."""
        return self._state.base

    @property
    def positions(self) -> np.ndarray:
        """Current ``(count, 3)`` positions as of the last recompute."""
        return self._state.current

    # ------------------------------------------------------------------
    # Per-frame
    # ------------------------------------------------------------------
    def recompute(self, elapsed_time: float) -> None:
        """Recompute every particle for ``elapsed_time`` and publish to the sink.

        O(count) and allocation-free: all arrays used here were created with
        the current configuration.
        """
        if self.config.count == 0:
            return
        self._evaluate(self.config.motion, elapsed_time)

    def _evaluate(self, motion: MotionSpec, elapsed_time: float) -> None:
        state = self._state
        evaluate_into(
            motion,
            state.base_cols,
            elapsed_time,
            state.current_cols,
            state.workspace,
        )
        state.sink.write_positions(state.current)
        if orientation_into(
            motion, elapsed_time, state.angle_x, state.angle_y, state.workspace
        ):
            state.sink.write_orientations(state.angle_x, state.angle_y)
            state.rotated = True
        elif state.rotated:
            state.sink.reset_orientations()
            state.rotated = False

    def _write_initial_pose(self) -> None:
        if self.config.count == 0:
            return
        motion = self.config.initial_motion or self.config.motion
        self._evaluate(motion, config.INITIAL_SETTLE_TIME)

    # ------------------------------------------------------------------
    # Reconfiguration
    # ------------------------------------------------------------------
    def reconfigure(
        self, new_config: ParticleFieldConfig, sink: ParticleSink | None = None
    ) -> None:
        """Switch to ``new_config``.

        Base positions are resampled only if the count or distribution
        changed. The sink is replaced only if the count or sink kind changed,
        or if a new one is supplied. The kernel is always swapped.

        Raises:
            ConfigurationError: If the new config is invalid. The field keeps
                its previous configuration and buffers untouched.
        """
        validate_config(new_config)
        _check_sink(new_config, sink)
        old = self.config

        resample = (
            new_config.count != old.count
            or new_config.distribution != old.distribution
        )
        if resample:
            base = sample(new_config.distribution, new_config.count, self._rng)
        else:
            base = self._state.base

        if sink is None and (
            new_config.count != old.count or new_config.sink != old.sink
        ):
            sink = create_sink(new_config.sink, new_config.count)

        if resample or sink is not None:
            state = _FieldState(base, sink if sink is not None else self._state.sink)
        else:
            state = self._state

        if state.rotated and not has_orientation(new_config.motion):
            state.sink.reset_orientations()
            state.rotated = False

        self.config = new_config
        self._state = state
        if resample or sink is not None:
            self._write_initial_pose()
        logger.debug(
            f"Reconfigured particle field '{new_config.name}' "
            f"(resampled={resample}, new_sink={sink is not None})"
        )


def _check_sink(cfg: ParticleFieldConfig, sink: ParticleSink | None) -> None:
    if sink is None:
        return
    if sink.count != cfg.count:
        raise ConfigurationError(
            f"Sink holds {sink.count} particles but config needs {cfg.count}"
        )
    if sink.kind is not cfg.sink:
        raise ConfigurationError(
            f"Sink is {sink.kind.value} but config needs {cfg.sink.value}"
        )
