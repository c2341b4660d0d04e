"""Host-side driver that keeps the right particle fields alive for a stage.

The stage value itself comes from the UI; this module only reacts to it.
Fields are created when their effect becomes visible and dropped when it is
hidden, and every attached field is recomputed once per frame.
"""

from __future__ import annotations

import logging

from primordia import config
from primordia.types import ElapsedTime, RandomSeed
from primordia.util import rng
from primordia.util.clock import ElapsedClock
from primordia.util.live_vars import live_variable_registry, record_time_live_variable

from .field import ParticleField, ParticleFieldConfig
from .presets import EFFECT_PRESETS, EffectPreset
from .vent_geometry import build_vent_vertices

logger = logging.getLogger(__name__)

RECOMPUTE_METRIC = "time.effects.recompute_ms"
TIME_SCALE_VARIABLE = "effects.time_scale"


class ParticleScene:
    """Set of attached particle fields, recomputed together every frame."""

    def __init__(
        self,
        presets: dict[str, EffectPreset] | None = None,
        clock: ElapsedClock | None = None,
        seed: RandomSeed = config.RANDOM_SEED,
    ) -> None:
        # Every random stream of the scene derives from this seed.
        rng.init(seed)
        self.presets = presets if presets is not None else EFFECT_PRESETS
        self.clock = clock if clock is not None else ElapsedClock()
        self.fields: dict[str, ParticleField] = {}
        self.stage = -1
        self.vent_vertices = build_vent_vertices(rng.get("geometry.vent"))
        self._register_live_variables()

    def _register_live_variables(self) -> None:
        if live_variable_registry.get_variable(RECOMPUTE_METRIC) is None:
            live_variable_registry.register_metric(
                RECOMPUTE_METRIC,
                description="CPU time to recompute all particle fields",
            )
        # The time scale belongs to this scene's clock; re-point it if an
        # older scene registered it first.
        live_variable_registry.unregister(TIME_SCALE_VARIABLE)
        live_variable_registry.register(
            TIME_SCALE_VARIABLE,
            lambda: self.clock.time_scale,
            self._set_time_scale,
            description="Playback speed of all particle effects",
            value_range=(0.0, 4.0),
        )

    def _set_time_scale(self, value: float) -> None:
        self.clock.time_scale = max(0.0, float(value))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def set_stage(self, stage: int) -> None:
        """Attach effects visible at ``stage`` and detach the rest."""
        self.stage = stage
        for name, preset in self.presets.items():
            visible = preset.visible_at(stage)
            if visible and name not in self.fields:
                self.attach(name)
            elif not visible and name in self.fields:
                self.detach(name)

    def attach(
        self, name: str, cfg: ParticleFieldConfig | None = None
    ) -> ParticleField:
        """Create (or reconfigure) the field for effect ``name``.

        Args:
            name: Preset name, also the field's key and its RNG domain.
            cfg: Configuration to use instead of the preset's default.

        Raises:
            KeyError: If ``name`` is not a known preset and no ``cfg`` is given.
            ConfigurationError: If the configuration is invalid.
        """
        if cfg is None:
            cfg = self.presets[name].build()

        existing = self.fields.get(name)
        if existing is not None:
            existing.reconfigure(cfg)
            return existing

        field = ParticleField(cfg, rng=rng.get(f"effects.{name}"))
        self.fields[name] = field
        logger.debug(f"Attached effect '{name}' ({cfg.count} particles)")
        return field

    def detach(self, name: str) -> None:
        if self.fields.pop(name, None) is None:
            logger.warning(f"Tried to detach effect '{name}' which is not attached")
            return
        logger.debug(f"Detached effect '{name}'")

    def close(self) -> None:
        """Drop all fields and release this scene's live variables."""
        self.fields.clear()
        live_variable_registry.unregister(TIME_SCALE_VARIABLE)

    # ------------------------------------------------------------------
    # Per-frame
    # ------------------------------------------------------------------
    def update(self, elapsed_time: float | None = None) -> ElapsedTime:
        """Recompute every attached field.

        Args:
            elapsed_time: Time to render. Ticks the scene clock if omitted.

        Returns:
            The elapsed time that was rendered.
        """
        t = self.clock.tick() if elapsed_time is None else ElapsedTime(elapsed_time)
        with record_time_live_variable(RECOMPUTE_METRIC):
            for field in self.fields.values():
                field.recompute(t)
        return t
