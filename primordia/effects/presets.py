"""The particle effects of the origin-of-life scene.

Each preset pairs a field configuration with the first stage at which the
effect is visible:

- Stage 0, primordial ocean: ambient dust suspended in the water.
- Stage 1, hydrothermal vent: smoke rising from the vent chimney.
- Stage 2, hydrogen sulfide: H2S molecules venting and spreading.
- Stage 3, protocell boundary: tumbling fuel molecules in the water.

The factory functions accept overrides for the parameters worth tuning;
everything else comes from ``primordia.config``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from primordia import colors, config
from primordia.types import Vec3

from .distributions import DiscAroundPoint, SolidSphere, VentLocalSphere
from .field import ParticleFieldConfig
from .motion import OscillatoryDrift, OutwardExpand, PlumeRise
from .sinks import SinkKind


def ambient_dust(
    count: int = 150,
    area_radius: float = config.PARTICLE_DISTRIBUTION_RADIUS,
    speed: float = config.PARTICLE_SPEED,
) -> ParticleFieldConfig:
    """Fine dark particles bobbing gently throughout the water."""
    return ParticleFieldConfig(
        name="ambient_dust",
        count=count,
        size=0.1,
        color=colors.DUST,
        distribution=SolidSphere(radius=area_radius),
        motion=OscillatoryDrift(
            speed=speed,
            amplitude_vertical=config.DRIFT_AMPLITUDE_VERTICAL,
            amplitude_horizontal=config.DRIFT_AMPLITUDE_HORIZONTAL,
        ),
        # Start from a smaller offset so the first frame isn't a visible jump.
        initial_motion=OscillatoryDrift(
            speed=speed,
            amplitude_vertical=config.SETTLE_AMPLITUDE_VERTICAL,
            amplitude_horizontal=config.SETTLE_AMPLITUDE_HORIZONTAL,
        ),
        sink=SinkKind.POINTS,
    )


def fuel_molecules(
    count: int = 50,
    area_radius: float = config.PARTICLE_DISTRIBUTION_RADIUS,
    speed: float = config.PARTICLE_SPEED * config.FUEL_SPEED_MULTIPLIER,
) -> ParticleFieldConfig:
    """Small green boxes that drift and tumble; drawn as instanced meshes."""
    return ParticleFieldConfig(
        name="fuel_molecules",
        count=count,
        size=0.08,
        color=colors.FUEL_MOLECULE,
        distribution=SolidSphere(radius=area_radius),
        motion=OscillatoryDrift(
            speed=speed,
            amplitude_vertical=config.DRIFT_AMPLITUDE_VERTICAL,
            amplitude_horizontal=config.DRIFT_AMPLITUDE_HORIZONTAL,
            tumble_amplitude=config.FUEL_TUMBLE_AMPLITUDE,
            tumble_rate=config.FUEL_TUMBLE_RATE,
        ),
        # Settles unrotated; tumbling starts with the first frame.
        initial_motion=OscillatoryDrift(
            speed=speed,
            amplitude_vertical=config.DRIFT_AMPLITUDE_VERTICAL,
            amplitude_horizontal=config.DRIFT_AMPLITUDE_HORIZONTAL,
        ),
        sink=SinkKind.INSTANCES,
    )


def h2s_gas(
    count: int = 80,
    vent_top: Vec3 = config.VENT_TOP,
    emission_radius: float = 1.5,
    speed: float = 0.5,
) -> ParticleFieldConfig:
    """Pale yellow H2S spheres rising from the vent and drifting apart."""
    return ParticleFieldConfig(
        name="h2s_gas",
        count=count,
        size=0.06,
        color=colors.H2S_MOLECULE,
        distribution=VentLocalSphere(
            vent_apex=vent_top, emission_radius=emission_radius
        ),
        # The plume loops after rising four emission radii.
        motion=PlumeRise(origin=vent_top, max_height=emission_radius, speed=speed),
        sink=SinkKind.INSTANCES,
    )


def vent_smoke(
    count: int = 200,
    vent_top: Vec3 = config.VENT_TOP,
    emission_radius: float = 0.5,
    speed: float = 0.8,
    spread_factor: float = 0.2,
    max_height: float = 8.0,
) -> ParticleFieldConfig:
    """Light grey smoke leaving the chimney and widening as it rises."""
    return ParticleFieldConfig(
        name="vent_smoke",
        count=count,
        size=0.08,
        color=colors.VENT_SMOKE,
        distribution=DiscAroundPoint(
            center=vent_top, radius=emission_radius, vertical_jitter=0.5
        ),
        motion=OutwardExpand(
            origin=vent_top,
            emission_radius=emission_radius,
            speed=speed,
            spread_factor=spread_factor,
            max_height=max_height,
            jitter=config.SMOKE_JITTER,
        ),
        sink=SinkKind.POINTS,
    )


@dataclass(frozen=True)
class EffectPreset:
    """A named effect and the first stage it appears in."""

    name: str
    min_stage: int
    build: Callable[[], ParticleFieldConfig]

    def visible_at(self, stage: int) -> bool:
        return stage >= self.min_stage


EFFECT_PRESETS: dict[str, EffectPreset] = {
    preset.name: preset
    for preset in (
        EffectPreset("ambient_dust", 0, ambient_dust),
        EffectPreset("vent_smoke", 1, vent_smoke),
        EffectPreset("h2s_gas", 2, h2s_gas),
        EffectPreset("fuel_molecules", 3, fuel_molecules),
    )
}


def effects_for_stage(stage: int) -> list[EffectPreset]:
    """Presets visible at ``stage``, in the order they were introduced."""
    return [p for p in EFFECT_PRESETS.values() if p.visible_at(stage)]
