"""Motion kernels: closed-form particle positions as a function of time.

A kernel maps ``(base position, particle index, elapsed time)`` to a current
position, and optionally to an orientation. Nothing is integrated and no
per-particle state survives between frames, so any frame can be recomputed
(or seeked to) from the base positions alone.

Each kernel comes in two shapes:

- ``evaluate()`` / ``orientation()``: scalar reference versions, one particle
  at a time. Easy to read and used by tests as the source of truth.
- ``evaluate_into()`` / ``orientation_into()``: vectorized versions used by
  ``ParticleField``. They write into caller-owned arrays through ufunc
  ``out=`` arguments and allocate no array data.

Variants:

- ``OscillatoryDrift``: three phase-offset sinusoids around the base
  position. Bounded, never drifts away. Optional tumbling orientation.
- ``PlumeRise``: rises from the base and snaps back every ``4 * max_height``
  of travel, while spreading outward from ``origin`` without bound.
- ``OutwardExpand``: vent smoke. Rises ``max_height`` then loops; the plume
  widens with height and picks up a little deterministic noise.
"""

from __future__ import annotations

from typing import TypeAlias

import math
from dataclasses import dataclass

import numpy as np

from primordia.types import EulerXYZ, Vec3

from .errors import ConfigurationError

# Angular frequency per axis (x, y, z) for oscillatory drift, scaled by speed.
DRIFT_FREQUENCY = (0.08, 0.05, 0.06)
# Phase advance per particle index (x, y, z), so neighbours never move in step.
DRIFT_PHASE_STEP = (0.6, 0.5, 0.7)

PLUME_RISE_RATE = 0.1
# A plume particle travels this many max_heights before it resets.
PLUME_PERIOD_HEIGHTS = 4.0

SMOKE_RISE_RATE = 0.5
SMOKE_SPREAD_SCALE = 0.5

# Constants of the classic sin-fract hash used for deterministic jitter.
_NOISE_INDEX_SCALE = 12.9898
_NOISE_TIME_SCALE = 78.233
_NOISE_AXIS_SCALE = 37.719
_NOISE_GAIN = 43758.5453


@dataclass(frozen=True)
class OscillatoryDrift:
    """Bounded bobbing around each base position.

    Attributes:
        speed: Time multiplier for all three sinusoids.
        amplitude_vertical: Peak offset along y.
        amplitude_horizontal: Peak offset along x and z.
        tumble_amplitude: Peak rotation (radians) about x and y. Zero means
            the kernel has no orientation.
        tumble_rate: Angular frequency of the tumble, scaled by speed.
    """

    speed: float = 1.0
    amplitude_vertical: float = 0.1
    amplitude_horizontal: float = 0.075
    tumble_amplitude: float = 0.0
    tumble_rate: float = 0.1


@dataclass(frozen=True)
class PlumeRise:
    """Gas rising from a source, spreading outward as time passes."""

    origin: Vec3 = (0.0, 0.0, 0.0)
    max_height: float = 1.0
    speed: float = 1.0
    spread_factor: float = 0.05
    jitter: float = 0.0


@dataclass(frozen=True)
class OutwardExpand:
    """Smoke leaving a vent: rises, widens with height, loops."""

    origin: Vec3 = (0.0, 0.0, 0.0)
    emission_radius: float = 0.5
    speed: float = 0.8
    spread_factor: float = 0.2
    max_height: float = 8.0
    jitter: float = 0.05


MotionSpec: TypeAlias = OscillatoryDrift | PlumeRise | OutwardExpand


class KernelWorkspace:
    """Scratch arrays for vectorized kernel evaluation.

    Contents are overwritten on every call; nothing carries over between
    frames.
    """

    def __init__(self, count: int) -> None:
        self.count = count
        # Particle index as float, the phase/seed identity of each particle.
        self.index = np.arange(count, dtype=np.float64)
        self.scratch = np.empty((3, count), dtype=np.float64)
        self.a, self.b, self.c = self.scratch


# =============================================================================
# VALIDATION
# =============================================================================


def _check_finite(name: str, value: float) -> None:
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")


def _check_non_negative(name: str, value: float) -> None:
    _check_finite(name, value)
    if value < 0:
        raise ConfigurationError(f"{name} must be non-negative, got {value}")


def _check_positive(name: str, value: float) -> None:
    _check_finite(name, value)
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")


def _check_origin(name: str, origin: Vec3) -> None:
    if len(origin) != 3 or not all(math.isfinite(c) for c in origin):
        raise ConfigurationError(f"{name} must be three finite floats, got {origin!r}")


def validate_motion(spec: MotionSpec) -> None:
    """Raise ConfigurationError if ``spec`` would produce NaN/Inf or loop badly."""
    match spec:
        case OscillatoryDrift():
            _check_non_negative("OscillatoryDrift.speed", spec.speed)
            _check_non_negative(
                "OscillatoryDrift.amplitude_vertical", spec.amplitude_vertical
            )
            _check_non_negative(
                "OscillatoryDrift.amplitude_horizontal", spec.amplitude_horizontal
            )
            _check_non_negative(
                "OscillatoryDrift.tumble_amplitude", spec.tumble_amplitude
            )
            _check_finite("OscillatoryDrift.tumble_rate", spec.tumble_rate)
        case PlumeRise():
            _check_origin("PlumeRise.origin", spec.origin)
            _check_positive("PlumeRise.max_height", spec.max_height)
            _check_non_negative("PlumeRise.speed", spec.speed)
            _check_non_negative("PlumeRise.spread_factor", spec.spread_factor)
            _check_non_negative("PlumeRise.jitter", spec.jitter)
        case OutwardExpand():
            _check_origin("OutwardExpand.origin", spec.origin)
            _check_non_negative("OutwardExpand.emission_radius", spec.emission_radius)
            _check_non_negative("OutwardExpand.speed", spec.speed)
            _check_non_negative("OutwardExpand.spread_factor", spec.spread_factor)
            _check_positive("OutwardExpand.max_height", spec.max_height)
            _check_non_negative("OutwardExpand.jitter", spec.jitter)
        case _:
            raise ConfigurationError(f"Unknown motion spec: {spec!r}")


def has_orientation(spec: MotionSpec) -> bool:
    """Whether the kernel rotates particles (only tumbling drift does)."""
    return isinstance(spec, OscillatoryDrift) and spec.tumble_amplitude > 0


# =============================================================================
# SHARED TIME TERMS
# =============================================================================


def plume_height(spec: PlumeRise, t: float) -> float:
    """Height above the base after ``t`` seconds, reset every period."""
    return (t * PLUME_RISE_RATE * spec.speed) % (spec.max_height * PLUME_PERIOD_HEIGHTS)


def plume_period(spec: PlumeRise) -> float:
    """Seconds between resets, or ``inf`` for a motionless plume."""
    if spec.speed == 0:
        return math.inf
    return spec.max_height * PLUME_PERIOD_HEIGHTS / (spec.speed * PLUME_RISE_RATE)


def plume_spread(spec: PlumeRise, t: float) -> float:
    """Horizontal scale about the origin. Grows without bound."""
    return 1 + t * spec.spread_factor * spec.speed


def smoke_travel(spec: OutwardExpand, t: float) -> float:
    """Distance risen since the last loop, in ``[0, max_height)``."""
    return (t * spec.speed * SMOKE_RISE_RATE) % spec.max_height


def smoke_spread_ratio(spec: OutwardExpand, height_factor: float) -> float:
    """Horizontal scale about the origin at a given fraction of max height.

    A zero emission radius has nothing to scale, so the ratio is 1.0.
    """
    if spec.emission_radius <= 0:
        return 1.0
    spread = (
        spec.emission_radius
        + height_factor * spec.spread_factor * spec.max_height * SMOKE_SPREAD_SCALE
    )
    return spread / spec.emission_radius


def noise(index: int, t: float, axis: int) -> float:
    """Deterministic pseudo-random value in ``[-0.5, 0.5)``."""
    x = math.sin(
        index * _NOISE_INDEX_SCALE
        + (t * _NOISE_TIME_SCALE + axis * _NOISE_AXIS_SCALE)
    )
    x *= _NOISE_GAIN
    return x - math.floor(x) - 0.5


def _noise_into(ws: KernelWorkspace, t: float, axis: int, out: np.ndarray) -> None:
    tmp = ws.c
    np.multiply(ws.index, _NOISE_INDEX_SCALE, out=out)
    np.add(out, t * _NOISE_TIME_SCALE + axis * _NOISE_AXIS_SCALE, out=out)
    np.sin(out, out=out)
    np.multiply(out, _NOISE_GAIN, out=out)
    np.floor(out, out=tmp)
    np.subtract(out, tmp, out=out)
    np.subtract(out, 0.5, out=out)


# =============================================================================
# SCALAR REFERENCE KERNELS
# =============================================================================


def evaluate(spec: MotionSpec, base: Vec3, index: int, t: float) -> Vec3:
    """Position of particle ``index`` at time ``t``."""
    bx, by, bz = base
    match spec:
        case OscillatoryDrift():
            kx, ky, kz = DRIFT_FREQUENCY
            px, py, pz = DRIFT_PHASE_STEP
            ah = spec.amplitude_horizontal
            av = spec.amplitude_vertical
            return (
                bx + math.sin(t * kx * spec.speed + index * px) * ah,
                by + math.sin(t * ky * spec.speed + index * py) * av,
                bz + math.cos(t * kz * spec.speed + index * pz) * ah,
            )
        case PlumeRise():
            ox, _, oz = spec.origin
            factor = plume_spread(spec, t)
            x = (bx - ox) * factor + ox
            z = (bz - oz) * factor + oz
            if spec.jitter > 0:
                x += spec.jitter * noise(index, t, 0)
                z += spec.jitter * noise(index, t, 2)
            return (x, by + plume_height(spec, t), z)
        case OutwardExpand():
            ox, _, oz = spec.origin
            travel = smoke_travel(spec, t)
            height_factor = travel / spec.max_height
            ratio = smoke_spread_ratio(spec, height_factor)
            x = ox + (bx - ox) * ratio
            y = by + travel
            z = oz + (bz - oz) * ratio
            scale = spec.jitter * height_factor
            if scale > 0:
                x += scale * noise(index, t, 0)
                y += scale * noise(index, t, 1)
                z += scale * noise(index, t, 2)
            return (x, y, z)
    raise ConfigurationError(f"Unknown motion spec: {spec!r}")


def orientation(spec: MotionSpec, index: int, t: float) -> EulerXYZ | None:
    """Euler XYZ rotation of particle ``index``, or None if it doesn't rotate."""
    if not has_orientation(spec):
        return None
    assert isinstance(spec, OscillatoryDrift)
    phase = t * spec.tumble_rate * spec.speed + index
    return (
        math.sin(phase) * spec.tumble_amplitude,
        math.cos(phase) * spec.tumble_amplitude,
        0.0,
    )


# =============================================================================
# VECTORIZED KERNELS
# =============================================================================

Columns: TypeAlias = tuple[np.ndarray, np.ndarray, np.ndarray]


def evaluate_into(
    spec: MotionSpec,
    base: Columns,
    t: float,
    out: Columns,
    ws: KernelWorkspace,
) -> None:
    """Write every particle's position at time ``t`` into ``out``.

    Args:
        spec: Motion parameters.
        base: x, y, z column views of the base positions.
        t: Elapsed time in seconds.
        out: x, y, z column views to write. Must not alias ``base``.
        ws: Scratch space sized for the field.
    """
    if ws.count == 0:
        return
    bx, by, bz = base
    out_x, out_y, out_z = out

    match spec:
        case OscillatoryDrift():
            kx, ky, kz = DRIFT_FREQUENCY
            px, py, pz = DRIFT_PHASE_STEP
            ah = spec.amplitude_horizontal
            av = spec.amplitude_vertical
            speed = spec.speed
            _drift_axis(bx, out_x, ws, t * kx * speed, px, ah, np.sin)
            _drift_axis(by, out_y, ws, t * ky * speed, py, av, np.sin)
            _drift_axis(bz, out_z, ws, t * kz * speed, pz, ah, np.cos)

        case PlumeRise():
            ox, _, oz = spec.origin
            factor = plume_spread(spec, t)
            _scale_about(bx, ox, factor, out_x, ws)
            _scale_about(bz, oz, factor, out_z, ws)
            np.add(by, plume_height(spec, t), out=out_y)
            if spec.jitter > 0:
                _add_noise(out_x, ws, t, 0, spec.jitter)
                _add_noise(out_z, ws, t, 2, spec.jitter)

        case OutwardExpand():
            ox, _, oz = spec.origin
            travel = smoke_travel(spec, t)
            height_factor = travel / spec.max_height
            ratio = smoke_spread_ratio(spec, height_factor)
            _scale_about(bx, ox, ratio, out_x, ws)
            _scale_about(bz, oz, ratio, out_z, ws)
            np.add(by, travel, out=out_y)
            scale = spec.jitter * height_factor
            if scale > 0:
                _add_noise(out_x, ws, t, 0, scale)
                _add_noise(out_y, ws, t, 1, scale)
                _add_noise(out_z, ws, t, 2, scale)


def orientation_into(
    spec: MotionSpec,
    t: float,
    out_x: np.ndarray,
    out_y: np.ndarray,
    ws: KernelWorkspace,
) -> bool:
    """Write rotation angles about x and y (z is always zero).

    Returns:
        False without touching the outputs if the kernel doesn't rotate.
    """
    if not has_orientation(spec):
        return False
    assert isinstance(spec, OscillatoryDrift)
    np.add(ws.index, t * spec.tumble_rate * spec.speed, out=ws.a)
    np.sin(ws.a, out=out_x)
    np.multiply(out_x, spec.tumble_amplitude, out=out_x)
    np.cos(ws.a, out=out_y)
    np.multiply(out_y, spec.tumble_amplitude, out=out_y)
    return True


def _drift_axis(
    base: np.ndarray,
    out: np.ndarray,
    ws: KernelWorkspace,
    time_phase: float,
    phase_step: float,
    amplitude: float,
    wave: np.ufunc,
) -> None:
    np.multiply(ws.index, phase_step, out=ws.a)
    np.add(ws.a, time_phase, out=ws.a)
    wave(ws.a, out=ws.a)
    np.multiply(ws.a, amplitude, out=ws.a)
    np.add(base, ws.a, out=out)


def _scale_about(
    base: np.ndarray, center: float, factor: float, out: np.ndarray, ws: KernelWorkspace
) -> None:
    np.subtract(base, center, out=ws.a)
    np.multiply(ws.a, factor, out=ws.a)
    np.add(ws.a, center, out=out)


def _add_noise(
    out: np.ndarray, ws: KernelWorkspace, t: float, axis: int, scale: float
) -> None:
    _noise_into(ws, t, axis, ws.b)
    np.multiply(ws.b, scale, out=ws.b)
    np.add(out, ws.b, out=out)
