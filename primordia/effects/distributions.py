"""Emission distributions: where a field's base positions come from.

Each distribution is a small frozen dataclass. ``sample()`` turns one into
a ``(count, 3)`` array of base positions using an injected numpy Generator,
so tests can pin the seed and assert exact output.

    base = sample(SolidSphere(center=(0, 0, 0), radius=7.0), 150, rng)
"""

from __future__ import annotations

from typing import TypeAlias

import math
from dataclasses import dataclass

import numpy as np

from primordia.types import Vec3

from .errors import ConfigurationError


@dataclass(frozen=True)
class SolidSphere:
    """Uniform-in-volume points inside a sphere."""

    center: Vec3 = (0.0, 0.0, 0.0)
    radius: float = 1.0


@dataclass(frozen=True)
class VentLocalSphere:
    """Uniform-in-volume points inside a sphere centred on a vent apex."""

    vent_apex: Vec3 = (0.0, 0.0, 0.0)
    emission_radius: float = 1.0


@dataclass(frozen=True)
class DiscAroundPoint:
    """Points on a horizontal disc with a little vertical thickness.

    The radius is drawn uniformly rather than area-corrected, which clusters
    particles towards the centre of the disc.
    """

    center: Vec3 = (0.0, 0.0, 0.0)
    radius: float = 0.5
    vertical_jitter: float = 0.5


DistributionSpec: TypeAlias = SolidSphere | VentLocalSphere | DiscAroundPoint


def _check_point(name: str, point: Vec3) -> None:
    if len(point) != 3 or not all(math.isfinite(c) for c in point):
        raise ConfigurationError(f"{name} must be three finite floats, got {point!r}")


def _check_extent(name: str, value: float, *, allow_zero: bool = True) -> None:
    if not math.isfinite(value) or value < 0 or (value == 0 and not allow_zero):
        qualifier = "non-negative" if allow_zero else "positive"
        raise ConfigurationError(
            f"{name} must be a finite {qualifier} number, got {value}"
        )


def validate_distribution(spec: DistributionSpec) -> None:
    """Raise ConfigurationError if ``spec`` can't be sampled."""
    match spec:
        case SolidSphere(center=center, radius=radius):
            _check_point("SolidSphere.center", center)
            # An ambient volume with no extent is almost certainly a mistake.
            _check_extent("SolidSphere.radius", radius, allow_zero=False)
        case VentLocalSphere(vent_apex=apex, emission_radius=radius):
            _check_point("VentLocalSphere.vent_apex", apex)
            _check_extent("VentLocalSphere.emission_radius", radius)
        case DiscAroundPoint(center=center, radius=radius, vertical_jitter=jitter):
            _check_point("DiscAroundPoint.center", center)
            _check_extent("DiscAroundPoint.radius", radius)
            _check_extent("DiscAroundPoint.vertical_jitter", jitter)
        case _:
            raise ConfigurationError(f"Unknown distribution spec: {spec!r}")


def validate_count(count: int) -> None:
    if isinstance(count, bool) or not isinstance(count, int | np.integer):
        raise ConfigurationError(f"count must be an integer, got {count!r}")
    if count < 0:
        raise ConfigurationError(f"count must be non-negative, got {count}")


def sample(
    spec: DistributionSpec, count: int, rng: np.random.Generator
) -> np.ndarray:
    """Draw ``count`` base positions from ``spec``.

    Returns:
        A new float64 array of shape ``(count, 3)``.

    Raises:
        ConfigurationError: If the count or spec is invalid.
    """
    validate_count(count)
    validate_distribution(spec)

    positions = np.empty((count, 3), dtype=np.float64)
    if count == 0:
        return positions

    match spec:
        case SolidSphere(center=center, radius=radius):
            _sample_ball(positions, center, radius, rng)
        case VentLocalSphere(vent_apex=apex, emission_radius=radius):
            _sample_ball(positions, apex, radius, rng)
        case DiscAroundPoint(center=center, radius=radius, vertical_jitter=jitter):
            _sample_disc(positions, center, radius, jitter, rng)
    return positions


def _sample_ball(
    out: np.ndarray, center: Vec3, radius: float, rng: np.random.Generator
) -> None:
    count = len(out)
    # cbrt on the radius keeps density uniform through the volume; a plain
    # radius * u would pile points up near the centre.
    r = radius * np.cbrt(rng.random(count))
    theta = rng.random(count) * (2 * math.pi)
    phi = np.arccos(2 * rng.random(count) - 1)

    sin_phi = np.sin(phi)
    out[:, 0] = center[0] + r * sin_phi * np.cos(theta)
    out[:, 1] = center[1] + r * sin_phi * np.sin(theta)
    out[:, 2] = center[2] + r * np.cos(phi)


def _sample_disc(
    out: np.ndarray,
    center: Vec3,
    radius: float,
    vertical_jitter: float,
    rng: np.random.Generator,
) -> None:
    count = len(out)
    r = radius * rng.random(count)
    theta = rng.random(count) * (2 * math.pi)
    lift = rng.random(count) * vertical_jitter

    out[:, 0] = center[0] + r * np.cos(theta)
    out[:, 1] = center[1] + lift
    out[:, 2] = center[2] + r * np.sin(theta)
