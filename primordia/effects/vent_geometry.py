"""Vertex generation for the hydrothermal vent body.

The vent is an open cone (or cylinder) centred on the origin. A one-shot
rim jitter roughens the top and bottom edges so the silhouette isn't a
perfect circle. Geometry is built once; nothing here runs per frame.
"""

from __future__ import annotations

import math

import numpy as np

from primordia import config

from .errors import ConfigurationError


def cone_vertices(
    radius_top: float,
    radius_bottom: float,
    height: float,
    radial_segments: int,
    height_segments: int = 1,
) -> np.ndarray:
    """Side-wall vertices of a cone/cylinder, rings ordered top to bottom.

    Each ring holds ``radial_segments`` vertices (no duplicated seam vertex),
    so the result has shape ``((height_segments + 1) * radial_segments, 3)``.
    The top ring sits at ``y = height / 2`` and the bottom at ``-height / 2``.

    Raises:
        ConfigurationError: On negative radii, non-positive height, fewer
            than 3 radial segments or fewer than 1 height segment.
    """
    if radius_top < 0 or radius_bottom < 0:
        raise ConfigurationError(
            f"Cone radii must be non-negative, got {radius_top}, {radius_bottom}"
        )
    if not height > 0:
        raise ConfigurationError(f"Cone height must be positive, got {height}")
    if radial_segments < 3 or height_segments < 1:
        raise ConfigurationError(
            f"Need >= 3 radial and >= 1 height segments, "
            f"got {radial_segments}, {height_segments}"
        )

    half_height = height / 2
    v = np.linspace(0.0, 1.0, height_segments + 1)
    theta = np.arange(radial_segments) * (2 * math.pi / radial_segments)

    ring_radius = v * (radius_bottom - radius_top) + radius_top
    ring_y = half_height - v * height

    vertices = np.empty((height_segments + 1, radial_segments, 3), dtype=np.float64)
    vertices[:, :, 0] = ring_radius[:, None] * np.sin(theta)[None, :]
    vertices[:, :, 1] = ring_y[:, None]
    vertices[:, :, 2] = ring_radius[:, None] * np.cos(theta)[None, :]
    return vertices.reshape(-1, 3)


def jitter_rim(
    vertices: np.ndarray,
    half_height: float,
    amount: float,
    rng: np.random.Generator,
    epsilon: float = config.RIM_JITTER_EPSILON,
) -> np.ndarray:
    """Nudge rim vertices horizontally, in place.

    Only vertices whose ``|y|`` is within ``epsilon`` of ``half_height`` are
    moved. Each gets independent uniform offsets in ``[-amount, amount]``
    on x and z; y is untouched.

    Returns:
        ``vertices``, for chaining.
    """
    if amount < 0 or epsilon < 0:
        raise ConfigurationError(
            f"Jitter amount and epsilon must be non-negative, got {amount}, {epsilon}"
        )
    on_rim = np.abs(np.abs(vertices[:, 1]) - half_height) <= epsilon
    rim_count = int(np.count_nonzero(on_rim))
    offsets = rng.uniform(-amount, amount, size=(rim_count, 2))
    vertices[on_rim, 0] += offsets[:, 0]
    vertices[on_rim, 2] += offsets[:, 1]
    return vertices


def build_vent_vertices(rng: np.random.Generator) -> np.ndarray:
    """The scene's vent body with a roughened rim, in vent-local space."""
    vertices = cone_vertices(
        config.VENT_TOP_RADIUS,
        config.VENT_BASE_RADIUS,
        config.VENT_HEIGHT,
        config.VENT_RADIAL_SEGMENTS,
        config.VENT_HEIGHT_SEGMENTS,
    )
    return jitter_rim(vertices, config.VENT_HEIGHT / 2, config.RIM_JITTER_AMOUNT, rng)
