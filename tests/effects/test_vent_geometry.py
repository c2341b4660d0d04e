from __future__ import annotations

import numpy as np
import pytest

from primordia import config
from primordia.effects.errors import ConfigurationError
from primordia.effects.vent_geometry import (
    build_vent_vertices,
    cone_vertices,
    jitter_rim,
)


def test_cone_vertices_ring_layout() -> None:
    vertices = cone_vertices(0.5, 1.5, 6.0, radial_segments=16, height_segments=4)
    rings = vertices.reshape(5, 16, 3)

    assert vertices.shape == (80, 3)
    np.testing.assert_allclose(rings[0, :, 1], 3.0)
    np.testing.assert_allclose(rings[-1, :, 1], -3.0)
    np.testing.assert_allclose(np.hypot(rings[0, :, 0], rings[0, :, 2]), 0.5)
    np.testing.assert_allclose(np.hypot(rings[-1, :, 0], rings[-1, :, 2]), 1.5)
    np.testing.assert_allclose(np.hypot(rings[2, :, 0], rings[2, :, 2]), 1.0)


def test_first_vertex_of_each_ring_points_along_z() -> None:
    vertices = cone_vertices(1.0, 1.0, 2.0, radial_segments=4)
    np.testing.assert_allclose(vertices[0], [0.0, 1.0, 1.0], atol=1e-12)
    np.testing.assert_allclose(vertices[1], [1.0, 1.0, 0.0], atol=1e-12)


@pytest.mark.parametrize(
    ("radius_top", "radius_bottom", "height", "radial", "vertical"),
    [
        (-0.5, 1.5, 6.0, 16, 1),
        (0.5, 1.5, 0.0, 16, 1),
        (0.5, 1.5, 6.0, 2, 1),
        (0.5, 1.5, 6.0, 16, 0),
    ],
)
def test_cone_vertices_rejects_bad_shape(
    radius_top: float, radius_bottom: float, height: float, radial: int, vertical: int
) -> None:
    with pytest.raises(ConfigurationError):
        cone_vertices(radius_top, radius_bottom, height, radial, vertical)


def test_jitter_rim_moves_only_rim_vertices_horizontally() -> None:
    original = cone_vertices(0.5, 1.5, 6.0, radial_segments=16, height_segments=4)
    vertices = original.copy()

    result = jitter_rim(vertices, 3.0, 0.08, np.random.default_rng(5))

    assert result is vertices
    moved = ~np.isclose(vertices, original).all(axis=1)
    on_rim = np.isclose(np.abs(original[:, 1]), 3.0)
    assert moved[on_rim].all()
    assert not moved[~on_rim].any()
    np.testing.assert_array_equal(vertices[:, 1], original[:, 1])
    assert np.abs(vertices - original).max() <= 0.08


def test_jitter_rim_with_zero_amount_is_identity() -> None:
    original = cone_vertices(0.5, 1.5, 6.0, radial_segments=8)
    vertices = jitter_rim(original.copy(), 3.0, 0.0, np.random.default_rng(0))
    np.testing.assert_array_equal(vertices, original)


def test_jitter_rim_rejects_negative_amount() -> None:
    vertices = cone_vertices(0.5, 1.5, 6.0, radial_segments=8)
    with pytest.raises(ConfigurationError):
        jitter_rim(vertices, 3.0, -0.1, np.random.default_rng(0))


def test_build_vent_vertices_is_reproducible() -> None:
    first = build_vent_vertices(np.random.default_rng(9))
    second = build_vent_vertices(np.random.default_rng(9))

    rings = config.VENT_HEIGHT_SEGMENTS + 1
    assert first.shape == (rings * config.VENT_RADIAL_SEGMENTS, 3)
    np.testing.assert_array_equal(first, second)
