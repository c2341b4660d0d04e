from __future__ import annotations

import math
import tracemalloc
from dataclasses import replace

import numpy as np
import pytest

from primordia import config
from primordia.effects.distributions import DiscAroundPoint, SolidSphere
from primordia.effects.errors import ConfigurationError
from primordia.effects.field import ParticleField, ParticleFieldConfig
from primordia.effects.motion import (
    OscillatoryDrift,
    OutwardExpand,
    PlumeRise,
    evaluate,
)
from primordia.effects.sinks import (
    InstanceTransformBuffer,
    PositionBuffer,
    SinkKind,
)

VENT_TOP = (0.0, -2.0, -3.0)


def _drift_config(count: int = 3, **overrides) -> ParticleFieldConfig:
    cfg = ParticleFieldConfig(
        count=count,
        distribution=SolidSphere(center=(0.0, 0.0, 0.0), radius=1.0),
        motion=OscillatoryDrift(
            speed=1.0, amplitude_vertical=0.1, amplitude_horizontal=0.075
        ),
    )
    return replace(cfg, **overrides)


def _tumble_config(count: int = 4) -> ParticleFieldConfig:
    return _drift_config(
        count,
        motion=OscillatoryDrift(speed=0.64, tumble_amplitude=0.2, tumble_rate=0.1),
        sink=SinkKind.INSTANCES,
    )


def test_three_particle_drift_at_time_zero(rng: np.random.Generator) -> None:
    field = ParticleField(_drift_config(), rng=rng)
    field.recompute(0.0)

    base = field.base_positions
    for i in range(3):
        offset = (
            math.sin(0.6 * i) * 0.075,
            math.sin(0.5 * i) * 0.1,
            math.cos(0.7 * i) * 0.075,
        )
        expected = base[i] + np.array(offset)
        np.testing.assert_allclose(field.positions[i], expected, atol=1e-12)
        np.testing.assert_allclose(field.sink.points[i], expected, atol=1e-6)


def test_recompute_is_idempotent(rng: np.random.Generator) -> None:
    cfg = ParticleFieldConfig(
        count=200,
        distribution=DiscAroundPoint(center=VENT_TOP, radius=0.5),
        motion=OutwardExpand(origin=VENT_TOP),
    )
    field = ParticleField(cfg, rng=rng)

    field.recompute(12.345)
    first = field.sink.data.copy()
    field.recompute(3.0)
    field.recompute(12.345)

    np.testing.assert_array_equal(field.sink.data, first)


def test_recompute_matches_scalar_kernel(rng: np.random.Generator) -> None:
    motion = PlumeRise(origin=VENT_TOP, max_height=1.5, speed=0.5)
    cfg = _drift_config(10, motion=motion)
    field = ParticleField(cfg, rng=rng)

    field.recompute(42.0)

    for i in range(10):
        expected = evaluate(motion, tuple(field.base_positions[i]), i, 42.0)
        assert tuple(field.positions[i]) == pytest.approx(expected)


def test_recompute_sets_dirty_flag(rng: np.random.Generator) -> None:
    field = ParticleField(_drift_config(), rng=rng)
    field.sink.mark_clean()

    field.recompute(1.0)

    assert field.sink.dirty


def test_zero_count_field_is_a_no_op(rng: np.random.Generator) -> None:
    field = ParticleField(_drift_config(0), rng=rng)
    field.recompute(5.0)

    assert field.count == 0
    assert field.positions.shape == (0, 3)
    assert not field.sink.dirty


def test_base_positions_are_read_only(rng: np.random.Generator) -> None:
    field = ParticleField(_drift_config(), rng=rng)
    with pytest.raises(ValueError):
        field.base_positions[0, 0] = 1.0


def test_initial_pose_uses_settle_motion(rng: np.random.Generator) -> None:
    settle = OscillatoryDrift(
        speed=1.0, amplitude_vertical=0.02, amplitude_horizontal=0.015
    )
    field = ParticleField(_drift_config(5, initial_motion=settle), rng=rng)

    assert field.sink.dirty
    for i in range(5):
        expected = evaluate(
            settle, tuple(field.base_positions[i]), i, config.INITIAL_SETTLE_TIME
        )
        assert tuple(field.positions[i]) == pytest.approx(expected)


def test_initial_pose_defaults_to_main_motion(rng: np.random.Generator) -> None:
    cfg = _drift_config()
    field = ParticleField(cfg, rng=rng)
    expected = evaluate(
        cfg.motion, tuple(field.base_positions[2]), 2, config.INITIAL_SETTLE_TIME
    )
    assert tuple(field.positions[2]) == pytest.approx(expected)


def test_instance_sink_gets_translation_and_tumble(rng: np.random.Generator) -> None:
    cfg = _tumble_config()
    field = ParticleField(cfg, rng=rng)
    field.recompute(2.0)

    sink = field.sink
    assert isinstance(sink, InstanceTransformBuffer)
    np.testing.assert_allclose(sink.matrices[:, :3, 3], field.positions, atol=1e-6)
    # Any tumble moves the rotation off the identity.
    assert not np.allclose(sink.matrices[:, :3, :3], np.eye(3))


def test_instance_sink_without_tumble_keeps_identity_rotation(
    rng: np.random.Generator,
) -> None:
    field = ParticleField(_drift_config(sink=SinkKind.INSTANCES), rng=rng)
    field.recompute(7.0)
    np.testing.assert_array_equal(
        field.sink.matrices[:, :3, :3], np.tile(np.eye(3), (3, 1, 1))
    )


def test_supplied_sink_is_used(rng: np.random.Generator) -> None:
    sink = PositionBuffer(3)
    field = ParticleField(_drift_config(), rng=rng, sink=sink)
    assert field.sink is sink
    assert sink.dirty


@pytest.mark.parametrize(
    "sink", [PositionBuffer(4), InstanceTransformBuffer(3)], ids=["count", "kind"]
)
def test_mismatched_sink_is_rejected(sink, rng: np.random.Generator) -> None:
    with pytest.raises(ConfigurationError):
        ParticleField(_drift_config(), rng=rng, sink=sink)


@pytest.mark.parametrize(
    "cfg",
    [
        _drift_config(-1),
        _drift_config(size=-0.1),
        _drift_config(color=(1.0, 1.0, 1.0)),
        _drift_config(color=(2.0, 0.0, 0.0, 1.0)),
        _drift_config(sink="points"),
        _drift_config(distribution=SolidSphere(radius=0.0)),
        _drift_config(motion=OscillatoryDrift(speed=-1.0)),
        _drift_config(initial_motion=PlumeRise(max_height=0.0)),
    ],
)
def test_invalid_config_is_rejected(cfg, rng: np.random.Generator) -> None:
    with pytest.raises(ConfigurationError):
        ParticleField(cfg, rng=rng)


# ---------------------------------------------------------------------------
# Reconfiguration
# ---------------------------------------------------------------------------


def test_reconfigure_motion_only_keeps_base_and_sink(
    rng: np.random.Generator,
) -> None:
    field = ParticleField(_drift_config(), rng=rng)
    base, sink = field.base_positions, field.sink

    new_motion = OscillatoryDrift(speed=2.0)
    field.reconfigure(_drift_config(motion=new_motion))

    assert field.base_positions is base
    assert field.sink is sink
    assert field.config.motion == new_motion


def test_reconfigure_count_resamples_and_replaces_sink(
    rng: np.random.Generator,
) -> None:
    field = ParticleField(_drift_config(), rng=rng)
    old_sink = field.sink

    field.reconfigure(_drift_config(10))

    assert field.count == 10
    assert field.base_positions.shape == (10, 3)
    assert field.sink is not old_sink
    assert field.sink.count == 10
    assert field.sink.dirty


def test_reconfigure_distribution_resamples_but_keeps_sink(
    rng: np.random.Generator,
) -> None:
    field = ParticleField(_drift_config(), rng=rng)
    old_base, old_sink = field.base_positions.copy(), field.sink

    field.reconfigure(_drift_config(distribution=SolidSphere(radius=5.0)))

    assert field.sink is old_sink
    assert not np.array_equal(field.base_positions, old_base)


def test_reconfigure_sink_kind_keeps_base(rng: np.random.Generator) -> None:
    field = ParticleField(_drift_config(), rng=rng)
    base = field.base_positions

    field.reconfigure(_drift_config(sink=SinkKind.INSTANCES))

    assert field.base_positions is base
    assert isinstance(field.sink, InstanceTransformBuffer)
    assert field.sink.count == 3


def test_failed_reconfigure_leaves_field_untouched(rng: np.random.Generator) -> None:
    cfg = _drift_config()
    field = ParticleField(cfg, rng=rng)
    field.recompute(1.0)
    base, sink = field.base_positions, field.sink
    before = sink.data.copy()

    with pytest.raises(ConfigurationError):
        field.reconfigure(_drift_config(10, motion=OscillatoryDrift(speed=-1.0)))

    assert field.config is cfg
    assert field.base_positions is base
    assert field.sink is sink
    np.testing.assert_array_equal(sink.data, before)


def test_reconfigure_rejects_mismatched_sink(rng: np.random.Generator) -> None:
    field = ParticleField(_drift_config(), rng=rng)
    with pytest.raises(ConfigurationError):
        field.reconfigure(_drift_config(5), sink=PositionBuffer(3))
    assert field.count == 3


def test_reconfigure_with_supplied_sink(rng: np.random.Generator) -> None:
    field = ParticleField(_drift_config(), rng=rng)
    sink = PositionBuffer(3)

    field.reconfigure(_drift_config(), sink=sink)

    assert field.sink is sink
    assert sink.dirty


def test_dropping_tumble_resets_rotation(rng: np.random.Generator) -> None:
    field = ParticleField(_tumble_config(), rng=rng)
    field.recompute(3.0)
    sink = field.sink

    field.reconfigure(
        replace(_tumble_config(), motion=OscillatoryDrift(speed=0.64))
    )
    field.recompute(3.0)

    assert field.sink is sink
    np.testing.assert_array_equal(
        sink.matrices[:, :3, :3], np.tile(np.eye(3), (4, 1, 1))
    )



def test_tumbling_settle_pose_is_cleared_by_untumbled_motion(
    rng: np.random.Generator,
) -> None:
    cfg = _drift_config(
        4,
        motion=OscillatoryDrift(speed=1.0),
        initial_motion=OscillatoryDrift(speed=1.0, tumble_amplitude=0.2),
        sink=SinkKind.INSTANCES,
    )
    field = ParticleField(cfg, rng=rng)
    assert not np.array_equal(
        field.sink.matrices[:, :3, :3], np.tile(np.eye(3), (4, 1, 1))
    )

    field.recompute(5.0)

    np.testing.assert_array_equal(
        field.sink.matrices[:, :3, :3], np.tile(np.eye(3), (4, 1, 1))
    )


def test_reconfigure_clears_rotation_left_by_settle_pose(
    rng: np.random.Generator,
) -> None:
    cfg = _drift_config(
        4,
        initial_motion=OscillatoryDrift(speed=1.0, tumble_amplitude=0.2),
        sink=SinkKind.INSTANCES,
    )
    field = ParticleField(cfg, rng=rng)
    sink = field.sink

    field.reconfigure(replace(cfg, initial_motion=None))

    assert field.sink is sink
    np.testing.assert_array_equal(
        sink.matrices[:, :3, :3], np.tile(np.eye(3), (4, 1, 1))
    )

# ---------------------------------------------------------------------------
# Allocation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "cfg",
    [
        ParticleFieldConfig(
            count=16384,
            distribution=DiscAroundPoint(center=VENT_TOP, radius=0.5),
            motion=OutwardExpand(origin=VENT_TOP),
        ),
        ParticleFieldConfig(
            count=16384,
            distribution=SolidSphere(radius=7.0),
            motion=OscillatoryDrift(speed=0.64, tumble_amplitude=0.2),
            sink=SinkKind.INSTANCES,
        ),
        ParticleFieldConfig(
            count=16384,
            distribution=SolidSphere(radius=1.5),
            motion=PlumeRise(origin=VENT_TOP, max_height=1.5, jitter=0.05),
            sink=SinkKind.INSTANCES,
        ),
    ],
    ids=["smoke", "tumble", "plume"],
)
def test_recompute_does_not_allocate(cfg, rng: np.random.Generator) -> None:
    field = ParticleField(cfg, rng=rng)
    for frame in range(10):
        field.recompute(frame / 60)

    tracemalloc.start()
    try:
        baseline, _ = tracemalloc.get_traced_memory()
        for frame in range(1000):
            field.recompute(frame / 60)
        current, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()

    # A single temporary column would be count * 8 bytes.
    assert current - baseline < 2048
    assert peak - baseline < cfg.count * 2
