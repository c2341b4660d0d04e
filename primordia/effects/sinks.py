"""Output buffers that particle fields publish into and renderers read from.

Two shapes are supported:

- ``PositionBuffer``: a flat float32 array of ``3 * count`` values (x, y, z
  interleaved), for point-sprite rendering.
- ``InstanceTransformBuffer``: ``count`` row-major 4x4 float32 transforms,
  for instanced rigid-body rendering.

Both carry a ``dirty`` flag that is set on every write. The consumer uploads
the data and calls ``mark_clean()``. All storage is allocated once in the
constructor; writes copy into it in place.
"""

from __future__ import annotations

import abc
from enum import Enum

import numpy as np


class SinkKind(Enum):
    """Buffer shape a field publishes into."""

    POINTS = "points"
    INSTANCES = "instances"


class ParticleSink(abc.ABC):
    """Base class for a fixed-size per-frame output buffer."""

    kind: SinkKind
    # Number of float32 values one particle occupies in GPU layout.
    floats_per_instance: int

    def __init__(self, count: int) -> None:
        self.count = count
        self.dirty = False

    @abc.abstractmethod
    def write_positions(self, positions: np.ndarray) -> None:
        """Copy a ``(count, 3)`` array of positions into the buffer."""
        pass

    def write_orientations(self, angle_x: np.ndarray, angle_y: np.ndarray) -> None:
        """Store per-particle rotations. Point sprites have no orientation."""
        pass

    def reset_orientations(self) -> None:
        """Return every particle to the identity rotation."""
        pass

    @abc.abstractmethod
    def copy_gpu_layout(self, out: np.ndarray) -> None:
        """Copy the buffer into ``out`` (flat float32) in the layout GPUs expect."""
        pass

    @property
    def gpu_nbytes(self) -> int:
        return self.count * self.floats_per_instance * 4

    def mark_clean(self) -> None:
        """Call after the renderer has consumed the current contents."""
        self.dirty = False


class PositionBuffer(ParticleSink):
    """Flat xyz positions for point-sprite rendering."""

    kind = SinkKind.POINTS
    floats_per_instance = 3

    def __init__(self, count: int) -> None:
        super().__init__(count)
        self.data = np.zeros(count * 3, dtype=np.float32)
        # (count, 3) view onto the same memory.
        self.points = self.data.reshape(count, 3)

    def write_positions(self, positions: np.ndarray) -> None:
        np.copyto(self.points, positions)
        self.dirty = True

    def copy_gpu_layout(self, out: np.ndarray) -> None:
        np.copyto(out[: self.data.size], self.data)


class InstanceTransformBuffer(ParticleSink):
    """Per-instance 4x4 transforms (translation plus rotation, unit scale)."""

    kind = SinkKind.INSTANCES
    floats_per_instance = 16

    def __init__(self, count: int) -> None:
        super().__init__(count)
        self.matrices = np.zeros((count, 4, 4), dtype=np.float32)
        self.matrices[:] = np.eye(4, dtype=np.float32)

        # Views created once so writes don't build new array objects each frame.
        self._translation = self.matrices[:, :3, 3]
        self._m = [[self.matrices[:, row, col] for col in range(3)] for row in range(3)]
        # cos x, sin x, cos y, sin y, product
        self._trig = np.empty((5, count), dtype=np.float64)
        self._trig_rows = tuple(self._trig)

    def write_positions(self, positions: np.ndarray) -> None:
        np.copyto(self._translation, positions)
        self.dirty = True

    def write_orientations(self, angle_x: np.ndarray, angle_y: np.ndarray) -> None:
        """Write ``Rx(angle_x) @ Ry(angle_y)`` into each transform's rotation.

        This is an XYZ Euler rotation with a zero z angle.
        """
        cos_x, sin_x, cos_y, sin_y, product = self._trig_rows
        m = self._m
        np.cos(angle_x, out=cos_x)
        np.sin(angle_x, out=sin_x)
        np.cos(angle_y, out=cos_y)
        np.sin(angle_y, out=sin_y)

        # Row 0: [cos y, 0, sin y]
        np.copyto(m[0][0], cos_y)
        m[0][1].fill(0.0)
        np.copyto(m[0][2], sin_y)
        # Row 1: [sin x sin y, cos x, -sin x cos y]
        np.multiply(sin_x, sin_y, out=product)
        np.copyto(m[1][0], product)
        np.copyto(m[1][1], cos_x)
        np.multiply(sin_x, cos_y, out=product)
        np.negative(product, out=product)
        np.copyto(m[1][2], product)
        # Row 2: [-cos x sin y, sin x, cos x cos y]
        np.multiply(cos_x, sin_y, out=product)
        np.negative(product, out=product)
        np.copyto(m[2][0], product)
        np.copyto(m[2][1], sin_x)
        np.multiply(cos_x, cos_y, out=product)
        np.copyto(m[2][2], product)
        self.dirty = True

    def reset_orientations(self) -> None:
        for row in range(3):
            for col in range(3):
                self._m[row][col].fill(1.0 if row == col else 0.0)
        self.dirty = True

    def copy_gpu_layout(self, out: np.ndarray) -> None:
        # OpenGL reads mat4 attributes column-major.
        staged = out[: self.count * 16].reshape(self.count, 4, 4)
        np.copyto(staged, self.matrices.transpose(0, 2, 1))


def create_sink(kind: SinkKind, count: int) -> ParticleSink:
    """Allocate an empty sink of the given shape."""
    match kind:
        case SinkKind.POINTS:
            return PositionBuffer(count)
        case SinkKind.INSTANCES:
            return InstanceTransformBuffer(count)
    raise ValueError(f"Unknown sink kind: {kind!r}")
