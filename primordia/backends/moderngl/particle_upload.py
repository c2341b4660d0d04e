from __future__ import annotations

import logging

import moderngl
import numpy as np

from primordia import config
from primordia.effects.sinks import ParticleSink

logger = logging.getLogger(__name__)


class ParticleBufferUploader:
    """
    Mirrors a particle sink into a dynamic ModernGL buffer.

    Point sinks upload as tightly packed ``3f`` vertices, transform sinks as
    one column-major ``16f`` mat4 per instance. The upload only happens on
    frames where the sink is dirty, and the sink is marked clean afterwards.
    """

    def __init__(
        self,
        mgl_context: moderngl.Context,
        sink: ParticleSink,
        headroom: int = config.UPLOAD_HEADROOM_INSTANCES,
    ) -> None:
        self.mgl_context = mgl_context
        self.headroom = headroom
        self.sink = sink
        self._staging = self._allocate_staging(sink)

        # Initialize VBO with clean zero data to prevent garbage memory artifacts
        self.vbo = self.mgl_context.buffer(self._staging.tobytes(), dynamic=True)

    def _allocate_staging(self, sink: ParticleSink) -> np.ndarray:
        capacity = sink.count + self.headroom
        return np.zeros(capacity * sink.floats_per_instance, dtype=np.float32)

    @property
    def instance_count(self) -> int:
        return self.sink.count

    def attach(self, sink: ParticleSink) -> None:
        """Switch to a new sink, e.g. after a field was reconfigured.

        The GPU buffer is orphaned and regrown only if the new sink doesn't
        fit into the current allocation.
        """
        self.sink = sink
        if sink.gpu_nbytes > self._staging.nbytes:
            self._staging = self._allocate_staging(sink)
            self.vbo.orphan(self._staging.nbytes)
            logger.debug(f"Grew particle buffer to {self._staging.nbytes} bytes")
        sink.dirty = True

    def upload(self) -> bool:
        """Write the sink to the GPU if it changed.

        Returns:
            True if data was written.
        """
        sink = self.sink
        if not sink.dirty or sink.count == 0:
            return False
        used = sink.count * sink.floats_per_instance
        sink.copy_gpu_layout(self._staging)
        self.vbo.write(self._staging[:used].tobytes())
        sink.mark_clean()
        return True

    def release(self) -> None:
        self.vbo.release()
