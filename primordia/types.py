from __future__ import annotations

from typing import NewType, TypeAlias

# =============================================================================
# SPATIAL TYPES
# =============================================================================

# World-space point or offset in scene units (y is up).
Vec3: TypeAlias = tuple[float, float, float]  # Example: (0.0, -2.0, -3.0)

# Euler rotation in radians, applied in XYZ order.
EulerXYZ: TypeAlias = tuple[float, float, float]

# =============================================================================
# TIME-RELATED TYPES
# =============================================================================

# Seconds since the scene started, supplied once per rendered frame.
# Monotonic during normal playback, but any value may be passed to seek or
# replay a frame since every particle position is a pure function of it.
ElapsedTime = NewType("ElapsedTime", float)

# =============================================================================
# RENDERING-RELATED TYPES
# =============================================================================

# Float RGBA color in 0.0-1.0 space (GPU-facing material colors).
ColorRGBA: TypeAlias = tuple[float, float, float, float]

# =============================================================================
# MISC
# =============================================================================

RandomSeed: TypeAlias = int | str | None

FloatRange: TypeAlias = tuple[float, float]
