"""
Configuration constants.

Centralizes the magic numbers of the scene and its particle effects.
Organized by functional area for easy maintenance.
"""

# =============================================================================
# GENERAL
# =============================================================================

# RANDOM_SEED = None
RANDOM_SEED = "primordial-soup"

# =============================================================================
# SCENE LAYOUT
# =============================================================================

# Shared speed multiplier for the ambient ensembles (dust, fuel).
PARTICLE_SPEED = 0.8
# Fuel molecules drift a little slower than the dust around them.
FUEL_SPEED_MULTIPLIER = 0.8
# Radius of the sphere of water the ambient particles fill.
PARTICLE_DISTRIBUTION_RADIUS = 7.0

# Hydrothermal vent body (a cone standing on the ocean floor)
VENT_POSITION = (0.0, -5.0, -3.0)  # Center of the cone
VENT_HEIGHT = 6.0
VENT_BASE_RADIUS = 1.5
# Chimney opening, matching the smoke emission radius.
VENT_TOP_RADIUS = 0.5
VENT_RADIAL_SEGMENTS = 16
VENT_TOP = (
    VENT_POSITION[0],
    VENT_POSITION[1] + VENT_HEIGHT / 2,
    VENT_POSITION[2],
)  # (0, -2, -3)

# =============================================================================
# PARTICLE FIELDS
# =============================================================================

# Elapsed time used for the "settling-in" pose written when a field is built,
# so the first frame is never the exact base distribution.
INITIAL_SETTLE_TIME = 0.01

# Oscillatory drift amplitudes (scene units)
DRIFT_AMPLITUDE_VERTICAL = 0.1
DRIFT_AMPLITUDE_HORIZONTAL = 0.075
SETTLE_AMPLITUDE_VERTICAL = 0.02
SETTLE_AMPLITUDE_HORIZONTAL = 0.015

# Fuel molecule tumbling (radians, cycles scale with speed)
FUEL_TUMBLE_AMPLITUDE = 0.2
FUEL_TUMBLE_RATE = 0.1

# Bounded noise amplitude applied to rising smoke so particles don't move
# as perfectly synchronized sheets.
SMOKE_JITTER = 0.05

# =============================================================================
# VENT GEOMETRY
# =============================================================================

# Vertices with |y| within this band of the half-height count as rim vertices.
RIM_JITTER_EPSILON = 0.01
# Maximum horizontal displacement of a rim vertex.
RIM_JITTER_AMOUNT = 0.08
VENT_HEIGHT_SEGMENTS = 4

# =============================================================================
# GPU UPLOAD
# =============================================================================

# Extra instances reserved in GPU buffers so small count increases on
# reconfigure don't force a reallocation.
UPLOAD_HEADROOM_INSTANCES = 64
