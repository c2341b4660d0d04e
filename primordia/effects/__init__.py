"""Procedural particle fields: emission, motion, and output buffers."""

from .distributions import DiscAroundPoint, SolidSphere, VentLocalSphere, sample
from .errors import ConfigurationError
from .field import ParticleField, ParticleFieldConfig
from .motion import OscillatoryDrift, OutwardExpand, PlumeRise, evaluate, orientation
from .scene import ParticleScene
from .sinks import InstanceTransformBuffer, ParticleSink, PositionBuffer, SinkKind

__all__ = [
    "ConfigurationError",
    "DiscAroundPoint",
    "InstanceTransformBuffer",
    "OscillatoryDrift",
    "OutwardExpand",
    "ParticleField",
    "ParticleFieldConfig",
    "ParticleScene",
    "ParticleSink",
    "PlumeRise",
    "PositionBuffer",
    "SinkKind",
    "SolidSphere",
    "VentLocalSphere",
    "evaluate",
    "orientation",
    "sample",
]
