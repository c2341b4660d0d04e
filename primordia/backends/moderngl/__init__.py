"""ModernGL backend utilities."""

from .particle_upload import ParticleBufferUploader

__all__ = ["ParticleBufferUploader"]
