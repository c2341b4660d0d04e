"""Renderer-facing adapters for particle sinks."""
