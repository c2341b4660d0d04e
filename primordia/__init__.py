"""Procedural particle fields for an origin-of-life scene."""
