"""Minimal image hosting service: upload, normalise to WebP, serve, delete."""

__version__ = "0.1.0"
