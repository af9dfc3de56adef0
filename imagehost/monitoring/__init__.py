"""Operational helpers (logging)."""
