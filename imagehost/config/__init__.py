"""Configuration helpers."""

from .settings import ConfigError, Settings, get_settings

__all__ = ["ConfigError", "Settings", "get_settings"]
