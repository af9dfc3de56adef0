"""Filesystem storage for encoded images."""

from .backend import LocalStorage, validate_name
from .naming import generate_filename, sanitize_label

__all__ = ["LocalStorage", "generate_filename", "sanitize_label", "validate_name"]
