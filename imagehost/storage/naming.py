"""Storage name generation."""

from __future__ import annotations

import re
import uuid

from imagehost.imgproc.normalize import TARGET_EXTENSION

MAX_LABEL_LENGTH = 64
FALLBACK_LABEL = "image"

_UNSAFE_RUN = re.compile(r"[^A-Za-z0-9._-]+")
_DOT_RUN = re.compile(r"\.{2,}")
_DASH_RUN = re.compile(r"-{2,}")


def _strip_directories(original: str) -> str:
    # Clients on Windows send backslash separated paths.
    return re.split(r"[\\/]", original)[-1]


def _strip_extension(name: str) -> str:
    stem, dot, _ = name.rpartition(".")
    # ".bashrc" has no extension, only a leading dot.
    if not dot or not stem.strip("."):
        return name
    return stem


def sanitize_label(original: str | None) -> str:
    """Reduce an untrusted upload name to a short filesystem-safe label."""

    label = _strip_extension(_strip_directories(original or ""))
    label = _UNSAFE_RUN.sub("-", label)
    label = _DOT_RUN.sub(".", label)
    label = _DASH_RUN.sub("-", label)
    label = label[:MAX_LABEL_LENGTH].strip(".-")
    return label or FALLBACK_LABEL


def generate_filename(original: str | None) -> str:
    """Return ``<label>-<uuid4>.webp`` for the given upload name."""

    return f"{sanitize_label(original)}-{uuid.uuid4()}{TARGET_EXTENSION}"
