"""Flat directory store for encoded images."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from imagehost.errors import NotFoundFailure, ProcessingFailure, ValidationFailure

logger = logging.getLogger(__name__)

_WRITE_FLAGS = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_NOFOLLOW", 0) | getattr(os, "O_BINARY", 0)


def validate_name(name: str) -> None:
    """Reject names that could escape the store directory."""

    if not name or name in (".", "..") or ".." in name or "/" in name or "\\" in name or "\x00" in name:
        raise ValidationFailure("Invalid file name.")


class LocalStorage:
    """Stores images as files directly under ``root``."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root).expanduser().resolve()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _path_for(self, name: str) -> Path:
        validate_name(name)
        path = self._root / name
        if path.parent != self._root:
            raise ValidationFailure("Invalid file name.")
        return path

    async def put(self, data: bytes, name: str) -> Path:
        """Write a new file; never overwrites and never follows symlinks."""

        path = self._path_for(name)
        try:
            await asyncio.to_thread(self._write_new, path, data)
        except OSError as exc:
            raise ProcessingFailure("Failed to store image.") from exc
        return path

    @staticmethod
    def _write_new(path: Path, data: bytes) -> None:
        fd = os.open(path, _WRITE_FLAGS, 0o644)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
        except BaseException:
            path.unlink(missing_ok=True)
            raise

    async def delete(self, name: str) -> None:
        """Remove ``name`` from the store."""

        path = self._path_for(name)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError as exc:
            raise NotFoundFailure("File not found.") from exc
        except OSError as exc:
            logger.exception("Failed to delete %s", name)
            raise ProcessingFailure("Failed to delete file.") from exc
