"""Image normalisation helpers."""

from __future__ import annotations

import asyncio
import io
import logging
from concurrent.futures import ThreadPoolExecutor

from PIL import Image, ImageOps, UnidentifiedImageError

from imagehost.errors import ProcessingFailure

TARGET_FORMAT = "WEBP"
TARGET_EXTENSION = ".webp"
TARGET_MEDIA_TYPE = "image/webp"

# Pillow signals corrupt input through several exception types.
_DECODE_ERRORS = (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError, EOFError)

logger = logging.getLogger(__name__)


def encode_webp(image_bytes: bytes, quality: int) -> bytes:
    """Decode any supported image and re-encode it as WebP.

    Only the first frame of animated inputs is kept. EXIF orientation is
    applied to the pixels; no metadata is written to the output.
    """

    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            img.seek(0)
            img.load()
            frame = ImageOps.exif_transpose(img)
    except _DECODE_ERRORS as exc:
        raise ProcessingFailure("Uploaded file could not be decoded as an image.") from exc

    buffer = io.BytesIO()
    try:
        if frame.mode in ("P", "PA", "LA", "La") or "transparency" in frame.info:
            frame = frame.convert("RGBA")
        elif frame.mode not in ("RGB", "RGBA"):
            frame = frame.convert("RGB")
        frame.save(buffer, TARGET_FORMAT, quality=int(quality))
    except (OSError, ValueError) as exc:
        raise ProcessingFailure("Failed to encode image.") from exc
    return buffer.getvalue()


class ImageNormalizer:
    """Re-encodes uploads into WebP on a bounded worker pool."""

    def __init__(self, quality: int, workers: int = 2) -> None:
        self._quality = quality
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="webp-encode")

    @property
    def quality(self) -> int:
        return self._quality

    def normalize_sync(self, image_bytes: bytes) -> bytes:
        return encode_webp(image_bytes, self._quality)

    async def normalize(self, image_bytes: bytes) -> bytes:
        """Return WebP bytes without blocking the event loop."""

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.normalize_sync, image_bytes)

    def shutdown(self) -> None:
        logger.debug("Shutting down encode pool")
        self._executor.shutdown(wait=True)
