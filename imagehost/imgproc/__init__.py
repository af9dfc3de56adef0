"""Image validation and normalisation."""

from .filter import ACCEPTED_MEDIA_TYPES, FilterResult, check_upload
from .normalize import TARGET_EXTENSION, TARGET_MEDIA_TYPE, ImageNormalizer

__all__ = [
    "ACCEPTED_MEDIA_TYPES",
    "FilterResult",
    "ImageNormalizer",
    "TARGET_EXTENSION",
    "TARGET_MEDIA_TYPE",
    "check_upload",
]
