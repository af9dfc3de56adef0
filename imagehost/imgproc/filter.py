"""Upload filter: media type and size checks that run before decoding."""

from __future__ import annotations

from dataclasses import dataclass

from imagehost.errors import PayloadTooLarge, ValidationFailure

ACCEPTED_MEDIA_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})


@dataclass(frozen=True, slots=True)
class FilterResult:
    """Outcome of the upload filter; ``failure`` is set when rejected."""

    failure: ValidationFailure | None = None

    @property
    def accepted(self) -> bool:
        return self.failure is None


def _base_media_type(declared: str | None) -> str:
    # "image/png; charset=binary" -> "image/png"
    return (declared or "").split(";", 1)[0].strip().lower()


def check_media_type(declared: str | None) -> FilterResult:
    """Accept only the enumerated image types."""

    if _base_media_type(declared) not in ACCEPTED_MEDIA_TYPES:
        return FilterResult(
            ValidationFailure("Invalid file type. Only JPEG, PNG, GIF and WebP images are allowed."),
        )
    return FilterResult()


def check_size(size: int, max_bytes: int) -> FilterResult:
    """Accept files up to and including ``max_bytes``."""

    if size > max_bytes:
        return FilterResult(PayloadTooLarge(f"File too large. Maximum size is {max_bytes} bytes."))
    return FilterResult()


def check_upload(declared: str | None, size: int, max_bytes: int) -> FilterResult:
    """Run the type check, then the size check."""

    result = check_media_type(declared)
    if not result.accepted:
        return result
    return check_size(size, max_bytes)
