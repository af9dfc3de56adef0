"""Failure taxonomy shared by the pipeline and the HTTP layer."""

from __future__ import annotations


class ImageHostError(Exception):
    """Base class for failures that map onto a JSON error response."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationFailure(ImageHostError):
    """The caller sent something malformed (type, size, name, shape)."""

    status_code = 400


class PayloadTooLarge(ValidationFailure):
    """Request body or file exceeded the configured ceiling."""


class ForbiddenFailure(ImageHostError):
    """The request origin is not on the allow-list."""

    status_code = 403


class NotFoundFailure(ImageHostError):
    status_code = 404


class ProcessingFailure(ImageHostError):
    """Decode, encode or filesystem error on an otherwise valid request."""

    status_code = 500
