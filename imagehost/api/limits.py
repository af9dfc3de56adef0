"""Transport-level request body limits."""

from __future__ import annotations

from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from imagehost.errors import PayloadTooLarge, ValidationFailure

# Room for multipart boundaries and part headers on top of the file itself.
# Starlette spools file parts above 1 MiB to a temporary file while parsing.
# At most body_limit_for(max_upload_bytes) bytes of an upload reach that spool,
# including a file up to 64 KiB over the ceiling that the route then rejects.
# The spool is removed when the form is closed and is never served.
MULTIPART_OVERHEAD_BYTES = 64 * 1024


def body_limit_for(max_upload_bytes: int) -> int:
    return max_upload_bytes + MULTIPART_OVERHEAD_BYTES


def _too_large(limit: int) -> PayloadTooLarge:
    return PayloadTooLarge(f"Request body too large. Maximum size is {limit} bytes.")


class BodySizeLimitMiddleware:
    """Abort body reads as soon as more than ``max_body_bytes`` arrive.

    The check happens inside ``receive``, so nothing is counted until a
    handler actually starts consuming the body.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    raise _too_large(self.max_body_bytes)
            return message

        await self.app(scope, limited_receive, send)


def check_declared_length(request: Request, max_body_bytes: int) -> None:
    """Fail fast when Content-Length already announces an oversized body."""

    raw = request.headers.get("content-length")
    if raw is None:
        return
    try:
        declared = int(raw)
    except ValueError as exc:
        raise ValidationFailure("Invalid Content-Length header.") from exc
    if declared > max_body_bytes:
        raise _too_large(max_body_bytes)
