"""Origin allow-list gate for mutating requests."""

from __future__ import annotations

import logging
from typing import Iterable

from fastapi import Depends, Request

from imagehost.errors import ForbiddenFailure
from imagehost.metrics.prometheus_exporter import origin_denied_total

logger = logging.getLogger(__name__)

MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def is_origin_allowed(origin: str | None, method: str, allowed_origins: Iterable[str]) -> bool:
    """Exact-match allow-list check; non-mutating methods always pass."""

    if method.upper() not in MUTATING_METHODS:
        return True
    if not origin:
        return False
    return any(origin == allowed for allowed in allowed_origins)


def require_allowed_origin(request: Request) -> None:
    """
    Reject mutating requests whose Origin header is not allow-listed.

    Runs as a route dependency, so the request body has not been read yet.
    """

    origin = request.headers.get("origin")
    settings = request.app.state.settings
    if is_origin_allowed(origin, request.method, settings.allowed_origins):
        return

    logger.warning("Write access denied for origin: %s", origin or "unknown")
    origin_denied_total.labels(method=request.method.upper()).inc()
    raise ForbiddenFailure("Forbidden: requests from this origin are not allowed.")


OriginGateDependency = Depends(require_allowed_origin)
