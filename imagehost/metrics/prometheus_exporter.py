"""Prometheus exporter helpers."""

from __future__ import annotations

from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest


image_uploads_total = Counter(
    "image_uploads_total",
    "Upload requests by outcome.",
    ["outcome"],
)

image_deletes_total = Counter(
    "image_deletes_total",
    "Delete requests by outcome.",
    ["outcome"],
)

origin_denied_total = Counter(
    "origin_denied_total",
    "Mutating requests rejected by the origin allow-list.",
    ["method"],
)


def render_latest() -> tuple[bytes, str]:
    """Return the default registry in text exposition format."""

    return generate_latest(), CONTENT_TYPE_LATEST
