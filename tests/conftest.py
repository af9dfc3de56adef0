"""Shared fixtures for the image host tests."""

from __future__ import annotations

import io
import os
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from imagehost.api.main import create_app
from imagehost.config.settings import Settings

ALLOWED_ORIGIN = "http://allowed.test"


def make_image(fmt: str = "PNG", size: tuple[int, int] = (32, 24), mode: str = "RGB", noise: bool = False) -> bytes:
    """Return an encoded test image."""

    if noise:
        img = Image.frombytes("RGB", size, os.urandom(size[0] * size[1] * 3)).convert(mode)
    else:
        img = Image.new(mode, size, color=(200, 40, 40) if mode == "RGB" else 0)
    buffer = io.BytesIO()
    img.save(buffer, fmt)
    return buffer.getvalue()


def is_webp(data: bytes) -> bool:
    return data[:4] == b"RIFF" and data[8:12] == b"WEBP"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        allowed_origins=(ALLOWED_ORIGIN, "http://127.0.0.1:5500"),
        storage_root=str(tmp_path / "images"),
        max_upload_bytes=1024 * 1024,
        encode_workers=1,
    )


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def store_dir(settings: Settings) -> Path:
    return settings.storage_path
