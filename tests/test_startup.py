"""Tests for process startup helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import pytest_mock

from imagehost import __main__ as entrypoint
from imagehost.api.main import create_app
from imagehost.config.settings import Settings
from imagehost.monitoring.logging import configure_logging


def test_configure_logging_uses_settings_level(mocker: pytest_mock.MockerFixture) -> None:
    basic_config = mocker.patch("imagehost.monitoring.logging.logging.basicConfig")

    configure_logging(Settings(log_level="debug"))

    assert basic_config.call_args.kwargs["level"] == logging.DEBUG
    assert "%(levelname)s" in basic_config.call_args.kwargs["format"]


def test_main_runs_uvicorn_with_configured_address(tmp_path: Path, mocker: pytest_mock.MockerFixture) -> None:
    settings = Settings(host="127.0.0.1", port=8123, storage_root=str(tmp_path / "images"))
    mocker.patch.object(entrypoint, "get_settings", return_value=settings)
    mocker.patch.object(entrypoint, "configure_logging")
    run = mocker.patch.object(entrypoint.uvicorn, "run")

    entrypoint.main()

    assert run.call_args.kwargs["host"] == "127.0.0.1"
    assert run.call_args.kwargs["port"] == 8123
    assert (tmp_path / "images").is_dir()


@pytest.mark.asyncio
async def test_startup_banner_lists_origins(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    app = create_app(Settings(storage_root=str(tmp_path / "images"), allowed_origins=("https://blog.example",)))

    with caplog.at_level(logging.INFO, logger="imagehost.api.main"):
        async with app.router.lifespan_context(app):
            pass

    assert "https://blog.example" in caplog.text
    assert str((tmp_path / "images").resolve()) in caplog.text
