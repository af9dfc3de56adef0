"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_ALLOWED_ORIGINS = ("http://localhost:5500", "http://127.0.0.1:5500")
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class ConfigError(ValueError):
    """Raised when an environment value cannot be turned into a setting."""


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable service settings, built once at startup."""

    environment: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 3000

    allowed_origins: tuple[str, ...] = DEFAULT_ALLOWED_ORIGINS
    webp_quality: int = 80
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    storage_root: str = "public/images"
    public_base_url: str = ""
    encode_workers: int = 2

    def __post_init__(self) -> None:
        if not 0 <= self.webp_quality <= 100:
            raise ConfigError(f"WEBP_QUALITY must be between 0 and 100, got {self.webp_quality}.")
        if self.max_upload_bytes <= 0:
            raise ConfigError("MAX_UPLOAD_BYTES must be a positive number of bytes.")
        if self.encode_workers < 1:
            raise ConfigError("ENCODE_WORKERS must be at least 1.")
        if not 0 < self.port < 65536:
            raise ConfigError(f"PORT must be a valid TCP port, got {self.port}.")

    @property
    def storage_path(self) -> Path:
        return Path(self.storage_root).expanduser().resolve()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from exc


def parse_origins(raw: str) -> tuple[str, ...]:
    """Split a comma separated origin list, keeping order and dropping blanks."""

    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _build_settings() -> Settings:
    _load_env_file()

    origins = os.getenv("ALLOWED_ORIGINS")
    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_int_env("PORT", 3000),
        allowed_origins=parse_origins(origins) if origins is not None else DEFAULT_ALLOWED_ORIGINS,
        webp_quality=_int_env("WEBP_QUALITY", 80),
        max_upload_bytes=_int_env("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
        storage_root=os.getenv("STORAGE_ROOT", "public/images"),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "").rstrip("/"),
        encode_workers=_int_env("ENCODE_WORKERS", 2),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
