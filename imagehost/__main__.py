"""Run the image host with uvicorn."""

from __future__ import annotations

import uvicorn

from imagehost.api.main import create_app
from imagehost.config.settings import get_settings
from imagehost.monitoring.logging import configure_logging


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
