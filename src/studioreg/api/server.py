"""Entry point for running the registration API with uvicorn."""

from __future__ import annotations

import uvicorn

from studioreg.api.app import create_app
from studioreg.config import get_settings
from studioreg.logging import setup_logging


def main() -> None:
    """Configure logging and serve the API."""
    settings = get_settings()
    logger = setup_logging(log_dir=settings.log_dir, level=settings.log_level)
    logger.info("Starting studioreg API on %s:%d", settings.host, settings.port)
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
