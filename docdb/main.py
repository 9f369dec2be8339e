"""
docdb - Main entry point.

Usage:
    python -m docdb.main
    uvicorn docdb.main:app --port 8000

Configuration is entirely via DOCDB_* environment variables.
See config.py for all available settings.
"""

from __future__ import annotations

import logging

import uvicorn

from .api import create_app
from .config import Settings
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)

settings = Settings()
setup_logging(settings)

app = create_app(settings)


def main() -> None:
    """Run the HTTP server until interrupted."""
    logger.info(
        "Starting docdb",
        extra={"host": settings.host, "port": settings.port, "log_level": settings.log_level},
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
