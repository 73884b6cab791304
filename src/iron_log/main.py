"""Application entry point."""

import logging
import os

import uvicorn

from iron_log.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    setup_logging()
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    logger.info("Starting IronLog API on %s:%s", host, port)
    uvicorn.run("iron_log.server.main:app", host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
