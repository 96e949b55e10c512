"""FastNetMon Exporter - process entry point."""

import logging
import os
import sys

import uvicorn

from .api import create_app
from .config import ExporterConfig, load_env_file
from .errors import ConfigError

logger = logging.getLogger(__name__)


def configure_logging(level_name: str) -> None:
    """Configure root logging at the named level, INFO if unknown."""
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def main() -> None:
    """Load configuration and serve the exporter until the process is stopped."""
    env_loaded = load_env_file()
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    if not env_loaded:
        logger.warning("Could not load .env file. Using environment variables.")

    try:
        config = ExporterConfig.from_env()
    except ConfigError as e:
        logger.critical(f"Failed to load configuration: {e}")
        sys.exit(1)

    app = create_app(config)

    logger.info(f"Starting exporter on {config.listen_address}")
    logger.info("Health check available at /health")

    # uvicorn exits non-zero when the listener cannot bind
    uvicorn.run(app, host=config.listen_host, port=config.listen_port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
