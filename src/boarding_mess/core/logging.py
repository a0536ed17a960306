"""Logging configuration."""

import logging
import sys

from boarding_mess.core.settings import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a stdout handler to the package logger once."""
    logger = logging.getLogger("boarding_mess")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    resolved = (level or settings.log_level).upper()
    logger.setLevel(logging.DEBUG if settings.debug else getattr(logging, resolved, logging.INFO))
