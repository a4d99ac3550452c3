"""Logging setup for bdmetals."""

import os
import sys

from loguru import logger

DEFAULT_LOG_LEVEL = "WARNING"


def configure_logging(level: str | None = None) -> None:
    """Send log records to stderr at the given level.

    Level: argument > BDMETALS_LOG_LEVEL env var > WARNING.
    """
    level = (level or os.environ.get("BDMETALS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format="<level>{level: <8}</level> {message}")
