from __future__ import annotations

import sys

from loguru import logger

from .config import Settings


def setup_logging(config: Settings) -> None:
    """Route loguru output to stderr and, if configured, to a log file."""
    logger.remove()
    logger.add(sys.stderr, level=config.log_level)
    if config.log_file:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(config.log_file, level=config.log_level, rotation="1 week")
