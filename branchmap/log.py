"""Logging setup."""

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger


DEFAULT_LEVEL = "INFO"
CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: Optional[str] = None, log_file: Optional[Path] = None):
    """Replace loguru's default sink with ours.

    The level comes from the argument, then BRANCHMAP_LOG_LEVEL, then INFO.
    When log_file is given, everything from DEBUG up is also written there.
    """
    level = (level or os.environ.get("BRANCHMAP_LOG_LEVEL") or DEFAULT_LEVEL).upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)
    if log_file is not None:
        logger.add(str(log_file), level="DEBUG", rotation="1 MB", retention=3,
                   encoding="utf-8")

    logger.debug(f"Logging configured at {level}")
    return level
