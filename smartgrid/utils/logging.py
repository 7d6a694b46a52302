"""
Logging Setup
=============

Configures the loguru sink used by the scenario runner CLI.
"""

import sys
from typing import Optional

from loguru import logger

from ..config import settings


def setup_logging(level: Optional[str] = None):
    """
    Configure the loguru logger for command-line runs.

    Removes the default handler and writes a short, readable format to
    stderr so that stdout stays free for the status report.
    """
    level = (level or settings.log_level).upper()

    logger.remove()

    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stderr,
        colorize=True,
        format=log_format,
        level=level,
        backtrace=False,
        diagnose=False,
    )

    logger.debug(f"Logging initialized with level: {level}")
    return logger
