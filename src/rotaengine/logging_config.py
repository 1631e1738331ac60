"""Logging configuration for the rota engine command-line tool.

The library modules only create loggers; handlers are installed here, by the
CLI, so embedding applications keep control of their own logging setup.
"""

import logging
import os
import sys
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """Colored level names for interactive terminals."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        if record.levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
            )
        return super().format(record)


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the ``rotaengine`` logger hierarchy.

    Args:
        level: Level name. Falls back to the ``ROTAENGINE_LOG_LEVEL``
            environment variable, then ``WARNING``.
    """
    level_name = (level or os.getenv("ROTAENGINE_LOG_LEVEL", "WARNING")).upper()

    logger = logging.getLogger("rotaengine")
    logger.setLevel(level_name)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if sys.stderr.isatty():
        formatter: logging.Formatter = ColoredFormatter(
            fmt="%(levelname)-8s %(asctime)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(levelname)s %(asctime)s [%(name)s:%(lineno)d] %(message)s"
        )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.propagate = False
