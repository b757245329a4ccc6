"""Logging configuration for staffplan with semantic verbosity levels."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO, cast

LOGGER_NAME = "staffplan"

# Levels between the standard ones, one per CLI verbosity step
CHANGES_LEVEL = 25  # Between INFO (20) and WARNING (30) - resolved starts and edits
CHECKS_LEVEL = 15  # Between DEBUG (10) and INFO (20) - fallbacks and reference checks

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0  # Only errors
VERBOSITY_CHANGES = 1  # Show edits and resolved starts
VERBOSITY_CHECKS = 2  # Show fallbacks taken by the resolver
VERBOSITY_DEBUG = 3  # Full walk-by-walk detail

_LEVEL_MAP = {
    VERBOSITY_SILENT: logging.ERROR,
    VERBOSITY_CHANGES: CHANGES_LEVEL,
    VERBOSITY_CHECKS: CHECKS_LEVEL,
    VERBOSITY_DEBUG: logging.DEBUG,
}


class StaffplanLogger(logging.Logger):
    """Logger with one method per verbosity level.

    - changes(): level 1, edits applied to a plan and resolved starts
    - checks(): level 2, every fallback the resolver takes
    - debug(): level 3, chain walks and memo hits
    """

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log changes (verbosity level 1)."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log checks (verbosity level 2)."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> StaffplanLogger:
    """Get the staffplan logger singleton.

    Use setup_logger() to configure it before first use. The logger class is
    swapped in only while the staffplan logger is created, so other loggers in
    the process keep the default class.
    """
    previous = logging.getLoggerClass()
    logging.setLoggerClass(StaffplanLogger)
    try:
        logger = logging.getLogger(LOGGER_NAME)
    finally:
        logging.setLoggerClass(previous)
    return cast(StaffplanLogger, logger)



def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the staffplan logger with a verbosity level.

    Can be called multiple times to reconfigure the logger.

    Args:
        verbosity: 0=silent (errors only), 1=changes, 2=checks, 3=debug
        stream: Optional output stream (defaults to sys.stderr, useful for testing)
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_LEVEL_MAP.get(verbosity, logging.ERROR))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Reset the logger to a clean, silent state."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)


def checks_enabled() -> bool:
    """Return True if checks-level logging is enabled (verbosity >= 2)."""
    return get_logger().isEnabledFor(CHECKS_LEVEL)


def debug_enabled() -> bool:
    """Return True if debug-level logging is enabled (verbosity >= 3)."""
    return get_logger().isEnabledFor(logging.DEBUG)
