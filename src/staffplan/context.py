"""Process-wide CLI state: config path and the "today" used for date defaults."""

from __future__ import annotations

from datetime import date
from pathlib import Path


class _Context:
    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.today: date | None = None


_context = _Context()


def get_config_path() -> Path | None:
    """Get the config path given on the command line, if any."""
    return _context.config_path


def set_config_path(path: Path | None) -> None:
    """Set the config path given on the command line."""
    _context.config_path = path


def get_today() -> date:
    """Get the date treated as today.

    Defaults to the system date; tests and ``--today`` pin it so that
    unanchored plans render reproducibly.
    """
    return _context.today or date.today()  # noqa: DTZ011


def set_today(value: date | None) -> None:
    """Pin (or unpin with None) the date treated as today."""
    _context.today = value
