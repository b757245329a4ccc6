"""Calendar helpers shared by the normalizer, resolver and view builders.

All arithmetic is in raw calendar days; weekends and holidays are not modeled.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta


def parse_calendar_date(value: str | date | None) -> date | None:
    """Parse a plan date into a ``date``.

    Accepts ``date``/``datetime`` objects, ``YYYY-MM-DD`` strings and full ISO
    datetime strings (truncated to their date part).

    Returns:
        The parsed date, or None if the value is missing, blank or unparsable
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def days_between(start: date, end: date) -> int:
    """Return the signed number of calendar days from ``start`` to ``end``."""
    return (end - start).days


def add_days(start: date, days: int) -> date:
    """Return ``start`` shifted by ``days`` calendar days."""
    return start + timedelta(days=days)
