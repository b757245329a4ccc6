"""Core dataclasses for schedule resolution."""

from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(frozen=True, slots=True)
class ScheduleEntry:
    """Resolved timing of one assignment.

    ``start_day`` is an offset from the plan's anchor date (day 0). The
    assignment occupies days ``start_day`` through ``end_day - 1``.
    """

    start_day: int  # >= 0
    duration_days: int  # >= 1
    start_date: date | None  # Only set when the plan has an anchor date

    @property
    def end_day(self) -> int:
        """First day after the assignment finishes (where a successor starts)."""
        return self.start_day + self.duration_days

    @property
    def end_date(self) -> date | None:
        """Last calendar day the assignment occupies, inclusive."""
        if self.start_date is None:
            return None
        return self.start_date + timedelta(days=self.duration_days - 1)


# Assignment id -> resolved entry, in plan order
Schedule = dict[str, ScheduleEntry]
