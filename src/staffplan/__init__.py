"""staffplan - resolve staffing schedules for initiative work breakdowns."""

__version__ = "0.1.0"
