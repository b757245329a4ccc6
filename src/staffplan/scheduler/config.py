"""Configuration classes for schedule resolution."""

from enum import Enum

from pydantic import BaseModel


class ReferenceFallback(str, Enum):
    """Start day used when an after-assignment reference cannot be followed."""

    PROJECT_START = "project_start"  # Always day 0
    RAW_START_DAY = "raw_start_day"  # The assignment's last raw start day, clamped to >= 0


class SchedulerConfig(BaseModel):
    """Configuration for the schedule resolver."""

    # Applies to missing, self and cyclic references
    broken_reference_fallback: ReferenceFallback = ReferenceFallback.PROJECT_START
