"""Scheduler package - start-day resolution for plan assignments.

Main entry points:
- resolve_schedule: Resolve every assignment of a list of work items
- resolve_plan: Same, using the plan's own anchor date
- build_assignment_lookup: Flat ID -> assignment mapping used for references
- find_reference_issues: Diagnostics for dangling, self and circular references

Configuration:
- SchedulerConfig: Fallback policy for unusable references
"""

from .config import ReferenceFallback, SchedulerConfig
from .core import Schedule, ScheduleEntry
from .lookup import (
    IssueKind,
    ReferenceIssue,
    ReferenceOption,
    build_assignment_lookup,
    find_reference_issues,
    reference_options,
    task_label,
)
from .resolver import resolve_plan, resolve_schedule

__all__ = [
    # Core types
    "Schedule",
    "ScheduleEntry",
    # Configuration
    "SchedulerConfig",
    "ReferenceFallback",
    # Lookup and diagnostics
    "build_assignment_lookup",
    "reference_options",
    "task_label",
    "find_reference_issues",
    "IssueKind",
    "ReferenceIssue",
    "ReferenceOption",
    # Resolution
    "resolve_schedule",
    "resolve_plan",
]
