"""Data models for staffplan."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

DEFAULT_DURATION_DAYS = 5
DEFAULT_EFFORT_DAYS = 5


class StartMode(str, Enum):
    """How an assignment's start day is determined."""

    PROJECT_START = "project-start"
    AFTER_ASSIGNMENT = "after-assignment"
    FIXED_DATE = "fixed-date"


class WorkItemStatus(str, Enum):
    """Lifecycle stage of a work item."""

    DISCOVERY = "discovery"
    DESIGN = "design"
    PILOT = "pilot"
    DELIVERY = "delivery"


class DurationMode(str, Enum):
    """Which quantity stays fixed when staffing changes."""

    FIXED_EFFORT = "fixed-effort"
    FIXED_DURATION = "fixed-duration"


@dataclass(frozen=True)
class ProjectStart:
    """Start on day 0 of the plan."""

    @property
    def mode(self) -> StartMode:
        return StartMode.PROJECT_START


@dataclass(frozen=True)
class AfterAssignment:
    """Start the day after another assignment finishes (finish-to-start).

    The reference may be None, point at an assignment that no longer exists,
    point at the owning assignment itself, or take part in a cycle. The
    resolver treats all of these as an unavailable reference.
    """

    assignment_id: str | None = None

    @property
    def mode(self) -> StartMode:
        return StartMode.AFTER_ASSIGNMENT


@dataclass(frozen=True)
class FixedDate:
    """Start on an explicit calendar date (ISO ``YYYY-MM-DD``)."""

    start_date: str | None = None

    @property
    def mode(self) -> StartMode:
        return StartMode.FIXED_DATE


StartPolicy = ProjectStart | AfterAssignment | FixedDate


def make_start_policy(
    mode: StartMode | str | None,
    start_after_id: str | None = None,
    start_date: str | None = None,
) -> StartPolicy:
    """Build the start policy variant for a mode tag.

    Unknown or missing modes map to ProjectStart. Payload arguments that do
    not belong to the selected variant are dropped.
    """
    try:
        resolved_mode = StartMode(mode) if mode is not None else StartMode.PROJECT_START
    except ValueError:
        resolved_mode = StartMode.PROJECT_START

    if resolved_mode is StartMode.AFTER_ASSIGNMENT:
        return AfterAssignment(assignment_id=start_after_id or None)
    if resolved_mode is StartMode.FIXED_DATE:
        return FixedDate(start_date=(start_date or "").strip() or None)
    return ProjectStart()


def _default_start() -> StartPolicy:
    return ProjectStart()


def _default_str_list() -> list[str]:
    return []


@dataclass
class Assignment:
    """One unit of work performed by a team role inside a work item.

    ``duration_days``, ``effort_days`` and ``start_day`` hold raw values as
    entered; they may be fractional or out of range until normalized.
    ``start_day`` is only consulted as a fallback when the start policy's own
    source is unavailable.
    """

    id: str
    role: str
    task: str = ""
    description: str = ""
    duration_days: float = DEFAULT_DURATION_DAYS
    effort_days: float = DEFAULT_EFFORT_DAYS
    start_day: float = 0
    start: StartPolicy = field(default_factory=_default_start)
    assigned_expert_id: str | None = None
    min_units: int | None = None
    max_units: int | None = None
    role_units: int | None = None
    can_split: bool | None = None
    parallel: bool | None = None
    duration_mode: DurationMode | None = None
    priority: int | None = None
    calendar_id: str | None = None
    branch_label: str | None = None
    wip_limit_tag: str | None = None
    constraints: list[str] = field(default_factory=_default_str_list)

    @property
    def start_mode(self) -> StartMode:
        """The tag of the current start policy."""
        return self.start.mode

    @property
    def start_after_id(self) -> str | None:
        """Referenced assignment id, or None unless the policy is AfterAssignment."""
        return self.start.assignment_id if isinstance(self.start, AfterAssignment) else None

    @property
    def start_date(self) -> str | None:
        """Fixed start date, or None unless the policy is FixedDate."""
        return self.start.start_date if isinstance(self.start, FixedDate) else None


@dataclass
class WorkItem:
    """A work breakdown item owning an ordered list of assignments."""

    id: str
    title: str = ""
    description: str = ""
    assumptions: str = ""
    owner: str = ""
    timeframe: str = ""
    status: WorkItemStatus = WorkItemStatus.DISCOVERY
    assignments: list[Assignment] = field(default_factory=list[Assignment])


@dataclass
class Plan:
    """All work items of one initiative draft plus its anchor (start) date."""

    work_items: list[WorkItem] = field(default_factory=list[WorkItem])
    anchor_date: str | None = None
    name: str = ""

    def iter_assignments(self) -> Iterator[tuple[WorkItem, Assignment]]:
        """Yield (work item, assignment) pairs in plan order."""
        for work_item in self.work_items:
            for assignment in work_item.assignments:
                yield work_item, assignment

    def get_work_item(self, work_item_id: str) -> WorkItem | None:
        """Get a work item by its ID."""
        for work_item in self.work_items:
            if work_item.id == work_item_id:
                return work_item
        return None

    def get_assignment(self, assignment_id: str) -> Assignment | None:
        """Get an assignment by its ID, searching all work items."""
        for _, assignment in self.iter_assignments():
            if assignment.id == assignment_id:
                return assignment
        return None

    def total_effort_days(self) -> int:
        """Sum of normalized effort over every assignment."""
        from .normalize import normalize_effort  # noqa: PLC0415 - normalize imports models

        return sum(normalize_effort(a.effort_days) for _, a in self.iter_assignments())
