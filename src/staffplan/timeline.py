"""Presentation records derived from a plan and its resolved schedule.

These builders are pure projections: they read a Plan and a Schedule and
return new records, never touching either input. Assignments missing from the
schedule fall back to their own normalized raw values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from .dates import add_days, parse_calendar_date
from .models import AfterAssignment, Assignment, DurationMode, Plan, WorkItem
from .normalize import normalize_duration, normalize_effort, normalize_start_day
from .scheduler import Schedule, ScheduleEntry, task_label

DEFAULT_TASK_NAME = "Task"
DEFAULT_WORK_ITEM_TITLE = "New work item"
UNASSIGNED_REASON = "No performer assigned"
NO_DESCRIPTION = "No description"
HOURS_PER_DAY = 8


def gantt_task_id(work_item: WorkItem, assignment: Assignment) -> str:
    """Timeline task ID for an assignment: "<work id>-<assignment id>"."""
    return f"{work_item.id}-{assignment.id}"


def gantt_task_ids(plan: Plan) -> list[list[str]]:
    """Unique task IDs, one row per work item, one entry per assignment.

    Joined IDs can clash (work "a-b" with assignment "c" and work "a" with
    assignment "b-c" both give "a-b-c"); later clashes get a "-2", "-3" ...
    suffix so every task keeps its own ID.
    """
    seen: set[str] = set()
    rows: list[list[str]] = []
    for work_item in plan.work_items:
        row: list[str] = []
        for assignment in work_item.assignments:
            base = task_id = gantt_task_id(work_item, assignment)
            suffix = 1
            while task_id in seen:
                suffix += 1
                task_id = f"{base}-{suffix}"
            seen.add(task_id)
            row.append(task_id)
        rows.append(row)
    return rows



def _entry_for(assignment: Assignment, schedule: Schedule) -> ScheduleEntry:
    entry = schedule.get(assignment.id)
    if entry is not None:
        return entry
    return ScheduleEntry(
        start_day=normalize_start_day(assignment.start_day),
        duration_days=normalize_duration(assignment.duration_days),
        start_date=None,
    )


@dataclass(frozen=True, slots=True)
class GanttDependency:
    """Edge to a predecessor task."""

    id: str  # Predecessor task ID
    type: str = "FS"  # Finish-to-start


@dataclass(frozen=True, slots=True)
class GanttResource:
    """A performer booked on a task."""

    id: str
    name: str
    role: str
    units: int = 1


@dataclass(frozen=True, slots=True)
class GanttBlocker:
    """Something preventing a task from starting."""

    id: str
    reason: str
    scope: str = "task"
    active: bool = True


@dataclass(slots=True)
class GanttTask:
    """One bar on the initiative timeline."""

    id: str
    name: str
    role: str
    work_id: str
    work_name: str
    start_day: int
    duration_days: int
    effort_days: int
    effort_hours: int
    start_date: date | None
    end_date: date | None  # Inclusive
    min_units: int = 1
    max_units: int = 1
    can_split: bool = True
    parallel_allowed: bool = True
    duration_mode: DurationMode = DurationMode.FIXED_EFFORT
    constraints: list[str] = field(default_factory=list[str])
    priority: int = 1
    wip_limit_tag: str | None = None
    assigned_expert: str | None = None
    scenario_branch: str = "Draft"
    calendar_id: str = "project-calendar"
    resources: list[GanttResource] = field(default_factory=list[GanttResource])
    dependencies: list[GanttDependency] = field(default_factory=list[GanttDependency])
    blockers: list[GanttBlocker] = field(default_factory=list[GanttBlocker])

    @property
    def is_blocked(self) -> bool:
        return any(blocker.active for blocker in self.blockers)


def build_gantt_tasks(  # noqa: PLR0913 - defaults come from config
    plan: Plan,
    schedule: Schedule,
    *,
    hours_per_day: int = HOURS_PER_DAY,
    scenario_branch: str = "Draft",
    calendar_id: str = "project-calendar",
) -> list[GanttTask]:
    """Build timeline tasks for every assignment, in plan order.

    Each task depends finish-to-start on the previous assignment of its work
    item and, for after-assignment starts, on the referenced assignment when
    it exists in the plan. Tasks without an assigned expert carry an active
    blocker.
    """
    task_ids = gantt_task_ids(plan)
    # Later duplicates win, as in the assignment lookup
    task_id_of = {
        assignment.id: task_ids[w][a]
        for w, work_item in enumerate(plan.work_items)
        for a, assignment in enumerate(work_item.assignments)
    }
    tasks: list[GanttTask] = []

    for w, work_item in enumerate(plan.work_items):
        work_name = work_item.title.strip() or DEFAULT_TASK_NAME
        for index, assignment in enumerate(work_item.assignments):
            task_id = task_ids[w][index]
            entry = _entry_for(assignment, schedule)
            effort = normalize_effort(assignment.effort_days)

            dependencies: list[GanttDependency] = []
            if index > 0:
                dependencies.append(GanttDependency(id=task_ids[w][index - 1]))
            policy = assignment.start
            if (
                isinstance(policy, AfterAssignment)
                and policy.assignment_id in task_id_of
                and policy.assignment_id != assignment.id
            ):
                dep = GanttDependency(id=task_id_of[policy.assignment_id])
                if dep not in dependencies:
                    dependencies.append(dep)

            expert = assignment.assigned_expert_id
            resources = (
                [GanttResource(id=expert, name=expert, role=assignment.role)] if expert else []
            )
            blockers = (
                []
                if expert
                else [GanttBlocker(id=f"{task_id}-blocker", reason=UNASSIGNED_REASON)]
            )

            if entry.start_day > 0:
                constraints = [f"SNET D{entry.start_day + 1}"]
            else:
                constraints = list(assignment.constraints)

            max_units = assignment.max_units or assignment.role_units or 1
            tasks.append(
                GanttTask(
                    id=task_id,
                    name=task_label(assignment, work_name),
                    role=assignment.role,
                    work_id=work_item.id,
                    work_name=work_name,
                    start_day=entry.start_day,
                    duration_days=entry.duration_days,
                    effort_days=effort,
                    effort_hours=effort * hours_per_day,
                    start_date=entry.start_date,
                    end_date=entry.end_date,
                    min_units=max(1, assignment.min_units or 1),
                    max_units=max(1, max_units),
                    can_split=assignment.can_split if assignment.can_split is not None else True,
                    parallel_allowed=(
                        assignment.parallel if assignment.parallel is not None else True
                    ),
                    duration_mode=assignment.duration_mode or DurationMode.FIXED_EFFORT,
                    constraints=constraints,
                    priority=(
                        assignment.priority if assignment.priority is not None else index + 1
                    ),
                    wip_limit_tag=assignment.wip_limit_tag,
                    assigned_expert=expert,
                    scenario_branch=assignment.branch_label or scenario_branch,
                    calendar_id=assignment.calendar_id or calendar_id,
                    resources=resources,
                    dependencies=dependencies,
                    blockers=blockers,
                )
            )

    return tasks


@dataclass(frozen=True, slots=True)
class WorkItemSpan:
    """Overall period covered by a work item's assignments."""

    work_item_id: str
    title: str
    start_day: int
    end_day: int  # Exclusive
    duration_days: int  # 0 when the work item has no assignments
    start_date: date | None = None

    @property
    def has_assignments(self) -> bool:
        return self.duration_days > 0

    @property
    def period_label(self) -> str:
        """Human label such as "D1 – D8 · 8 d"."""
        if not self.has_assignments:
            return "Period not defined"
        return f"D{self.start_day + 1} – D{self.end_day} · {self.duration_days} d"


def summarize_work_items(plan: Plan, schedule: Schedule) -> list[WorkItemSpan]:
    """Compute the span of every work item from its assignments' schedule."""
    spans: list[WorkItemSpan] = []
    anchor = parse_calendar_date(plan.anchor_date)

    for work_item in plan.work_items:
        title = work_item.title.strip() or DEFAULT_WORK_ITEM_TITLE
        entries = [_entry_for(a, schedule) for a in work_item.assignments]
        if not entries:
            spans.append(WorkItemSpan(work_item.id, title, 0, 1, 0))
            continue

        start = min(e.start_day for e in entries)
        end = max(start + 1, max(e.end_day for e in entries))
        spans.append(
            WorkItemSpan(
                work_item_id=work_item.id,
                title=title,
                start_day=start,
                end_day=end,
                duration_days=max(1, end - start),
                start_date=add_days(anchor, start) if anchor is not None else None,
            )
        )
    return spans


@dataclass(frozen=True, slots=True)
class RoleWorkDraft:
    """One assignment as seen from the role that staffs it."""

    id: str  # Same as the timeline task ID
    work_id: str
    assignment_id: str
    title: str
    description: str
    start_day: int
    duration_days: int
    effort_days: int
    tasks: tuple[str, ...]


@dataclass(slots=True)
class RolePlan:
    """Everything one role is asked to do across the plan."""

    role: str
    skills: list[str] = field(default_factory=list[str])
    work_items: list[RoleWorkDraft] = field(default_factory=list[RoleWorkDraft])

    @property
    def required(self) -> int:
        """Number of assignments the role must cover."""
        return len(self.work_items)

    @property
    def total_effort_days(self) -> int:
        return sum(draft.effort_days for draft in self.work_items)


def build_role_plans(plan: Plan, schedule: Schedule) -> list[RolePlan]:
    """Group assignments by role, in order of each role's first appearance."""
    by_role: dict[str, RolePlan] = {}
    task_ids = gantt_task_ids(plan)

    for w, work_item in enumerate(plan.work_items):
        title = work_item.title.strip() or DEFAULT_TASK_NAME
        work_description = work_item.description.strip()
        for index, assignment in enumerate(work_item.assignments):
            role_plan = by_role.setdefault(assignment.role, RolePlan(role=assignment.role))
            skill = assignment.task.strip()
            if skill and skill not in role_plan.skills:
                role_plan.skills.append(skill)

            entry = _entry_for(assignment, schedule)
            role_plan.work_items.append(
                RoleWorkDraft(
                    id=task_ids[w][index],
                    work_id=work_item.id,
                    assignment_id=assignment.id,
                    title=title,
                    description=(
                        assignment.description.strip() or work_description or NO_DESCRIPTION
                    ),
                    start_day=entry.start_day,
                    duration_days=entry.duration_days,
                    effort_days=normalize_effort(assignment.effort_days),
                    tasks=(skill,) if skill else (),
                )
            )

    return list(by_role.values())
