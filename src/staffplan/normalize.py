"""Normalization of user-entered durations, effort and start days.

Values typed into an editor can be fractional, negative, missing or plain
garbage while a person is mid-edit. Everything here clamps them into range
instead of raising, and edits are applied by building a new Plan so callers
can recompute the schedule from a consistent snapshot.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import date
from typing import Any

from pydantic import BaseModel

from .dates import days_between, parse_calendar_date
from .logger import get_logger
from .models import (
    DEFAULT_DURATION_DAYS,
    DEFAULT_EFFORT_DAYS,
    Assignment,
    DurationMode,
    Plan,
    StartMode,
    WorkItem,
    make_start_policy,
)

logger = get_logger()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves going toward +infinity."""
    return math.floor(value + 0.5)


def _coerce_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _clamp(value: Any, minimum: int) -> int:
    number = _coerce_number(value)
    if number is None:
        return minimum
    return max(minimum, round_half_up(number))


def normalize_duration(value: Any) -> int:
    """Clamp a raw duration to an integer number of days >= 1."""
    return _clamp(value, 1)


def normalize_effort(value: Any) -> int:
    """Clamp a raw effort to an integer number of person-days >= 1."""
    return _clamp(value, 1)


def normalize_start_day(value: Any) -> int:
    """Clamp a raw start day to an integer offset >= 0."""
    return _clamp(value, 0)


def normalize_assignment(assignment: Assignment) -> Assignment:
    """Return a copy with duration, effort and start day in range.

    Duration is raised to effort if needed so that effort never exceeds it.
    """
    effort = normalize_effort(assignment.effort_days)
    duration = max(normalize_duration(assignment.duration_days), effort)
    return replace(
        assignment,
        effort_days=effort,
        duration_days=duration,
        start_day=normalize_start_day(assignment.start_day),
    )


class AssignmentEdit(BaseModel):
    """A partial update to one assignment.

    Only fields that were explicitly set are applied, so ``start_after_id=None``
    clears a reference while omitting it leaves the reference alone.
    """

    role: str | None = None
    task: str | None = None
    description: str | None = None
    duration_days: float | None = None
    effort_days: float | None = None
    start_day: float | None = None
    start_mode: StartMode | None = None
    start_after_id: str | None = None
    start_date: str | None = None
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


# Fields copied verbatim from an edit onto the assignment
_PLAIN_FIELDS = (
    "role",
    "task",
    "description",
    "assigned_expert_id",
    "min_units",
    "max_units",
    "role_units",
    "can_split",
    "parallel",
    "duration_mode",
    "priority",
    "calendar_id",
    "branch_label",
    "wip_limit_tag",
)


def _edited_assignment(  # noqa: PLR0912 - one branch per edit rule
    assignment: Assignment,
    edit: AssignmentEdit,
    lookup: dict[str, Assignment],
    anchor: date | None,
) -> Assignment:
    provided = edit.model_fields_set

    next_effort = normalize_effort(
        edit.effort_days if "effort_days" in provided else assignment.effort_days
    )
    next_start = normalize_start_day(
        edit.start_day if "start_day" in provided else assignment.start_day
    )
    previous_duration = normalize_duration(assignment.duration_days)
    next_duration = normalize_duration(
        edit.duration_days if "duration_days" in provided else assignment.duration_days
    )

    # Duration may never be shorter than effort
    if "effort_days" in provided and next_duration < next_effort:
        next_duration = next_effort
    if "duration_days" in provided and next_duration < previous_duration:
        next_effort = min(next_effort, next_duration)

    next_mode = (
        edit.start_mode
        if "start_mode" in provided and edit.start_mode is not None
        else assignment.start_mode
    )
    next_after_id = (
        edit.start_after_id if "start_after_id" in provided else assignment.start_after_id
    )
    next_date = (
        (edit.start_date or "").strip() or None
        if "start_date" in provided
        else assignment.start_date
    )

    computed_start = next_start
    if next_mode is StartMode.PROJECT_START:
        computed_start = 0
    elif next_mode is StartMode.AFTER_ASSIGNMENT:
        reference = lookup.get(next_after_id) if next_after_id != assignment.id else None
        if next_after_id and reference is not None:
            computed_start = normalize_start_day(reference.start_day) + normalize_duration(
                reference.duration_days
            )
    else:
        target = parse_calendar_date(next_date)
        if anchor is not None and target is not None:
            computed_start = max(0, days_between(anchor, target))

    updates: dict[str, Any] = {
        name: getattr(edit, name) for name in _PLAIN_FIELDS if name in provided
    }
    if "role" in updates and updates["role"] is None:
        del updates["role"]

    return replace(
        assignment,
        **updates,
        effort_days=next_effort,
        duration_days=next_duration,
        start_day=computed_start,
        start=make_start_policy(next_mode, next_after_id, next_date),
    )


def apply_assignment_edit(
    plan: Plan,
    work_item_id: str,
    assignment_id: str,
    edit: AssignmentEdit,
    *,
    anchor_date: str | date | None = None,
) -> Plan:
    """Apply an edit to one assignment and return the updated plan.

    The input plan is left untouched. Unknown work item or assignment IDs
    return an equivalent plan unchanged.

    Args:
        plan: Current plan snapshot
        work_item_id: ID of the work item owning the assignment
        assignment_id: ID of the assignment to edit
        edit: Fields to change
        anchor_date: Anchor used to turn a fixed date into a raw start day;
            defaults to the plan's own anchor date

    Returns:
        A new Plan containing the edited assignment
    """
    anchor = parse_calendar_date(anchor_date if anchor_date is not None else plan.anchor_date)
    lookup = {a.id: a for _, a in plan.iter_assignments()}

    found = False
    work_items: list[WorkItem] = []
    for work_item in plan.work_items:
        if work_item.id != work_item_id:
            work_items.append(work_item)
            continue
        assignments: list[Assignment] = []
        for assignment in work_item.assignments:
            if assignment.id == assignment_id:
                found = True
                updated = _edited_assignment(assignment, edit, lookup, anchor)
                logger.changes(
                    f"Edited {assignment_id}: {updated.start_mode.value}, "
                    f"start D{updated.start_day}, {updated.duration_days}d "
                    f"({updated.effort_days} person-days)"
                )
                assignments.append(updated)
            else:
                assignments.append(assignment)
        work_items.append(replace(work_item, assignments=assignments))

    if not found:
        logger.checks(f"Edit ignored: no assignment {assignment_id} in work item {work_item_id}")
    return replace(plan, work_items=work_items)


def change_start_mode(  # noqa: PLR0913 - mirrors apply_assignment_edit plus the mode
    plan: Plan,
    work_item_id: str,
    assignment_id: str,
    mode: StartMode,
    *,
    anchor_date: str | date | None = None,
    today: date | None = None,
) -> Plan:
    """Switch an assignment's start mode, filling in a sensible payload.

    - after-assignment references the first other assignment in plan order,
      or falls back to project-start when the plan has no other assignment
    - fixed-date keeps the assignment's existing date, else uses the anchor
      date, else ``today``
    - project-start clears both reference and date

    ``anchor_date`` overrides the plan's own anchor, as in apply_assignment_edit.
    """
    if mode is StartMode.AFTER_ASSIGNMENT:
        fallback = next((a.id for _, a in plan.iter_assignments() if a.id != assignment_id), None)
        if fallback is None:
            edit = AssignmentEdit(
                start_mode=StartMode.PROJECT_START, start_after_id=None, start_date=None
            )
        else:
            edit = AssignmentEdit(start_mode=mode, start_after_id=fallback)
    elif mode is StartMode.FIXED_DATE:
        current = plan.get_assignment(assignment_id)
        anchor = parse_calendar_date(anchor_date if anchor_date is not None else plan.anchor_date)
        default_date = (current.start_date if current else None) or (
            (anchor or today or date.today()).isoformat()  # noqa: DTZ011
        )
        edit = AssignmentEdit(start_mode=mode, start_after_id=None, start_date=default_date)
    else:
        edit = AssignmentEdit(start_mode=mode, start_after_id=None, start_date=None)

    return apply_assignment_edit(plan, work_item_id, assignment_id, edit, anchor_date=anchor_date)


def next_assignment_defaults(
    work_item: WorkItem, default_duration: int = DEFAULT_DURATION_DAYS
) -> tuple[int, int]:
    """Compute (start_day, duration_days) for an assignment appended to a work item.

    The new assignment starts where the latest existing one ends (by raw
    start and duration) and inherits the last assignment's duration.
    """
    next_start = 0
    for assignment in work_item.assignments:
        end = normalize_start_day(assignment.start_day) + normalize_duration(
            assignment.duration_days
        )
        next_start = max(next_start, end)

    if work_item.assignments:
        duration = normalize_duration(work_item.assignments[-1].duration_days)
    else:
        duration = normalize_duration(default_duration)
    return next_start, duration


def add_assignment(  # noqa: PLR0913 - mirrors the editor's "add assignment" inputs
    plan: Plan,
    work_item_id: str,
    assignment_id: str,
    role: str,
    *,
    default_duration: int = DEFAULT_DURATION_DAYS,
    effort_days: int | None = None,
) -> Plan:
    """Append a new project-start assignment to a work item.

    The role defaults to the work item's last assignment role when ``role``
    is empty. Unknown work items leave the plan unchanged.
    """
    work_items: list[WorkItem] = []
    for work_item in plan.work_items:
        if work_item.id != work_item_id:
            work_items.append(work_item)
            continue
        start_day, duration = next_assignment_defaults(work_item, default_duration)
        last_role = work_item.assignments[-1].role if work_item.assignments else ""
        new_assignment = Assignment(
            id=assignment_id,
            role=role or last_role,
            duration_days=duration,
            effort_days=min(
                normalize_effort(DEFAULT_EFFORT_DAYS if effort_days is None else effort_days),
                duration,
            ),
            start_day=start_day,
        )
        logger.changes(f"Added {assignment_id} to {work_item_id} at D{start_day + 1}")
        work_items.append(replace(work_item, assignments=[*work_item.assignments, new_assignment]))
    return replace(plan, work_items=work_items)
