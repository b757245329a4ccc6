"""Assignment lookup and reference diagnostics."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from staffplan.models import AfterAssignment, Assignment

if TYPE_CHECKING:
    from staffplan.models import Plan, WorkItem

DEFAULT_WORK_TITLE = "Work"


def build_assignment_lookup(work_items: Iterable[WorkItem]) -> dict[str, Assignment]:
    """Map every assignment ID in the plan to its assignment.

    Built by a linear scan in plan order; if two assignments share an ID the
    later one wins. Absent IDs are simply absent from the result.
    """
    lookup: dict[str, Assignment] = {}
    for work_item in work_items:
        for assignment in work_item.assignments:
            lookup[assignment.id] = assignment
    return lookup


def task_label(assignment: Assignment, fallback: str) -> str:
    """Display label for an assignment: its task, or ``fallback`` when blank."""
    return assignment.task.strip() or fallback


@dataclass(frozen=True, slots=True)
class ReferenceOption:
    """One choice in an after-assignment reference picker."""

    value: str  # Assignment ID
    label: str


def reference_options(plan: Plan) -> list[ReferenceOption]:
    """List every assignment as a selectable reference, labelled "Work · Task"."""
    options: list[ReferenceOption] = []
    for work_item in plan.work_items:
        work_title = work_item.title.strip() or DEFAULT_WORK_TITLE
        for assignment in work_item.assignments:
            label = f"{work_title} · {task_label(assignment, work_title)}"
            options.append(ReferenceOption(value=assignment.id, label=label))
    return options


class IssueKind(str, Enum):
    """Kinds of unusable after-assignment references."""

    DANGLING = "dangling"
    SELF = "self"
    CYCLE = "cycle"


@dataclass(frozen=True, slots=True)
class ReferenceIssue:
    """An after-assignment reference the resolver will not follow."""

    kind: IssueKind
    assignment_ids: tuple[str, ...]  # Offending assignment, or cycle members in chain order
    reference_id: str | None = None

    @property
    def message(self) -> str:
        if self.kind is IssueKind.DANGLING:
            return f"{self.assignment_ids[0]} starts after unknown assignment {self.reference_id}"
        if self.kind is IssueKind.SELF:
            return f"{self.assignment_ids[0]} starts after itself"
        cycle = " -> ".join([*self.assignment_ids, self.assignment_ids[0]])
        return f"Circular start reference: {cycle}"


def _followable_reference(assignment: Assignment, lookup: dict[str, Assignment]) -> str | None:
    policy = assignment.start
    if not isinstance(policy, AfterAssignment):
        return None
    ref_id = policy.assignment_id
    if not ref_id or ref_id == assignment.id or ref_id not in lookup:
        return None
    return ref_id


def find_reference_issues(lookup: dict[str, Assignment]) -> list[ReferenceIssue]:
    """Report dangling, self and circular after-assignment references.

    This is a diagnostic for editors and the ``check`` command; resolution
    itself never fails on these.
    """
    issues: list[ReferenceIssue] = []

    for assignment_id, assignment in lookup.items():
        policy = assignment.start
        if not isinstance(policy, AfterAssignment) or not policy.assignment_id:
            continue
        if policy.assignment_id == assignment_id:
            issues.append(ReferenceIssue(IssueKind.SELF, (assignment_id,), assignment_id))
        elif policy.assignment_id not in lookup:
            issues.append(
                ReferenceIssue(IssueKind.DANGLING, (assignment_id,), policy.assignment_id)
            )

    # Each assignment has at most one reference, so every walk ends at a
    # terminal, an already-explored node, or a cycle on its own path
    explored: set[str] = set()
    for start_id in lookup:
        if start_id in explored:
            continue
        path: list[str] = []
        position: dict[str, int] = {}
        current: str | None = start_id
        while current is not None and current not in explored:
            if current in position:
                issues.append(ReferenceIssue(IssueKind.CYCLE, tuple(path[position[current] :])))
                break
            position[current] = len(path)
            path.append(current)
            current = _followable_reference(lookup[current], lookup)
        explored.update(path)

    return issues
