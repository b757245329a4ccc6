"""Schedule resolution: start day, duration and start date for every assignment.

Assignments reference each other through after-assignment start policies,
forming an arbitrary directed graph authored interactively. It may contain
dangling references, self references and cycles at any moment, so resolution
is total: every unusable reference degrades to a fallback start day instead
of raising, and every walk terminates.

Each assignment has at most one outgoing reference, so resolving one
assignment is a walk along a single chain. The walk keeps the chain it is
currently on as an explicit stack (no recursion, so chain length is not
bounded by the interpreter's recursion limit). Reaching an assignment that is
already on the chain closes a cycle; all of its members take the fallback.
Resolved start days are memoized for the duration of one call only.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import TYPE_CHECKING

from staffplan.dates import add_days, days_between, parse_calendar_date
from staffplan.logger import checks_enabled, debug_enabled, get_logger
from staffplan.models import AfterAssignment, Assignment, FixedDate, ProjectStart
from staffplan.normalize import normalize_duration, normalize_start_day

from .config import ReferenceFallback, SchedulerConfig
from .core import Schedule, ScheduleEntry
from .lookup import build_assignment_lookup

if TYPE_CHECKING:
    from staffplan.models import Plan, WorkItem

logger = get_logger()


def _own_start(assignment: Assignment, anchor: date | None) -> int:
    """Start day of an assignment whose policy needs no other assignment."""
    policy = assignment.start
    if isinstance(policy, ProjectStart):
        return 0
    if isinstance(policy, FixedDate):
        target = parse_calendar_date(policy.start_date)
        if anchor is not None and target is not None:
            return max(0, days_between(anchor, target))
        if not (policy.start_date or "").strip():
            reason = "no date set"
        elif target is None:
            reason = "unparsable date"
        else:
            reason = "no anchor date"
        logger.checks(
            f"{assignment.id}: fixed date {policy.start_date!r} unusable ({reason}), "
            "keeping raw start day"
        )
    return normalize_start_day(assignment.start_day)


def _fallback_start(assignment: Assignment, config: SchedulerConfig) -> int:
    if config.broken_reference_fallback is ReferenceFallback.RAW_START_DAY:
        return normalize_start_day(assignment.start_day)
    return 0


def _resolve_start(
    assignment_id: str,
    lookup: dict[str, Assignment],
    anchor: date | None,
    memo: dict[str, int],
    config: SchedulerConfig,
) -> int:
    """Resolve one assignment's start day, filling ``memo`` along the way."""
    # Assignments waiting on their reference, outermost first, with that reference
    chain: list[tuple[str, str]] = []
    on_chain: dict[str, int] = {}
    current = assignment_id

    while current not in memo:
        assignment = lookup.get(current)
        if assignment is None:
            memo[current] = 0
            break

        policy = assignment.start
        if not isinstance(policy, AfterAssignment):
            memo[current] = _own_start(assignment, anchor)
            break

        ref_id = policy.assignment_id
        if not ref_id or ref_id not in lookup:
            logger.checks(
                f"{current}: start reference {ref_id!r} "
                f"{'is empty' if not ref_id else 'does not exist'}, using fallback"
            )
            memo[current] = _fallback_start(assignment, config)
            break

        if ref_id == current or ref_id in on_chain:
            members = [current]
            if ref_id != current:
                members = [waiting for waiting, _ in chain[on_chain[ref_id] :]] + members
            if checks_enabled():
                logger.checks(
                    f"Circular start reference {' -> '.join([*members, members[0]])}, "
                    "using fallback for all members"
                )
            for member in members:
                memo[member] = _fallback_start(lookup[member], config)
            break

        on_chain[current] = len(chain)
        chain.append((current, ref_id))
        current = ref_id

    for waiting, ref_id in reversed(chain):
        if waiting in memo:
            continue  # Cycle member, already given the fallback
        memo[waiting] = memo[ref_id] + normalize_duration(lookup[ref_id].duration_days)

    return memo[assignment_id]


def resolve_schedule(
    work_items: Iterable[WorkItem],
    anchor_date: str | date | None = None,
    *,
    config: SchedulerConfig | None = None,
) -> Schedule:
    """Compute the schedule of every assignment in the given work items.

    Pure and total: the work items are never mutated, nothing is cached
    between calls, and no input makes it raise or loop.

    Args:
        work_items: The plan's work items, in order
        anchor_date: Calendar date of day 0. Missing, blank or unparsable
            anchors leave every ``start_date`` as None and disable fixed dates
        config: Resolver configuration (fallback policy)

    Returns:
        Mapping from assignment ID to its resolved entry, in plan order
    """
    config = config or SchedulerConfig()
    lookup = build_assignment_lookup(work_items)
    anchor = parse_calendar_date(anchor_date)
    memo: dict[str, int] = {}

    schedule: Schedule = {}
    for assignment_id, assignment in lookup.items():
        start_day = _resolve_start(assignment_id, lookup, anchor, memo, config)
        schedule[assignment_id] = ScheduleEntry(
            start_day=start_day,
            duration_days=normalize_duration(assignment.duration_days),
            start_date=add_days(anchor, start_day) if anchor is not None else None,
        )
        if debug_enabled():
            logger.debug(f"{assignment_id}: D{start_day + 1}, {schedule[assignment_id].duration_days}d")

    return schedule


def resolve_plan(plan: Plan, *, config: SchedulerConfig | None = None) -> Schedule:
    """Resolve a plan's schedule against its own anchor date."""
    return resolve_schedule(plan.work_items, plan.anchor_date, config=config)
