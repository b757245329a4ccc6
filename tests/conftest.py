"""Pytest configuration and fixtures for staffplan tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from staffplan import context
from staffplan.logger import reset_logger
from staffplan.models import (
    AfterAssignment,
    Assignment,
    FixedDate,
    Plan,
    ProjectStart,
    StartPolicy,
    WorkItem,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"
INITIATIVE_PLAN = FIXTURES_DIR / "initiative_plan.yaml"


@pytest.fixture(autouse=True)
def clean_global_state() -> None:
    """Reset the logger and CLI context before each test for isolation."""
    reset_logger()
    context.set_config_path(None)
    context.set_today(None)


def make_assignment(  # noqa: PLR0913 - test helper mirrors Assignment fields
    assignment_id: str,
    *,
    role: str = "Engineer",
    duration: float = 5,
    effort: float | None = None,
    start_day: float = 0,
    start: StartPolicy | None = None,
    task: str = "",
    expert: str | None = None,
) -> Assignment:
    """Create an assignment with effort defaulting to its duration."""
    return Assignment(
        id=assignment_id,
        role=role,
        task=task,
        duration_days=duration,
        effort_days=effort if effort is not None else duration,
        start_day=start_day,
        start=start or ProjectStart(),
        assigned_expert_id=expert,
    )


def after(assignment_id: str | None) -> AfterAssignment:
    """Shorthand for an after-assignment start policy."""
    return AfterAssignment(assignment_id)


def on(start_date: str | None) -> FixedDate:
    """Shorthand for a fixed-date start policy."""
    return FixedDate(start_date)


def make_plan(*assignments: Assignment, anchor_date: str | None = None) -> Plan:
    """Create a plan with all assignments in a single work item "w"."""
    return Plan(
        work_items=[WorkItem(id="w", title="Work", assignments=list(assignments))],
        anchor_date=anchor_date,
    )


@pytest.fixture
def initiative_plan() -> Plan:
    """The four-assignment example plan anchored on 2025-01-06.

    A starts at project start, B after A, C on a fixed date and D after itself.
    """
    return Plan(
        name="Checkout Redesign",
        anchor_date="2025-01-06",
        work_items=[
            WorkItem(
                id="research",
                title="Customer research",
                assignments=[
                    make_assignment(
                        "A", role="Analyst", task="Interviews", duration=5, expert="dana"
                    ),
                    make_assignment(
                        "B",
                        role="Designer",
                        task="Journey map",
                        duration=3,
                        effort=2,
                        start=after("A"),
                    ),
                ],
            ),
            WorkItem(
                id="pilot",
                title="Pilot rollout",
                assignments=[
                    make_assignment("C", task="Feature flag", duration=2, start=on("2025-01-20")),
                    make_assignment("D", task="Monitoring", duration=2, start=after("D")),
                ],
            ),
        ],
    )
