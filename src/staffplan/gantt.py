"""Mermaid Gantt rendering of a resolved plan."""

from __future__ import annotations

import re
from datetime import date

from .dates import add_days
from .models import Plan
from .scheduler import Schedule
from .timeline import GanttTask, build_gantt_tasks
from .unified_config import GanttConfig, GanttGrouping, UnifiedConfig

_MERMAID_ID_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")
_LABEL_UNSAFE = re.compile(r"[:#;]")


def _mermaid_ids(tasks: list[GanttTask]) -> dict[str, str]:
    """Map task IDs to Mermaid-safe IDs that stay unique after sanitizing."""
    mapping: dict[str, str] = {}
    used: set[str] = set()
    for task in tasks:
        base = candidate = _MERMAID_ID_UNSAFE.sub("_", task.id)
        suffix = 1
        while candidate in used:
            suffix += 1
            candidate = f"{base}_{suffix}"
        used.add(candidate)
        mapping[task.id] = candidate
    return mapping


class MermaidGanttRenderer:
    """Render a plan's timeline tasks as a Mermaid Gantt chart.

    Bars use the resolved start dates. Plans without an anchor date are drawn
    from ``fallback_anchor`` so that relative days still land on a calendar.
    """

    def __init__(
        self,
        plan: Plan,
        schedule: Schedule,
        *,
        config: UnifiedConfig | None = None,
        fallback_anchor: date | None = None,
    ):
        """Initialize the renderer.

        Args:
            plan: The plan whose assignments are drawn
            schedule: Resolved schedule for the plan
            config: Unified config; supplies Gantt options and task defaults
            fallback_anchor: Day 0 used when the schedule carries no dates.
                If None, defaults to today
        """
        self.plan = plan
        self.schedule = schedule
        self.config = config or UnifiedConfig()
        self.fallback_anchor = fallback_anchor or date.today()  # noqa: DTZ011

    @property
    def gantt_config(self) -> GanttConfig:
        return self.config.gantt

    def build_tasks(self) -> list[GanttTask]:
        defaults = self.config.defaults
        return build_gantt_tasks(
            self.plan,
            self.schedule,
            hours_per_day=defaults.hours_per_day,
            scenario_branch=defaults.scenario_branch,
            calendar_id=defaults.calendar_id,
        )

    def generate(self, title: str | None = None) -> str:
        """Generate Mermaid Gantt text.

        Args:
            title: Chart title; defaults to the plan name, then the configured title
        """
        chart_title = title or self.plan.name.strip() or self.gantt_config.title
        lines = [
            "gantt",
            f"    title {self._label(chart_title)}",
            "    dateFormat YYYY-MM-DD",
            "",
        ]

        tasks = self.build_tasks()
        mermaid_ids = _mermaid_ids(tasks)
        for section, section_tasks in self._organize(tasks):
            if section is not None:
                lines.append(f"    section {self._label(section)}")
            for task in section_tasks:
                lines.append(self._task_line(task, mermaid_ids[task.id]))

        return "\n".join(lines)

    def _organize(self, tasks: list[GanttTask]) -> list[tuple[str | None, list[GanttTask]]]:
        """Split tasks into (section label, tasks) pairs in first-seen order."""
        grouping = self.gantt_config.group_by
        if grouping is GanttGrouping.NONE:
            return [(None, tasks)]

        # Work sections are keyed by ID so untitled work items stay apart
        groups: dict[str, tuple[str, list[GanttTask]]] = {}
        for task in tasks:
            if grouping is GanttGrouping.WORK:
                key, label = task.work_id, task.work_name
            else:
                key, label = task.role, task.role
            groups.setdefault(key, (label, []))[1].append(task)
        return [(label, group) for label, group in groups.values()]

    def _task_start(self, task: GanttTask) -> date:
        if task.start_date is not None:
            return task.start_date
        return add_days(self.fallback_anchor, task.start_day)

    def _task_line(self, task: GanttTask, mermaid_id: str) -> str:
        label = f"{task.name} ({task.role})"
        if task.assigned_expert:
            label += f" - {task.assigned_expert}"

        tags = ["active"] if task.is_blocked else []
        tags_str = ", ".join(tags) + ", " if tags else ""
        start_str = self._task_start(task).strftime("%Y-%m-%d")
        return (
            f"    {self._label(label)} :{tags_str}{mermaid_id}, "
            f"{start_str}, {task.duration_days}d"
        )

    @staticmethod
    def _label(text: str) -> str:
        # ':' separates label from task data in Mermaid
        return _LABEL_UNSAFE.sub(" ", text).strip()


def render_mermaid(
    plan: Plan,
    schedule: Schedule,
    config: UnifiedConfig | None = None,
    *,
    fallback_anchor: date | None = None,
    title: str | None = None,
) -> str:
    """Render a plan's schedule as Mermaid Gantt text."""
    renderer = MermaidGanttRenderer(
        plan, schedule, config=config, fallback_anchor=fallback_anchor
    )
    return renderer.generate(title)
