"""Tests for Mermaid Gantt rendering."""

from datetime import date

from staffplan.gantt import MermaidGanttRenderer, render_mermaid
from staffplan.models import Plan, WorkItem
from staffplan.scheduler import resolve_plan
from staffplan.unified_config import GanttConfig, GanttGrouping, UnifiedConfig
from tests.conftest import after, make_assignment, make_plan


def _config(group_by: GanttGrouping, title: str = "Initiative Schedule") -> UnifiedConfig:
    return UnifiedConfig(gantt=GanttConfig(title=title, group_by=group_by))


class TestMermaidGantt:
    """Test Mermaid output for resolved plans."""

    def test_header(self, initiative_plan: Plan) -> None:
        """The chart opens with the gantt header and uses the plan name as title."""
        lines = render_mermaid(initiative_plan, resolve_plan(initiative_plan)).splitlines()

        assert lines[:4] == [
            "gantt",
            "    title Checkout Redesign",
            "    dateFormat YYYY-MM-DD",
            "",
        ]

    def test_task_lines(self, initiative_plan: Plan) -> None:
        """Assigned tasks show the expert; unassigned ones are tagged active."""
        output = render_mermaid(initiative_plan, resolve_plan(initiative_plan))

        assert "    Interviews (Analyst) - dana :research-A, 2025-01-06, 5d" in output
        assert "    Journey map (Designer) :active, research-B, 2025-01-11, 3d" in output
        assert "    Feature flag (Engineer) :active, pilot-C, 2025-01-20, 2d" in output

    def test_grouped_by_work_item(self, initiative_plan: Plan) -> None:
        """Work item grouping is the default."""
        output = render_mermaid(initiative_plan, resolve_plan(initiative_plan))

        assert "    section Customer research" in output
        assert "    section Pilot rollout" in output
        assert output.index("section Customer research") < output.index("research-B")
        assert output.index("research-B") < output.index("section Pilot rollout")

    def test_grouped_by_role(self, initiative_plan: Plan) -> None:
        """Role grouping puts every role in its own section."""
        output = render_mermaid(
            initiative_plan, resolve_plan(initiative_plan), _config(GanttGrouping.ROLE)
        )

        assert "    section Analyst" in output
        assert "    section Engineer" in output
        assert "section Customer research" not in output

    def test_ungrouped(self, initiative_plan: Plan) -> None:
        """No sections without grouping."""
        output = render_mermaid(
            initiative_plan, resolve_plan(initiative_plan), _config(GanttGrouping.NONE)
        )

        assert "section" not in output
        assert "research-A" in output

    def test_title_precedence(self, initiative_plan: Plan) -> None:
        """An explicit title wins, then the plan name, then the configured title."""
        schedule = resolve_plan(initiative_plan)
        unnamed = make_plan(make_assignment("A"))

        assert "title Launch" in render_mermaid(initiative_plan, schedule, title="Launch")
        assert "title Checkout Redesign" in render_mermaid(initiative_plan, schedule)
        assert "title Roadmap" in render_mermaid(
            unnamed, resolve_plan(unnamed), _config(GanttGrouping.WORK, title="Roadmap")
        )

    def test_unanchored_plan_uses_fallback_anchor(self) -> None:
        """Relative days are drawn from the fallback anchor."""
        plan = make_plan(
            make_assignment("A", duration=5), make_assignment("B", duration=2, start=after("A"))
        )

        output = render_mermaid(plan, resolve_plan(plan), fallback_anchor=date(2025, 2, 3))

        assert ":active, w-A, 2025-02-03, 5d" in output
        assert ":active, w-B, 2025-02-08, 2d" in output

    def test_labels_sanitized(self) -> None:
        """Mermaid separators are removed from labels and IDs."""
        plan = make_plan(make_assignment("a.1", task="Review: phase #2"))

        output = render_mermaid(plan, resolve_plan(plan), fallback_anchor=date(2025, 1, 6))

        assert "Review  phase  2 (Engineer) :active, w-a_1, 2025-01-06, 5d" in output

    def test_untitled_work_items_keep_own_sections(self) -> None:
        """Work items sharing a display title still get one section each."""
        plan = Plan(
            work_items=[
                WorkItem(id="w1", assignments=[make_assignment("A")]),
                WorkItem(id="w2", assignments=[make_assignment("B")]),
            ]
        )

        output = render_mermaid(plan, resolve_plan(plan), fallback_anchor=date(2025, 1, 6))

        assert output.count("    section Task") == 2
        assert output.index("w1-A") < output.index("section Task", output.index("w1-A"))

    def test_mermaid_ids_unique_after_sanitizing(self) -> None:
        """IDs that only differ in unsafe characters do not collide."""
        plan = make_plan(make_assignment("a.1"), make_assignment("a_1"))

        output = render_mermaid(plan, resolve_plan(plan), fallback_anchor=date(2025, 1, 6))

        assert ":active, w-a_1, 2025-01-06, 5d" in output
        assert ":active, w-a_1_2, 2025-01-06, 5d" in output

    def test_build_tasks_uses_config_defaults(self, initiative_plan: Plan) -> None:
        """Task defaults come from the defaults section of the config."""
        config = UnifiedConfig.model_validate({"defaults": {"hours_per_day": 6}})
        renderer = MermaidGanttRenderer(
            initiative_plan, resolve_plan(initiative_plan), config=config
        )

        assert renderer.build_tasks()[1].effort_hours == 12
