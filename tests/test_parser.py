"""Tests for plan parsing and loading."""

from pathlib import Path

import pytest

from staffplan import context
from staffplan.exceptions import ParseError, ValidationError
from staffplan.loader import load_config_for, load_plan
from staffplan.models import (
    AfterAssignment,
    DurationMode,
    FixedDate,
    ProjectStart,
    WorkItemStatus,
)
from staffplan.parser import PlanParser
from staffplan.unified_config import DefaultsConfig, GanttGrouping
from tests.conftest import INITIATIVE_PLAN


class TestPlanParser:
    """Test the PlanParser."""

    @pytest.fixture
    def parser(self) -> PlanParser:
        """Create a parser instance."""
        return PlanParser()

    def test_parse_example_file(self, parser: PlanParser) -> None:
        """Test parsing the example initiative plan."""
        plan = parser.parse_file(INITIATIVE_PLAN)

        assert plan.name == "Checkout Redesign"
        assert plan.anchor_date == "2025-01-06"
        assert [w.id for w in plan.work_items] == ["research", "pilot"]

        research = plan.work_items[0]
        assert research.title == "Customer research"
        assert research.timeframe == "2025 Q1"
        assert research.status is WorkItemStatus.DISCOVERY
        assert plan.work_items[1].status is WorkItemStatus.PILOT

    def test_start_policies(self, parser: PlanParser) -> None:
        """Start modes are inferred from start_after and start_date."""
        plan = parser.parse_file(INITIATIVE_PLAN)

        starts = {a.id: a.start for _, a in plan.iter_assignments()}
        assert starts == {
            "A": ProjectStart(),
            "B": AfterAssignment("A"),
            "C": FixedDate("2025-01-20"),
            "D": AfterAssignment("D"),
        }

    def test_assignment_fields(self, parser: PlanParser) -> None:
        """Test field mapping and effort defaults."""
        plan = parser.parse_file(INITIATIVE_PLAN)

        a = plan.get_assignment("A")
        c = plan.get_assignment("C")
        assert a is not None
        assert c is not None
        assert a.assigned_expert_id == "dana"
        assert a.task == "Interviews"
        # Default effort is capped at an explicit shorter duration
        assert (c.duration_days, c.effort_days) == (2, 2)

    def test_configured_defaults(self) -> None:
        """Missing durations and effort take the configured defaults."""
        parser = PlanParser(DefaultsConfig(duration_days=10, effort_days=4))

        plan = parser.parse_data({"work_items": {"w": {"assignments": {"A": {"role": "Analyst"}}}}})

        a = plan.get_assignment("A")
        assert a is not None
        assert (a.duration_days, a.effort_days) == (10, 4)

    def test_optional_fields(self, parser: PlanParser) -> None:
        """Test staffing attributes are carried through."""
        plan = parser.parse_data(
            {
                "work_items": {
                    "w": {
                        "assignments": {
                            "A": {
                                "role": "Engineer",
                                "min_units": 1,
                                "max_units": 2,
                                "can_split": False,
                                "duration_mode": "fixed-duration",
                                "calendar": "emea",
                                "branch": "Stretch",
                                "constraints": "MSO D3",
                                "start_after": 7,
                            }
                        }
                    }
                }
            }
        )

        a = plan.get_assignment("A")
        assert a is not None
        assert a.max_units == 2
        assert a.can_split is False
        assert a.duration_mode is DurationMode.FIXED_DURATION
        assert a.calendar_id == "emea"
        assert a.branch_label == "Stretch"
        assert a.constraints == ["MSO D3"]
        assert a.start == AfterAssignment("7")

    def test_explicit_mode_drops_other_payload(self, parser: PlanParser) -> None:
        """An explicit start_mode selects which payload is kept."""
        plan = parser.parse_data(
            {
                "work_items": {
                    "w": {
                        "assignments": {
                            "A": {
                                "role": "Engineer",
                                "start_mode": "fixed-date",
                                "start_after": "B",
                                "start_date": "2025-02-01",
                            }
                        }
                    }
                }
            }
        )

        a = plan.get_assignment("A")
        assert a is not None
        assert a.start == FixedDate("2025-02-01")

    def test_empty_assignments(self, parser: PlanParser) -> None:
        """An empty assignments key means no assignments."""
        plan = parser.parse_data({"work_items": {"w": {"title": "Empty", "assignments": None}}})

        assert plan.work_items[0].assignments == []
        assert plan.anchor_date is None

    def test_null_start_day_is_day_zero(self, parser: PlanParser, tmp_path: Path) -> None:
        """A start_day key left empty counts as day 0."""
        plan_file = tmp_path / "plan.yaml"
        plan_file.write_text(
            "work_items:\n"
            "  w:\n"
            "    assignments:\n"
            "      A:\n"
            "        role: Engineer\n"
            "        start_day:\n"
        )

        a = parser.parse_file(plan_file).get_assignment("A")

        assert a is not None
        assert a.start_day == 0

    def test_ambiguous_start_rejected(self, parser: PlanParser) -> None:
        """Both start_after and start_date without a mode is an error."""
        data = {
            "work_items": {
                "w": {
                    "assignments": {
                        "A": {"role": "Engineer", "start_after": "B", "start_date": "2025-02-01"}
                    }
                }
            }
        }

        with pytest.raises(ValidationError, match="start_after"):
            parser.parse_data(data)

    def test_missing_role_rejected(self, parser: PlanParser) -> None:
        """Every assignment needs a role."""
        with pytest.raises(ValidationError):
            parser.parse_data({"work_items": {"w": {"assignments": {"A": {"task": "x"}}}}})

    def test_invalid_yaml(self, parser: PlanParser, tmp_path: Path) -> None:
        """Test handling of invalid YAML syntax."""
        bad = tmp_path / "bad.yaml"
        bad.write_text("work_items: [unclosed\n")

        with pytest.raises(ParseError, match="Failed to parse YAML"):
            parser.parse_file(bad)

    def test_non_mapping_root(self, parser: PlanParser, tmp_path: Path) -> None:
        """The root of a plan file must be a mapping."""
        bad = tmp_path / "list.yaml"
        bad.write_text("- a\n- b\n")

        with pytest.raises(ParseError, match="dictionary"):
            parser.parse_file(bad)

    def test_missing_file(self, parser: PlanParser, tmp_path: Path) -> None:
        """Missing files raise ParseError."""
        with pytest.raises(ParseError, match="File not found"):
            parser.parse_file(tmp_path / "missing.yaml")


class TestLoadPlan:
    """Test loading with config discovery and normalization."""

    def test_normalizes(self, tmp_path: Path) -> None:
        """Loaded plans have integer, in-range numbers."""
        plan_file = tmp_path / "plan.yaml"
        plan_file.write_text(
            "work_items:\n"
            "  w:\n"
            "    assignments:\n"
            "      A:\n"
            "        role: Engineer\n"
            "        duration_days: 3\n"
            "        effort_days: 7\n"
            "        start_day: 2.5\n"
        )

        plan = load_plan(plan_file)

        a = plan.get_assignment("A")
        assert a is not None
        assert (a.duration_days, a.effort_days, a.start_day) == (7, 7, 3)

    def test_config_next_to_plan(self, tmp_path: Path) -> None:
        """A staffplan_config.yaml beside the plan supplies defaults."""
        (tmp_path / "staffplan_config.yaml").write_text("defaults:\n  duration_days: 10\n")
        plan_file = tmp_path / "plan.yaml"
        plan_file.write_text("work_items:\n  w:\n    assignments:\n      A:\n        role: QA\n")

        plan = load_plan(plan_file)

        a = plan.get_assignment("A")
        assert a is not None
        assert a.duration_days == 10
        assert a.effort_days == 5

    def test_context_config_path(self, tmp_path: Path) -> None:
        """The CLI config path is used when no explicit path is given."""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("gantt:\n  group_by: role\n")
        context.set_config_path(config_file)

        config = load_config_for(tmp_path / "plan.yaml")

        assert config.gantt.group_by is GanttGrouping.ROLE

    def test_reference_issues_are_not_errors(self) -> None:
        """Plans with self references still load."""
        plan = load_plan(INITIATIVE_PLAN)

        d = plan.get_assignment("D")
        assert d is not None
        assert d.start == AfterAssignment("D")
