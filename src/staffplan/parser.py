"""YAML parser for staffplan plan files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import Assignment, Plan, WorkItem, make_start_policy
from .normalize import normalize_start_day
from .schemas import AssignmentSchema, PlanSchema
from .unified_config import DefaultsConfig


class PlanParser:
    """Parser for plan YAML files.

    Only handles YAML parsing and model creation. For loading with config
    discovery and normalization, use load_plan() from staffplan.loader.
    """

    def __init__(self, defaults: DefaultsConfig | None = None):
        self.defaults = defaults or DefaultsConfig()

    def parse_file(self, file_path: Path | str) -> Plan:
        """Parse a YAML file into a Plan."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> Plan:
        """Convert already-loaded YAML data into a Plan."""
        try:
            schema = PlanSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid plan structure: {e}") from e

        work_items: list[WorkItem] = []
        for work_id, work_data in schema.work_items.items():
            assignments = [
                self._build_assignment(assignment_id, assignment_data)
                for assignment_id, assignment_data in work_data.assignments.items()
            ]
            work_items.append(
                WorkItem(
                    id=work_id,
                    title=work_data.title,
                    description=work_data.description,
                    assumptions=work_data.assumptions.strip(),
                    owner=work_data.owner,
                    timeframe=work_data.timeframe,
                    status=work_data.status,
                    assignments=assignments,
                )
            )

        return Plan(
            name=schema.plan.name,
            anchor_date=schema.plan.start_date,
            work_items=work_items,
        )

    def _build_assignment(self, assignment_id: str, data: AssignmentSchema) -> Assignment:
        duration = (
            data.duration_days if data.duration_days is not None else self.defaults.duration_days
        )
        if data.effort_days is not None:
            effort = data.effort_days
        elif data.duration_days is not None:
            # A short explicit duration caps the default effort
            effort = min(self.defaults.effort_days, data.duration_days)
        else:
            effort = self.defaults.effort_days

        return Assignment(
            id=assignment_id,
            role=data.role,
            task=data.task,
            description=data.description,
            duration_days=duration,
            effort_days=effort,
            start_day=normalize_start_day(data.start_day),
            start=make_start_policy(data.start_mode, data.start_after, data.start_date),
            assigned_expert_id=data.assigned_expert,
            min_units=data.min_units,
            max_units=data.max_units,
            role_units=data.role_units,
            can_split=data.can_split,
            parallel=data.parallel,
            duration_mode=data.duration_mode,
            priority=data.priority,
            calendar_id=data.calendar,
            branch_label=data.branch,
            wip_limit_tag=data.wip_limit_tag,
            constraints=data.constraints,
        )
