"""Pydantic schemas for plan YAML validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .models import DurationMode, StartMode, WorkItemStatus


def _date_to_string(v: Any) -> str | None:
    # YAML loads bare 2025-01-06 as a date object
    if v is None:
        return None
    return str(v)


class AssignmentSchema(BaseModel):
    """Schema for one assignment entry."""

    role: str
    task: str = ""
    description: str = ""
    duration_days: float | None = None  # None = configured default
    effort_days: float | None = None  # None = configured default
    start_day: float | None = None  # None = day 0
    start_mode: StartMode | None = None  # None = inferred from start_after/start_date
    start_after: str | None = None
    start_date: str | None = None
    assigned_expert: str | None = None
    min_units: int | None = None
    max_units: int | None = None
    role_units: int | None = None
    can_split: bool | None = None
    parallel: bool | None = None
    duration_mode: DurationMode | None = None
    priority: int | None = None
    calendar: str | None = None
    branch: str | None = None
    wip_limit_tag: str | None = None
    constraints: list[str] = Field(default_factory=list)

    @field_validator("start_date", mode="before")
    @classmethod
    def coerce_date_to_string(cls, v: Any) -> str | None:
        """Convert YAML date objects to ISO strings."""
        return _date_to_string(v)

    @field_validator("start_after", "assigned_expert", mode="before")
    @classmethod
    def coerce_id_to_string(cls, v: Any) -> str | None:
        """Allow numeric IDs in YAML."""
        if v is None:
            return None
        return str(v)

    @field_validator("constraints", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure value is a list."""
        if v is None:
            return []
        if isinstance(v, list):
            return [str(item) for item in v]  # type: ignore[misc]
        return [str(v)]

    @model_validator(mode="after")
    def infer_start_mode(self) -> AssignmentSchema:
        """Infer the start mode from whichever of start_after/start_date is present."""
        if self.start_mode is not None:
            return self
        if self.start_after is not None and self.start_date is not None:
            raise ValueError(
                "Cannot specify both 'start_after' and 'start_date' without 'start_mode'"
            )
        if self.start_after is not None:
            self.start_mode = StartMode.AFTER_ASSIGNMENT
        elif self.start_date is not None:
            self.start_mode = StartMode.FIXED_DATE
        else:
            self.start_mode = StartMode.PROJECT_START
        return self


class WorkItemSchema(BaseModel):
    """Schema for one work item and its assignments."""

    title: str = ""
    description: str = ""
    assumptions: str = ""
    owner: str = ""
    timeframe: str = ""
    status: WorkItemStatus = WorkItemStatus.DISCOVERY
    assignments: dict[str, AssignmentSchema] = Field(default_factory=dict)

    @field_validator("timeframe", mode="before")
    @classmethod
    def coerce_timeframe_to_string(cls, v: Any) -> str:
        """YAML reads timeframes like 2025 as integers."""
        if v is None:
            return ""
        return str(v)

    @field_validator("assignments", mode="before")
    @classmethod
    def empty_assignments(cls, v: Any) -> Any:
        """Treat an empty 'assignments:' key as no assignments."""
        return {} if v is None else v


class PlanMetadataSchema(BaseModel):
    """Schema for the plan header."""

    name: str = ""
    start_date: str | None = None  # Anchor date, day 0

    @field_validator("start_date", mode="before")
    @classmethod
    def coerce_date_to_string(cls, v: Any) -> str | None:
        """Convert YAML date objects to ISO strings."""
        return _date_to_string(v)


class PlanSchema(BaseModel):
    """Schema for the entire plan YAML file."""

    plan: PlanMetadataSchema = Field(default_factory=PlanMetadataSchema)
    work_items: dict[str, WorkItemSchema] = Field(default_factory=dict)
