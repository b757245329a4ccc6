"""Unified configuration loader (staffplan_config.yaml).

One YAML file configures the resolver, the defaults applied to plan files and
the Gantt renderer. Every section is optional.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import DEFAULT_DURATION_DAYS, DEFAULT_EFFORT_DAYS
from .scheduler import SchedulerConfig

CONFIG_FILENAME = "staffplan_config.yaml"


class DefaultsConfig(BaseModel):
    """Values used for assignment fields a plan file leaves out."""

    duration_days: int = Field(default=DEFAULT_DURATION_DAYS, ge=1)
    effort_days: int = Field(default=DEFAULT_EFFORT_DAYS, ge=1)
    hours_per_day: int = Field(default=8, ge=1)  # Converts effort days to hours
    scenario_branch: str = "Draft"
    calendar_id: str = "project-calendar"


class GanttGrouping(str, Enum):
    """How Gantt tasks are split into sections."""

    NONE = "none"
    WORK = "work"
    ROLE = "role"


class GanttConfig(BaseModel):
    """Configuration for Mermaid Gantt generation."""

    title: str = "Initiative Schedule"
    group_by: GanttGrouping = GanttGrouping.WORK


class UnifiedConfig(BaseModel):
    """All staffplan configuration sections."""

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    gantt: GanttConfig = Field(default_factory=GanttConfig)


def load_unified_config(config_path: Path | str) -> UnifiedConfig:
    """Load unified configuration from a YAML file.

    Args:
        config_path: Path to staffplan_config.yaml

    Returns:
        UnifiedConfig with defaults for any section the file omits

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ParseError: If the file is not valid YAML or not a mapping
        ValidationError: If a section has invalid values
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Failed to parse config {config_path}: {e}") from e

    if data is None:
        return UnifiedConfig()
    if not isinstance(data, dict):
        raise ParseError(f"Config {config_path} must contain a mapping at the root level")

    try:
        return UnifiedConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid config {config_path}: {e}") from e


def discover_config(plan_path: Path | None = None, config_path: Path | None = None) -> Path | None:
    """Find the config file to use.

    Search order:
    1. Explicit config_path argument
    2. Plan file directory / staffplan_config.yaml
    3. Current directory / staffplan_config.yaml
    """
    if config_path is not None and config_path.exists():
        return config_path

    if plan_path is not None:
        candidate = Path(plan_path).parent / CONFIG_FILENAME
        if candidate.exists():
            return candidate

    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return cwd_config

    return None
