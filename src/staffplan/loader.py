"""Plan loading with config discovery and normalization."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from . import context
from .logger import get_logger
from .models import Plan
from .normalize import normalize_assignment
from .parser import PlanParser
from .scheduler import build_assignment_lookup, find_reference_issues
from .unified_config import UnifiedConfig, discover_config, load_unified_config

logger = get_logger()


def load_config_for(plan_path: Path | str | None, config_path: Path | None = None) -> UnifiedConfig:
    """Load the config that applies to a plan file.

    Search order: explicit ``config_path``, the CLI ``--config`` option, the
    plan's directory, the current directory. Falls back to built-in defaults.
    """
    path = discover_config(
        Path(plan_path) if plan_path is not None else None,
        config_path or context.get_config_path(),
    )
    if path is None:
        return UnifiedConfig()
    logger.checks(f"Using config {path}")
    return load_unified_config(path)


def normalize_plan(plan: Plan) -> Plan:
    """Return a copy of the plan with every assignment's numbers in range."""
    return replace(
        plan,
        work_items=[
            replace(work_item, assignments=[normalize_assignment(a) for a in work_item.assignments])
            for work_item in plan.work_items
        ],
    )


def load_plan(
    path: Path | str,
    config_path: Path | None = None,
    *,
    config: UnifiedConfig | None = None,
) -> Plan:
    """Load and normalize a plan file.

    This is the main entry point for loading plans. It handles:
    1. Config discovery (unless ``config`` is given)
    2. YAML parsing with configured defaults
    3. Normalization of durations, effort and start days

    Unusable start references are reported at checks verbosity but are not
    errors: the resolver falls back for them.

    Args:
        path: Path to the plan YAML file
        config_path: Optional explicit path to config file
        config: Optional explicit unified config (overrides discovery)

    Returns:
        The normalized Plan
    """
    if config is None:
        config = load_config_for(path, config_path)

    plan = PlanParser(config.defaults).parse_file(path)
    plan = normalize_plan(plan)

    for issue in find_reference_issues(build_assignment_lookup(plan.work_items)):
        logger.checks(f"Warning: {issue.message}")

    return plan
