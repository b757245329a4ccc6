"""Command-line interface for staffplan."""

from __future__ import annotations

import csv
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Annotated

import typer

from . import context
from .exceptions import StaffplanError
from .gantt import render_mermaid
from .loader import load_config_for, load_plan
from .logger import setup_logger
from .models import Plan
from .scheduler import Schedule, build_assignment_lookup, find_reference_issues, resolve_plan
from .timeline import build_role_plans, summarize_work_items
from .unified_config import GanttGrouping, UnifiedConfig
from .writer import write_schedule_annotations

app = typer.Typer(
    name="staffplan",
    help="Initiative staffing planner - resolve assignment schedules from work breakdowns",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: staffplan_config.yaml)",
        ),
    ] = None,
    today: Annotated[
        str | None,
        typer.Option("--today", help="Date treated as today (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Global options for staffplan commands."""
    setup_logger(verbose)
    context.set_config_path(config)
    context.set_today(_parse_date_option(today))


def _parse_date_option(date_str: str | None) -> date | None:
    """Parse a YYYY-MM-DD CLI option, exiting with an error if invalid."""
    if date_str is None:
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        typer.echo(
            f"Error: Invalid date format '{date_str}'. Use YYYY-MM-DD format.",
            err=True,
        )
        raise typer.Exit(1) from None


def _load(file: Path, anchor_date: str | None) -> tuple[Plan, UnifiedConfig, Schedule]:
    """Load a plan and its config, apply an anchor override and resolve."""
    parsed_anchor = _parse_date_option(anchor_date)
    try:
        config = load_config_for(file)
        plan = load_plan(file, config=config)
    except (StaffplanError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    if parsed_anchor is not None:
        plan = replace(plan, anchor_date=parsed_anchor.isoformat())
    return plan, config, resolve_plan(plan, config=config.scheduler)


def _display_schedule(plan: Plan, schedule: Schedule) -> None:
    """Display the resolved schedule grouped by work item."""
    typer.echo(f"Schedule: {plan.name or 'untitled plan'}")
    typer.echo(f"Anchor date: {plan.anchor_date or 'none'}")
    typer.echo("=" * 80)

    spans = {span.work_item_id: span for span in summarize_work_items(plan, schedule)}
    for work_item in plan.work_items:
        span = spans[work_item.id]
        typer.echo("")
        typer.echo(f"{span.title} ({span.period_label})")
        for assignment in work_item.assignments:
            entry = schedule[assignment.id]
            dates = ""
            if entry.start_date is not None:
                dates = f"  {entry.start_date} .. {entry.end_date}"
            typer.echo(
                f"  {assignment.id}  {assignment.role}"
                f"{' / ' + assignment.task if assignment.task else ''}"
                f"  D{entry.start_day + 1} +{entry.duration_days}d"
                f"{dates}  [{assignment.start_mode.value}]"
            )

    typer.echo("")
    typer.echo(f"Total effort: {plan.total_effort_days()} person-days")


def _export_schedule_csv(plan: Plan, schedule: Schedule, output_path: Path) -> None:
    """Export the resolved schedule to CSV."""
    with output_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(
            [
                "assignment_id",
                "work_item_id",
                "role",
                "task",
                "start_mode",
                "start_day",
                "duration_days",
                "effort_days",
                "start_date",
                "end_date",
            ]
        )
        for work_item, assignment in plan.iter_assignments():
            entry = schedule[assignment.id]
            writer.writerow(
                [
                    assignment.id,
                    work_item.id,
                    assignment.role,
                    assignment.task,
                    assignment.start_mode.value,
                    entry.start_day,
                    entry.duration_days,
                    assignment.effort_days,
                    entry.start_date.isoformat() if entry.start_date else "",
                    entry.end_date.isoformat() if entry.end_date else "",
                ]
            )


@app.command()
def schedule(
    file: Annotated[Path, typer.Argument(help="Path to the plan YAML file")] = Path("plan.yaml"),
    anchor_date: Annotated[
        str | None,
        typer.Option("--anchor-date", "-a", help="Override the plan start date (YYYY-MM-DD)"),
    ] = None,
    annotate_yaml: Annotated[
        bool,
        typer.Option(
            "--annotate-yaml",
            help="Write estimated_start_day/estimated_start/estimated_end back to the plan file",
        ),
    ] = False,
    output_csv: Annotated[
        Path | None,
        typer.Option("--output-csv", help="Export the schedule to a CSV file"),
    ] = None,
) -> None:
    """Resolve the plan's schedule and display or persist it."""
    plan, _, resolved = _load(file, anchor_date)

    if output_csv:
        _export_schedule_csv(plan, resolved, output_csv)
        typer.echo(f"Schedule exported to {output_csv}")
    if annotate_yaml:
        try:
            changed = write_schedule_annotations(file, resolved)
        except StaffplanError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1) from e
        typer.echo(f"Annotations written to {file} ({changed} assignments updated)")
    if not output_csv and not annotate_yaml:
        _display_schedule(plan, resolved)


@app.command()
def gantt(
    file: Annotated[Path, typer.Argument(help="Path to the plan YAML file")] = Path("plan.yaml"),
    *,
    anchor_date: Annotated[
        str | None,
        typer.Option("--anchor-date", "-a", help="Override the plan start date (YYYY-MM-DD)"),
    ] = None,
    title: Annotated[str | None, typer.Option("--title", help="Chart title")] = None,
    group_by: Annotated[
        GanttGrouping | None,
        typer.Option("--group-by", help="Section tasks by work item, role, or not at all"),
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Generate a Gantt chart in Mermaid format."""
    plan, config, resolved = _load(file, anchor_date)
    if group_by is not None:
        config = config.model_copy(
            update={"gantt": config.gantt.model_copy(update={"group_by": group_by})}
        )

    mermaid_output = render_mermaid(
        plan, resolved, config, fallback_anchor=context.get_today(), title=title
    )

    if output:
        # Wrap in markdown code fence if output is a .md file
        if output.suffix.lower() == ".md":
            content = f"```mermaid\n{mermaid_output}\n```\n"
        else:
            content = mermaid_output
        output.write_text(content, encoding="utf-8")
        typer.echo(f"Gantt chart written to {output}")
    else:
        typer.echo(mermaid_output)


@app.command()
def roles(
    file: Annotated[Path, typer.Argument(help="Path to the plan YAML file")] = Path("plan.yaml"),
) -> None:
    """Show what each role is asked to staff across the plan."""
    plan, _, resolved = _load(file, None)

    for role_plan in build_role_plans(plan, resolved):
        typer.echo(
            f"{role_plan.role}: {role_plan.required} assignment(s), "
            f"{role_plan.total_effort_days} person-days"
        )
        if role_plan.skills:
            typer.echo(f"  Skills: {', '.join(role_plan.skills)}")
        for draft in role_plan.work_items:
            typer.echo(
                f"  - {draft.title} [{draft.assignment_id}] "
                f"D{draft.start_day + 1} +{draft.duration_days}d"
            )


@app.command()
def check(
    file: Annotated[Path, typer.Argument(help="Path to the plan YAML file")] = Path("plan.yaml"),
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit with status 1 when any reference issue is found"),
    ] = False,
) -> None:
    """Report dangling, self and circular start references."""
    plan, _, _ = _load(file, None)
    issues = find_reference_issues(build_assignment_lookup(plan.work_items))

    if not issues:
        typer.echo("No reference issues found")
        return

    typer.echo(f"{len(issues)} reference issue(s):")
    for issue in issues:
        typer.echo(f"  - [{issue.kind.value}] {issue.message}")
    typer.echo("Affected assignments start from the fallback day.")
    if strict:
        raise typer.Exit(1)


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
