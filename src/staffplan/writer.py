"""Write resolved schedule annotations back into a plan YAML file."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ruamel.yaml import YAML

from .exceptions import ParseError
from .logger import get_logger
from .scheduler import Schedule

logger = get_logger()

# Keys owned by the annotator; anything else in the file is left untouched
START_DAY_KEY = "estimated_start_day"
START_KEY = "estimated_start"
END_KEY = "estimated_end"


def _set_if_changed(mapping: Any, key: str, value: Any) -> bool:
    # Only touch keys whose value differs, to preserve formatting
    if key in mapping and mapping[key] == value:
        return False
    mapping[key] = value
    return True


def write_schedule_annotations(file_path: Path, schedule: Schedule) -> int:
    """Annotate each assignment in a plan file with its resolved timing.

    Adds ``estimated_start_day`` always and ``estimated_start`` /
    ``estimated_end`` (plain YAML dates, end inclusive) when the schedule is anchored.
    Comments, ordering and quoting of the rest of the file are preserved.

    Args:
        file_path: Plan file to update in place
        schedule: Schedule resolved from that file

    Returns:
        Number of assignments whose annotations changed
    """
    yaml_rt = YAML()
    yaml_rt.preserve_quotes = True  # type: ignore[assignment]

    with file_path.open(encoding="utf-8") as f:
        data: Any = yaml_rt.load(f)  # type: ignore[no-untyped-call]

    if not isinstance(data, dict) or "work_items" not in data:
        raise ParseError(f"No 'work_items' section found in {file_path}")

    changed = 0
    for work_data in (data["work_items"] or {}).values():
        if not work_data or not work_data.get("assignments"):
            continue
        for assignment_id, assignment_data in work_data["assignments"].items():
            entry = schedule.get(str(assignment_id))
            if entry is None or assignment_data is None:
                continue

            touched = _set_if_changed(assignment_data, START_DAY_KEY, entry.start_day)
            if entry.start_date is not None and entry.end_date is not None:
                touched |= _set_if_changed(assignment_data, START_KEY, entry.start_date)
                touched |= _set_if_changed(assignment_data, END_KEY, entry.end_date)
            else:
                for key in (START_KEY, END_KEY):
                    if key in assignment_data:
                        del assignment_data[key]
                        touched = True

            if touched:
                changed += 1
                logger.changes(f"Annotated {assignment_id}: D{entry.start_day + 1}")

    with file_path.open("w", encoding="utf-8") as f:
        yaml_rt.dump(data, f)  # type: ignore[no-untyped-call]

    return changed
