"""Schedule rendering: JSON payloads and plain-text tables."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from .timeparse import format_datetime

if TYPE_CHECKING:
    from .exceptions import CycleError
    from .models import Schedule, Task

CYCLE_ERROR_MESSAGE = "circular dependency"


def _format_optional(value: Any) -> str | None:
    return format_datetime(value) if value is not None else None


def _format_hours(hours: float) -> str:
    return str(int(hours)) if hours == int(hours) else f"{hours:g}"


def schedule_to_dict(schedule: Schedule) -> dict[str, Any]:
    """Convert a schedule into a JSON-serializable payload."""
    return {
        "schedule": [
            {
                "taskId": entry.task_id,
                "description": entry.description,
                "startTime": format_datetime(entry.start_time),
                "endTime": format_datetime(entry.end_time),
                "dependencies": list(entry.dependencies),
                "duration": entry.duration,
                "isFixedStart": entry.is_fixed_start,
            }
            for entry in schedule.tasks
        ],
        "anchorDate": format_datetime(schedule.anchor_date),
        "earliestStart": _format_optional(schedule.earliest_start),
        "latestEnd": _format_optional(schedule.latest_end),
        "totalDurationHours": schedule.total_duration_hours,
    }


def cycle_error_payload(error: CycleError) -> dict[str, Any]:
    """Error payload reported for a dependency loop."""
    return {"error": CYCLE_ERROR_MESSAGE, "path": list(error.path)}


def to_json(payload: dict[str, Any], indent: int = 2) -> str:
    """Serialize a payload; indent 0 gives compact single-line output."""
    return json.dumps(payload, indent=indent or None)


def _table(headers: list[str], rows: list[list[str]]) -> list[str]:
    widths = [len(header) for header in headers]
    for row in rows:
        widths = [max(width, len(cell)) for width, cell in zip(widths, row)]

    def line(cells: list[str]) -> str:
        return "  ".join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

    lines = [line(headers), line(["-" * width for width in widths])]
    lines.extend(line(row) for row in rows)
    return lines


def format_schedule_table(schedule: Schedule) -> str:
    """Render a schedule as a plain-text table with a summary footer."""
    rows = [
        [
            entry.task_id,
            entry.description,
            format_datetime(entry.start_time),
            format_datetime(entry.end_time),
            _format_hours(entry.duration),
            ", ".join(entry.dependencies) or "-",
        ]
        for entry in schedule.tasks
    ]
    lines = _table(["Task", "Description", "Start", "End", "Hours", "Depends on"], rows)

    fixed = [entry.task_id for entry in schedule.tasks if entry.is_fixed_start]
    lines.append("")
    lines.append(f"Anchor:         {format_datetime(schedule.anchor_date)}")
    lines.append(f"Earliest start: {_format_optional(schedule.earliest_start) or '-'}")
    lines.append(f"Latest end:     {_format_optional(schedule.latest_end) or '-'}")
    lines.append(f"Total duration: {schedule.total_duration_hours} h")
    if fixed:
        lines.append(f"Fixed starts:   {', '.join(fixed)}")
    return "\n".join(lines) + "\n"


def format_task_table(tasks: list[Task]) -> str:
    """Render task definitions as a plain-text table."""
    rows = [
        [
            task.id,
            task.description,
            _format_hours(task.duration),
            str(task.timing),
            ", ".join(task.dependencies) or "-",
            "global" if task.is_global else f"private ({task.owner})",
        ]
        for task in tasks
    ]
    return "\n".join(
        _table(["Task", "Description", "Hours", "Timing", "Depends on", "Scope"], rows)
    ) + "\n"
