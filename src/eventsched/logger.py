"""Logging for eventsched.

Output is controlled by a single verbosity setting (``-v`` on the CLI):

- 0: errors only
- 1: computed schedules
- 2: request resolution (selected tasks, dependencies outside the request,
  per-event loop checks)
- 3: scheduler internals (execution order, per-task assignments)

The ``log_*`` helpers below are the lines the service and scheduler emit;
they format nothing unless their level is enabled.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, TextIO

from .timeparse import format_datetime

if TYPE_CHECKING:
    from datetime import datetime

    from .models import Schedule, Task

CHANGES_LEVEL = 25  # between INFO and WARNING
CHECKS_LEVEL = 15  # between DEBUG and INFO

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

LOGGER_NAME = "eventsched"

# Verbosity -> logging level; anything out of range is treated as silent
_VERBOSITY_LEVELS = (logging.ERROR, CHANGES_LEVEL, CHECKS_LEVEL, logging.DEBUG)


class EventschedLogger(logging.Logger):
    """Logger with the two extra verbosity levels."""

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> EventschedLogger:
    """Get the eventsched logger instance (singleton)."""
    logging.setLoggerClass(EventschedLogger)
    logger = logging.getLogger(LOGGER_NAME)
    assert isinstance(logger, EventschedLogger)
    return logger


def level_for(verbosity: int) -> int:
    """Logging level for a CLI verbosity value."""
    if 0 <= verbosity < len(_VERBOSITY_LEVELS):
        return _VERBOSITY_LEVELS[verbosity]
    return logging.ERROR


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the eventsched logger; safe to call again to reconfigure.

    Args:
        verbosity: 0=errors only, 1=schedules, 2=request checks, 3=debug
        stream: Output stream, sys.stderr when omitted
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(level_for(verbosity))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and go back to errors only."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)


def log_request(tasks: Sequence[Task], anchor: datetime) -> None:
    """Report the resolved tasks of a scheduling request."""
    logger = get_logger()
    if not logger.isEnabledFor(CHECKS_LEVEL):
        return
    logger.checks(
        "Scheduling %d task(s) from %s: %s",
        len(tasks),
        format_datetime(anchor),
        ", ".join(task.id for task in tasks),
    )


def log_dangling(dangling: Mapping[str, Sequence[str]]) -> None:
    """Report dependencies that point outside the requested tasks."""
    logger = get_logger()
    for task_id, dep_ids in dangling.items():
        logger.checks(
            "  %s depends on tasks outside the request: %s", task_id, ", ".join(dep_ids)
        )


def log_result(schedule: Schedule) -> None:
    """Report the span of a computed schedule."""
    logger = get_logger()
    earliest, latest = schedule.earliest_start, schedule.latest_end
    if earliest is None or latest is None or not logger.isEnabledFor(CHANGES_LEVEL):
        return
    logger.changes(
        "Scheduled %d task(s): %s to %s (%d h)",
        len(schedule.tasks),
        format_datetime(earliest),
        format_datetime(latest),
        schedule.total_duration_hours,
    )


def log_event_checked(event_id: str, task_count: int) -> None:
    get_logger().checks("Event %s: %d task(s), no loops", event_id, task_count)


def log_execution_order(order: Sequence[Task]) -> None:
    logger = get_logger()
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Execution order: %s", ", ".join(task.id for task in order))


def log_assignment(task_id: str, start: datetime, end: datetime, *, fixed: bool) -> None:
    """Report the times assigned to one task."""
    logger = get_logger()
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(
        "  %s: %s -> %s%s",
        task_id,
        start.isoformat(),
        end.isoformat(),
        " (fixed start)" if fixed else "",
    )
