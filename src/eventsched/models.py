"""Data models for eventsched."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE


class TimingRelation(str, Enum):
    """How a task's timing offset relates to its base start time."""

    BEFORE = "before"
    AFTER = "after"
    START = "start"
    END = "end"


class TimeUnit(str, Enum):
    """Unit of a timing offset."""

    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"

    @property
    def milliseconds(self) -> int:
        """Number of milliseconds in one unit."""
        return _UNIT_MS[self]


_UNIT_MS = {
    TimeUnit.SECONDS: MS_PER_SECOND,
    TimeUnit.MINUTES: MS_PER_MINUTE,
    TimeUnit.HOURS: MS_PER_HOUR,
}


@dataclass(frozen=True)
class Timing:
    """Rule shifting a task's start relative to its dependency-derived base time."""

    relation: TimingRelation = TimingRelation.AFTER
    offset: float = 0.0
    unit: TimeUnit = TimeUnit.MINUTES

    @property
    def offset_ms(self) -> float:
        """Unsigned offset converted to milliseconds."""
        return self.offset * self.unit.milliseconds

    def __str__(self) -> str:
        if self.offset == 0:
            return self.relation.value
        offset = int(self.offset) if self.offset == int(self.offset) else self.offset
        return f"{offset} {self.unit.value} {self.relation.value}"


def _default_str_list() -> list[str]:
    return []


def _default_dict() -> dict[str, Any]:
    return {}


@dataclass
class Task:
    """A task definition as supplied by the task store."""

    id: str
    description: str
    duration: float  # hours
    dependencies: list[str] = field(default_factory=_default_str_list)
    timing: Timing = field(default_factory=Timing)
    start_date: datetime | None = None  # Fixed start, overrides dependencies
    is_global: bool = False
    owner: str | None = None  # Owning user for private tasks

    @property
    def duration_delta(self) -> timedelta:
        """Duration as a timedelta."""
        return timedelta(milliseconds=self.duration * MS_PER_HOUR)

    def visible_to(self, user: str | None) -> bool:
        """Whether the given user may select this task."""
        return self.is_global or (user is not None and self.owner == user)

    def with_overrides(
        self, duration: float | None = None, dependencies: list[str] | None = None
    ) -> Task:
        """Return a copy with per-event overrides applied."""
        changes: dict[str, Any] = {}
        if duration is not None:
            changes["duration"] = duration
        if dependencies is not None:
            changes["dependencies"] = list(dependencies)
        return replace(self, **changes) if changes else self


@dataclass
class ScheduledTask:
    """A task that has been placed on the timeline."""

    task_id: str
    description: str
    start_time: datetime
    end_time: datetime
    dependencies: list[str]
    duration: float
    is_fixed_start: bool = False


@dataclass
class Schedule:
    """Computed timeline for a set of tasks, ordered by start time."""

    tasks: list[ScheduledTask]
    anchor_date: datetime

    @property
    def earliest_start(self) -> datetime | None:
        """Earliest start time across all scheduled tasks."""
        if not self.tasks:
            return None
        return min(task.start_time for task in self.tasks)

    @property
    def latest_end(self) -> datetime | None:
        """Latest end time across all scheduled tasks."""
        if not self.tasks:
            return None
        return max(task.end_time for task in self.tasks)

    @property
    def total_duration_hours(self) -> int:
        """Whole hours spanned from earliest start to latest end, rounded up."""
        earliest = self.earliest_start
        latest = self.latest_end
        if earliest is None or latest is None:
            return 0
        return math.ceil((latest - earliest) / timedelta(hours=1))

    def get(self, task_id: str) -> ScheduledTask | None:
        """Get the scheduled entry for a task id."""
        for task in self.tasks:
            if task.task_id == task_id:
                return task
        return None


@dataclass
class EventTask:
    """A task assigned to an event, with optional per-event overrides."""

    task_id: str
    duration: float | None = None
    dependencies: list[str] | None = None


def _default_event_tasks() -> list[EventTask]:
    return []


@dataclass
class Event:
    """An event whose date anchors the schedule of its assigned tasks."""

    id: str
    title: str
    description: str
    date: datetime
    metadata: dict[str, Any] = field(default_factory=_default_dict)
    tasks: list[EventTask] = field(default_factory=_default_event_tasks)

    @property
    def task_ids(self) -> list[str]:
        """Ids of the assigned tasks, in assignment order."""
        return [assigned.task_id for assigned in self.tasks]


@dataclass
class TaskStoreMetadata:
    """Metadata for a task store document."""

    version: str = "1.0"
    owner: str | None = None
