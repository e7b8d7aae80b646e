"""High-level scheduling service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .config import AppConfig, DanglingDependencyPolicy
from .exceptions import CycleError, InputError
from .logger import log_dangling, log_event_checked, log_request, log_result
from .scheduler import compute_schedule, dangling_dependencies, execution_order
from .timeparse import parse_anchor

if TYPE_CHECKING:
    from datetime import datetime

    from .models import Event, EventTask, Schedule, Task
    from .store import TaskStore


def apply_event_overrides(event: Event, tasks: list[Task]) -> list[Task]:
    """Return copies of the tasks with the event's per-task overrides applied.

    The first assignment of a task wins if the event lists it more than once.
    """
    assignments: dict[str, EventTask] = {}
    for assigned in event.tasks:
        assignments.setdefault(assigned.task_id, assigned)

    result: list[Task] = []
    for task in tasks:
        assigned = assignments.get(task.id)
        if assigned is None:
            result.append(task)
            continue
        result.append(
            task.with_overrides(duration=assigned.duration, dependencies=assigned.dependencies)
        )
    return result


class SchedulingService:
    """Resolves scheduling requests against a task store.

    This service coordinates:
    - Request validation (task selection and anchor date)
    - Scope-aware task lookup in the TaskStore
    - Per-event task overrides
    - The scheduling calculator
    """

    def __init__(self, store: TaskStore, config: AppConfig | None = None):
        """Initialize scheduling service.

        Args:
            store: Task store to resolve task ids against
            config: Optional configuration (defaults apply when omitted)
        """
        self.store = store
        self.config = config or AppConfig()

    @property
    def strict_dependencies(self) -> bool:
        """Whether dependencies outside the request are rejected."""
        return self.config.scheduler.dangling_dependencies == DanglingDependencyPolicy.ERROR

    def _resolve_user(self, user: str | None) -> str | None:
        return user if user is not None else self.config.default_user

    def schedule_tasks(
        self,
        task_ids: list[str],
        anchor_date: Any,
        user: str | None = None,
    ) -> Schedule:
        """Schedule the selected tasks against an anchor date.

        Args:
            task_ids: Ids of the tasks to schedule; repeats are ignored
            anchor_date: Anchor as datetime, ISO-8601 text or epoch milliseconds
            user: User whose private tasks may be selected

        Raises:
            InputError: If the request is incomplete or names unknown tasks
            CycleError: If the selected tasks depend on each other in a loop
        """
        if not task_ids:
            raise InputError("No tasks selected")
        anchor = parse_anchor(anchor_date)

        unique_ids = list(dict.fromkeys(task_ids))
        tasks = self.store.fetch(unique_ids, self._resolve_user(user))
        return self._compute(tasks, anchor)

    def schedule_event(
        self,
        event_ref: str,
        user: str | None = None,
        anchor_date: Any = None,
    ) -> Schedule:
        """Schedule an event's assigned tasks, anchored at the event date.

        Per-event duration and dependency overrides apply to this schedule
        only; store records are left untouched.

        Args:
            event_ref: Event id or title
            user: User whose private tasks may be selected
            anchor_date: Optional anchor replacing the event date

        Raises:
            InputError: If the event is unknown, has no tasks, or names tasks
                the user cannot see
            CycleError: If the event's tasks depend on each other in a loop
        """
        event = self.store.find_event(event_ref)
        if event is None:
            raise InputError(f"Event not found: {event_ref}")
        if not event.tasks:
            raise InputError(f"Event '{event.title}' has no tasks")

        anchor = parse_anchor(anchor_date) if anchor_date is not None else event.date
        tasks = self._event_tasks(event, self._resolve_user(user))
        return self._compute(tasks, anchor)

    def _event_tasks(self, event: Event, user: str | None) -> list[Task]:
        """Resolve an event's assignments into tasks with overrides applied."""
        base_tasks = self.store.fetch(list(dict.fromkeys(event.task_ids)), user)
        return apply_event_overrides(event, base_tasks)

    def _compute(self, tasks: list[Task], anchor: datetime) -> Schedule:
        log_request(tasks, anchor)
        log_dangling(dangling_dependencies(tasks))

        schedule = compute_schedule(tasks, anchor, strict_dependencies=self.strict_dependencies)
        log_result(schedule)
        return schedule

    def find_cycles(self) -> list[tuple[str, CycleError]]:
        """Check the whole store and every event for dependency loops.

        Visibility is not applied here: every task is considered.

        Returns:
            (label, error) pairs; "store" for the full task set, otherwise the
            event id
        """
        found: list[tuple[str, CycleError]] = []

        if self.store.tasks:
            try:
                execution_order(self.store.tasks)
            except CycleError as e:
                found.append(("store", e))

        for event in self.store.events:
            assigned_ids = dict.fromkeys(event.task_ids)
            tasks = apply_event_overrides(
                event, [task for task in self.store.tasks if task.id in assigned_ids]
            )
            try:
                execution_order(tasks)
            except CycleError as e:
                found.append((event.id, e))
            else:
                log_event_checked(event.id, len(tasks))

        return found
