"""In-memory task store."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from .exceptions import InputError
from .models import Event, Task, TaskStoreMetadata


class TaskScope(str, Enum):
    """Which tasks a listing or search covers."""

    ALL = "all"
    GLOBAL = "global"
    PRIVATE = "private"


def _default_events() -> list[Event]:
    return []


@dataclass
class TaskStore:
    """Task and event records loaded from a store document."""

    metadata: TaskStoreMetadata
    tasks: list[Task]
    events: list[Event] = field(default_factory=_default_events)

    def get_all_ids(self) -> set[str]:
        """Get all task IDs in the store."""
        return {task.id for task in self.tasks}

    def get(self, task_id: str) -> Task | None:
        """Get a task by its ID."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_event(self, event_id: str) -> Event | None:
        """Get an event by its ID."""
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    def find_event(self, ref: str) -> Event | None:
        """Find an event by ID, falling back to an exact title match."""
        event = self.get_event(ref)
        if event:
            return event
        for candidate in self.events:
            if candidate.title == ref:
                return candidate
        return None

    def visible_tasks(self, user: str | None = None) -> list[Task]:
        """Global tasks plus the given user's private tasks."""
        return [task for task in self.tasks if task.visible_to(user)]

    def fetch(self, task_ids: list[str], user: str | None = None) -> list[Task]:
        """Look up tasks by ID in the requested order.

        Only tasks visible to ``user`` are returned; anything else counts as
        not found.

        Raises:
            InputError: If no IDs are given or some cannot be resolved
        """
        if not task_ids:
            raise InputError("No tasks selected")

        visible = {task.id: task for task in self.visible_tasks(user)}
        missing = [task_id for task_id in task_ids if task_id not in visible]
        if missing:
            raise InputError(f"Some tasks not found: {', '.join(missing)}")

        return [visible[task_id] for task_id in task_ids]

    def search(
        self,
        text: str | None = None,
        *,
        user: str | None = None,
        scope: TaskScope = TaskScope.ALL,
    ) -> list[Task]:
        """Search task descriptions, case-insensitively.

        ``text`` is a regular expression; if it does not compile it is
        matched as a plain substring.
        """
        tasks = self.visible_tasks(user)
        if scope == TaskScope.GLOBAL:
            tasks = [task for task in tasks if task.is_global]
        elif scope == TaskScope.PRIVATE:
            tasks = [task for task in tasks if not task.is_global]

        if not text:
            return tasks

        try:
            pattern = re.compile(text, re.IGNORECASE)
        except re.error:
            pattern = re.compile(re.escape(text), re.IGNORECASE)
        return [task for task in tasks if pattern.search(task.description)]
