"""YAML parser for eventsched task stores."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import DataError, ParseError, ValidationError
from .models import Event, EventTask, Task, TaskStoreMetadata, TimeUnit, Timing
from .schemas import TaskStoreSchema
from .store import TaskStore

if TYPE_CHECKING:
    from .config import AppConfig


class TaskStoreParser:
    """Parser for task store YAML files.

    This parser only handles YAML parsing and record creation.
    For loading with reference validation, use load_task_store() from
    eventsched.loader.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.default_unit = config.scheduler.default_unit if config else TimeUnit.MINUTES

    def parse_file(self, file_path: Path | str) -> TaskStore:
        """Parse a YAML file into a TaskStore."""
        path = Path(file_path)
        if not path.exists():
            raise DataError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e
        except OSError as e:
            raise DataError(f"Failed to read task store {file_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> TaskStore:
        """Parse loaded YAML data into a TaskStore."""
        try:
            schema = TaskStoreSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid YAML structure: {e}") from e

        metadata = TaskStoreMetadata(
            version=schema.metadata.version,
            owner=schema.metadata.owner,
        )

        tasks: list[Task] = []
        for task_id, task_data in schema.tasks.items():
            owner = task_data.owner or (None if task_data.is_global else metadata.owner)
            if not task_data.is_global and owner is None:
                raise ValidationError(
                    f"Private task '{task_id}' must have an 'owner' "
                    "(or set metadata.owner for the store)"
                )

            timing = Timing(
                relation=task_data.timing.relation,
                offset=task_data.timing.offset,
                unit=task_data.timing.unit or self.default_unit,
            )

            tasks.append(
                Task(
                    id=task_id,
                    description=task_data.description,
                    duration=task_data.duration,
                    dependencies=list(dict.fromkeys(task_data.dependencies)),
                    timing=timing,
                    start_date=task_data.start_date,
                    is_global=task_data.is_global,
                    owner=owner,
                )
            )

        events: list[Event] = []
        for event_id, event_data in schema.events.items():
            events.append(
                Event(
                    id=event_id,
                    title=event_data.title,
                    description=event_data.description,
                    date=event_data.date,
                    metadata=dict(event_data.metadata),
                    tasks=[
                        EventTask(
                            task_id=assigned.task,
                            duration=assigned.duration,
                            dependencies=(
                                list(dict.fromkeys(assigned.dependencies))
                                if assigned.dependencies is not None
                                else None
                            ),
                        )
                        for assigned in event_data.tasks
                    ],
                )
            )

        return TaskStore(metadata=metadata, tasks=tasks, events=events)
