"""Task store loading with configuration discovery and validation."""

from __future__ import annotations

from pathlib import Path

from . import context
from .config import CONFIG_FILENAME, AppConfig, load_config
from .exceptions import MissingReferenceError, ValidationError
from .parser import TaskStoreParser
from .store import TaskStore


def discover_config(
    store_path: Path | str | None = None,
    config_path: Path | None = None,
) -> AppConfig:
    """Discover configuration from various locations.

    Search order:
    1. Explicit config_path argument
    2. Global context (set via CLI --config)
    3. Task store directory / eventsched_config.yaml
    4. Current directory / eventsched_config.yaml

    Falls back to default settings when nothing is found.
    """
    if config_path:
        return load_config(config_path)

    ctx_config = context.get_config_path()
    if ctx_config:
        return load_config(ctx_config)

    if store_path is not None:
        dir_config = Path(store_path).parent / CONFIG_FILENAME
        if dir_config.exists():
            return load_config(dir_config)

    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return AppConfig()


def load_task_store(
    path: Path | str,
    config: AppConfig | None = None,
) -> TaskStore:
    """Load and validate a task store.

    Args:
        path: Path to the task store YAML file
        config: Optional explicit config (discovered when omitted)

    Returns:
        Validated TaskStore
    """
    if config is None:
        config = discover_config(path)

    store = TaskStoreParser(config).parse_file(path)
    validate_task_store(store)
    return store


def validate_task_store(store: TaskStore) -> None:
    """Validate event references and event title uniqueness."""
    all_ids = store.get_all_ids()

    titles: dict[str, str] = {}
    for event in store.events:
        if event.title in titles:
            raise ValidationError(
                f"Event title '{event.title}' is used by both "
                f"'{titles[event.title]}' and '{event.id}'"
            )
        titles[event.title] = event.id

        for assigned in event.tasks:
            if assigned.task_id not in all_ids:
                raise MissingReferenceError(
                    f"Event {event.id} assigns unknown task: {assigned.task_id}"
                )
