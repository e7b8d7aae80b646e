"""Command-line interface for eventsched."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from . import context
from .config import AppConfig, OutputFormat
from .exceptions import CycleError, EventschedError
from .loader import discover_config, load_task_store
from .logger import setup_logger
from .models import Schedule
from .render import (
    cycle_error_payload,
    format_schedule_table,
    format_task_table,
    schedule_to_dict,
    to_json,
)
from .service import SchedulingService
from .store import TaskScope, TaskStore
from .timeparse import format_datetime

EXIT_ERROR = 1
EXIT_CYCLE = 2

app = typer.Typer(
    name="eventsched",
    help="Compute dependency-aware task schedules for events",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show results, 2=show checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: eventsched_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for eventsched commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _load(store_path: Path) -> tuple[AppConfig, TaskStore]:
    """Load config and task store, exiting with a message on failure."""
    try:
        config = discover_config(store_path)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: Invalid config: {e}", err=True)
        raise typer.Exit(EXIT_ERROR) from None

    try:
        store = load_task_store(store_path, config)
    except EventschedError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_ERROR) from None

    return config, store


def _write(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Output written to {output}")
    else:
        typer.echo(text, nl=False)


@app.command()
def schedule(  # noqa: PLR0913 - CLI command needs multiple options
    store_file: Annotated[Path, typer.Argument(help="Path to the task store YAML file")],
    task_ids: Annotated[
        list[str] | None, typer.Argument(help="Ids of the tasks to schedule")
    ] = None,
    *,
    event: Annotated[
        str | None,
        typer.Option(
            "--event", "-e", help="Schedule the tasks assigned to this event (id or title)"
        ),
    ] = None,
    anchor: Annotated[
        str | None,
        typer.Option(
            "--anchor",
            "-a",
            help="Anchor date (ISO-8601 or epoch ms); defaults to the event date",
        ),
    ] = None,
    user: Annotated[
        str | None, typer.Option("--user", "-u", help="User whose private tasks are visible")
    ] = None,
    output_format: Annotated[
        OutputFormat | None, typer.Option("--format", "-f", help="Output format")
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Compute start and end times for a set of tasks."""
    if event and task_ids:
        typer.echo("Error: Cannot specify both task ids and --event", err=True)
        raise typer.Exit(EXIT_ERROR)
    if not event and not task_ids:
        typer.echo("Error: Specify task ids or --event", err=True)
        raise typer.Exit(EXIT_ERROR)

    config, store = _load(store_file)
    fmt = output_format or config.output.format
    service = SchedulingService(store, config)

    try:
        result: Schedule
        if event:
            result = service.schedule_event(event, user=user, anchor_date=anchor)
        else:
            result = service.schedule_tasks(task_ids or [], anchor, user=user)
    except CycleError as e:
        if fmt == OutputFormat.JSON:
            typer.echo(to_json(cycle_error_payload(e), config.output.indent))
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_CYCLE) from None
    except EventschedError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_ERROR) from None

    if fmt == OutputFormat.JSON:
        text = to_json(schedule_to_dict(result), config.output.indent) + "\n"
    else:
        text = format_schedule_table(result)
    _write(text, output)


@app.command()
def tasks(
    store_file: Annotated[Path, typer.Argument(help="Path to the task store YAML file")],
    *,
    search: Annotated[
        str | None,
        typer.Option("--search", "-s", help="Filter descriptions (regex, case-insensitive)"),
    ] = None,
    scope: Annotated[
        TaskScope, typer.Option("--scope", help="Which tasks to list")
    ] = TaskScope.ALL,
    user: Annotated[
        str | None, typer.Option("--user", "-u", help="User whose private tasks are visible")
    ] = None,
) -> None:
    """List the tasks visible to a user."""
    config, store = _load(store_file)
    found = store.search(search, user=user or config.default_user, scope=scope)
    if not found:
        typer.echo("No tasks found", err=True)
        return
    typer.echo(format_task_table(found), nl=False)


@app.command()
def events(
    store_file: Annotated[Path, typer.Argument(help="Path to the task store YAML file")],
) -> None:
    """List events with their dates and assigned tasks."""
    _, store = _load(store_file)
    if not store.events:
        typer.echo("No events found", err=True)
        return
    for event in store.events:
        typer.echo(f"{event.id}: {event.title} @ {format_datetime(event.date)}")
        if event.description:
            typer.echo(f"  {event.description}")
        typer.echo(f"  tasks ({len(event.tasks)}): {', '.join(event.task_ids) or '-'}")


@app.command()
def check(
    store_file: Annotated[Path, typer.Argument(help="Path to the task store YAML file")],
) -> None:
    """Validate a task store and look for dependency loops."""
    config, store = _load(store_file)
    service = SchedulingService(store, config)

    cycles = service.find_cycles()
    if cycles:
        for label, error in cycles:
            typer.echo(f"{label}: {error}", err=True)
        raise typer.Exit(EXIT_CYCLE)

    typer.echo(f"OK: {len(store.tasks)} task(s), {len(store.events)} event(s)")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
