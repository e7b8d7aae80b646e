"""Task scheduling calculator.

Turns a set of task definitions and an anchor date into a timeline:

1. Order the tasks so every dependency precedes its dependents, failing on
   dependency loops.
2. Walk that order assigning start/end times. A task starts at its fixed
   start date if it has one, otherwise at the latest end time of its
   dependencies (or the anchor date when none apply), shifted by its timing
   offset.
3. Sort the result by start time.

Dependencies that are not part of the requested set are treated as already
satisfied.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from datetime import datetime, timedelta

from .exceptions import CycleError, InputError
from .logger import log_assignment, log_execution_order
from .models import Schedule, ScheduledTask, Task, Timing, TimingRelation
from .timeparse import as_utc

# Sign applied to the offset for each relation. "start" and "end" are accepted
# but carry no adjustment of their own: the offset is applied as-is.
_RELATION_SIGN = {
    TimingRelation.BEFORE: -1,
    TimingRelation.AFTER: 1,
    TimingRelation.START: 1,
    TimingRelation.END: 1,
}

_ON_STACK = 1
_DONE = 2


def offset_delta(timing: Timing) -> timedelta:
    """Signed shift a timing rule applies to a task's base start time."""
    return timedelta(milliseconds=_RELATION_SIGN[timing.relation] * timing.offset_ms)


def dangling_dependencies(tasks: Sequence[Task]) -> dict[str, list[str]]:
    """Map task id to the dependency ids that are not in the given set."""
    ids = {task.id for task in tasks}
    dangling: dict[str, list[str]] = {}
    for task in tasks:
        missing = [dep_id for dep_id in task.dependencies if dep_id not in ids]
        if missing:
            dangling[task.id] = missing
    return dangling


def execution_order(tasks: Sequence[Task]) -> list[Task]:
    """Order tasks so that every dependency comes before its dependents.

    Depth-first traversal with an explicit stack. Roots are taken in input
    order and children in dependency-list order, so the result is stable for
    a given input.

    Raises:
        CycleError: If the dependencies within the set form a loop
    """
    task_map = {task.id: task for task in tasks}

    def children(task_id: str) -> Iterator[str]:
        return (dep_id for dep_id in task_map[task_id].dependencies if dep_id in task_map)

    state: dict[str, int] = {}
    order: list[Task] = []

    for root in tasks:
        if root.id in state:
            continue

        state[root.id] = _ON_STACK
        stack: list[tuple[str, Iterator[str]]] = [(root.id, children(root.id))]

        while stack:
            task_id, pending = stack[-1]
            for child_id in pending:
                child_state = state.get(child_id)
                if child_state == _DONE:
                    continue
                if child_state == _ON_STACK:
                    path = [entry_id for entry_id, _ in stack]
                    raise CycleError(path[path.index(child_id) :] + [child_id])
                state[child_id] = _ON_STACK
                stack.append((child_id, children(child_id)))
                break
            else:
                stack.pop()
                state[task_id] = _DONE
                order.append(task_map[task_id])

    return order


def _task_times(
    task: Task, anchor: datetime, end_times: dict[str, datetime]
) -> tuple[datetime, datetime]:
    """Start and end of one task, given the end times assigned so far.

    Raises:
        InputError: If the times cannot be represented as datetimes
    """
    try:
        if task.start_date is not None:
            start_time = as_utc(task.start_date)
        else:
            dependency_ends = [
                end_times[dep_id] for dep_id in task.dependencies if dep_id in end_times
            ]
            base = max(dependency_ends) if dependency_ends else anchor
            start_time = base + offset_delta(task.timing)
        return start_time, start_time + task.duration_delta
    except OverflowError as e:
        raise InputError(
            f"Times for task {task.id} fall outside the supported date range"
        ) from e


def compute_schedule(
    tasks: Sequence[Task],
    anchor_date: datetime | None,
    *,
    strict_dependencies: bool = False,
) -> Schedule:
    """Compute start and end times for every task.

    Args:
        tasks: Tasks to schedule, with unique ids. Input order breaks ties.
        anchor_date: Default start for tasks without a fixed start date or
            scheduled dependencies
        strict_dependencies: Reject dependencies outside the task set instead
            of treating them as satisfied

    Returns:
        Schedule sorted by start time

    Raises:
        InputError: If no tasks or anchor are given, ids repeat, a time falls
            outside the datetime range, or (strict mode) a dependency is
            outside the set
        CycleError: If the dependencies form a loop
    """
    if not tasks:
        raise InputError("No tasks to schedule")
    if anchor_date is None:
        raise InputError("Anchor date is required")

    seen: set[str] = set()
    for task in tasks:
        if task.id in seen:
            raise InputError(f"Duplicate task id: {task.id}")
        seen.add(task.id)

    if strict_dependencies:
        dangling = dangling_dependencies(tasks)
        if dangling:
            details = "; ".join(
                f"{task_id} -> {', '.join(dep_ids)}" for task_id, dep_ids in dangling.items()
            )
            raise InputError(f"Dependencies outside the requested tasks: {details}")

    anchor = as_utc(anchor_date)
    order = execution_order(tasks)
    log_execution_order(order)

    end_times: dict[str, datetime] = {}
    scheduled: list[ScheduledTask] = []

    for task in order:
        start_time, end_time = _task_times(task, anchor, end_times)
        end_times[task.id] = end_time
        log_assignment(task.id, start_time, end_time, fixed=task.start_date is not None)

        scheduled.append(
            ScheduledTask(
                task_id=task.id,
                description=task.description,
                start_time=start_time,
                end_time=end_time,
                dependencies=list(task.dependencies),
                duration=task.duration,
                is_fixed_start=task.start_date is not None,
            )
        )

    scheduled.sort(key=lambda entry: entry.start_time)
    return Schedule(tasks=scheduled, anchor_date=anchor)
