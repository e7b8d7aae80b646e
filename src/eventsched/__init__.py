"""eventsched - dependency-aware task scheduling for events."""

from .exceptions import (
    CycleError,
    DataError,
    EventschedError,
    InputError,
    MissingReferenceError,
    ParseError,
    ValidationError,
)
from .models import (
    Event,
    EventTask,
    Schedule,
    ScheduledTask,
    Task,
    TimeUnit,
    Timing,
    TimingRelation,
)
from .scheduler import compute_schedule, execution_order, offset_delta
from .service import SchedulingService
from .store import TaskScope, TaskStore

__version__ = "0.1.0"

__all__ = [
    # Scheduling
    "compute_schedule",
    "execution_order",
    "offset_delta",
    "SchedulingService",
    # Models
    "Task",
    "Timing",
    "TimingRelation",
    "TimeUnit",
    "ScheduledTask",
    "Schedule",
    "Event",
    "EventTask",
    # Store
    "TaskStore",
    "TaskScope",
    # Errors
    "EventschedError",
    "InputError",
    "CycleError",
    "DataError",
    "ParseError",
    "ValidationError",
    "MissingReferenceError",
]
