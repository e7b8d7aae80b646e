"""Custom exceptions for eventsched."""

from __future__ import annotations


class EventschedError(Exception):
    """Base exception for all eventsched errors."""

    pass


class InputError(EventschedError):
    """Raised when a scheduling request is missing or references unknown data."""

    pass


class CycleError(EventschedError):
    """Raised when task dependencies form a loop.

    The ``path`` attribute holds the task ids along the loop, starting and
    ending with the same id.
    """

    def __init__(self, path: list[str]) -> None:
        self.path = list(path)
        super().__init__(f"Circular dependency detected: {' -> '.join(self.path)}")


class DataError(EventschedError):
    """Raised when the task store cannot be read."""

    pass


class ParseError(EventschedError):
    """Raised when YAML parsing fails."""

    pass


class ValidationError(EventschedError):
    """Raised when validation fails."""

    pass


class MissingReferenceError(ValidationError):
    """Raised when a referenced ID does not exist."""

    pass
