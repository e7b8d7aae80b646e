"""Anchor and task date parsing utilities."""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Any

from .exceptions import InputError

_EPOCH_MS_RE = re.compile(r"^-?\d+$")


def as_utc(value: datetime) -> datetime:
    """Return an aware datetime, assuming UTC for naive values."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def from_epoch_ms(value: float) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime.

    Raises:
        ValueError: If the value is not a finite time within the datetime range
    """
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"Invalid date: {value!r} is outside the supported date range") from e


def parse_datetime(value: Any) -> datetime:
    """Parse a date/time given as ISO-8601 text, epoch milliseconds, or a date object.

    Supported inputs:
    - "2024-01-01T09:00:00Z", "2024-01-01T09:00:00+02:00" - ISO-8601
    - "2024-01-01T09:00:00", "2024-01-01" - naive values are taken as UTC
    - 1704099600000, "1704099600000" - epoch milliseconds
    - datetime / date objects (as produced by YAML timestamps)

    Raises:
        ValueError: If the value cannot be interpreted as a point in time
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time(), tzinfo=timezone.utc)
    if isinstance(value, bool):
        raise ValueError(f"Invalid date: {value!r}")
    if isinstance(value, (int, float)):
        return from_epoch_ms(value)
    if isinstance(value, str):
        text = value.strip()
        if _EPOCH_MS_RE.match(text):
            return from_epoch_ms(int(text))
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return as_utc(datetime.fromisoformat(text))
        except ValueError as e:
            raise ValueError(f"Invalid date: {value!r}") from e
    raise ValueError(f"Invalid date: {value!r}")


def parse_anchor(value: Any) -> datetime:
    """Parse a caller-supplied anchor date.

    Raises:
        InputError: If the anchor is missing or unparseable
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InputError("Anchor date is required")
    try:
        return parse_datetime(value)
    except ValueError as e:
        raise InputError(str(e)) from e


def format_datetime(value: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision and a Z suffix."""
    utc = as_utc(value).astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
