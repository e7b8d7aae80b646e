"""Pytest configuration and fixtures for eventsched tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from eventsched import context
from eventsched.logger import reset_logger
from eventsched.models import Task, TimeUnit, Timing, TimingRelation

ANCHOR = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_global_state() -> Iterator[None]:
    """Reset the logger and CLI context between tests."""
    reset_logger()
    context.reset()
    yield
    reset_logger()
    context.reset()


@pytest.fixture
def fixtures_dir() -> Path:
    """Get the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def anchor() -> datetime:
    """Default anchor date used across scheduling tests."""
    return ANCHOR


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Factory for tasks with sensible defaults."""

    def _make(  # noqa: PLR0913 - mirrors Task fields
        task_id: str,
        duration: float = 1.0,
        deps: list[str] | None = None,
        *,
        relation: TimingRelation | str = TimingRelation.AFTER,
        offset: float = 0.0,
        unit: TimeUnit | str = TimeUnit.MINUTES,
        start_date: datetime | None = None,
        **kwargs: Any,
    ) -> Task:
        return Task(
            id=task_id,
            description=kwargs.pop("description", f"Task {task_id}"),
            duration=duration,
            dependencies=list(deps or []),
            timing=Timing(
                relation=TimingRelation(relation), offset=offset, unit=TimeUnit(unit)
            ),
            start_date=start_date,
            is_global=kwargs.pop("is_global", True),
            **kwargs,
        )

    return _make
