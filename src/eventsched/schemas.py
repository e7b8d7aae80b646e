"""Pydantic schemas for task store YAML validation."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import TimeUnit, TimingRelation
from .timeparse import parse_datetime


def _coerce_str_list(v: Any) -> list[str]:
    if isinstance(v, list):
        return [str(item) for item in v]  # type: ignore[misc]
    return [str(v)]


class TimingSchema(BaseModel):
    """Schema for a task timing rule."""

    relation: TimingRelation = TimingRelation.AFTER
    offset: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    unit: TimeUnit | None = None  # None = configured default unit

    @field_validator("relation", "unit", mode="before")
    @classmethod
    def normalize_case(cls, v: Any) -> Any:
        """Accept enum values in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class TaskSchema(BaseModel):
    """Schema for a single task record."""

    model_config = ConfigDict(populate_by_name=True)

    description: str = Field(min_length=1)
    duration: float = Field(gt=0, allow_inf_nan=False)  # hours
    dependencies: list[str] = Field(default_factory=list)
    timing: TimingSchema = Field(default_factory=TimingSchema)
    start_date: datetime | None = None
    is_global: bool = Field(default=False, alias="global")
    owner: str | None = None

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v: Any) -> Any:
        """Reject whitespace-only descriptions."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure value is a list of ids."""
        if v is None:
            return []
        return _coerce_str_list(v)

    @field_validator("timing", mode="before")
    @classmethod
    def default_timing(cls, v: Any) -> Any:
        """Treat an empty timing entry as the default rule."""
        if v is None:
            return {}
        return v

    @field_validator("start_date", mode="before")
    @classmethod
    def parse_start_date(cls, v: Any) -> datetime | None:
        """Accept ISO-8601 strings, YAML timestamps and epoch milliseconds."""
        if v is None:
            return None
        return parse_datetime(v)


class EventTaskSchema(BaseModel):
    """Schema for a task assignment within an event."""

    task: str
    duration: float | None = Field(default=None, gt=0, allow_inf_nan=False)
    dependencies: list[str] | None = None

    @field_validator("task", mode="before")
    @classmethod
    def coerce_task_id(cls, v: Any) -> str:
        """Allow numeric ids written without quotes."""
        return str(v)

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str] | None:
        """Ensure value is a list of ids when given."""
        if v is None:
            return None
        return _coerce_str_list(v)


class EventSchema(BaseModel):
    """Schema for an event record."""

    title: str = Field(min_length=1)
    description: str = ""
    date: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)
    tasks: list[EventTaskSchema] = Field(default_factory=list)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> datetime:
        """Accept ISO-8601 strings, YAML timestamps and epoch milliseconds."""
        return parse_datetime(v)

    @field_validator("tasks", mode="before")
    @classmethod
    def expand_task_ids(cls, v: Any) -> Any:
        """Allow bare task ids in place of assignment mappings."""
        if v is None:
            return []
        if isinstance(v, list):
            return [
                item if isinstance(item, dict) else {"task": str(item)}
                for item in v  # type: ignore[misc]
            ]
        return v


class MetadataSchema(BaseModel):
    """Schema for task store metadata."""

    version: str = "1.0"
    owner: str | None = None  # Owner assumed for private tasks that omit one

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version_to_string(cls, v: Any) -> str:
        """Ensure version is a string."""
        return str(v)


class TaskStoreSchema(BaseModel):
    """Schema for the entire task store YAML document."""

    metadata: MetadataSchema = Field(default_factory=MetadataSchema)
    tasks: dict[str, TaskSchema] = Field(default_factory=dict)
    events: dict[str, EventSchema] = Field(default_factory=dict)

    @field_validator("tasks", "events", mode="before")
    @classmethod
    def coerce_keys(cls, v: Any) -> Any:
        """Use string ids even when YAML keys are numbers."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(key): value for key, value in v.items()}  # type: ignore[misc]
        return v
