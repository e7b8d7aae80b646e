"""Configuration loading for eventsched.

A single YAML file (eventsched_config.yaml) holds scheduler behaviour and
output defaults.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from .models import TimeUnit

CONFIG_FILENAME = "eventsched_config.yaml"


class DanglingDependencyPolicy(str, Enum):
    """What to do with dependencies that are outside the requested task set."""

    IGNORE = "ignore"  # Treat as already satisfied
    ERROR = "error"  # Reject the request


class OutputFormat(str, Enum):
    """Available schedule output formats."""

    TABLE = "table"
    JSON = "json"


class SchedulerConfig(BaseModel):
    """Configuration for the scheduling calculator."""

    dangling_dependencies: DanglingDependencyPolicy = DanglingDependencyPolicy.IGNORE
    default_unit: TimeUnit = TimeUnit.MINUTES  # Unit for timings that omit one


class OutputConfig(BaseModel):
    """Configuration for rendering schedules."""

    format: OutputFormat = OutputFormat.TABLE
    indent: int = Field(default=2, ge=0)


class AppConfig(BaseModel):
    """Top-level eventsched configuration."""

    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    default_user: str | None = None  # User whose private tasks are visible by default


def load_config(config_path: Path | str) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to eventsched_config.yaml

    Returns:
        Validated AppConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if not data:
        raise ValueError("Empty configuration file")
    if not isinstance(data, dict):
        raise ValueError("Configuration must be a mapping at the root level")

    # pydantic's ValidationError is a ValueError
    return AppConfig.model_validate(data)
