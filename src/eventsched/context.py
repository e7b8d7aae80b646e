"""Process-wide CLI options shared between the typer callback and the loaders."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class CliOptions:
    """Options given before the subcommand on the command line."""

    config_path: Path | None = None


_options = CliOptions()


def get_config_path() -> Path | None:
    """Config file named with --config, if any."""
    return _options.config_path


def set_config_path(path: Path | None) -> None:
    """Record the config file named with --config."""
    _options.config_path = path


def reset() -> None:
    """Forget all CLI options (used between tests)."""
    global _options  # noqa: PLW0603
    _options = CliOptions()
