"""
Configuration data models.

This module contains the configuration structures loaded from `config.toml`.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class TrackerConfig:
    """
    Settings for the build lifecycle tracker, loaded from `[agent.tracker]`.
    """

    # Root directory for agent working files (`[agent] work_dir`).
    work_dir: Path = field(default_factory=lambda: Path("."))
    # Sub-directory of work_dir holding per-build sentinel files.
    sentinel_dir_name: str = "build_tmp"
    # Permission bits applied to sentinel files so the worker can overwrite them.
    sentinel_file_mode: int = 0o777
    # Prefix for watcher thread names; the pid is appended.
    thread_name_prefix: str = "BuildWatcher"
    # How long the CLI waits for reports; 0 means no bound.
    idle_wait_timeout: float = 0.0

    @property
    def sentinel_dir(self) -> Path:
        return self.work_dir / self.sentinel_dir_name


@dataclass
class AgentConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    tracker: TrackerConfig
    log_level: str = "INFO"
