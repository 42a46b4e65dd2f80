"""
Build tracking data models.

This module contains the records that flow through the tracker: the
identity of a build attempt, the terminal status reported for it, and the
enums describing exit dispositions and watcher lifecycle states.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class BuildInfo:
    """
    Identifies one build attempt executed by a worker process.
    
    Instances are immutable; the tracker hands out the same object it was
    given, so callers never observe mutation of a returned value.
    """

    # Unique per build attempt.
    build_id: str
    # Distinguishes concurrent executors (slots) on the same host.
    vm_seq_id: int

    # --- Metadata passed through to the completion sink ---
    project_id: str = ""
    pipeline_id: str = ""
    workspace: str = ""
    execute_count: int = 1
    # Temporary files the reporting side should remove after the build.
    to_del_tmp_files: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Callers may pass a list; store an immutable copy.
        object.__setattr__(self, "to_del_tmp_files", tuple(self.to_del_tmp_files))

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable view of this build."""
        data = asdict(self)
        data["to_del_tmp_files"] = list(self.to_del_tmp_files)
        return data


class ExitDisposition(Enum):
    """How a worker process ended, as resolved by its watcher."""

    # Wait succeeded and the sentinel file was empty.
    NORMAL_EXIT = "normal_exit"
    # Sentinel file held content at resolution time (worker error or crash notice).
    WORKER_REPORTED_FAILURE = "worker_reported_failure"
    # The wait call failed and the sentinel file was empty.
    PROCESS_WAIT_FAILURE = "process_wait_failure"
    # The process could not be found when the watcher started.
    PROCESS_LOOKUP_FAILURE = "process_lookup_failure"


class WatcherState(Enum):
    """Lifecycle states of a process watcher."""

    SPAWNED = "spawned"
    WATCHING = "watching"
    RESOLVED = "resolved"
    REPORTED = "reported"


@dataclass(frozen=True)
class BuildCompletion:
    """
    Terminal status of one build, handed to the completion sink exactly once.
    """

    build_info: BuildInfo
    success: bool
    message: str
    disposition: ExitDisposition
    process_id: int
    # Exit code from the OS wait, when one was obtained.
    exit_code: Optional[int] = None

    @property
    def build_id(self) -> str:
        return self.build_info.build_id
