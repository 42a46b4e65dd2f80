"""
Build lifecycle management.

This module provides the BuildManager, the entry point the dispatcher uses
to record claimed builds, hand over spawned worker processes and query what
is currently running. Each registered process gets its own watcher thread,
which reports the build's terminal status to the completion sink.
"""

import json
import logging
import threading
import time
from typing import List, Optional

from ..models.build import BuildInfo
from ..models.config import TrackerConfig
from ..system.processes import ProcessProbe, PsutilProcessProbe
from ..validation import validate_build_id
from .completion import CompletionSink
from .registry import ActiveRegistry, PendingRegistry
from .sentinel import SentinelFile
from .watcher import ProcessWatcher

logger = logging.getLogger(__name__)


class BuildManager:
    """
    Tracks claimed and running builds for one agent.

    Create one instance at agent start and share it between the dispatcher
    and whatever reads the query surface. Dispatch-side calls never block on
    a worker process.

    Args:
        sink: Receives one completion per registered build
        sentinel: Sentinel file protocol for the agent's work directory
        probe: Process lookup/wait capability; psutil-backed by default
        pending: Pending registry (fresh one by default)
        active: Active registry (fresh one by default)
        thread_name_prefix: Prefix for watcher thread names
    """

    def __init__(self, sink: CompletionSink, sentinel: SentinelFile,
                 probe: Optional[ProcessProbe] = None,
                 pending: Optional[PendingRegistry] = None,
                 active: Optional[ActiveRegistry] = None,
                 thread_name_prefix: str = "BuildWatcher"):
        self.sink = sink
        self.sentinel = sentinel
        self.probe = probe or PsutilProcessProbe()
        self.pending = pending or PendingRegistry()
        self.active = active or ActiveRegistry()
        self.thread_name_prefix = thread_name_prefix

        # Guards register + clear-pending + sentinel write as one unit.
        self._lock = threading.Lock()
        self._watchers: List[ProcessWatcher] = []

    @classmethod
    def from_config(cls, config: TrackerConfig, sink: CompletionSink,
                    probe: Optional[ProcessProbe] = None) -> "BuildManager":
        return cls(
            sink=sink,
            sentinel=SentinelFile.from_config(config),
            probe=probe,
            thread_name_prefix=config.thread_name_prefix,
        )

    # --- Dispatch surface ---

    def add_pre_instance(self, build_id: str) -> None:
        """Mark a build as claimed but not yet running."""
        self.pending.claim(build_id)
        logger.debug(f"build {build_id} claimed")

    claim = add_pre_instance

    def add_build(self, process_id: int, build_info: BuildInfo,
                  sentinel_prepared: bool = False) -> ProcessWatcher:
        """
        Start tracking a worker process that is executing ``build_info``.

        Records the process as active, clears the build's pending claim,
        pre-writes its sentinel file and starts a watcher thread. Returns
        without waiting for the process.

        Registering a pid again for the build it is already tracked under
        returns the running watcher, so the build is still reported once.

        Args:
            process_id: Pid of the already started worker
            build_info: Build the worker executes
            sentinel_prepared: The caller wrote the crash notice before
                spawning the worker; skip the write here so a worker that
                already settled its message file is not overwritten

        Returns:
            The watcher supervising the process

        Raises:
            ValidationError: If the build id cannot be used in a file name;
                nothing is recorded in that case
        """
        validate_build_id(build_info.build_id, field_name="build_info.build_id")
        logger.info(
            f"add build: processId: {process_id}, "
            f"buildInfo: {json.dumps(build_info.to_dict(), ensure_ascii=False)}"
        )

        watcher = ProcessWatcher(
            pid=process_id,
            build_info=build_info,
            probe=self.probe,
            sentinel=self.sentinel,
            registry=self.active,
            sink=self.sink,
        )
        with self._lock:
            existing = self._running_watcher(process_id, build_info.build_id)
            if existing is not None:
                logger.warning(
                    f"pid {process_id} already tracked for build {build_info.build_id}, "
                    f"keeping the running watcher"
                )
                return existing

            self.active.register(process_id, build_info)
            self.pending.unclaim(build_info.build_id)
            if not sentinel_prepared:
                self.sentinel.prepare(build_info.build_id, build_info.vm_seq_id)
            self._watchers = [w for w in self._watchers if not w.done]
            self._watchers.append(watcher)

        thread = threading.Thread(
            target=watcher.run,
            name=f"{self.thread_name_prefix}-{process_id}",
            daemon=True,
        )
        thread.start()
        return watcher

    register = add_build

    def _running_watcher(self, process_id: int, build_id: str) -> Optional[ProcessWatcher]:
        """Watcher still tracking ``build_id`` under ``process_id``, if any. Caller holds the lock."""
        current = self.active.get(process_id)
        if current is None or current.build_id != build_id:
            return None
        for watcher in self._watchers:
            if watcher.pid == process_id and watcher.build_info is current and not watcher.done:
                return watcher
        return None

    # --- Query surface ---

    def get_instance_count(self) -> int:
        with self._lock:
            return self.active.count()

    def get_instances(self) -> List[BuildInfo]:
        """Snapshot of the builds with a running worker process."""
        with self._lock:
            return self.active.list()

    def get_pre_instances_count(self) -> int:
        with self._lock:
            return self.pending.count()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every watcher started so far has reported.

        Args:
            timeout: Overall bound in seconds; None waits indefinitely

        Returns:
            True if all watchers finished, False on timeout
        """
        with self._lock:
            watchers = list(self._watchers)

        deadline = None if timeout is None else time.monotonic() + timeout
        for watcher in watchers:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            if not watcher.join(remaining):
                return False
        return True
