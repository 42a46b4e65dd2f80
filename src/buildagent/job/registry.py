"""
Pending and active build registries.

Both registries are shared between the dispatch path and the process
watchers, so every operation takes the registry's own lock. Read
operations return copies; they are point-in-time snapshots with no
ordering guarantee across concurrent mutation.
"""

import logging
import threading
from typing import Dict, FrozenSet, List, Optional, Set

from ..models.build import BuildInfo

logger = logging.getLogger(__name__)


class PendingRegistry:
    """Build ids that were claimed but have no running process yet."""

    def __init__(self):
        self._build_ids: Set[str] = set()
        self._lock = threading.Lock()

    def claim(self, build_id: str) -> None:
        with self._lock:
            self._build_ids.add(build_id)

    def unclaim(self, build_id: str) -> None:
        with self._lock:
            self._build_ids.discard(build_id)

    def contains(self, build_id: str) -> bool:
        with self._lock:
            return build_id in self._build_ids

    def count(self) -> int:
        with self._lock:
            return len(self._build_ids)

    def snapshot(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._build_ids)


class ActiveRegistry:
    """
    Maps OS process ids to the build each process is executing.
    """

    def __init__(self):
        self._instances: Dict[int, BuildInfo] = {}
        self._lock = threading.Lock()

    def register(self, pid: int, build_info: BuildInfo) -> Optional[BuildInfo]:
        """
        Record ``build_info`` under ``pid``.

        A second registration for the same pid overwrites the first one.

        Returns:
            The BuildInfo that was replaced, or None
        """
        with self._lock:
            previous = self._instances.get(pid)
            self._instances[pid] = build_info
        if previous is not None:
            logger.warning(
                f"pid {pid} already registered for build {previous.build_id}, "
                f"overwriting with build {build_info.build_id}"
            )
        return previous

    def unregister(self, pid: int, expected: Optional[BuildInfo] = None) -> Optional[BuildInfo]:
        """
        Remove the entry for ``pid``.

        Args:
            pid: Process id to remove
            expected: When given, only remove the entry if it still holds
                this build, so a stale watcher cannot drop a newer
                registration for a reused pid

        Returns:
            The removed BuildInfo, or None if nothing was removed
        """
        with self._lock:
            current = self._instances.get(pid)
            if current is None:
                return None
            if expected is not None and current is not expected:
                return None
            return self._instances.pop(pid)

    def get(self, pid: int) -> Optional[BuildInfo]:
        with self._lock:
            return self._instances.get(pid)

    def count(self) -> int:
        with self._lock:
            return len(self._instances)

    def list(self) -> List[BuildInfo]:
        """Snapshot of the builds currently executing."""
        with self._lock:
            return list(self._instances.values())

    def pids(self) -> List[int]:
        with self._lock:
            return list(self._instances.keys())
