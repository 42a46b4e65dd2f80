"""
Process observation capability.

The tracker treats a running worker as an opaque OS process it can only look
up by pid and wait on. This module defines that capability as a small
interface so tests can substitute a fake, and provides the psutil-backed
implementation used in production.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import psutil

logger = logging.getLogger(__name__)


class ProcessProbeError(Exception):
    """Base class for errors raised while observing a process."""

    def __init__(self, pid: int, message: str):
        super().__init__(message)
        self.pid = pid


class ProcessLookupFailure(ProcessProbeError):
    """The OS could not locate the process when the watcher started."""


class ProcessWaitFailure(ProcessProbeError):
    """Waiting for the process failed for a reason other than a normal exit."""


class ProcessProbe(ABC):
    """
    Lookup and blocking wait on OS processes.
    """

    @abstractmethod
    def lookup(self, pid: int) -> Any:
        """
        Obtain a handle for a running process.

        Raises:
            ProcessLookupFailure: If no such process exists
        """

    @abstractmethod
    def wait(self, handle: Any) -> Optional[int]:
        """
        Block until the process behind ``handle`` terminates.

        Returns:
            The exit code, or None when the OS does not expose one
            (e.g. the process is not a child of this agent)

        Raises:
            ProcessWaitFailure: If the wait itself failed
        """


class PsutilProcessProbe(ProcessProbe):
    """ProcessProbe backed by psutil.Process."""

    def lookup(self, pid: int) -> psutil.Process:
        try:
            return psutil.Process(pid)
        except psutil.NoSuchProcess as e:
            raise ProcessLookupFailure(pid, f"process {pid} not found: {e}") from e
        except (psutil.Error, ValueError) as e:
            raise ProcessLookupFailure(pid, str(e)) from e

    def wait(self, handle: psutil.Process) -> Optional[int]:
        try:
            return handle.wait()
        except psutil.NoSuchProcess:
            # Gone between lookup and wait; treat as exited without a code.
            logger.debug(f"Process {handle.pid} vanished before wait")
            return None
        except (psutil.Error, OSError) as e:
            raise ProcessWaitFailure(handle.pid, f"wait for process {handle.pid} failed: {e}") from e
