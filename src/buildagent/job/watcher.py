"""
Process watcher.

One watcher supervises one registered worker process. It moves through
SPAWNED -> WATCHING -> RESOLVED -> REPORTED:

- SPAWNED -> WATCHING: look the pid up. A failed lookup skips the wait and
  resolves immediately as a failure.
- WATCHING -> RESOLVED: block until the process exits, then read the
  build's sentinel file once and resolve the final status.
- RESOLVED -> REPORTED: drop the active registry entry, then hand the
  completion to the sink.

Nothing is retried. Errors end the build, never the tracker.
"""

import logging
import threading
from typing import Optional

from ..models.build import BuildCompletion, BuildInfo, ExitDisposition, WatcherState
from ..system.processes import ProcessLookupFailure, ProcessProbe, ProcessWaitFailure
from ..validation import ErrorSeverity, handle_error, handle_process_error
from .completion import CompletionSink
from .registry import ActiveRegistry
from .sentinel import SentinelFile

logger = logging.getLogger(__name__)


def resolve_completion(build_info: BuildInfo, pid: int, exit_code: Optional[int],
                       wait_error: Optional[str], sentinel_message: str) -> BuildCompletion:
    """
    Combine the wait outcome and the sentinel content into a final status.

    Non-empty sentinel content always wins and marks the build failed. A
    wait error is only used as the message when the sentinel is empty.
    With neither, the build succeeded.
    """
    if sentinel_message:
        return BuildCompletion(build_info, False, sentinel_message,
                               ExitDisposition.WORKER_REPORTED_FAILURE, pid, exit_code)
    if wait_error:
        return BuildCompletion(build_info, False, wait_error,
                               ExitDisposition.PROCESS_WAIT_FAILURE, pid, exit_code)
    return BuildCompletion(build_info, True, f"worker pid[{pid}] exit",
                           ExitDisposition.NORMAL_EXIT, pid, exit_code)


class ProcessWatcher:
    """
    Supervises one worker process and reports its completion exactly once.

    The BuildInfo is captured at registration, so the report always carries
    the build this watcher was started for.
    """

    def __init__(self, pid: int, build_info: BuildInfo, probe: ProcessProbe,
                 sentinel: SentinelFile, registry: ActiveRegistry, sink: CompletionSink):
        self.pid = pid
        self.build_info = build_info
        self.probe = probe
        self.sentinel = sentinel
        self.registry = registry
        self.sink = sink
        self.state = WatcherState.SPAWNED
        self.completion: Optional[BuildCompletion] = None
        self._done = threading.Event()

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait until the completion has been handed to the sink."""
        return self._done.wait(timeout)

    def run(self) -> None:
        """Watch the process to completion. Never raises."""
        try:
            completion = self._resolve()
        except Exception as e:
            handle_process_error(e, self.pid, severity=ErrorSeverity.ERROR, reraise=False, logger=logger)
            # Still SPAWNED means the lookup itself blew up.
            if self.state is WatcherState.SPAWNED:
                disposition = ExitDisposition.PROCESS_LOOKUP_FAILURE
            else:
                disposition = ExitDisposition.PROCESS_WAIT_FAILURE
            completion = BuildCompletion(
                self.build_info, False, f"build process err, pid: {self.pid}, err: {e}",
                disposition, self.pid,
            )
            self.state = WatcherState.RESOLVED

        try:
            self._report(completion)
        finally:
            self._done.set()

    def _resolve(self) -> BuildCompletion:
        try:
            handle = self.probe.lookup(self.pid)
        except ProcessLookupFailure as e:
            err_msg = f"build process err, pid: {self.pid}, err: {e}"
            logger.warning(err_msg)
            self.state = WatcherState.RESOLVED
            return BuildCompletion(self.build_info, False, err_msg,
                                   ExitDisposition.PROCESS_LOOKUP_FAILURE, self.pid)

        self.state = WatcherState.WATCHING
        exit_code = None
        wait_error = None
        try:
            exit_code = self.probe.wait(handle)
        except ProcessWaitFailure as e:
            wait_error = str(e)

        msg = self.sentinel.read(self.build_info.build_id, self.build_info.vm_seq_id)
        logger.info(
            f"build[{self.build_info.build_id}] pid[{self.pid}] finish, "
            f"exit_code={exit_code} err={wait_error}, msg={msg}"
        )
        self.state = WatcherState.RESOLVED
        return resolve_completion(self.build_info, self.pid, exit_code, wait_error, msg)

    def _report(self, completion: BuildCompletion) -> None:
        self.registry.unregister(self.pid, expected=self.build_info)
        self.completion = completion
        try:
            self.sink.report(completion)
        except Exception as e:
            handle_error(
                error=e,
                context=f"reporting completion of build {self.build_info.build_id}",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )
        self.state = WatcherState.REPORTED
