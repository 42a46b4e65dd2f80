"""
Completion sinks.

A completion sink receives the single terminal status of each tracked
build. The tracker guarantees one report per registered build; if a sink is
ever invoked twice for the same build, the last report wins at the sink's
discretion.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from ..models.build import BuildCompletion, BuildInfo

logger = logging.getLogger(__name__)


class CompletionSink(ABC):
    """Receives terminal build statuses from process watchers."""

    @abstractmethod
    def report(self, completion: BuildCompletion) -> None:
        """
        Handle the terminal status of one build.

        Called from a watcher thread; implementations must be thread-safe.
        """


class CallbackCompletionSink(CompletionSink):
    """
    Adapts a plain callable taking ``(build_info, success, message)``.
    """

    def __init__(self, callback: Callable[[BuildInfo, bool, str], None]):
        self.callback = callback

    def report(self, completion: BuildCompletion) -> None:
        self.callback(completion.build_info, completion.success, completion.message)


class LoggingCompletionSink(CompletionSink):
    """Logs each completion; used when no reporting collaborator is wired in."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or globals()['logger']

    def report(self, completion: BuildCompletion) -> None:
        payload = json.dumps(
            {
                **completion.build_info.to_dict(),
                "success": completion.success,
                "message": completion.message,
                "disposition": completion.disposition.value,
            },
            ensure_ascii=False,
        )
        if completion.success:
            self.logger.info(f"build finished: {payload}")
        else:
            self.logger.warning(f"build failed: {payload}")


class CollectingCompletionSink(CompletionSink):
    """Keeps every completion in memory, in arrival order."""

    def __init__(self):
        self._completions: List[BuildCompletion] = []
        self._condition = threading.Condition()

    def report(self, completion: BuildCompletion) -> None:
        with self._condition:
            self._completions.append(completion)
            self._condition.notify_all()

    @property
    def completions(self) -> List[BuildCompletion]:
        with self._condition:
            return list(self._completions)

    def wait_for(self, count: int, timeout: Optional[float] = None) -> bool:
        """
        Block until at least ``count`` completions have arrived.

        Returns:
            True if the count was reached, False on timeout
        """
        with self._condition:
            return self._condition.wait_for(lambda: len(self._completions) >= count, timeout=timeout)
