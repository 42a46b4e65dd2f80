"""
Build lifecycle tracking.

Components:
- BuildManager: claim/register entry points and the query surface
- PendingRegistry / ActiveRegistry: claimed and running builds
- SentinelFile: per-build crash marker used to detect abnormal exits
- ProcessWatcher: per-process supervisor that reports exactly once
- CompletionSink: where terminal statuses are delivered
"""

from .build_manager import BuildManager
from .completion import (
    CallbackCompletionSink,
    CollectingCompletionSink,
    CompletionSink,
    LoggingCompletionSink,
)
from .registry import ActiveRegistry, PendingRegistry
from .sentinel import BUILD_MSG_FILE_ENV, DEFAULT_CRASH_MESSAGE, SentinelFile
from .watcher import ProcessWatcher, resolve_completion

__all__ = [
    "BuildManager",
    "CallbackCompletionSink",
    "CollectingCompletionSink",
    "CompletionSink",
    "LoggingCompletionSink",
    "ActiveRegistry",
    "PendingRegistry",
    "BUILD_MSG_FILE_ENV",
    "DEFAULT_CRASH_MESSAGE",
    "SentinelFile",
    "ProcessWatcher",
    "resolve_completion",
]
