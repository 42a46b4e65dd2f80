"""
buildagent: build-process lifecycle tracking for build agents.

This package tracks the worker processes an agent launches for its builds:
which builds were claimed, which processes are executing them, and how
each process ended. Every build that reaches a running process is reported
exactly once to a completion sink.

The package is organized into specialized modules:
- config: Configuration loading and validation
- models: Build records, exit dispositions and configuration types
- validation: Input validation and error handling
- system: Process lookup and wait capability
- job: Registries, sentinel files, process watchers and the BuildManager
- worker: Worker-side helper for the build message file
- cli: Command-line interface

Usage:
    from buildagent import BuildManager, BuildInfo, LoggingCompletionSink, get_config
    manager = BuildManager.from_config(get_config().tracker, sink=LoggingCompletionSink())
    manager.add_pre_instance("b1")
    manager.add_build(pid, BuildInfo(build_id="b1", vm_seq_id=1))
"""

from .config import get_config, clear_config_cache, set_config_path
from .job import (
    BuildManager,
    CallbackCompletionSink,
    CollectingCompletionSink,
    CompletionSink,
    LoggingCompletionSink,
    SentinelFile,
)
from .models import (
    AgentConfig,
    BuildCompletion,
    BuildInfo,
    ExitDisposition,
    TrackerConfig,
)
from .system import ProcessLookupFailure, ProcessProbe, ProcessWaitFailure, PsutilProcessProbe
from .validation import ValidationError

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "get_config",
    "clear_config_cache", 
    "set_config_path",
    # Tracking
    "BuildManager",
    "CallbackCompletionSink",
    "CollectingCompletionSink",
    "CompletionSink",
    "LoggingCompletionSink",
    "SentinelFile",
    # Models
    "AgentConfig",
    "BuildCompletion",
    "BuildInfo",
    "ExitDisposition",
    "TrackerConfig",
    # Process observation
    "ProcessLookupFailure",
    "ProcessProbe",
    "ProcessWaitFailure",
    "PsutilProcessProbe",
    # Validation
    "ValidationError",
]
