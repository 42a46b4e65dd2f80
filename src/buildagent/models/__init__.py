"""
Data models for the build tracker.

Build Models:
- Build identity and reporting metadata
- Terminal completion records and exit dispositions
- Watcher lifecycle states

Configuration Models:
- Tracker settings and the root agent configuration
"""

from .build import BuildCompletion, BuildInfo, ExitDisposition, WatcherState
from .config import AgentConfig, TrackerConfig

__all__ = [
    # Build
    "BuildCompletion",
    "BuildInfo",
    "ExitDisposition",
    "WatcherState",
    # Configuration
    "AgentConfig",
    "TrackerConfig",
]
