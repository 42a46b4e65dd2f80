"""
System interaction utilities.

Provides the process observation capability the tracker uses to look up
worker processes and wait for them to terminate.
"""

from .processes import (
    ProcessLookupFailure,
    ProcessProbe,
    ProcessProbeError,
    ProcessWaitFailure,
    PsutilProcessProbe,
)

__all__ = [
    "ProcessLookupFailure",
    "ProcessProbe",
    "ProcessProbeError",
    "ProcessWaitFailure",
    "PsutilProcessProbe",
]
