"""
Command-line interface for the buildagent package.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
