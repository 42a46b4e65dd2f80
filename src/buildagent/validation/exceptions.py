"""
Exception handling and error management.

This module provides the error handling helpers shared by the tracker:
consistent severity-based logging with optional re-raising, plus the
validation exception used by configuration and input checks.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ValidationError(Exception):
    """
    Exception raised when validation fails.
    
    This is the main exception type used for configuration and input checks.
    """
    
    def __init__(self, message: str, field_name: Optional[str] = None, 
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Handle errors with consistent logging and optional re-raising.
    
    Args:
        error: The exception that occurred
        context: Context description of where the error occurred
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']
    
    error_msg = f"Error in {context}: {error}"
    
    # Handle both enum and string severity values
    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value
    
    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=True)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=True)
    
    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_file_error(error: Exception, context: str, **kwargs) -> None:
    """Handle file-related errors."""
    handle_error(error, f"file {context}", **kwargs)


def handle_process_error(error: Exception, pid: int, **kwargs) -> None:
    """Handle errors raised while observing a build process."""
    handle_error(error, f"build process pid[{pid}]", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Handle CLI-related errors and exit."""
    exit_code = kwargs.pop('exit_code', 1)
    
    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)
    
    sys.exit(exit_code)
