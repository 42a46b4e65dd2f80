"""
Validation and error handling for the buildagent package.

This module provides input validation and error handling with consistent
error reporting across the tracker.
"""

from .exceptions import (
    ErrorSeverity,
    ValidationError,
    handle_error,
    handle_config_error,
    handle_file_error,
    handle_process_error,
    handle_cli_error,
)

from .validators import (
    validate_build_id,
    validate_enum_choice,
    validate_file_mode,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Core functionality
    "ErrorSeverity",
    "ValidationError", 
    "handle_error",
    "handle_config_error",
    "handle_file_error", 
    "handle_process_error",
    "handle_cli_error",
    # Validators
    "validate_build_id",
    "validate_enum_choice", 
    "validate_file_mode",
    "validate_non_empty_string",
    "validate_positive_float",
    "validate_positive_integer",
]
