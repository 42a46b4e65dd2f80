"""
Validation functions for tracker configuration and build input.
"""

import re
from typing import Any, List, Optional

from .exceptions import ValidationError

# Build ids end up in sentinel file names, so path separators are rejected.
_BUILD_ID_PATTERN = re.compile(r'^[A-Za-z0-9_.-]+$')


def validate_positive_integer(
    value: Any, 
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is an integer inside the given bounds.
    
    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated
        
    Returns:
        Validated integer value
        
    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_positive_float(
    value: Any, 
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a number inside the given bounds.
    
    Raises:
        ValidationError: If validation fails
    """
    try:
        float_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    if float_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and float_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    return float_value


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    """Validate that a value is a string with non-whitespace content."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f"{field_name} must be a non-empty string",
            field_name=field_name,
            value=value
        )
    return value


def validate_build_id(build_id: Any, field_name: str = "build_id") -> str:
    """
    Validate a build identifier.
    
    Build ids are used to derive sentinel file names, so only characters
    that are safe inside a single path component are accepted.
    
    Raises:
        ValidationError: If the id is empty or contains unsafe characters
    """
    validate_non_empty_string(build_id, field_name=field_name)
    if not _BUILD_ID_PATTERN.match(build_id) or build_id in (".", ".."):
        raise ValidationError(
            f"{field_name} must contain only alphanumeric characters, dots, underscores, and hyphens: {build_id}",
            field_name=field_name,
            value=build_id
        )
    return build_id


def validate_file_mode(value: Any, field_name: str = "file_mode") -> int:
    """
    Validate a POSIX permission mode.
    
    Accepts an integer or an octal string such as ``"0o777"`` or ``"777"``.
    
    Returns:
        The mode as an integer
        
    Raises:
        ValidationError: If the value is not a mode between 0 and 0o777
    """
    if isinstance(value, str):
        text = value.strip().lower()
        if text.startswith("0o"):
            text = text[2:]
        try:
            mode = int(text, 8)
        except ValueError:
            raise ValidationError(
                f"{field_name} must be an octal permission string, got {value}",
                field_name=field_name,
                value=value
            )
    elif isinstance(value, int) and not isinstance(value, bool):
        mode = value
    else:
        raise ValidationError(
            f"{field_name} must be an integer or octal string, got {value}",
            field_name=field_name,
            value=value
        )
    
    if mode < 0 or mode > 0o777:
        raise ValidationError(
            f"{field_name} must be between 0o000 and 0o777, got {oct(mode)}",
            field_name=field_name,
            value=value
        )
    return mode


def validate_enum_choice(
    value: Any, 
    choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.
    
    Args:
        value: Value to validate
        choices: List of allowed choices
        field_name: Name of the field being validated
        case_sensitive: Whether the comparison should be case-sensitive
        
    Returns:
        Validated choice, in the spelling used by ``choices``
        
    Raises:
        ValidationError: If value is not in choices
    """
    str_value = str(value)
    
    if case_sensitive:
        if str_value not in choices:
            raise ValidationError(
                f"{field_name} must be one of {choices}, got {value}",
                field_name=field_name,
                value=value
            )
        return str_value

    lower_choices = [choice.lower() for choice in choices]
    lower_value = str_value.lower()
    if lower_value not in lower_choices:
        raise ValidationError(
            f"{field_name} must be one of {choices}, got {value}",
            field_name=field_name,
            value=value
        )
    return choices[lower_choices.index(lower_value)]
