"""
Configuration validation utilities.

Turns the raw `[agent]` table into validated configuration models.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.config import AgentConfig, TrackerConfig
from ..validation import (
    ValidationError,
    validate_enum_choice,
    validate_file_mode,
    validate_non_empty_string,
    validate_positive_float,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def validate_tracker_config(agent_data: Dict[str, Any], base_dir: Optional[Path] = None) -> TrackerConfig:
    """
    Validate and create a TrackerConfig from the raw `[agent]` table.

    Args:
        agent_data: Raw `[agent]` table from TOML
        base_dir: Directory that a relative `work_dir` is resolved against

    Returns:
        Validated TrackerConfig instance

    Raises:
        ValidationError: If validation fails
    """
    tracker_settings = agent_data.get("tracker", {})
    if not isinstance(tracker_settings, dict):
        raise ValidationError("agent.tracker must be a table", field_name="agent.tracker")

    work_dir_raw = agent_data.get("work_dir", ".")
    validate_non_empty_string(work_dir_raw, field_name="agent.work_dir")
    work_dir = Path(work_dir_raw).expanduser()
    if not work_dir.is_absolute() and base_dir is not None:
        work_dir = base_dir / work_dir

    sentinel_dir_name = validate_non_empty_string(
        tracker_settings.get("sentinel_dir_name", "build_tmp"),
        field_name="agent.tracker.sentinel_dir_name",
    )
    if "/" in sentinel_dir_name or "\\" in sentinel_dir_name:
        raise ValidationError(
            "agent.tracker.sentinel_dir_name must be a single directory name",
            field_name="agent.tracker.sentinel_dir_name",
            value=sentinel_dir_name,
        )

    sentinel_file_mode = validate_file_mode(
        tracker_settings.get("sentinel_file_mode", 0o777),
        field_name="agent.tracker.sentinel_file_mode",
    )

    thread_name_prefix = validate_non_empty_string(
        tracker_settings.get("thread_name_prefix", "BuildWatcher"),
        field_name="agent.tracker.thread_name_prefix",
    )

    idle_wait_timeout = validate_positive_float(
        tracker_settings.get("idle_wait_timeout", 0.0),
        min_value=0.0,
        field_name="agent.tracker.idle_wait_timeout",
    )

    return TrackerConfig(
        work_dir=work_dir,
        sentinel_dir_name=sentinel_dir_name,
        sentinel_file_mode=sentinel_file_mode,
        thread_name_prefix=thread_name_prefix,
        idle_wait_timeout=idle_wait_timeout,
    )


def validate_agent_config(agent_data: Dict[str, Any], base_dir: Optional[Path] = None) -> AgentConfig:
    """
    Validate the whole `[agent]` table.

    Raises:
        ValidationError: If validation fails
    """
    if not isinstance(agent_data, dict):
        raise ValidationError("agent must be a table", field_name="agent")

    logging_settings = agent_data.get("logging", {})
    log_level = validate_enum_choice(
        logging_settings.get("level", "INFO"),
        choices=LOG_LEVELS,
        field_name="agent.logging.level",
        case_sensitive=False,
    )

    tracker = validate_tracker_config(agent_data, base_dir=base_dir)
    logger.debug(f"Validated tracker config: {tracker}")
    return AgentConfig(tracker=tracker, log_level=log_level)
