"""
Configuration management and singleton pattern.

This module provides the main configuration loading interface, caching the
validated configuration so it is loaded only once per process.
"""

import logging
from pathlib import Path
from typing import Optional

from ..models.config import AgentConfig
from ..validation import handle_config_error, ErrorSeverity
from .loader import load_main_config
from .validators import validate_agent_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[AgentConfig] = None

# Default config shipped next to the sources. Overridden by set_config_path()
# (tests, the CLI --config flag).
_DEFAULT_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"
_CONFIG_FILE_PATH = _DEFAULT_CONFIG_FILE_PATH


def set_config_path(config_path: Path) -> None:
    """
    Set a custom configuration file path.
    
    Clears any cached configuration so the next get_config() call loads
    from the new path.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """Clear the cached configuration, forcing a reload on next access."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def _load_config(config_path: Path) -> AgentConfig:
    """
    Load and validate the agent configuration from a TOML file.
    
    A missing default config file yields built-in defaults; a missing file
    that was explicitly configured is an error.
    
    Raises:
        FileNotFoundError: If an explicitly configured file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the file is malformed
    """
    if config_path == _DEFAULT_CONFIG_FILE_PATH and not config_path.exists():
        logger.info(f"No configuration file at {config_path}, using defaults")
        return validate_agent_config({}, base_dir=Path.cwd())

    try:
        agent_data = load_main_config(config_path)
        app_config = validate_agent_config(agent_data, base_dir=config_path.parent)
        logger.info(f"Loaded configuration, sentinel dir: {app_config.tracker.sentinel_dir}")
        return app_config
    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def get_config() -> AgentConfig:
    """
    Get the global agent configuration, loading it if necessary.
    
    Returns:
        The cached AgentConfig instance
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    """Check if configuration has been loaded and cached."""
    return _CONFIG is not None


def get_config_info() -> dict:
    """
    Get information about the current configuration state.
    
    Returns:
        Dictionary with configuration metadata
    """
    return {
        "config_loaded": is_config_loaded(),
        "config_path": str(_CONFIG_FILE_PATH),
        "sentinel_dir": str(_CONFIG.tracker.sentinel_dir) if _CONFIG else None,
    }
