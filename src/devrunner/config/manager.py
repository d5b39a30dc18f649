"""
Configuration management and singleton pattern.

This module provides the main configuration loading and management interface,
implementing a singleton pattern to ensure configuration is loaded only once.
"""

import logging
from pathlib import Path
from typing import Optional

from ..models.config import AppConfig
from ..validation import ErrorSeverity, handle_config_error
from .loader import load_main_config
from .validators import validate_app_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[AppConfig] = None

# Path explicitly chosen with set_config_path(); None means the default
# location, conf/config.toml under the current working directory.
_CONFIG_FILE_PATH: Optional[Path] = None

DEFAULT_CONFIG_RELPATH = Path("conf") / "config.toml"


def set_config_path(config_path: Path) -> None:
    """
    Set a custom configuration file path.

    Clears any cached configuration so the next get_config() reloads from
    the new path.

    Args:
        config_path: Path to the main config.toml file
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """
    Clear the cached configuration, forcing a reload on next access.
    """
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def get_config_path() -> Path:
    """The config.toml path get_config() would load."""
    return _CONFIG_FILE_PATH or Path.cwd() / DEFAULT_CONFIG_RELPATH


def load_app_config(config_path: Optional[Path]) -> AppConfig:
    """
    Load and validate the application configuration.

    With ``config_path=None`` the default location is tried and, when no file
    exists there, the built-in defaults are returned. An explicit path that
    does not exist is an error.

    Raises:
        FileNotFoundError: If an explicit config file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the file is malformed
    """
    if config_path is None:
        default_path = Path.cwd() / DEFAULT_CONFIG_RELPATH
        if not default_path.exists():
            logger.info(f"No configuration file at {default_path}, using defaults")
            return AppConfig()
        config_path = default_path

    try:
        main_config_data = load_main_config(config_path)
        app_config = validate_app_config(main_config_data, base_dir=config_path.parent)
        logger.info(f"Successfully loaded configuration from {config_path}")
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


def get_config() -> AppConfig:
    """
    Get the global application configuration, loading it if necessary.

    Returns:
        The singleton AppConfig instance
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_app_config(_CONFIG_FILE_PATH)
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
        "config_path": str(get_config_path()),
        "has_build": bool(_CONFIG and _CONFIG.build),
        "max_concurrency": _CONFIG.runner.max_concurrency if _CONFIG else None,
    }
