"""
Configuration management for the devrunner package.

This module provides a clean interface for loading, validating, and accessing
configuration data from TOML files with singleton pattern management.
"""

# Main configuration interface
from .manager import (
    clear_config_cache,
    get_config,
    get_config_info,
    get_config_path,
    is_config_loaded,
    load_app_config,
    set_config_path,
)

# For advanced usage - direct access to loaders and validators
from .loader import load_main_config, load_toml_file
from .validators import (
    validate_app_config,
    validate_build_config,
    validate_bundles_config,
    validate_logging_config,
    validate_runner_config,
)

__all__ = [
    # Main interface
    "get_config",
    "set_config_path",
    "get_config_path",
    "clear_config_cache",
    "is_config_loaded",
    "get_config_info",
    "load_app_config",
    # Advanced interface
    "load_toml_file",
    "load_main_config",
    "validate_app_config",
    "validate_build_config",
    "validate_bundles_config",
    "validate_logging_config",
    "validate_runner_config",
]
