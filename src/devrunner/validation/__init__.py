"""
Validation and error handling for the devrunner package.

This module provides input validation and the exception types shared by the
process, bundle and build layers.
"""

from .exceptions import (
    BuildEngineError,
    BuildError,
    ErrorSeverity,
    OrchestratorError,
    SpawnError,
    ValidationError,
    handle_config_error,
    handle_error,
    handle_subprocess_error,
)
from .validators import (
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
    validate_string_list,
)

__all__ = [
    # Exceptions
    "BuildEngineError",
    "BuildError",
    "ErrorSeverity",
    "OrchestratorError",
    "SpawnError",
    "ValidationError",
    # Handlers
    "handle_config_error",
    "handle_error",
    "handle_subprocess_error",
    # Validators
    "validate_enum_choice",
    "validate_non_empty_string",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_string_list",
]
