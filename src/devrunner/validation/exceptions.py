"""
Exception types and error handling helpers.

This module keeps the error handling small: one helper that logs an error at
a chosen severity and optionally re-raises it, a validation error for bad
inputs, and the runtime errors raised by the process and build layers.
"""

import logging
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
    Exception raised when validation of an input or config value fails.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class OrchestratorError(Exception):
    """Base class for runtime failures of the process and build layers."""


class SpawnError(OrchestratorError):
    """
    Raised when a child process could not be created.

    Only surfaces to callers that chose to await the ``ERRORED`` completion.
    """

    def __init__(self, target: str, cause: BaseException):
        super().__init__(f"Failed to launch '{target}': {cause}")
        self.target = target
        self.cause = cause


class BuildEngineError(OrchestratorError):
    """The build engine could not run the build at all."""


class BuildError(OrchestratorError):
    """
    Raised by strict compilation when the first build pass failed.

    The failing outcome is kept on the exception so callers can still
    inspect the stats.
    """

    def __init__(self, message: str, outcome: Any = None):
        super().__init__(message)
        self.outcome = outcome


def handle_error(
    error: BaseException,
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

    if isinstance(severity, str):
        severity_str = severity.lower()
    else:
        severity_str = severity.value

    if severity_str == "debug":
        effective_logger.debug(error_msg, exc_info=error)
    elif severity_str == "info":
        effective_logger.info(error_msg)
    elif severity_str == "warning":
        effective_logger.warning(error_msg)
    elif severity_str == "error":
        effective_logger.error(error_msg)
    elif severity_str == "critical":
        effective_logger.critical(error_msg, exc_info=error)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_subprocess_error(error: BaseException, command: str, **kwargs) -> None:
    """Handle subprocess-related errors."""
    handle_error(error, f"subprocess command '{command}'", **kwargs)
