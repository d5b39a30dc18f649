"""
Logging configuration.

Library modules only create loggers; applications embedding the orchestrator
call setup_logging() once, or configure_logging() with the loaded [logging]
table (Orchestrator does this when built with apply_logging=True).
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from .models.config import LoggingConfig

DEFAULT_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger with a stdout handler and an optional file.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path; parent directories are created
        format_string: Custom format string

    Returns:
        The root logger
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Apply the ``[logging]`` table of config.toml."""
    return setup_logging(level=config.level, log_file=config.file)
