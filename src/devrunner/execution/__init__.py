"""
Process execution for the devrunner package.

This module provides the awaitable process runner, the concurrent batch
runner built on it, and static file operations built on both.
"""

from .batch_runner import BatchRunner, normalize_requests
from .file_ops import StaticFileOps, copy_command, move_command
from .process_runner import CompletionChannel, ProcessRunner, classify_returncode

__all__ = [
    "BatchRunner",
    "CompletionChannel",
    "ProcessRunner",
    "StaticFileOps",
    "classify_returncode",
    "copy_command",
    "move_command",
    "normalize_requests",
]
