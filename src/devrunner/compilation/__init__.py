"""
Compilation lifecycle for the devrunner package.

This module provides the build engine boundary, the one-shot/watch compile
controller and the diagnostics reporter.
"""

from .controller import CompileController, FirstBuildTracker, WatchState
from .engine import BuildEngine, CommandBuildEngine, WatchOptions, WatchSession
from .reporter import DiagnosticsReporter

__all__ = [
    "BuildEngine",
    "CommandBuildEngine",
    "CompileController",
    "DiagnosticsReporter",
    "FirstBuildTracker",
    "WatchOptions",
    "WatchSession",
    "WatchState",
]
