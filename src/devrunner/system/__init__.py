"""
System interaction: environment snapshots, process launch strategies and
process tree termination.
"""

from .environment import DEFAULT_RUNTIME_MODE, RUNTIME_MODE_VAR, RuntimeEnvironment
from .launchers import (
    BackgroundLauncher,
    ForegroundLauncher,
    Launcher,
    ShellLauncher,
    create_launchers,
)
from .processes import terminate_process_tree

__all__ = [
    # Environment
    "DEFAULT_RUNTIME_MODE",
    "RUNTIME_MODE_VAR",
    "RuntimeEnvironment",
    # Launchers
    "BackgroundLauncher",
    "ForegroundLauncher",
    "Launcher",
    "ShellLauncher",
    "create_launchers",
    # Processes
    "terminate_process_tree",
]
