"""
Configuration data models.

This module contains the configuration structures for process launching,
bundle discovery, the build engine and logging, loaded from ``config.toml``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class RunnerConfig:
    """
    Settings for launching child processes, from the ``[runner]`` table.
    """

    # Value of RUNTIME_MODE for children when the caller's environment lacks it.
    runtime_mode_default: str = "development"
    # Upper bound on simultaneously running batch requests; None is unbounded.
    max_concurrency: Optional[int] = None
    # Interpreter used by the background strategy to run built artifacts;
    # None (an empty string in config.toml) executes the artifact directly.
    background_interpreter: Optional[str] = "node"
    # Shell used by the shell strategy.
    shell_executable: str = "/bin/sh"
    # Grace period per phase when an explicit terminate is requested.
    terminate_timeout: float = 3.0


@dataclass
class BundlesConfig:
    """
    Bundle discovery conventions, from the ``[bundles]`` table.
    """

    # Directory, relative to the working directory, whose entries are bundles.
    directory: str = "app/bundles"
    # Directory holding built server artifacts.
    build_dir: str = "build"
    # Suffix appended to a bundle name to get its artifact file.
    artifact_suffix: str = ".js"
    # Watcher wrapper that restarts an artifact when it changes.
    hot_wrapper: str = "scripts/nodemon"

    def artifact_path(self, name: str) -> str:
        return f"{self.build_dir}/{name}{self.artifact_suffix}"


@dataclass
class BuildConfig:
    """
    Configuration handed to the build engine, from the ``[build]`` table.
    """

    # Shell command that performs one build pass.
    command: str
    name: str = ""
    # Working directory for the build command.
    cwd: Path = field(default_factory=Path.cwd)
    # Directory scanned for produced assets after each pass.
    output_dir: Optional[Path] = None
    # Files or directories whose changes trigger a rebuild in watch mode.
    watch_paths: List[Path] = field(default_factory=list)
    poll_interval: float = 0.5
    # Quiet period after a change before the rebuild starts.
    aggregate_timeout: float = 0.2
    # Engine version string reported in stats.
    version: Optional[str] = None


@dataclass
class LoggingConfig:
    """Logging settings, from the ``[logging]`` table."""

    level: str = "INFO"
    file: Optional[Path] = None


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    runner: RunnerConfig = field(default_factory=RunnerConfig)
    bundles: BundlesConfig = field(default_factory=BundlesConfig)
    # None when config.toml has no [build] table.
    build: Optional[BuildConfig] = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)
