"""
Data models for the orchestrator.

Request Models:
- Launch strategies and completion kinds
- Run requests, their params, and the exit info a run resolves with
- Static file operation items

Build Models:
- Build stats, assets and chunks produced by a build pass
- The rendering profile for diagnostics
- Build outcomes and the typed compile result

Configuration Models:
- Runner, bundle, build and logging settings
"""

from .build import (
    DEFAULT_STATS_FORMAT,
    Asset,
    BuildOutcome,
    BuildStats,
    Chunk,
    CompileResult,
    StatsFormat,
    format_size,
)
from .config import AppConfig, BuildConfig, BundlesConfig, LoggingConfig, RunnerConfig
from .requests import (
    CompletionKind,
    FileOpItem,
    ProcessExitInfo,
    RunParams,
    RunRequest,
    Strategy,
)

__all__ = [
    # Requests
    "CompletionKind",
    "FileOpItem",
    "ProcessExitInfo",
    "RunParams",
    "RunRequest",
    "Strategy",
    # Build
    "DEFAULT_STATS_FORMAT",
    "Asset",
    "BuildOutcome",
    "BuildStats",
    "Chunk",
    "CompileResult",
    "StatsFormat",
    "format_size",
    # Configuration
    "AppConfig",
    "BuildConfig",
    "BundlesConfig",
    "LoggingConfig",
    "RunnerConfig",
]
