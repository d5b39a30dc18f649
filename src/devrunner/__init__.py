"""
devrunner: build/run orchestration.

This package launches external processes (build scripts, servers, file
copies) behind one awaitable interface and drives a bundling engine in
one-shot or watch mode, normalizing its diagnostic output.

The package is organized into specialized modules:
- config: Configuration loading and validation
- models: Data structures and type definitions
- validation: Input validation and error types
- system: Environment snapshots, launch strategies, process termination
- execution: Process runner, batch runner, static file operations
- bundles: Bundle discovery
- compilation: Build engine boundary, compile controller, diagnostics

Usage:
    import asyncio
    from devrunner import Orchestrator

    async def main():
        orchestrator = Orchestrator()
        await orchestrator.compile()
        await orchestrator.run_async(orchestrator.get_servers(hot=True))

    asyncio.run(main())
"""

# Main interfaces
from .config import clear_config_cache, get_config, set_config_path
from .log_config import configure_logging, setup_logging
from .orchestrator import Orchestrator

# Components
from .bundles import BundleDiscovery
from .compilation import (
    BuildEngine,
    CommandBuildEngine,
    CompileController,
    DiagnosticsReporter,
    WatchOptions,
    WatchSession,
)
from .execution import BatchRunner, ProcessRunner, StaticFileOps
from .system import RuntimeEnvironment

# Models
from .models import (
    AppConfig,
    BuildConfig,
    BuildOutcome,
    BuildStats,
    CompileResult,
    CompletionKind,
    FileOpItem,
    ProcessExitInfo,
    RunParams,
    RunRequest,
    Strategy,
)

# Errors
from .validation import (
    BuildEngineError,
    BuildError,
    OrchestratorError,
    SpawnError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "Orchestrator",
    "get_config",
    "set_config_path",
    "clear_config_cache",
    "setup_logging",
    "configure_logging",
    # Components
    "BatchRunner",
    "BuildEngine",
    "BundleDiscovery",
    "CommandBuildEngine",
    "CompileController",
    "DiagnosticsReporter",
    "ProcessRunner",
    "RuntimeEnvironment",
    "StaticFileOps",
    "WatchOptions",
    "WatchSession",
    # Models
    "AppConfig",
    "BuildConfig",
    "BuildOutcome",
    "BuildStats",
    "CompileResult",
    "CompletionKind",
    "FileOpItem",
    "ProcessExitInfo",
    "RunParams",
    "RunRequest",
    "Strategy",
    # Errors
    "BuildEngineError",
    "BuildError",
    "OrchestratorError",
    "SpawnError",
    "ValidationError",
]
