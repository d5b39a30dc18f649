"""
Orchestrator facade.

One object exposing the whole surface: run, run_async, get_servers, copy,
move, compile and compile_and_watch. It wires the specialized components
together from an AppConfig and delegates to them.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from .bundles import BundleDiscovery
from .compilation import CompileController, DiagnosticsReporter, WatchOptions
from .compilation.controller import EngineFactory
from .compilation.engine import CommandBuildEngine
from .config import get_config
from .execution import BatchRunner, ProcessRunner, StaticFileOps
from .log_config import configure_logging
from .models import AppConfig, CompileResult, ProcessExitInfo, RunRequest
from .system import RuntimeEnvironment

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Process orchestration and compilation lifecycle behind one object.

    Components are built from ``config`` (the loaded config.toml when not
    given) with dependency injection, so each can be replaced in tests.
    With ``apply_logging`` the ``[logging]`` table configures the root logger.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        environment: Optional[RuntimeEnvironment] = None,
        cwd: Optional[Path] = None,
        engine_factory: EngineFactory = CommandBuildEngine,
        reporter: Optional[DiagnosticsReporter] = None,
        apply_logging: bool = False,
    ):
        self.config = config or get_config()
        if apply_logging:
            configure_logging(self.config.logging)

        self.process_runner = ProcessRunner(self.config.runner, environment=environment)
        self.batch_runner = BatchRunner(self.process_runner, max_concurrency=self.config.runner.max_concurrency)
        self.file_ops = StaticFileOps(self.batch_runner)
        self.discovery = BundleDiscovery(self.config.bundles, cwd=cwd)
        self.compiler = CompileController(engine_factory=engine_factory, reporter=reporter)

    async def run(self, target: str, params: Any = None) -> ProcessExitInfo:
        return await self.process_runner.run(target, params)

    async def run_async(self, requests: Iterable[Any]) -> List[ProcessExitInfo]:
        return await self.batch_runner.run_async(requests)

    def get_servers(self, bundles: Optional[Sequence[str]] = None, hot: bool = False) -> List[RunRequest]:
        return self.discovery.get_servers(bundles=bundles, hot=hot)

    async def start_servers(self, bundles: Optional[Sequence[str]] = None, hot: bool = False) -> List[ProcessExitInfo]:
        """Resolve the servers and run them all; resolves when every one has exited."""
        return await self.run_async(self.get_servers(bundles=bundles, hot=hot))

    async def copy(self, items: Iterable[Any]) -> List[ProcessExitInfo]:
        return await self.file_ops.copy(items)

    async def move(self, items: Iterable[Any]) -> List[ProcessExitInfo]:
        return await self.file_ops.move(items)

    async def compile(self, config: Any = None, strict: bool = False) -> CompileResult:
        """One-shot build; ``config`` defaults to the ``[build]`` table."""
        return await self.compiler.compile(self._build_config(config), strict=strict)

    async def compile_and_watch(
        self, config: Any = None, options: Optional[WatchOptions] = None, strict: bool = False
    ) -> CompileResult:
        """Watch build resolving after the first pass; ``config`` defaults to ``[build]``."""
        return await self.compiler.compile_and_watch(self._build_config(config), options=options, strict=strict)

    async def shutdown(self) -> None:
        """
        Explicit opt-in stop: close watch sessions and terminate children
        still running. Nothing calls this implicitly.
        """
        logger.info("Shutting down orchestrator")
        await self.compiler.close()
        await self.process_runner.terminate_all()

    def _build_config(self, config: Any) -> Any:
        if config is not None:
            return config
        if self.config.build is None:
            raise ValueError("No build config given and config.toml has no [build] table")
        return self.config.build
