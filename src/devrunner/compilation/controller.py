"""
One-shot and watch-mode compilation.

CompileController hands a configuration object, untouched, to a build engine
and turns the engine's pass-by-pass results into a single awaitable result.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, List, Optional

from ..models.build import BuildOutcome, CompileResult
from ..validation import BuildError
from .engine import BuildEngine, CommandBuildEngine, WatchOptions, WatchSession
from .reporter import DiagnosticsReporter

logger = logging.getLogger(__name__)

EngineFactory = Callable[[Any], BuildEngine]


class WatchState(Enum):
    AWAITING_FIRST_BUILD = "awaiting_first_build"
    STEADY = "steady"


class FirstBuildTracker:
    """
    Watch-mode state machine.

    The first outcome moves AWAITING_FIRST_BUILD to STEADY and settles the
    future; later outcomes are only reported.
    """

    def __init__(self, reporter: DiagnosticsReporter):
        self.reporter = reporter
        self.state = WatchState.AWAITING_FIRST_BUILD
        self.first_build: asyncio.Future = asyncio.get_running_loop().create_future()
        self.builds_seen = 0

    def __call__(self, outcome: BuildOutcome) -> None:
        self.builds_seen += 1
        self.reporter.report(outcome.error, outcome.stats)
        if self.state is WatchState.AWAITING_FIRST_BUILD:
            self.state = WatchState.STEADY
            self.first_build.set_result(outcome)
        else:
            logger.debug(f"Rebuild #{self.builds_seen} reported")


class CompileController:
    """
    Drives a build engine once or in watch mode.

    Engine errors are reported, never raised, unless the caller opts into
    ``strict``. Watch sessions keep running after the first build and are
    only stopped by an explicit ``close()``.
    """

    def __init__(
        self,
        engine_factory: EngineFactory = CommandBuildEngine,
        reporter: Optional[DiagnosticsReporter] = None,
    ):
        self.engine_factory = engine_factory
        self.reporter = reporter or DiagnosticsReporter()
        self.watchers: List[WatchSession] = []

    async def compile(self, config: Any, strict: bool = False) -> CompileResult:
        """
        Run one build pass and report it.

        Args:
            config: Engine configuration, passed through unmodified
            strict: Raise BuildError if the pass failed

        Returns:
            The pass outcome

        Raises:
            BuildError: Only when ``strict`` and the pass failed
        """
        engine = self.engine_factory(config)
        try:
            outcome = await engine.run()
        except Exception as e:
            # An engine raising from run() is an engine error like any other
            outcome = BuildOutcome(error=e)
        self.reporter.report(outcome.error, outcome.stats)
        return self._settle(outcome, None, strict)

    async def compile_and_watch(
        self,
        config: Any,
        options: Optional[WatchOptions] = None,
        strict: bool = False,
    ) -> CompileResult:
        """
        Start watching and return once the first build pass is done.

        Every later pass is reported but produces no further signal.

        Raises:
            BuildError: Only when ``strict`` and the first pass failed; the
                session keeps running either way
        """
        engine = self.engine_factory(config)
        tracker = FirstBuildTracker(self.reporter)
        session = engine.watch(options or WatchOptions(), tracker)
        self.watchers.append(session)

        outcome = await tracker.first_build
        logger.info("Initial build finished, watching for changes")
        return self._settle(outcome, session, strict)

    def _settle(self, outcome: BuildOutcome, session: Optional[WatchSession], strict: bool) -> CompileResult:
        if strict and outcome.failed:
            raise BuildError(
                f"Build failed: {outcome.error or '; '.join(outcome.stats.errors)}",
                outcome=outcome,
            )
        return CompileResult(outcome=outcome, watch=session)

    async def close(self) -> None:
        """Explicitly stop every watch session this controller started."""
        sessions, self.watchers = self.watchers, []
        for session in sessions:
            await session.close()
