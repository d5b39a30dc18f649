"""
Uniform awaitable process launching.

ProcessRunner turns a run request into a child process using the launcher
for its strategy, then resolves once with the completion kind the caller
chose to await.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from ..models.config import RunnerConfig
from ..models.requests import CompletionKind, ProcessExitInfo, RunRequest, Strategy
from ..system.environment import RuntimeEnvironment
from ..system.launchers import Launcher, create_launchers
from ..system.processes import terminate_process_tree
from ..validation import ErrorSeverity, SpawnError, handle_error, handle_subprocess_error

logger = logging.getLogger(__name__)

# Completion kinds that satisfy each awaited kind. Awaiting EXITED means
# awaiting termination of any sort, so a signal death also resolves it.
_MATCHES = {
    CompletionKind.EXITED: (CompletionKind.EXITED, CompletionKind.SIGNALED),
    CompletionKind.SIGNALED: (CompletionKind.SIGNALED,),
    CompletionKind.ERRORED: (CompletionKind.ERRORED,),
}


class CompletionChannel:
    """
    Single-resolution channel for one run.

    Only the first delivery of an awaited kind settles it. An ``ERRORED``
    delivery settles it with a SpawnError; any other kind with the exit info.
    Deliveries of kinds nobody awaits are refused and leave it pending.
    """

    def __init__(self, awaited: CompletionKind):
        self.awaited = awaited
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()

    @property
    def settled(self) -> bool:
        return self._future.done()

    def deliver(self, info: ProcessExitInfo, cause: Optional[BaseException] = None) -> bool:
        """Offer a completion; returns True if it settled the channel."""
        if self._future.done() or info.kind not in _MATCHES[self.awaited]:
            return False
        if info.kind is CompletionKind.ERRORED:
            self._future.set_exception(SpawnError(info.target, cause))
        else:
            self._future.set_result(info)
        return True

    def __await__(self):
        return self._future.__await__()


def classify_returncode(returncode: int) -> Tuple[CompletionKind, Optional[int], Optional[int]]:
    """Map an asyncio returncode to (kind, exit code, signal number)."""
    if returncode < 0:
        return CompletionKind.SIGNALED, None, -returncode
    return CompletionKind.EXITED, returncode, None


class ProcessRunner:
    """
    Launches external commands behind one awaitable contract.

    The environment is an explicit RuntimeEnvironment; when none is given a
    fresh snapshot of the process environment is taken for every run.
    """

    def __init__(
        self,
        config: Optional[RunnerConfig] = None,
        environment: Optional[RuntimeEnvironment] = None,
        launchers: Optional[Dict[Strategy, Launcher]] = None,
    ):
        self.config = config or RunnerConfig()
        self.environment = environment
        self.launchers = launchers or create_launchers(self.config)
        # pid -> target of children still running
        self._live: Dict[int, str] = {}

    def snapshot_environment(self) -> RuntimeEnvironment:
        if self.environment is not None:
            return self.environment
        return RuntimeEnvironment.from_environ(default_mode=self.config.runtime_mode_default)

    async def run(self, target: str, params: Any = None) -> ProcessExitInfo:
        """
        Run ``target`` and wait for the awaited completion kind.

        Args:
            target: Command, script path, or (for the shell strategy) a full
                command line
            params: RunParams, a plain mapping of params, or None for defaults

        Returns:
            Exit info of the process

        Raises:
            SpawnError: If the process could not be created and the caller
                awaits ``CompletionKind.ERRORED``
            ValidationError: If target or params are malformed
        """
        return await self.run_request(RunRequest.coerce((target, params)))

    async def run_request(self, request: RunRequest) -> ProcessExitInfo:
        params = request.params
        launcher = self.launchers[params.strategy]
        channel = CompletionChannel(params.resolve_on)
        env = self.snapshot_environment().to_env()

        try:
            process = await launcher.launch(request.target, params.args, env)
        except OSError as e:
            info = ProcessExitInfo(
                target=request.target,
                strategy=params.strategy,
                kind=CompletionKind.ERRORED,
            )
            if not channel.deliver(info, cause=e):
                handle_subprocess_error(
                    e,
                    request.target,
                    severity=ErrorSeverity.ERROR,
                    reraise=False,
                    logger=logger,
                )
                logger.error(
                    f"Run of '{request.target}' awaits {params.resolve_on.name} and "
                    f"will not resolve after a spawn failure"
                )
            return await channel

        logger.info(f"Started {params.strategy.name.lower()} process '{request.target}' (PID: {process.pid})")
        self._live[process.pid] = request.target
        try:
            returncode, stdout, stderr = await launcher.wait(process)
        finally:
            self._live.pop(process.pid, None)

        kind, code, signum = classify_returncode(returncode)
        info = ProcessExitInfo(
            target=request.target,
            strategy=params.strategy,
            kind=kind,
            pid=process.pid,
            returncode=code,
            signal=signum,
            stdout=stdout,
            stderr=stderr,
        )
        logger.debug(f"Process '{request.target}' (PID: {process.pid}) completed: {kind.name} {code if signum is None else signum}")

        if not channel.deliver(info):
            logger.warning(
                f"Process '{request.target}' (PID: {process.pid}) ended with {kind.name}; "
                f"run awaiting {params.resolve_on.name} stays pending"
            )
        return await channel

    @property
    def live_pids(self):
        return sorted(self._live)

    async def terminate_all(self) -> None:
        """
        Explicitly stop every child this runner started that is still running.

        Nothing calls this implicitly; runs whose processes are stopped here
        resolve through their normal completion path.
        """
        loop = asyncio.get_running_loop()
        for pid, target in list(self._live.items()):
            try:
                await loop.run_in_executor(
                    None, terminate_process_tree, pid, target, self.config.terminate_timeout
                )
            except Exception as e:
                handle_error(
                    error=e,
                    context=f"terminating '{target}' (PID: {pid})",
                    severity=ErrorSeverity.WARNING,
                    reraise=False,
                    logger=logger,
                )
