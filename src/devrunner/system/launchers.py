"""
Process launch strategies.

Each strategy is one Launcher implementation. The runner picks the launcher
for a request's strategy from a table built once at construction, so no call
site branches on the strategy itself.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Sequence, Tuple

from ..models.config import RunnerConfig
from ..models.requests import Strategy

logger = logging.getLogger(__name__)

# (returncode, stdout, stderr) once a launched process has terminated
WaitResult = Tuple[int, Optional[str], Optional[str]]


class Launcher(ABC):
    """Creates a child process for one strategy and waits for its end."""

    strategy: Strategy

    @abstractmethod
    async def launch(
        self, target: str, args: Sequence[str], env: Dict[str, str]
    ) -> asyncio.subprocess.Process:
        """
        Start the child.

        Raises:
            OSError: If the OS cannot create the process
        """

    async def wait(self, process: asyncio.subprocess.Process) -> WaitResult:
        returncode = await process.wait()
        return returncode, None, None


class ForegroundLauncher(Launcher):
    """Runs ``target *args`` directly, sharing the caller's stdin/stdout/stderr."""

    strategy = Strategy.FOREGROUND

    async def launch(self, target, args, env):
        logger.debug(f"Spawning foreground process: {target} {list(args)}")
        return await asyncio.create_subprocess_exec(target, *args, env=env)


class BackgroundLauncher(Launcher):
    """
    Runs a built artifact as a managed child.

    The child gets its own session so the parent can signal it (and its
    descendants) as a unit. Output is not silenced; stdin is detached.
    """

    strategy = Strategy.BACKGROUND

    def __init__(self, interpreter: Optional[str] = "node"):
        # None executes the target directly
        self.interpreter = interpreter

    async def launch(self, target, args, env):
        argv = [target, *args]
        if self.interpreter:
            argv.insert(0, self.interpreter)
        logger.debug(f"Forking background process: {argv}")
        return await asyncio.create_subprocess_exec(
            *argv,
            env=env,
            stdin=asyncio.subprocess.DEVNULL,
            start_new_session=True,
        )


class ShellLauncher(Launcher):
    """
    Runs ``target`` as a complete shell command line; args are ignored.

    Output is captured and returned with the exit status.
    """

    strategy = Strategy.SHELL

    def __init__(self, executable: Optional[str] = "/bin/sh"):
        self.executable = executable

    async def launch(self, target, args, env):
        if args:
            logger.debug(f"Shell strategy ignores args {list(args)} for '{target}'")
        logger.debug(f"Executing shell command: '{target}'")
        return await asyncio.create_subprocess_shell(
            target,
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            executable=self.executable,
        )

    async def wait(self, process):
        stdout, stderr = await process.communicate()
        return (
            process.returncode,
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
        )


def create_launchers(config: Optional[RunnerConfig] = None) -> Dict[Strategy, Launcher]:
    """Build the strategy -> launcher table for a runner config."""
    config = config or RunnerConfig()
    return {
        Strategy.BACKGROUND: BackgroundLauncher(config.background_interpreter),
        Strategy.SHELL: ShellLauncher(config.shell_executable),
        Strategy.FOREGROUND: ForegroundLauncher(),
    }
