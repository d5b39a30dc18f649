"""
Static file copy and move, expressed as shell runs.
"""

import logging
from typing import Any, Iterable, List

from ..models.requests import FileOpItem, ProcessExitInfo, RunParams, RunRequest, Strategy
from .batch_runner import BatchRunner

logger = logging.getLogger(__name__)

_SHELL = RunParams(strategy=Strategy.SHELL)


def copy_command(item: FileOpItem) -> str:
    """
    Archive-preserving copy command line for one item.

    Paths are inserted as shell words, so globs like ``static/*`` expand.
    """
    return f"cp -a {item.target} {item.dest}"


def move_command(item: FileOpItem) -> str:
    return f"mv {item.target} {item.dest}"


class StaticFileOps:
    """
    Batch copy/move of filesystem entries through ``cp -a`` and ``mv``.

    No path validation, collision detection or dry run. A failing ``cp`` or
    ``mv`` shows up as a non-zero returncode in its exit info, not as an
    exception.
    """

    def __init__(self, batch_runner: BatchRunner):
        self.batch_runner = batch_runner

    async def copy(self, items: Iterable[Any]) -> List[ProcessExitInfo]:
        return await self._run(items, copy_command, "copy")

    async def move(self, items: Iterable[Any]) -> List[ProcessExitInfo]:
        return await self._run(items, move_command, "move")

    async def _run(self, items, build_command, verb: str) -> List[ProcessExitInfo]:
        requests = [RunRequest(build_command(FileOpItem.coerce(item)), _SHELL) for item in items]
        logger.info(f"Starting {verb} of {len(requests)} static items")
        results = await self.batch_runner.run_async(requests)
        for result in results:
            if not result.succeeded:
                logger.warning(f"'{result.target}' exited with {result.returncode}: {(result.stderr or '').strip()}")
        return results
