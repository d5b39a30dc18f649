"""
Build engine boundary.

The orchestrator treats the bundler as an opaque engine: it is created from a
configuration object, runs one build pass on request, or watches its sources
and calls a handler after every pass. CommandBuildEngine is the stock engine;
it runs a configured bundler command and inspects the output directory.
"""

import asyncio
import hashlib
import inspect
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from ..models.build import Asset, BuildOutcome, BuildStats, Chunk
from ..models.config import BuildConfig
from ..system.processes import terminate_process_tree
from ..validation import BuildEngineError, ErrorSeverity, handle_error

logger = logging.getLogger(__name__)

OutcomeHandler = Callable[[BuildOutcome], Any]

# path -> (mtime_ns, size)
FileSnapshot = Dict[str, Tuple[int, int]]


@dataclass
class WatchOptions:
    """Overrides for the watch loop; None keeps the engine config value."""

    poll_interval: Optional[float] = None
    aggregate_timeout: Optional[float] = None


class WatchSession:
    """
    A running watch loop.

    Builds once immediately, then polls the watched files and rebuilds after
    a change has been quiet for ``aggregate_timeout``. The handler is called
    after every pass, in order. The loop runs until ``close()``.
    """

    def __init__(
        self,
        build: Callable[[], Awaitable[BuildOutcome]],
        snapshot: Callable[[], FileSnapshot],
        handler: OutcomeHandler,
        poll_interval: float,
        aggregate_timeout: float,
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
        name: str = "watch",
    ):
        self._build = build
        self._snapshot = snapshot
        self._handler = handler
        self.poll_interval = poll_interval
        self.aggregate_timeout = aggregate_timeout
        self._on_close = on_close
        self.name = name
        self.passes = 0
        self._invalidated = asyncio.Event()
        self._closed = False
        self._task = asyncio.get_running_loop().create_task(self._watch_loop(), name=f"watch:{name}")

    @property
    def running(self) -> bool:
        return not self._closed and not self._task.done()

    def invalidate(self) -> None:
        """Request a rebuild without waiting for a file change."""
        self._invalidated.set()

    async def close(self) -> None:
        """Stop watching and terminate a build pass still in flight."""
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            await self._on_close()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            handle_error(
                error=e,
                context=f"watch loop of '{self.name}'",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )
        logger.info(f"Watch session '{self.name}' closed after {self.passes} passes")

    async def _take_snapshot(self) -> FileSnapshot:
        """Snapshot the watched files off the event loop; a failure counts as no files."""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._snapshot)
        except Exception as e:
            handle_error(
                error=e,
                context=f"scanning watched files of '{self.name}'",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
            return {}

    async def _watch_loop(self) -> None:
        last = await self._take_snapshot()
        await self._run_pass()
        while not self._closed:
            try:
                await asyncio.wait_for(self._invalidated.wait(), timeout=self.poll_interval)
                forced = True
            except asyncio.TimeoutError:
                forced = False

            current = await self._take_snapshot()
            if not forced and current == last:
                continue

            # Let a burst of writes settle before rebuilding
            while self.aggregate_timeout > 0:
                await asyncio.sleep(self.aggregate_timeout)
                settled = await self._take_snapshot()
                if settled == current:
                    break
                current = settled

            self._invalidated.clear()
            last = current
            logger.info(f"Change detected in watched files, rebuilding '{self.name}'")
            await self._run_pass()

    async def _run_pass(self) -> None:
        try:
            outcome = await self._build()
        except Exception as e:
            outcome = BuildOutcome(error=e)
        self.passes += 1
        try:
            result = self._handler(outcome)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            handle_error(
                error=e,
                context=f"watch handler of '{self.name}' (pass {self.passes})",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=logger,
            )


class BuildEngine(ABC):
    """An opaque builder created from one configuration object."""

    @abstractmethod
    async def run(self) -> BuildOutcome:
        """Run one build pass."""

    @abstractmethod
    def watch(self, options: WatchOptions, handler: OutcomeHandler) -> WatchSession:
        """Start watching; must be called from inside a running event loop."""


def _snapshot_root(root: Path, snapshot: FileSnapshot) -> None:
    if root.is_dir():
        candidates = (p for p in root.rglob("*") if p.is_file())
    elif root.exists():
        candidates = iter([root])
    else:
        return
    for path in candidates:
        try:
            stat = path.stat()
        except FileNotFoundError:
            continue
        snapshot[str(path)] = (stat.st_mtime_ns, stat.st_size)


def _snapshot_paths(paths: List[Path]) -> FileSnapshot:
    """
    (mtime, size) of every file under ``paths``. Blocking; run it in an
    executor. A root that cannot be scanned is logged and treated as absent.
    """
    snapshot: FileSnapshot = {}
    for root in paths:
        found: FileSnapshot = {}
        try:
            _snapshot_root(root, found)
            snapshot.update(found)
        except OSError as e:
            handle_error(
                error=e,
                context=f"scanning '{root}'",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
    return snapshot


def _chunk_name(asset_name: str) -> str:
    """``js/alpha.js.map`` -> ``alpha``"""
    return Path(asset_name).name.split(".", 1)[0] or asset_name


class CommandBuildEngine(BuildEngine):
    """
    Runs a bundler command through the shell and reports its output.

    A non-zero exit is a compilation error recorded in ``stats.errors``; only
    a command that cannot be started at all produces ``outcome.error``.
    """

    def __init__(self, config: BuildConfig):
        self.config = config
        self._active: Optional[asyncio.subprocess.Process] = None

    def _scan_output(self) -> FileSnapshot:
        if self.config.output_dir is None:
            return {}
        return _snapshot_paths([self.config.output_dir])

    def _collect_stats(self, stats: BuildStats, before: FileSnapshot) -> None:
        after = self._scan_output()
        output_dir = self.config.output_dir
        digest = hashlib.sha256()
        chunks: Dict[str, Chunk] = {}

        for path_str in sorted(after):
            mtime_ns, size = after[path_str]
            path = Path(path_str)
            name = path.relative_to(output_dir).as_posix() if output_dir else path.name
            chunk_name = _chunk_name(name)
            stats.assets.append(
                Asset(
                    name=name,
                    size=size,
                    chunk_names=[chunk_name],
                    emitted=before.get(path_str) != (mtime_ns, size),
                )
            )
            chunk = chunks.setdefault(chunk_name, Chunk(name=chunk_name))
            chunk.files.append(name)
            chunk.size += size

            digest.update(name.encode("utf-8"))
            try:
                digest.update(path.read_bytes())
            except OSError as e:
                stats.warnings.append(f"{name}: could not be read for hashing: {e}")

        stats.chunks = list(chunks.values())
        stats.hash = digest.hexdigest()[:20]

    async def run(self) -> BuildOutcome:
        config = self.config
        label = config.name or "build"
        stats = BuildStats(name=config.name, version=config.version)
        loop = asyncio.get_running_loop()
        before = await loop.run_in_executor(None, self._scan_output)

        logger.info(f"Running {label}: '{config.command}' in {config.cwd}")
        try:
            process = await asyncio.create_subprocess_shell(
                config.command,
                cwd=config.cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            stats.end_time = time.time()
            return BuildOutcome(
                error=BuildEngineError(f"Could not run build command '{config.command}': {e}"),
                stats=stats,
            )

        self._active = process
        try:
            stdout, stderr = await process.communicate()
        finally:
            self._active = None

        stats.end_time = time.time()
        out_text = stdout.decode("utf-8", errors="replace").strip()
        err_text = stderr.decode("utf-8", errors="replace").strip()
        if out_text:
            logger.debug(f"{label} output:\n{out_text}")

        if process.returncode != 0:
            detail = err_text or out_text
            stats.errors.append(
                f"{label}: command exited with code {process.returncode}" + (f"\n{detail}" if detail else "")
            )
        elif err_text:
            stats.warnings.append(f"{label}:\n{err_text}")

        # Output scan and hashing read every asset; keep them off the event loop
        await loop.run_in_executor(None, self._collect_stats, stats, before)
        return BuildOutcome(error=None, stats=stats)

    def watched_snapshot(self) -> FileSnapshot:
        return _snapshot_paths(self.config.watch_paths)

    async def terminate_active(self) -> None:
        process = self._active
        if process is None or process.returncode is not None:
            return
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, terminate_process_tree, process.pid, self.config.name or "build", 3.0
        )

    def watch(self, options: WatchOptions, handler: OutcomeHandler) -> WatchSession:
        poll = options.poll_interval if options.poll_interval is not None else self.config.poll_interval
        aggregate = (
            options.aggregate_timeout if options.aggregate_timeout is not None else self.config.aggregate_timeout
        )
        if not self.config.watch_paths:
            logger.warning(f"No watch paths configured for '{self.config.name or 'build'}'; only invalidate() rebuilds")
        return WatchSession(
            build=self.run,
            snapshot=self.watched_snapshot,
            handler=handler,
            poll_interval=poll,
            aggregate_timeout=aggregate,
            on_close=self.terminate_active,
            name=self.config.name or "build",
        )
