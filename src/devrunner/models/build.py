"""
Build result data models.

This module contains the structures a build engine produces on every build
pass, the rendering profile used to turn them into readable text, and the
typed result handed back to compile callers.
"""

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from ..compilation.engine import WatchSession

# ANSI styles used when colors are enabled
_BOLD = "\033[1m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"
_RESET = "\033[0m"


def format_size(size: int) -> str:
    """Human-readable byte size, e.g. ``512 bytes`` or ``1.21 KiB``."""
    if size < 1024:
        return f"{size} bytes"
    value = float(size)
    for unit in ("KiB", "MiB", "GiB"):
        value /= 1024.0
        if value < 1024.0 or unit == "GiB":
            break
    return f"{value:.2f} {unit}"


@dataclass
class StatsFormat:
    """Which sections of a build stats rendering to include."""

    colors: bool = False
    hash: bool = True
    version: bool = True
    timings: bool = True
    assets: bool = True
    chunks: bool = True
    children: bool = True
    errors: bool = True
    warnings: bool = True


@dataclass
class Asset:
    """One file produced by a build pass."""

    name: str
    size: int
    chunk_names: List[str] = field(default_factory=list)
    # False when the file was already on disk before this pass started
    emitted: bool = True


@dataclass
class Chunk:
    """A named group of assets belonging to one bundle entry."""

    name: str
    files: List[str] = field(default_factory=list)
    size: int = 0


@dataclass
class BuildStats:
    """
    Opaque result of one build pass.

    Compilation problems (syntax errors, failed commands) live in ``errors``;
    a fatal engine failure is reported separately through
    ``BuildOutcome.error``.
    """

    name: str = ""
    hash: str = ""
    version: Optional[str] = None
    start_time: float = field(default_factory=time.time)
    end_time: Optional[float] = None
    assets: List[Asset] = field(default_factory=list)
    chunks: List[Chunk] = field(default_factory=list)
    children: List["BuildStats"] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def has_errors(self) -> bool:
        return bool(self.errors) or any(child.has_errors() for child in self.children)

    def has_warnings(self) -> bool:
        return bool(self.warnings) or any(child.has_warnings() for child in self.children)

    @property
    def duration_ms(self) -> int:
        end = self.end_time if self.end_time is not None else self.start_time
        return max(0, int(round((end - self.start_time) * 1000)))

    def to_string(self, fmt: Optional[StatsFormat] = None) -> str:
        """Render the stats as multi-line text according to ``fmt``."""
        fmt = fmt or StatsFormat()
        return "\n".join(self._render_lines(fmt))

    def _render_lines(self, fmt: StatsFormat) -> List[str]:
        def paint(text: str, style: str) -> str:
            return f"{style}{text}{_RESET}" if fmt.colors else text

        lines: List[str] = []
        if fmt.hash and self.hash:
            lines.append(f"Hash: {paint(self.hash, _BOLD)}")
        if fmt.version and self.version:
            lines.append(f"Version: {paint(self.version, _BOLD)}")
        if fmt.timings:
            lines.append(f"Time: {paint(f'{self.duration_ms}ms', _BOLD)}")
            built_at = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(self.start_time))
            lines.append(f"Built at: {paint(built_at, _BOLD)}")

        if fmt.assets and self.assets:
            name_width = max(len("Asset"), *(len(a.name) for a in self.assets))
            size_width = max(len("Size"), *(len(format_size(a.size)) for a in self.assets))
            lines.append(f"{'Asset'.rjust(name_width)}  {'Size'.rjust(size_width)}  Chunks")
            for asset in self.assets:
                row = (
                    f"{paint(asset.name.rjust(name_width), _GREEN)}  "
                    f"{format_size(asset.size).rjust(size_width)}  "
                    f"{', '.join(asset.chunk_names)}"
                )
                if asset.emitted:
                    row += f"  {paint('[emitted]', _GREEN)}"
                lines.append(row.rstrip())

        if fmt.chunks:
            for chunk in self.chunks:
                lines.append(
                    f"chunk {{{paint(chunk.name, _YELLOW)}}} "
                    f"{', '.join(chunk.files)} {format_size(chunk.size)}"
                )

        if fmt.errors:
            for message in self.errors:
                lines.append("")
                lines.append(paint(f"ERROR in {message}", _RED))
        if fmt.warnings:
            for message in self.warnings:
                lines.append("")
                lines.append(paint(f"WARNING in {message}", _YELLOW))

        if fmt.children:
            for child in self.children:
                lines.append(f"Child {paint(child.name or 'compilation', _BOLD)}:")
                lines.extend(f"    {line}" for line in child._render_lines(fmt))

        return lines


# Fixed profile used for every diagnostics report
DEFAULT_STATS_FORMAT = StatsFormat(
    colors=True,
    hash=False,
    version=False,
    chunks=False,
    children=False,
)


@dataclass(frozen=True)
class BuildOutcome:
    """The (error, stats) pair produced by one build pass."""

    error: Optional[BaseException] = None
    stats: Optional[BuildStats] = None

    @property
    def failed(self) -> bool:
        return self.error is not None or (self.stats is not None and self.stats.has_errors())


@dataclass(frozen=True)
class CompileResult:
    """
    What ``compile`` and ``compile_and_watch`` resolve with.

    For watch mode ``outcome`` is the first pass and ``watch`` is the still
    running session.
    """

    outcome: BuildOutcome
    watch: Optional["WatchSession"] = None

    @property
    def ok(self) -> bool:
        return not self.outcome.failed
