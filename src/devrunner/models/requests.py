"""
Run request and process completion models.

A run request names a target and how to launch it; a process exit info is
what a run resolves with once the awaited completion kind occurs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..validation import ValidationError, validate_non_empty_string


class Strategy(Enum):
    """How a child process is created."""

    # Managed child running a built artifact through an interpreter
    BACKGROUND = "fork"
    # Full command line handed to a shell
    SHELL = "exec"
    # Direct child sharing the caller's stdio
    FOREGROUND = "spawn"


class CompletionKind(Enum):
    """The ways a child process run can complete."""

    EXITED = "exit"
    SIGNALED = "signal"
    ERRORED = "error"


# Lifecycle event names accepted in mapping params, besides the enum values.
_EVENT_ALIASES = {
    "exit": CompletionKind.EXITED,
    "close": CompletionKind.EXITED,
    "signal": CompletionKind.SIGNALED,
    "error": CompletionKind.ERRORED,
}


def _coerce_strategy(value: Union[str, Strategy, None]) -> Strategy:
    if value is None:
        return Strategy.FOREGROUND
    if isinstance(value, Strategy):
        return value
    if isinstance(value, str):
        lowered = value.lower()
        for strategy in Strategy:
            if lowered in (strategy.value, strategy.name.lower()):
                return strategy
    raise ValidationError(
        f"Unknown launch strategy: {value!r}", field_name="strategy", value=value
    )


def _coerce_completion(value: Union[str, CompletionKind, None]) -> CompletionKind:
    if value is None:
        return CompletionKind.EXITED
    if isinstance(value, CompletionKind):
        return value
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in _EVENT_ALIASES:
            return _EVENT_ALIASES[lowered]
        for kind in CompletionKind:
            if lowered == kind.name.lower():
                return kind
    raise ValidationError(
        f"Unknown completion kind: {value!r}", field_name="resolve_on", value=value
    )


@dataclass(frozen=True)
class RunParams:
    """
    Launch parameters for one run.

    ``args`` is ignored by the shell strategy, which treats the target as a
    complete command line.
    """

    strategy: Strategy = Strategy.FOREGROUND
    args: Tuple[str, ...] = ()
    resolve_on: CompletionKind = CompletionKind.EXITED

    def __post_init__(self):
        object.__setattr__(self, "strategy", _coerce_strategy(self.strategy))
        object.__setattr__(self, "resolve_on", _coerce_completion(self.resolve_on))
        # A bare string would otherwise split into one arg per character
        if not isinstance(self.args, (list, tuple)):
            raise ValidationError(
                f"args must be a list of strings, got {type(self.args).__name__}",
                field_name="args",
                value=self.args,
            )
        object.__setattr__(self, "args", tuple(str(arg) for arg in self.args))

    @classmethod
    def from_mapping(cls, params: Optional[Mapping[str, Any]]) -> "RunParams":
        """
        Build params from a plain mapping.

        Accepts ``strategy`` or ``method`` (``fork``/``exec``/``spawn``),
        ``args``, and ``resolve_on`` or ``resolveOn`` (``exit``/``error``/...).
        """
        if not params:
            return cls()
        unknown = set(params) - {"strategy", "method", "args", "resolve_on", "resolveOn"}
        if unknown:
            raise ValidationError(
                f"Unknown run params: {sorted(unknown)}", field_name="params", value=params
            )
        return cls(
            strategy=params.get("strategy", params.get("method")),
            args=params.get("args") or (),
            resolve_on=params.get("resolve_on", params.get("resolveOn")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Render the non-default fields using the plain-mapping key names."""
        rendered: Dict[str, Any] = {}
        if self.strategy is not Strategy.FOREGROUND:
            rendered["method"] = self.strategy.value
        if self.args:
            rendered["args"] = list(self.args)
        if self.resolve_on is not CompletionKind.EXITED:
            rendered["resolveOn"] = self.resolve_on.value
        return rendered


@dataclass(frozen=True)
class RunRequest:
    """A target plus the params to launch it with."""

    target: str
    params: RunParams = field(default_factory=RunParams)

    def __post_init__(self):
        validate_non_empty_string(self.target, field_name="target")

    @classmethod
    def coerce(cls, item: Any) -> "RunRequest":
        """
        Normalize any accepted request shape into a RunRequest.

        Accepted: a RunRequest, a bare target string, a ``(target, params)``
        pair, or a ``{"script": ..., "params": ...}`` mapping.
        """
        if isinstance(item, RunRequest):
            return item
        if isinstance(item, str):
            return cls(item)
        if isinstance(item, Mapping):
            target = item.get("script", item.get("target"))
            return cls(target, _coerce_params(item.get("params")))
        if isinstance(item, (tuple, list)) and len(item) in (1, 2):
            params = item[1] if len(item) == 2 else None
            return cls(item[0], _coerce_params(params))
        raise ValidationError(
            f"Unsupported run request: {item!r}", field_name="request", value=item
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"script": self.target, "params": self.params.to_dict()}


def _coerce_params(params: Any) -> RunParams:
    if params is None:
        return RunParams()
    if isinstance(params, RunParams):
        return params
    if isinstance(params, Mapping):
        return RunParams.from_mapping(params)
    raise ValidationError(
        f"Unsupported run params: {params!r}", field_name="params", value=params
    )


@dataclass(frozen=True)
class ProcessExitInfo:
    """
    Payload a run resolves with.

    ``returncode`` is set for ``EXITED`` and ``signal`` for ``SIGNALED``.
    ``stdout``/``stderr`` are only captured by the shell strategy.
    """

    target: str
    strategy: Strategy
    kind: CompletionKind
    pid: Optional[int] = None
    returncode: Optional[int] = None
    signal: Optional[int] = None
    stdout: Optional[str] = None
    stderr: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.kind is CompletionKind.EXITED and self.returncode == 0


@dataclass(frozen=True)
class FileOpItem:
    """Source and destination of one static copy or move."""

    target: str
    dest: str

    @classmethod
    def coerce(cls, item: Any) -> "FileOpItem":
        if isinstance(item, FileOpItem):
            return item
        if isinstance(item, Mapping):
            return cls(
                validate_non_empty_string(item.get("target"), field_name="target"),
                validate_non_empty_string(item.get("dest"), field_name="dest"),
            )
        raise ValidationError(
            f"Unsupported file item: {item!r}", field_name="item", value=item
        )
