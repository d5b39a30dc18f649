"""
Runtime environment snapshots for child processes.

The environment is captured into an explicit value and handed to the
launchers, so nothing below the runner reads ``os.environ`` itself.
"""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional

RUNTIME_MODE_VAR = "RUNTIME_MODE"
DEFAULT_RUNTIME_MODE = "development"


@dataclass(frozen=True)
class RuntimeEnvironment:
    """Read-only environment injected into every spawned child."""

    variables: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_environ(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        default_mode: str = DEFAULT_RUNTIME_MODE,
    ) -> "RuntimeEnvironment":
        """
        Snapshot ``environ`` (default: the process environment) and normalize
        RUNTIME_MODE, which falls back to ``default_mode`` when unset or empty.
        """
        snapshot = dict(os.environ if environ is None else environ)
        snapshot[RUNTIME_MODE_VAR] = snapshot.get(RUNTIME_MODE_VAR) or default_mode
        return cls(MappingProxyType(snapshot))

    @property
    def runtime_mode(self) -> str:
        return self.variables.get(RUNTIME_MODE_VAR, DEFAULT_RUNTIME_MODE)

    def with_overrides(self, **overrides: str) -> "RuntimeEnvironment":
        merged = dict(self.variables)
        merged.update(overrides)
        return RuntimeEnvironment(MappingProxyType(merged))

    def to_env(self) -> Dict[str, str]:
        """A fresh mutable copy, one per child."""
        return dict(self.variables)
