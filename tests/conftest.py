"""
Pytest configuration and shared fixtures for the devrunner test suite.

This module provides common fixtures, fake build engines and configuration
files shared by the unit and integration tests.
"""

import asyncio
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from devrunner.compilation.engine import BuildEngine, WatchOptions, WatchSession  # noqa: E402
from devrunner.compilation.reporter import DiagnosticsReporter  # noqa: E402
from devrunner.models import BuildOutcome, BuildStats  # noqa: E402


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_config_data():
    """Sample config.toml content for testing."""
    return {
        "runner": {
            "runtime_mode_default": "staging",
            "max_concurrency": 4,
            "background_interpreter": "sh",
            "terminate_timeout": 1.5,
        },
        "bundles": {
            "directory": "src/bundles",
            "build_dir": "dist",
            "artifact_suffix": ".mjs",
            "hot_wrapper": "bin/reload",
        },
        "build": {
            "name": "web",
            "command": "make bundle",
            "cwd": ".",
            "output_dir": "dist",
            "watch_paths": ["src"],
            "poll_interval": 0.25,
            "aggregate_timeout": 0.1,
            "version": "5.90.0",
        },
        "logging": {"level": "debug"},
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary config.toml for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    with open(config_file, "w") as f:
        toml.dump(sample_config_data, f)

    return {"config": config_file, "dir": temp_dir}


@pytest.fixture(autouse=True)
def reset_config_state(monkeypatch):
    """Keep the configuration singleton isolated between tests."""
    from devrunner.config import manager

    monkeypatch.setattr(manager, "_CONFIG", None)
    monkeypatch.setattr(manager, "_CONFIG_FILE_PATH", None)
    yield


# ============================================================================
# Build Engine Fakes
# ============================================================================


def make_outcome(name: str = "app", errors: Optional[List[str]] = None,
                 error: Optional[BaseException] = None) -> BuildOutcome:
    """Build outcome with a finished stats object."""
    stats = BuildStats(name=name, hash="0123456789abcdef0123", version="1.0.0",
                       start_time=1000.0, end_time=1000.5, errors=list(errors or []))
    return BuildOutcome(error=error, stats=stats)


class FakeBuildEngine(BuildEngine):
    """
    Engine returning queued outcomes, one per pass.

    The config is expected to be a dict holding an ``outcomes`` list; the
    last outcome repeats once the queue runs dry. Watch sessions never poll
    files, so only ``invalidate()`` triggers rebuilds.
    """

    instances: List["FakeBuildEngine"] = []

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.outcomes = list(config["outcomes"])
        self.runs = 0
        self.sessions: List[WatchSession] = []
        FakeBuildEngine.instances.append(self)

    async def run(self) -> BuildOutcome:
        await asyncio.sleep(0)
        self.runs += 1
        if len(self.outcomes) > 1:
            return self.outcomes.pop(0)
        return self.outcomes[0]

    def watch(self, options: WatchOptions, handler) -> WatchSession:
        session = WatchSession(
            build=self.run,
            snapshot=lambda: {},
            handler=handler,
            poll_interval=options.poll_interval or 60.0,
            aggregate_timeout=0.0,
            name="fake",
        )
        self.sessions.append(session)
        return session


class RecordingReporter(DiagnosticsReporter):
    """Reporter that remembers every report call."""

    def __init__(self):
        super().__init__()
        self.reports: List[tuple] = []

    def report(self, error, stats):
        self.reports.append((error, stats))
        super().report(error, stats)


@pytest.fixture
def fake_engine_factory():
    FakeBuildEngine.instances = []
    return FakeBuildEngine


@pytest.fixture
def recording_reporter():
    return RecordingReporter()


async def wait_until(predicate, timeout: float = 5.0, interval: float = 0.02) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` elapses."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if predicate():
            return True
        await asyncio.sleep(interval)
    return predicate()
