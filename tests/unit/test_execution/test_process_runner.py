"""
Tests for the awaitable process runner and its completion channel.
"""

import asyncio
import os
import signal

import pytest

from devrunner.execution.process_runner import (
    CompletionChannel,
    ProcessRunner,
    classify_returncode,
)
from devrunner.models import CompletionKind, ProcessExitInfo, RunParams, Strategy
from devrunner.models.config import RunnerConfig
from devrunner.system import RuntimeEnvironment
from devrunner.validation import SpawnError, ValidationError

MISSING_COMMAND = "/nonexistent/devrunner-missing-command"


@pytest.mark.unit
class TestProcessRunnerExit:
    """Resolution on process exit."""

    @pytest.mark.asyncio
    async def test_successful_command_resolves_with_zero(self):
        """A foreground process exiting 0 resolves with returncode 0."""
        runner = ProcessRunner()
        info = await runner.run("true")

        assert isinstance(info, ProcessExitInfo)
        assert info.kind is CompletionKind.EXITED
        assert info.returncode == 0
        assert info.signal is None
        assert info.strategy is Strategy.FOREGROUND
        assert info.succeeded

    @pytest.mark.asyncio
    async def test_failing_command_resolves_not_rejects(self):
        """Exit code 2 is a normal resolution, not an exception."""
        runner = ProcessRunner()
        info = await runner.run("sh", {"args": ["-c", "exit 2"]})

        assert info.kind is CompletionKind.EXITED
        assert info.returncode == 2
        assert not info.succeeded

    @pytest.mark.asyncio
    async def test_signal_death_resolves_exit_await(self):
        """Awaiting EXITED also resolves when the child dies from a signal."""
        runner = ProcessRunner()
        info = await runner.run("sh", RunParams(args=("-c", "kill -TERM $$")))

        assert info.kind is CompletionKind.SIGNALED
        assert info.signal == signal.SIGTERM
        assert info.returncode is None

    @pytest.mark.asyncio
    async def test_signal_await_resolves_on_signal(self):
        runner = ProcessRunner()
        params = RunParams(args=("-c", "kill -KILL $$"), resolve_on=CompletionKind.SIGNALED)
        info = await runner.run("sh", params)

        assert info.kind is CompletionKind.SIGNALED
        assert info.signal == signal.SIGKILL

    @pytest.mark.asyncio
    async def test_signal_await_stays_pending_on_normal_exit(self):
        """A completion kind nobody awaits leaves the run pending."""
        runner = ProcessRunner()
        params = RunParams(args=("-c", "exit 0"), resolve_on=CompletionKind.SIGNALED)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(runner.run("sh", params), timeout=0.5)

    @pytest.mark.asyncio
    async def test_shell_strategy_captures_output(self):
        """The shell strategy runs a full command line and captures output."""
        runner = ProcessRunner()
        info = await runner.run("echo out; echo err >&2; exit 3", {"method": "exec"})

        assert info.strategy is Strategy.SHELL
        assert info.returncode == 3
        assert info.stdout == "out\n"
        assert info.stderr == "err\n"

    @pytest.mark.asyncio
    async def test_shell_strategy_ignores_args(self):
        runner = ProcessRunner()
        info = await runner.run("echo hello", RunParams(strategy=Strategy.SHELL, args=("ignored",)))

        assert info.stdout == "hello\n"

    @pytest.mark.asyncio
    async def test_background_strategy_uses_interpreter(self, temp_dir):
        """Background runs the target through the configured interpreter."""
        script = temp_dir / "server.js"
        marker = temp_dir / "started.txt"
        script.write_text(f'echo "$1" > "{marker}"\nexit 7\n')

        runner = ProcessRunner(RunnerConfig(background_interpreter="sh"))
        info = await runner.run(str(script), {"method": "fork", "args": ["port-8080"]})

        assert info.strategy is Strategy.BACKGROUND
        assert info.returncode == 7
        assert marker.read_text().strip() == "port-8080"


@pytest.mark.unit
class TestProcessRunnerSpawnFailure:
    """Spawn failures only surface when ERRORED is awaited."""

    @pytest.mark.asyncio
    async def test_spawn_failure_rejects_when_awaiting_error(self):
        runner = ProcessRunner()

        with pytest.raises(SpawnError) as exc_info:
            await runner.run(MISSING_COMMAND, {"resolveOn": "error"})

        assert exc_info.value.target == MISSING_COMMAND
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    @pytest.mark.asyncio
    async def test_spawn_failure_stays_pending_when_awaiting_exit(self, caplog):
        runner = ProcessRunner()

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(runner.run(MISSING_COMMAND), timeout=0.5)

        assert "will not resolve" in caplog.text

    @pytest.mark.asyncio
    async def test_shell_missing_command_is_plain_exit(self):
        """Through a shell, a missing command is exit 127, not a spawn failure."""
        runner = ProcessRunner()
        info = await runner.run("devrunner-missing-command-xyz", {"method": "exec"})

        assert info.kind is CompletionKind.EXITED
        assert info.returncode == 127


@pytest.mark.unit
class TestProcessRunnerEnvironment:
    """RUNTIME_MODE injection."""

    @pytest.mark.asyncio
    async def test_runtime_mode_defaults_to_development(self):
        env = RuntimeEnvironment.from_environ({"PATH": os.environ.get("PATH", "")})
        runner = ProcessRunner(environment=env)

        info = await runner.run('echo "$RUNTIME_MODE"', {"method": "exec"})
        assert info.stdout.strip() == "development"

    @pytest.mark.asyncio
    async def test_inherited_runtime_mode_is_kept(self):
        env = RuntimeEnvironment.from_environ({"PATH": os.environ.get("PATH", ""), "RUNTIME_MODE": "production"})
        runner = ProcessRunner(environment=env)

        info = await runner.run('echo "$RUNTIME_MODE"', {"method": "exec"})
        assert info.stdout.strip() == "production"

    @pytest.mark.asyncio
    async def test_process_environment_read_per_run(self, monkeypatch):
        """Without an explicit environment each run snapshots os.environ."""
        runner = ProcessRunner(RunnerConfig(runtime_mode_default="qa"))

        monkeypatch.delenv("RUNTIME_MODE", raising=False)
        first = await runner.run('echo "$RUNTIME_MODE"', {"method": "exec"})

        monkeypatch.setenv("RUNTIME_MODE", "test")
        second = await runner.run('echo "$RUNTIME_MODE"', {"method": "exec"})

        assert first.stdout.strip() == "qa"
        assert second.stdout.strip() == "test"

    @pytest.mark.asyncio
    async def test_full_environment_is_inherited(self, monkeypatch):
        monkeypatch.setenv("DEVRUNNER_TEST_VALUE", "42")
        runner = ProcessRunner()

        info = await runner.run('echo "$DEVRUNNER_TEST_VALUE"', {"method": "exec"})
        assert info.stdout.strip() == "42"


@pytest.mark.unit
class TestProcessRunnerValidation:

    @pytest.mark.asyncio
    async def test_empty_target_rejected(self):
        runner = ProcessRunner()
        with pytest.raises(ValidationError):
            await runner.run("")

    @pytest.mark.asyncio
    async def test_unknown_strategy_rejected(self):
        runner = ProcessRunner()
        with pytest.raises(ValidationError):
            await runner.run("true", {"method": "teleport"})

    @pytest.mark.asyncio
    async def test_live_pids_cleared_after_exit(self):
        runner = ProcessRunner()
        await runner.run("true")
        assert runner.live_pids == []


@pytest.mark.unit
class TestCompletionChannel:
    """Single resolution of the completion channel."""

    def _info(self, kind, returncode=None, signum=None):
        return ProcessExitInfo(target="t", strategy=Strategy.FOREGROUND, kind=kind,
                               returncode=returncode, signal=signum)

    @pytest.mark.asyncio
    async def test_only_first_matching_delivery_settles(self):
        channel = CompletionChannel(CompletionKind.EXITED)
        first = self._info(CompletionKind.EXITED, returncode=0)
        second = self._info(CompletionKind.EXITED, returncode=1)

        assert channel.deliver(first) is True
        assert channel.deliver(second) is False
        assert await channel is first

    @pytest.mark.asyncio
    async def test_unmatched_kind_is_refused(self):
        channel = CompletionChannel(CompletionKind.ERRORED)

        assert channel.deliver(self._info(CompletionKind.EXITED, returncode=0)) is False
        assert not channel.settled

    @pytest.mark.asyncio
    async def test_errored_delivery_raises_spawn_error(self):
        channel = CompletionChannel(CompletionKind.ERRORED)
        cause = PermissionError("denied")

        assert channel.deliver(self._info(CompletionKind.ERRORED), cause=cause)
        with pytest.raises(SpawnError) as exc_info:
            await channel
        assert exc_info.value.cause is cause

    def test_classify_returncode(self):
        assert classify_returncode(0) == (CompletionKind.EXITED, 0, None)
        assert classify_returncode(2) == (CompletionKind.EXITED, 2, None)
        assert classify_returncode(-9) == (CompletionKind.SIGNALED, None, 9)
