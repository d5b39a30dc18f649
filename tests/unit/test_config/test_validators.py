"""
Unit tests for configuration validation functionality.

Tests the validation of the runner, bundles, build and logging tables,
including defaults, path resolution and error handling.
"""

from pathlib import Path

import pytest

from devrunner.config.validators import (
    validate_app_config,
    validate_build_config,
    validate_bundles_config,
    validate_logging_config,
    validate_runner_config,
)
from devrunner.models.config import AppConfig, BundlesConfig, RunnerConfig
from devrunner.validation import ValidationError


@pytest.mark.unit
class TestRunnerConfigValidation:
    """Test cases for the [runner] table."""

    def test_validate_runner_config_success(self, sample_config_data):
        config = validate_runner_config(sample_config_data["runner"])

        assert config.runtime_mode_default == "staging"
        assert config.max_concurrency == 4
        assert config.background_interpreter == "sh"
        assert config.terminate_timeout == 1.5
        assert config.shell_executable == "/bin/sh"

    def test_empty_table_uses_defaults(self):
        assert validate_runner_config({}) == RunnerConfig()

    def test_zero_concurrency_means_unbounded(self):
        assert validate_runner_config({"max_concurrency": 0}).max_concurrency is None

    @pytest.mark.parametrize("value", [-1, 5000, "many", True])
    def test_invalid_max_concurrency(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_runner_config({"max_concurrency": value})
        assert "max_concurrency" in str(exc_info.value)

    def test_empty_interpreter_means_direct_exec(self):
        config = validate_runner_config({"background_interpreter": ""})
        assert config.background_interpreter is None

    def test_non_string_interpreter_rejected(self):
        with pytest.raises(ValidationError):
            validate_runner_config({"background_interpreter": 1})

    def test_table_must_be_mapping(self):
        with pytest.raises(ValidationError):
            validate_runner_config(["not", "a", "table"])


@pytest.mark.unit
class TestBundlesConfigValidation:

    def test_validate_bundles_config_success(self, sample_config_data):
        config = validate_bundles_config(sample_config_data["bundles"])

        assert config.directory == "src/bundles"
        assert config.artifact_path("web") == "dist/web.mjs"
        assert config.hot_wrapper == "bin/reload"

    def test_defaults(self):
        config = validate_bundles_config({})
        assert config == BundlesConfig()
        assert config.artifact_path("alpha") == "build/alpha.js"

    def test_empty_suffix_allowed(self):
        assert validate_bundles_config({"artifact_suffix": ""}).artifact_path("srv") == "build/srv"

    def test_non_string_suffix_rejected(self):
        with pytest.raises(ValidationError):
            validate_bundles_config({"artifact_suffix": 3})


@pytest.mark.unit
class TestBuildConfigValidation:
    """Test cases for the [build] table."""

    def test_paths_resolved_against_base_dir(self, sample_config_data, temp_dir):
        config = validate_build_config(sample_config_data["build"], base_dir=temp_dir)

        assert config.command == "make bundle"
        assert config.name == "web"
        assert config.cwd == temp_dir / "."
        assert config.output_dir == temp_dir / "dist"
        assert config.watch_paths == [temp_dir / "src"]
        assert config.poll_interval == 0.25
        assert config.aggregate_timeout == 0.1
        assert config.version == "5.90.0"

    def test_absolute_paths_kept(self, temp_dir):
        config = validate_build_config({"command": "true", "output_dir": "/tmp/out"}, base_dir=temp_dir)
        assert config.output_dir == Path("/tmp/out")

    def test_cwd_defaults_to_base_dir(self, temp_dir):
        config = validate_build_config({"command": "true"}, base_dir=temp_dir)

        assert config.cwd == temp_dir
        assert config.output_dir is None
        assert config.watch_paths == []

    def test_command_required(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_build_config({"name": "web"})
        assert "build.command" in str(exc_info.value)

    def test_invalid_watch_paths(self):
        with pytest.raises(ValidationError):
            validate_build_config({"command": "true", "watch_paths": "src"})

    def test_invalid_poll_interval(self):
        with pytest.raises(ValidationError):
            validate_build_config({"command": "true", "poll_interval": 0})


@pytest.mark.unit
class TestLoggingAndAppConfigValidation:

    def test_level_is_case_insensitive(self):
        assert validate_logging_config({"level": "debug"}).level == "DEBUG"

    def test_invalid_level(self):
        with pytest.raises(ValidationError):
            validate_logging_config({"level": "verbose"})

    def test_log_file_resolved(self, temp_dir):
        config = validate_logging_config({"file": "logs/run.log"}, base_dir=temp_dir)
        assert config.file == temp_dir / "logs" / "run.log"

    def test_full_config(self, sample_config_data, temp_dir):
        config = validate_app_config(sample_config_data, base_dir=temp_dir)

        assert config.runner.max_concurrency == 4
        assert config.bundles.build_dir == "dist"
        assert config.build.name == "web"
        assert config.logging.level == "DEBUG"

    def test_empty_config(self):
        config = validate_app_config({})

        assert config == AppConfig()
        assert config.build is None
