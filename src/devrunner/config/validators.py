"""
Configuration validation utilities.

Each function turns one raw TOML table into its validated dataclass. Missing
keys take the dataclass defaults.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.config import (
    AppConfig,
    BuildConfig,
    BundlesConfig,
    LoggingConfig,
    RunnerConfig,
)
from ..validation import (
    ValidationError,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
    validate_string_list,
)

logger = logging.getLogger(__name__)

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _check_table(data: Any, table: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(f"[{table}] must be a table", field_name=table, value=data)
    return data


def validate_runner_config(runner_data: Dict[str, Any]) -> RunnerConfig:
    """
    Validate and create a RunnerConfig from the ``[runner]`` table.

    ``max_concurrency = 0`` (the default) means unbounded fan-out.

    Raises:
        ValidationError: If validation fails
    """
    runner_data = _check_table(runner_data, "runner")
    defaults = RunnerConfig()

    runtime_mode_default = validate_non_empty_string(
        runner_data.get("runtime_mode_default", defaults.runtime_mode_default),
        field_name="runner.runtime_mode_default",
    )

    max_concurrency = validate_positive_integer(
        runner_data.get("max_concurrency", 0),
        min_value=0,
        max_value=4096,
        field_name="runner.max_concurrency",
    )

    # "" means run the artifact directly, without an interpreter
    background_interpreter = runner_data.get("background_interpreter", defaults.background_interpreter)
    if not isinstance(background_interpreter, str):
        raise ValidationError(
            "runner.background_interpreter must be a string",
            field_name="runner.background_interpreter",
            value=background_interpreter,
        )
    background_interpreter = background_interpreter.strip() or None

    shell_executable = validate_non_empty_string(
        runner_data.get("shell_executable", defaults.shell_executable),
        field_name="runner.shell_executable",
    )

    terminate_timeout = validate_positive_float(
        runner_data.get("terminate_timeout", defaults.terminate_timeout),
        min_value=0.1,
        max_value=60.0,
        field_name="runner.terminate_timeout",
    )

    return RunnerConfig(
        runtime_mode_default=runtime_mode_default,
        max_concurrency=max_concurrency or None,
        background_interpreter=background_interpreter,
        shell_executable=shell_executable,
        terminate_timeout=terminate_timeout,
    )


def validate_bundles_config(bundles_data: Dict[str, Any]) -> BundlesConfig:
    """
    Validate and create a BundlesConfig from the ``[bundles]`` table.

    Raises:
        ValidationError: If validation fails
    """
    bundles_data = _check_table(bundles_data, "bundles")
    defaults = BundlesConfig()

    values = {}
    for key in ("directory", "build_dir", "hot_wrapper"):
        values[key] = validate_non_empty_string(
            bundles_data.get(key, getattr(defaults, key)),
            field_name=f"bundles.{key}",
        )

    artifact_suffix = bundles_data.get("artifact_suffix", defaults.artifact_suffix)
    if not isinstance(artifact_suffix, str):
        raise ValidationError(
            "bundles.artifact_suffix must be a string",
            field_name="bundles.artifact_suffix",
            value=artifact_suffix,
        )

    return BundlesConfig(artifact_suffix=artifact_suffix, **values)


def validate_build_config(build_data: Dict[str, Any], base_dir: Optional[Path] = None) -> BuildConfig:
    """
    Validate and create a BuildConfig from the ``[build]`` table.

    Relative ``cwd``, ``output_dir`` and ``watch_paths`` are resolved against
    ``base_dir`` (the directory of config.toml), or kept relative to the
    process working directory when it is None.

    Raises:
        ValidationError: If validation fails
    """
    build_data = _check_table(build_data, "build")

    command = validate_non_empty_string(build_data.get("command"), field_name="build.command")
    name = build_data.get("name", "")
    if not isinstance(name, str):
        raise ValidationError("build.name must be a string", field_name="build.name", value=name)

    def resolve(raw: Any, field_name: str) -> Path:
        path = Path(validate_non_empty_string(raw, field_name=field_name))
        if base_dir is not None and not path.is_absolute():
            path = base_dir / path
        return path

    cwd = resolve(build_data["cwd"], "build.cwd") if "cwd" in build_data else (base_dir or Path.cwd())

    output_dir = None
    if "output_dir" in build_data:
        output_dir = resolve(build_data["output_dir"], "build.output_dir")

    watch_paths = [
        resolve(raw, f"build.watch_paths[{i}]")
        for i, raw in enumerate(validate_string_list(build_data.get("watch_paths", []), "build.watch_paths"))
    ]

    poll_interval = validate_positive_float(
        build_data.get("poll_interval", 0.5),
        min_value=0.01,
        max_value=60.0,
        field_name="build.poll_interval",
    )

    aggregate_timeout = validate_positive_float(
        build_data.get("aggregate_timeout", 0.2),
        min_value=0.0,
        max_value=60.0,
        field_name="build.aggregate_timeout",
    )

    version = build_data.get("version")
    if version is not None and not isinstance(version, str):
        raise ValidationError("build.version must be a string", field_name="build.version", value=version)

    return BuildConfig(
        command=command,
        name=name,
        cwd=cwd,
        output_dir=output_dir,
        watch_paths=watch_paths,
        poll_interval=poll_interval,
        aggregate_timeout=aggregate_timeout,
        version=version,
    )


def validate_logging_config(logging_data: Dict[str, Any], base_dir: Optional[Path] = None) -> LoggingConfig:
    """Validate and create a LoggingConfig from the ``[logging]`` table."""
    logging_data = _check_table(logging_data, "logging")

    level = validate_enum_choice(
        logging_data.get("level", "INFO"),
        valid_choices=_LOG_LEVELS,
        field_name="logging.level",
    )

    log_file = None
    if "file" in logging_data:
        log_file = Path(validate_non_empty_string(logging_data["file"], field_name="logging.file"))
        if base_dir is not None and not log_file.is_absolute():
            log_file = base_dir / log_file

    return LoggingConfig(level=level, file=log_file)


def validate_app_config(main_config_data: Dict[str, Any], base_dir: Optional[Path] = None) -> AppConfig:
    """
    Validate the whole parsed config.toml.

    Raises:
        ValidationError: If any table fails validation
    """
    build_data = main_config_data.get("build")
    app_config = AppConfig(
        runner=validate_runner_config(main_config_data.get("runner", {})),
        bundles=validate_bundles_config(main_config_data.get("bundles", {})),
        build=validate_build_config(build_data, base_dir) if build_data is not None else None,
        logging=validate_logging_config(main_config_data.get("logging", {}), base_dir),
    )
    logger.debug(f"Validated configuration: {app_config}")
    return app_config
