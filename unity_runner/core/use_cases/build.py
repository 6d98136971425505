"""
Build use case — resolve, assemble and run one Unity build step.

The CLI passes option overrides as a plain dict; keys are
``RunnerParameters`` / ``FeatureParameters`` field names plus the
step-level ``working_directory``, ``build_id``, ``temp_directory``,
``tools_directory`` and ``virtual_context``. ``None`` values mean
"not given" and leave the configuration file's value in place.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from unity_runner.adapters.shell.process import run_build
from unity_runner.core.config.loader import load_config
from unity_runner.core.models.build import BuildContext, CommandLine, RunnerConfig, RunResult
from unity_runner.core.models.parameters import FeatureParameters, RunnerParameters
from unity_runner.core.services.build_logger import BuildLogger
from unity_runner.core.services.build_service import UnityRunnerBuildService
from unity_runner.core.services.tool_provider import UnityToolProvider
from unity_runner.core.use_cases.detect import agent_for, load_provider

logger = logging.getLogger(__name__)

_STEP_KEYS = ("working_directory", "build_id", "virtual_context")
_FEATURE_KEYS = {"feature_unity_version": "unity_version", "cache_server": "cache_server"}


def make_context(config: RunnerConfig, overrides: dict[str, Any] | None = None) -> BuildContext:
    """Merge CLI overrides into the configured build step."""
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    runner_data = config.runner.model_dump()
    runner_data.update({k: v for k, v in overrides.items() if k in RunnerParameters.model_fields})

    feature_data = config.feature.model_dump() if config.feature is not None else None
    feature_overrides = {
        field: overrides[key] for key, field in _FEATURE_KEYS.items() if key in overrides
    }
    if feature_overrides:
        feature_data = {**(feature_data or {}), **feature_overrides}

    step: dict[str, Any] = {
        "build_id": config.build_id,
        "virtual_context": config.virtual_context,
        "working_directory": config.working_directory or str(Path.cwd()),
    }
    step.update({k: overrides[k] for k in _STEP_KEYS if k in overrides})

    temp_directory = overrides.get("temp_directory") or config.agent.temp_directory
    if temp_directory:
        step["temp_directory"] = temp_directory

    return BuildContext(
        runner=RunnerParameters.model_validate(runner_data),
        feature=FeatureParameters.model_validate(feature_data) if feature_data is not None else None,
        **step,
    )


def _service_for(
    config_path: Path | None,
    overrides: dict[str, Any] | None,
    provider: UnityToolProvider | None,
    build_logger: BuildLogger | None,
) -> tuple[UnityRunnerBuildService, BuildContext]:
    config = load_config(config_path)
    context = make_context(config, overrides)

    tools_directory = (overrides or {}).get("tools_directory")
    provider = load_provider(agent_for(config, tools_directory), provider)
    logger.debug("Build %s in %s", context.build_id, context.working_directory)
    return UnityRunnerBuildService(provider, build_logger=build_logger), context


def prepare_build(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    provider: UnityToolProvider | None = None,
    build_logger: BuildLogger | None = None,
) -> tuple[UnityRunnerBuildService, CommandLine]:
    """Load config, populate the registry and build the command line.

    Raises:
        ConfigError: The configuration file is invalid.
        ToolNotFoundError: No editor satisfies the request.
        InvalidVersion: The requested version is malformed.
    """
    service, context = _service_for(config_path, overrides, provider, build_logger)
    return service, service.make_command_line(context)


def run_step(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    provider: UnityToolProvider | None = None,
    build_logger: BuildLogger | None = None,
) -> RunResult:
    """Run one build step end to end.

    Raises:
        ConfigError, ToolNotFoundError, InvalidVersion, ProcessLaunchError
    """
    service, context = _service_for(config_path, overrides, provider, build_logger)
    return run_build(service, context, build_logger)
