"""
Configuration loader — reads unity-runner.yml into domain models.

The file describes one build step the way a CI server would hand it
over: the step's runner parameters, the build feature's parameters,
and a few facts about the agent.

    build_id: "1234"
    agent:
      tools_directory: /opt/buildagent/tools
    runner:
      projectPath: game
      runEditorTests: "true"
      testCategories: "Fast, Smoke"
    feature:
      cacheServer: 10.0.0.5:8126
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from unity_runner.core.models.build import RunnerConfig

logger = logging.getLogger(__name__)

# Default config filename
RUNNER_CONFIG_FILE = "unity-runner.yml"


class ConfigError(Exception):
    """Raised when the runner configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for unity-runner.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to unity-runner.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / RUNNER_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None, required: bool = False) -> RunnerConfig:
    """Load and validate the runner configuration.

    Args:
        path: Explicit path to unity-runner.yml. If None, searches upward.
        required: Fail when no file is found instead of returning defaults.

    Returns:
        Validated RunnerConfig model. Relative directories in it are
        resolved against the file's directory.

    Raises:
        ConfigError: If the file is missing (when required or explicit) or invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        if required:
            raise ConfigError(f"No {RUNNER_CONFIG_FILE} found. Specify one with --config.")
        logger.debug("No %s found, using defaults", RUNNER_CONFIG_FILE)
        return RunnerConfig()

    if not path.is_file():
        if explicit or required:
            raise ConfigError(f"Config file not found: {path}")
        return RunnerConfig()

    logger.debug("Loading runner config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = RunnerConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid runner configuration: {e}") from e

    base = path.parent.resolve()
    if config.working_directory and not Path(config.working_directory).is_absolute():
        config.working_directory = str(base / config.working_directory)
    if config.agent.tools_directory and not Path(config.agent.tools_directory).is_absolute():
        config.agent.tools_directory = str(base / config.agent.tools_directory)

    logger.info("Loaded runner config from %s (build %s)", path, config.build_id)
    return config
