"""
Detection use case — scan the agent for Unity editors.

Ties together config loading, the tool provider and the published
``unity.path.<version>`` agent parameters.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from unity_runner.core.config.loader import ConfigError, load_config
from unity_runner.core.models.build import AgentConfiguration, RunnerConfig
from unity_runner.core.services.tool_provider import UnityToolProvider

logger = logging.getLogger(__name__)


@dataclass
class DetectResult:
    """Result of the detect use case."""

    parameters: dict[str, str] = field(default_factory=dict)
    detector: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "detector": self.detector,
            "installations": len(self.parameters),
            "parameters": dict(self.parameters),
        }


def agent_for(config: RunnerConfig, tools_directory: str | None = None) -> AgentConfiguration:
    """Agent configuration from the config file, with an optional override."""
    agent = AgentConfiguration(tools_directory=tools_directory or config.agent.tools_directory)
    if config.agent.temp_directory:
        agent.temp_directory = config.agent.temp_directory
    return agent


def load_provider(
    agent: AgentConfiguration,
    provider: UnityToolProvider | None = None,
) -> UnityToolProvider:
    """Create (or reuse) a provider and populate it for ``agent``."""
    provider = provider or UnityToolProvider()
    provider.load(agent)
    return provider


def run_detect(
    config_path: Path | None = None,
    tools_directory: str | None = None,
    provider: UnityToolProvider | None = None,
) -> DetectResult:
    """Scan for editors and return the parameters they publish.

    Args:
        config_path: Optional explicit path to unity-runner.yml.
        tools_directory: Extra directory to scan (overrides the config).
        provider: Provider to populate (default: one for the host OS).

    Returns:
        DetectResult with ``unity.path.<version>`` → home entries.
    """
    result = DetectResult()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    agent = agent_for(config, tools_directory)
    provider = load_provider(agent, provider)

    detector = provider.detector
    result.detector = detector.name if detector is not None else None
    result.parameters = dict(agent.configuration_parameters)
    logger.debug("Detected %d installation(s)", len(result.parameters))
    return result
