"""
Build models — the agent, one build step, and what it runs.

``AgentConfiguration`` lives as long as the agent process. A
``BuildContext`` is created per build step; the ``InvocationSpec`` and
``CommandLine`` built from it are discarded once the editor exits.
"""

from __future__ import annotations

import tempfile
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from unity_runner.core.models.parameters import FeatureParameters, RunnerParameters


class AgentConfiguration(BaseModel):
    """The build agent this runner is installed on."""

    tools_directory: str | None = None
    temp_directory: str = Field(default_factory=tempfile.gettempdir)
    configuration_parameters: dict[str, str] = Field(default_factory=dict)

    def add_configuration_parameter(self, name: str, value: str) -> None:
        """Publish a parameter for builds running on this agent."""
        self.configuration_parameters[name] = value


class BuildContext(BaseModel):
    """Everything one Unity build step needs to run."""

    working_directory: str = "."
    build_id: str = "0"
    temp_directory: str = Field(default_factory=tempfile.gettempdir)
    runner: RunnerParameters = Field(default_factory=RunnerParameters)
    feature: FeatureParameters | None = None
    virtual_context: bool = False   # running inside a container image

    @property
    def working_path(self) -> Path:
        return Path(self.working_directory).absolute()

    def requested_version(self) -> str | None:
        """The version asked for by the step, else by the feature.

        Returns None when neither set has a version.
        """
        version = self.runner.unity_version.strip()
        if not version and self.feature is not None:
            version = self.feature.unity_version.strip()
        return version or None


class InvocationSpec(BaseModel):
    """The resolved shape of one editor invocation."""

    executable_path: str
    project_directory: str
    build_target: str | None = None
    output_player_path: str | None = None
    run_tests: bool = False
    test_filters: list[str] = Field(default_factory=list)
    extra_args: list[str] = Field(default_factory=list)
    log_file_path: str | None = None
    test_report_path: str | None = None


class CommandLine(BaseModel):
    """An executable and its arguments, ready to launch."""

    executable: str
    arguments: list[str] = Field(default_factory=list)
    working_directory: str = "."

    def argv(self) -> list[str]:
        return [self.executable, *self.arguments]


class RunResult(BaseModel):
    """Outcome of a finished build step."""

    exit_code: int
    duration_ms: int = 0
    test_report_path: str | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class InvocationState(str, Enum):
    """Lifecycle of the editor process as seen by the build service."""

    NOT_STARTED = "not_started"
    STARTING = "starting"
    RUNNING = "running"
    FINISHED = "finished"


class AgentSettings(BaseModel):
    """The ``agent:`` section of the runner configuration file."""

    tools_directory: str | None = None
    temp_directory: str | None = None


class RunnerConfig(BaseModel):
    """Root of ``unity-runner.yml``."""

    build_id: str = "0"
    working_directory: str | None = None
    virtual_context: bool = False
    agent: AgentSettings = Field(default_factory=AgentSettings)
    runner: RunnerParameters = Field(default_factory=RunnerParameters)
    feature: FeatureParameters | None = None
