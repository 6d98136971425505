"""
Domain models — Pydantic types for the Unity runner.

All models are re-exported here for convenient access:

    from unity_runner.core.models import Installation, BuildContext, RunnerParameters
"""

from unity_runner.core.models.build import (
    AgentConfiguration,
    AgentSettings,
    BuildContext,
    CommandLine,
    InvocationSpec,
    InvocationState,
    RunResult,
    RunnerConfig,
)
from unity_runner.core.models.installation import Installation, InstallationSnapshot
from unity_runner.core.models.parameters import (
    RUNNER_DISPLAY_NAME,
    RUNNER_TYPE,
    UNITY_CONFIG_NAME,
    UNITY_PATH_ENV,
    FeatureParameters,
    RunnerParameters,
)
from unity_runner.core.models.version import (
    UNITY_2019,
    parse_version,
    version_from_text,
)

__all__ = [
    # build.py
    "AgentConfiguration",
    "AgentSettings",
    "BuildContext",
    "CommandLine",
    "FeatureParameters",
    # installation.py
    "Installation",
    "InstallationSnapshot",
    "InvocationSpec",
    "InvocationState",
    # parameters.py
    "RUNNER_DISPLAY_NAME",
    "RUNNER_TYPE",
    "RunResult",
    "RunnerConfig",
    "RunnerParameters",
    "UNITY_2019",
    "UNITY_CONFIG_NAME",
    "UNITY_PATH_ENV",
    # version.py
    "parse_version",
    "version_from_text",
]
