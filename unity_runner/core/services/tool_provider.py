"""
Unity tool provider — the agent's registry of installed editors.

Populated once when the agent configuration loads:

    provider = UnityToolProvider()
    provider.load(agent)              # scan, publish unity.path.<version>
    version, editor = provider.get_unity("unity", parse_version("2019.1.0"))

The registry keeps an ``InstallationSnapshot`` that is replaced as a
whole on every ``load()`` and only read afterwards, so a build never
sees a half-populated registry.

Selection rule: with no version requested the newest installation is
used; otherwise the newest installation whose version is >= the
requested one. A request for 2019.1.0 on an agent with 2019.2.0 and
2020.1.0 therefore resolves to 2020.1.0.
"""

from __future__ import annotations

import logging
from pathlib import Path

from packaging.version import Version

from unity_runner.adapters.detectors import UnityDetector, detector_for_platform
from unity_runner.core.models.build import AgentConfiguration, BuildContext
from unity_runner.core.models.installation import Installation, InstallationSnapshot
from unity_runner.core.models.parameters import (
    RUNNER_DISPLAY_NAME,
    RUNNER_TYPE,
    UNITY_CONFIG_NAME,
    UNITY_PATH_ENV,
)
from unity_runner.core.models.version import UNITY_2019, parse_version

logger = logging.getLogger(__name__)

VIRTUAL_CONTEXT_VERSION = UNITY_2019
"""Version assumed when the editor runs inside a container image."""


class ToolNotFoundError(Exception):
    """Raised when no Unity editor can be provided for a build."""


class UnityToolProvider:
    """Locates Unity editors installed on this agent.

    Args:
        detector: Detection strategy. Defaults to the host OS strategy;
            pass ``None`` explicitly through ``for_detector`` to model an
            unsupported OS.
    """

    def __init__(self, detector: UnityDetector | None = None, *, autodetect: bool = True):
        if detector is None and autodetect:
            detector = detector_for_platform()
        self._detector = detector
        self._snapshot = InstallationSnapshot.empty()

    @classmethod
    def for_detector(cls, detector: UnityDetector | None) -> UnityToolProvider:
        """Build a provider around exactly this detector (None = unsupported OS)."""
        return cls(detector, autodetect=False)

    @property
    def detector(self) -> UnityDetector | None:
        return self._detector

    @property
    def installations(self) -> InstallationSnapshot:
        return self._snapshot

    # ── Agent configuration ─────────────────────────────────────

    def load(self, agent: AgentConfiguration) -> InstallationSnapshot:
        """Scan for editors and publish them as agent parameters.

        Replaces the current snapshot. Each installation is published as
        ``unity.path.<version>`` → home directory.
        """
        logger.info("Locating %s tools", RUNNER_DISPLAY_NAME)

        installations: list[Installation] = []
        if self._detector is not None:
            if agent.tools_directory:
                self._detector.register_additional_hint_path(agent.tools_directory)
            for version, home in self._detector.find_installations():
                installations.append(Installation(version=version, path=str(Path(home).absolute())))
        else:
            logger.warning("No %s detector for this operating system", RUNNER_DISPLAY_NAME)

        self._snapshot = InstallationSnapshot(installations)

        stale = [k for k in agent.configuration_parameters if k.startswith(UNITY_CONFIG_NAME)]
        for key in stale:
            del agent.configuration_parameters[key]

        for installation in self._snapshot:
            logger.info("Found %s %s at %s", RUNNER_DISPLAY_NAME, installation.version, installation.path)
            agent.add_configuration_parameter(
                f"{UNITY_CONFIG_NAME}{installation.version}", installation.path,
            )

        return self._snapshot

    # ── Lookups ─────────────────────────────────────────────────

    def supports(self, tool_name: str) -> bool:
        return tool_name.lower() == RUNNER_TYPE

    def locate(self, requested_version: Version | None = None) -> str:
        """Editor binary for the requested version (or the newest one)."""
        return self.get_path(RUNNER_TYPE, requested_version)

    def get_path(self, tool_name: str, unity_version: Version | None = None) -> str:
        _, editor_path = self.get_unity(tool_name, unity_version)
        return editor_path

    def get_path_for_build(self, tool_name: str, context: BuildContext) -> str:
        if context.virtual_context:
            return RUNNER_TYPE
        return self.get_path(tool_name, _requested_version(context))

    def get_unity(self, tool_name: str, unity_version: Version | None = None) -> tuple[Version, str]:
        """Resolve (version, editor binary path).

        Raises:
            ToolNotFoundError: Unsupported tool, unsupported OS, or no
                installation satisfying ``unity_version``.
        """
        if not self.supports(tool_name):
            raise ToolNotFoundError(f"Unsupported tool {tool_name}")

        if self._detector is None:
            raise ToolNotFoundError(RUNNER_TYPE)

        if unity_version is None:
            installation = self._snapshot.latest()
        else:
            installation = self._snapshot.latest_at_least(unity_version)

        if installation is None:
            raise ToolNotFoundError(
                f"Unable to locate tool {tool_name} in system. "
                f"Please make sure to specify {UNITY_PATH_ENV} environment variable"
            )

        editor = self._detector.get_editor_path(Path(installation.path))
        logger.debug("Resolved %s %s → %s", tool_name, installation.version, editor)
        return installation.version, str(editor.absolute())

    def get_unity_for_build(self, tool_name: str, context: BuildContext) -> tuple[Version, str]:
        """Resolve the editor for a build step.

        In a virtual context (the build runs inside a container image)
        the editor is expected on the image's PATH as ``unity``.
        """
        if context.virtual_context:
            return VIRTUAL_CONTEXT_VERSION, RUNNER_TYPE
        return self.get_unity(tool_name, _requested_version(context))


def _requested_version(context: BuildContext) -> Version | None:
    text = context.requested_version()
    if text is None:
        return None
    return parse_version(text)
