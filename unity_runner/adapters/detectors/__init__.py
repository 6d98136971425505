"""
Detectors — one Unity discovery strategy per desktop OS family.

``detector_for_platform`` picks the strategy for the host once; an
unsupported OS yields None and every lookup in the registry fails.
"""

from __future__ import annotations

import platform

from unity_runner.adapters.detectors.base import UnityDetector
from unity_runner.adapters.detectors.linux import LinuxUnityDetector
from unity_runner.adapters.detectors.macos import MacOsUnityDetector
from unity_runner.adapters.detectors.windows import WindowsUnityDetector

_DETECTORS: dict[str, type] = {
    "Windows": WindowsUnityDetector,
    "Darwin": MacOsUnityDetector,
    "Linux": LinuxUnityDetector,
}


def is_windows(system: str | None = None) -> bool:
    return (system or platform.system()) == "Windows"


def detector_for_platform(system: str | None = None) -> UnityDetector | None:
    """Create the detector for ``system`` (default: the host OS)."""
    detector_cls = _DETECTORS.get(system or platform.system())
    return detector_cls() if detector_cls else None


__all__ = [
    "LinuxUnityDetector",
    "MacOsUnityDetector",
    "UnityDetector",
    "WindowsUnityDetector",
    "detector_for_platform",
    "is_windows",
]
