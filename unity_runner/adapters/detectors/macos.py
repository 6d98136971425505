"""
macOS detector — application bundles under /Applications.

The bundle's ``Info.plist`` is the most reliable source of the version
(``CFBundleVersion`` holds e.g. ``2019.4.1f1``). Homes whose plist is
missing or unreadable fall back to the directory name, which is how
Unity Hub lays out ``/Applications/Unity/Hub/Editor/<version>``.
"""

from __future__ import annotations

import logging
import plistlib
from pathlib import Path

from packaging.version import Version

from unity_runner.adapters.detectors.base import (
    Found,
    scan_roots,
    version_from_dir_name,
    with_hub_dirs,
)
from unity_runner.core.models.version import version_from_text

logger = logging.getLogger(__name__)

_BUNDLE = Path("Unity.app", "Contents")
_VERSION_KEYS = ("CFBundleVersion", "CFBundleShortVersionString")


def read_bundle_version(home: Path) -> Version | None:
    """Read the editor version from the bundle, else from the home's name."""
    plist_path = home / _BUNDLE / "Info.plist"
    if plist_path.is_file():
        try:
            with plist_path.open("rb") as f:
                info = plistlib.load(f)
        except (OSError, plistlib.InvalidFileException, ValueError) as e:
            logger.debug("Unreadable %s: %s", plist_path, e)
        else:
            for key in _VERSION_KEYS:
                version = version_from_text(str(info.get(key, "")))
                if version is not None:
                    return version
    return version_from_dir_name(home)


class MacOsUnityDetector:
    """Finds ``<home>/Unity.app/Contents/MacOS/Unity`` under /Applications."""

    name = "macos"

    def __init__(self, search_roots: list[Path] | None = None):
        self._roots = list(search_roots) if search_roots is not None else [Path("/Applications")]
        self._hints: list[Path] = []

    def register_additional_hint_path(self, path: str | Path) -> None:
        self._hints.append(Path(path))

    def find_installations(self) -> list[Found]:
        return scan_roots(
            with_hub_dirs([*self._roots, *self._hints]),
            self.get_editor_path,
            read_bundle_version,
        )

    def get_editor_path(self, home: Path) -> Path:
        return home / _BUNDLE / "MacOS" / "Unity"
