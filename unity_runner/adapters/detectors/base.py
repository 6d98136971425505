"""
Detector protocol — how an OS-specific strategy finds Unity editors.

There is exactly one strategy per supported desktop OS family. They
share no base class; each conforms to ``UnityDetector`` and uses the
scanning helpers below.

A search root is a directory whose direct children may be Unity
homes: ``/Applications``, ``C:\\Program Files``, a Hub's ``Editor``
folder, or an agent tools directory. A child is a candidate when its
name starts with ``Unity`` or carries a version, and it is accepted
once its editor binary exists and a version can be read for it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Protocol

from packaging.version import Version

from unity_runner.core.models.version import version_from_text

logger = logging.getLogger(__name__)

HUB_EDITOR_DIR = Path("Unity", "Hub", "Editor")
PLAYBACK_ENGINES_DIR = Path("Editor", "Data", "PlaybackEngines")

_IVY_VERSION_RE = re.compile(r'unityVersion="([^"]+)"')

Found = tuple[Version, Path]


class UnityDetector(Protocol):
    """Capability shared by the OS-specific detection strategies."""

    name: str

    def register_additional_hint_path(self, path: str | Path) -> None:
        """Add a directory to scan on top of the well-known locations."""

    def find_installations(self) -> list[Found]:
        """Return (version, home) for every editor found."""

    def get_editor_path(self, home: Path) -> Path:
        """Return the editor binary inside an installation home."""


def with_hub_dirs(roots: Iterable[Path]) -> list[Path]:
    """Expand each root with its Unity Hub ``Editor`` sub-directory."""
    expanded: list[Path] = []
    for root in roots:
        for candidate in (root, root / HUB_EDITOR_DIR):
            if candidate not in expanded:
                expanded.append(candidate)
    return expanded


def is_candidate_name(name: str) -> bool:
    return name.lower().startswith("unity") or version_from_text(name) is not None


def scan_roots(
    roots: Iterable[Path],
    editor_path: Callable[[Path], Path],
    read_version: Callable[[Path], Version | None],
) -> list[Found]:
    """Scan the direct children of every existing root.

    Args:
        roots: Directories to scan, in priority order (later wins on ties).
        editor_path: Maps a home directory to its editor binary.
        read_version: Reads a home's version, or returns None.

    Returns:
        (version, home) pairs in discovery order.
    """
    found: list[Found] = []
    seen: set[Path] = set()

    for root in roots:
        if not root.is_dir():
            continue
        try:
            children = sorted(root.iterdir())
        except OSError as e:
            logger.debug("Cannot list %s: %s", root, e)
            continue

        for home in children:
            if home in seen or not home.is_dir() or not is_candidate_name(home.name):
                continue
            seen.add(home)

            if not editor_path(home).is_file():
                logger.debug("Skipping %s: no editor binary", home)
                continue

            version = read_version(home)
            if version is None:
                logger.debug("Skipping %s: cannot determine version", home)
                continue

            found.append((version, home.absolute()))

    return found


def version_from_dir_name(home: Path) -> Version | None:
    return version_from_text(home.name)


def version_from_playback_engines(home: Path) -> Version | None:
    """Read ``unityVersion`` from a bundled playback engine's ``ivy.xml``.

    Non-Hub installs live in a plain ``Unity`` folder; every editor ships
    at least its own platform's engine under ``Editor/Data/PlaybackEngines``.
    """
    engines = home / PLAYBACK_ENGINES_DIR
    if not engines.is_dir():
        return None
    for ivy in sorted(engines.glob("*/ivy.xml")):
        try:
            text = ivy.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Unreadable %s: %s", ivy, e)
            continue
        match = _IVY_VERSION_RE.search(text)
        if match:
            version = version_from_text(match.group(1))
            if version is not None:
                return version
    return None


def read_install_version(home: Path) -> Version | None:
    """Version from the home's name, else from inside the installation."""
    return version_from_dir_name(home) or version_from_playback_engines(home)
