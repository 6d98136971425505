"""Windows detector — Program Files and Unity Hub installs."""

from __future__ import annotations

import os
from pathlib import Path

from unity_runner.adapters.detectors.base import (
    Found,
    read_install_version,
    scan_roots,
    with_hub_dirs,
)

_PROGRAM_FILES_VARS = ("ProgramFiles", "ProgramFiles(x86)", "ProgramW6432")


def default_windows_roots() -> list[Path]:
    roots: list[Path] = []
    for var in _PROGRAM_FILES_VARS:
        value = os.environ.get(var)
        if value and Path(value) not in roots:
            roots.append(Path(value))
    if not roots:
        roots.append(Path("C:/Program Files"))
    return roots


class WindowsUnityDetector:
    """Finds ``<home>\\Editor\\Unity.exe`` under Program Files."""

    name = "windows"

    def __init__(self, search_roots: list[Path] | None = None):
        self._roots = list(search_roots) if search_roots is not None else default_windows_roots()
        self._hints: list[Path] = []

    def register_additional_hint_path(self, path: str | Path) -> None:
        self._hints.append(Path(path))

    def find_installations(self) -> list[Found]:
        return scan_roots(
            with_hub_dirs([*self._roots, *self._hints]),
            self.get_editor_path,
            read_install_version,
        )

    def get_editor_path(self, home: Path) -> Path:
        return home / "Editor" / "Unity.exe"
