"""Linux detector — /opt and per-user Unity Hub installs."""

from __future__ import annotations

from pathlib import Path

from unity_runner.adapters.detectors.base import (
    Found,
    read_install_version,
    scan_roots,
    with_hub_dirs,
)


def default_linux_roots() -> list[Path]:
    home = Path.home()
    return [
        Path("/opt"),
        home / "Unity" / "Hub" / "Editor",
        home / ".local" / "share" / "Unity" / "Hub" / "Editor",
    ]


class LinuxUnityDetector:
    """Finds ``<home>/Editor/Unity`` under /opt and the user's Hub folders."""

    name = "linux"

    def __init__(self, search_roots: list[Path] | None = None):
        self._roots = list(search_roots) if search_roots is not None else default_linux_roots()
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
        return home / "Editor" / "Unity"
