"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest
from packaging.version import Version

from unity_runner.core.services.tool_provider import UnityToolProvider


class FakeDetector:
    """In-memory detector: a fixed set of (version, home) pairs."""

    name = "fake"

    def __init__(self, installations: dict[str, str] | None = None):
        self.installations = installations or {}
        self.hints: list[Path] = []

    def register_additional_hint_path(self, path):
        self.hints.append(Path(path))

    def find_installations(self):
        return [(Version(v), Path(p)) for v, p in self.installations.items()]

    def get_editor_path(self, home: Path) -> Path:
        return home / "Editor" / "Unity"


def make_editor(root: Path, dir_name: str, editor: tuple[str, ...] = ("Editor", "Unity")) -> Path:
    """Create a fake Unity home with an editor binary, return the home."""
    home = root / dir_name
    binary = home.joinpath(*editor)
    binary.parent.mkdir(parents=True, exist_ok=True)
    binary.write_text("")
    return home


@pytest.fixture
def fake_detector(tmp_path: Path) -> FakeDetector:
    """Detector reporting 2018.4.0, 2019.2.0 and 2020.1.0."""
    return FakeDetector({
        "2018.4.0": str(tmp_path / "Unity-2018.4.0f1"),
        "2019.2.0": str(tmp_path / "Unity-2019.2.0f1"),
        "2020.1.0": str(tmp_path / "Unity-2020.1.0f1"),
    })


@pytest.fixture
def provider(fake_detector: FakeDetector) -> UnityToolProvider:
    """Provider over ``fake_detector``, already loaded."""
    from unity_runner.core.models.build import AgentConfiguration

    tool_provider = UnityToolProvider.for_detector(fake_detector)
    tool_provider.load(AgentConfiguration())
    return tool_provider


@pytest.fixture
def editor_factory():
    """``make_editor(root, dir_name, editor=(...))`` as a fixture."""
    return make_editor


@pytest.fixture
def detector_factory():
    """Build a ``FakeDetector`` from ``{version: home}``."""
    return FakeDetector
