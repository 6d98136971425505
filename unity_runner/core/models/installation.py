"""
Installation models — what the detectors found on this agent.

An ``Installation`` is one copy of the Unity editor: its version and
its home directory. The ``InstallationSnapshot`` is the registry's
read-only view of all of them, rebuilt wholesale on every agent
configuration load and never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from packaging.version import Version
from pydantic import BaseModel, ConfigDict


class Installation(BaseModel):
    """A discovered copy of the Unity editor."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    version: Version
    path: str                       # installation home (absolute)


class InstallationSnapshot:
    """Immutable, version-ascending collection of installations.

    When two installations share a version the one found last wins,
    so a later search root overrides an earlier one.
    """

    __slots__ = ("_entries",)

    def __init__(self, installations: Iterable[Installation] = ()):
        by_version: dict[Version, Installation] = {}
        for installation in installations:
            by_version[installation.version] = installation
        self._entries: tuple[Installation, ...] = tuple(
            by_version[v] for v in sorted(by_version)
        )

    @classmethod
    def empty(cls) -> InstallationSnapshot:
        return cls()

    @property
    def entries(self) -> tuple[Installation, ...]:
        return self._entries

    def latest(self) -> Installation | None:
        """The installation with the greatest version."""
        return self._entries[-1] if self._entries else None

    def latest_at_least(self, minimum: Version) -> Installation | None:
        """The greatest installation whose version is >= ``minimum``.

        This is deliberately the maximum of the qualifying versions,
        not the smallest one that is just new enough.
        """
        for installation in reversed(self._entries):
            if installation.version >= minimum:
                return installation
        return None

    def __iter__(self) -> Iterator[Installation]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        versions = ", ".join(str(i.version) for i in self._entries)
        return f"<InstallationSnapshot [{versions}]>"
