"""
Semantic versions — the ordering key of every installation.

Versions are ``packaging.version.Version`` objects restricted to a
three-part ``major.minor.patch`` release. Two parsers exist:

    - ``parse_version``: strict, for versions a user asked for.
      Malformed input raises ``InvalidVersion`` and is not wrapped.
    - ``version_from_text``: lenient, for the version strings Unity
      itself prints (``2019.4.1f1``, ``Unity 2018.2.0b3``). The first
      ``major.minor.patch`` triple wins; the release suffix is dropped.
"""

from __future__ import annotations

import re

from packaging.version import InvalidVersion, Version

_STRICT_RE = re.compile(r"^\d+\.\d+\.\d+$")
_EMBEDDED_RE = re.compile(r"(?<![\d.])(\d+)\.(\d+)\.(\d+)")

UNITY_2019 = Version("2019.0.0")
"""First release able to write its log to stdout on Windows."""


def parse_version(text: str) -> Version:
    """Parse a user-supplied ``major.minor.patch`` version.

    Raises:
        InvalidVersion: If ``text`` is not exactly three dot-separated numbers.
    """
    value = text.strip()
    if not _STRICT_RE.match(value):
        raise InvalidVersion(f"Invalid version: {text!r} (expected major.minor.patch)")
    return Version(value)


def version_from_text(text: str) -> Version | None:
    """Extract a version from a Unity directory name or bundle string.

    Returns None when no ``major.minor.patch`` triple is present.
    """
    match = _EMBEDDED_RE.search(text)
    if not match:
        return None
    return Version(".".join(match.groups()))
