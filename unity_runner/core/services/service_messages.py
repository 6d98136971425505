"""
TeamCity service messages.

    ##teamcity[importData type='nunit' path='/tmp/unityTestResults-1.xml']

Attribute values are escaped with ``|`` so that quotes, brackets and
line breaks survive the CI server's parser.
"""

from __future__ import annotations

_ESCAPES = {
    "|": "||",
    "'": "|'",
    "\n": "|n",
    "\r": "|r",
    "[": "|[",
    "]": "|]",
    "\u0085": "|x",
    "\u2028": "|l",
    "\u2029": "|p",
}


def escape_value(value: str) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in value)


def service_message(name: str, **attributes: str) -> str:
    """Format a multi-attribute service message (attribute order is kept)."""
    parts = " ".join(f"{key}='{escape_value(str(value))}'" for key, value in attributes.items())
    return f"##teamcity[{name} {parts}]" if parts else f"##teamcity[{name}]"


def import_data(data_type: str, path: str) -> str:
    """Directive telling the server to import a report file."""
    return service_message("importData", type=data_type, path=path)
