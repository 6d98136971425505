"""
Argument text helpers.

Free-form arguments are split like a shell would split them, honouring
single and double quotes. Backslashes are literal, so Windows paths
such as ``C:\\Builds\\out`` survive untouched.
"""

from __future__ import annotations

import re
import shlex

_LIST_SEPARATORS = re.compile(r"[,;\s]+")


def split_command_arguments(text: str) -> list[str]:
    """Tokenize a command-line fragment and strip its quotes."""
    lexer = shlex.shlex(text, posix=True)
    lexer.whitespace_split = True
    lexer.escape = ""
    lexer.commenters = ""
    return list(lexer)


def split_list(text: str) -> list[str]:
    """Split a list typed one-per-line or separated by commas/semicolons."""
    return [item for item in _LIST_SEPARATORS.split(text) if item]
