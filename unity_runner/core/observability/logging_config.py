"""
Logging configuration — set up once by the CLI entrypoint.

Every module does ``logger = logging.getLogger(__name__)`` and inherits
this config. Runner diagnostics go to stderr; stdout belongs to the
build (editor output, tailed log lines, service messages) and is
written by ``BuildLogger``, never by ``logging``.

Levels are resolved in precedence order:
    --debug / --verbose / --quiet  >  UNITY_RUNNER_LOG_LEVEL  >  WARNING

Optional file output via UNITY_RUNNER_LOG_FILE / UNITY_RUNNER_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LEVEL = "UNITY_RUNNER_LOG_LEVEL"
ENV_FILE = "UNITY_RUNNER_LOG_FILE"
ENV_FILE_LEVEL = "UNITY_RUNNER_LOG_FILE_LEVEL"

# ── Format strings ──────────────────────────────────────────────

# Default: CI consoles already timestamp every line
_FMT_PLAIN = "[unity-runner] %(message)s"

# DEBUG: logger and line, for tracing detection
_FMT_DEBUG = "[unity-runner] %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

# File output: always full detail
_FMT_FILE = "%(asctime)s %(levelname)-5s %(threadName)s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(ENV_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger for the runner process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a diagnostics file.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = _parse_level(level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(
        logging.Formatter(_FMT_DEBUG if console_level <= logging.DEBUG else _FMT_PLAIN)
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name → numeric constant; unknown names mean WARNING."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
