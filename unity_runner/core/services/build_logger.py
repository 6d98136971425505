"""
Build log — the console the CI server reads.

Editor output, tailed log lines and service messages all end up on
stdout, where the CI server parses them. They come from two threads
(the process reader and the log tailer), so writes are serialized.
Diagnostics about the runner itself go through ``logging`` instead.
"""

from __future__ import annotations

import sys
import threading
from typing import TextIO

from unity_runner.core.services.service_messages import service_message


class BuildLogger:
    """Line-oriented, thread-safe writer for build output."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def message(self, line: str) -> None:
        with self._lock:
            self.stream.write(line.rstrip("\r\n") + "\n")
            self.stream.flush()

    def service_message(self, name: str, **attributes: str) -> None:
        self.message(service_message(name, **attributes))
