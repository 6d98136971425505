"""
Log tailer — follows a file another process is writing.

Polls the file every ``delay`` seconds and hands each complete line to
``on_line``. The tailer:

    - waits for the file to appear (the editor creates it lazily),
    - reads from the start of the file,
    - keeps an unterminated last line until its newline arrives,
      flushing it when stopped,
    - reports rotation (the file shrinking below the read position)
      through ``on_rotated`` and then restarts from the beginning, unless
      the callback stopped the tailer, in which case nothing more is read.

Stopping is cooperative: ``stop()`` sets an event, the loop finishes
the read in progress, drains what is left and exits.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DELAY_S = 0.5


class LogTailer:
    """Background follower of a single log file."""

    def __init__(
        self,
        path: str | Path,
        on_line: Callable[[str], None],
        on_rotated: Callable[[], None] | None = None,
        delay: float = DEFAULT_DELAY_S,
        encoding: str = "utf-8",
    ):
        self._path = Path(path)
        self._on_line = on_line
        self._on_rotated = on_rotated
        self._delay = delay
        self._encoding = encoding
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._position = 0
        self._pending = b""
        self._abandoned = False         # stopped on rotation, skip the final drain

    @property
    def path(self) -> Path:
        return self._path

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("Tailer already started")
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="unity-log-tailer",
        )
        self._thread.start()
        logger.debug("Tailing %s (poll every %.1fs)", self._path, self._delay)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Ask the loop to exit and wait for it (unless called from it)."""
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        while not self._stop.is_set():
            self._poll()
            self._stop.wait(self._delay)
        if not self._abandoned:
            self._poll()
            self._flush_pending()
        logger.debug("Stopped tailing %s", self._path)

    def _poll(self) -> None:
        try:
            size = self._path.stat().st_size
        except FileNotFoundError:
            return
        except OSError as e:
            logger.debug("Cannot stat %s: %s", self._path, e)
            return

        if size < self._position:
            logger.debug("%s rotated (size %d < position %d)", self._path, size, self._position)
            self._flush_pending()
            self._position = 0
            if self._on_rotated is not None:
                self._on_rotated()
            if self._stop.is_set():
                self._abandoned = True
                return

        if size == self._position:
            return

        try:
            with self._path.open("rb") as f:
                f.seek(self._position)
                chunk = f.read()
        except OSError as e:
            logger.debug("Cannot read %s: %s", self._path, e)
            return

        self._position += len(chunk)
        data = self._pending + chunk
        *lines, self._pending = data.split(b"\n")
        for raw in lines:
            self._emit(raw)

    def _flush_pending(self) -> None:
        if self._pending:
            raw, self._pending = self._pending, b""
            self._emit(raw)

    def _emit(self, raw: bytes) -> None:
        self._on_line(raw.decode(self._encoding, errors="replace").rstrip("\r"))
