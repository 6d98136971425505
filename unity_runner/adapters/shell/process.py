"""
Editor process runner — launch Unity and stream its output.

The editor runs synchronously. Its stdout and stderr are merged and
forwarded line by line to the build log while the build service's
lifecycle hooks run around it:

    make_command_line → before_process_started → (editor runs)
                      → after_process_finished

``after_process_finished`` runs even when the editor cannot be started,
so the log tailer never outlives the build step.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import time

from unity_runner.core.models.build import BuildContext, RunResult
from unity_runner.core.services.build_logger import BuildLogger
from unity_runner.core.services.build_service import UnityRunnerBuildService

logger = logging.getLogger(__name__)


class ProcessLaunchError(Exception):
    """Raised when the editor executable cannot be started."""


def run_build(
    service: UnityRunnerBuildService,
    context: BuildContext,
    build_logger: BuildLogger | None = None,
) -> RunResult:
    """Run one build step to completion.

    Args:
        service: Fresh build service for this step.
        context: The build step.
        build_logger: Sink for the editor's output (default: stdout).

    Returns:
        RunResult with the editor's exit code.

    Raises:
        ToolNotFoundError: No editor matches the request.
        ProcessLaunchError: The editor could not be started.
    """
    sink = build_logger or BuildLogger()
    command = service.make_command_line(context)

    if service.is_command_line_logging_enabled():
        logger.info("Starting: %s", shlex.join(command.argv()))
        logger.info("in directory: %s", command.working_directory)

    start = time.monotonic()
    try:
        service.before_process_started()
        try:
            proc = subprocess.Popen(
                command.argv(),
                cwd=command.working_directory,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise ProcessLaunchError(f"Cannot start {command.executable}: {e}") from e

        service.process_started()
        assert proc.stdout is not None
        with proc.stdout:
            for line in proc.stdout:
                sink.message(line)
        exit_code = proc.wait()
    finally:
        service.after_process_finished()

    elapsed_ms = int((time.monotonic() - start) * 1000)
    logger.info("Process exited with code %d (%d ms)", exit_code, elapsed_ms)

    report = service.tests_report_file
    return RunResult(
        exit_code=exit_code,
        duration_ms=elapsed_ms,
        test_report_path=str(report) if report else None,
    )
