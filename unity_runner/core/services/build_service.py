"""
Unity build service — turns a build step into an editor invocation.

For each build step the service:

    1. resolves the editor through the ``UnityToolProvider``,
    2. assembles the batch-mode command line (``make_command_line``),
    3. starts tailing the editor log when the editor cannot write it to
       stdout (``before_process_started``),
    4. drains the tailer and asks the CI server to import the NUnit
       report once the editor exits (``after_process_finished``).

Argument order:

    -batchmode -projectPath <dir> [-buildTarget <t>] [-<player> <path>]
    [-runEditorTests] [-nographics] [-executeMethod <m>] [<arguments>...]
    (-quit | -editorTestsResultFile <xml> [test filters] [cache server])
    -logFile [<txt>]

``-runEditorTests`` quits the editor by itself, so ``-quit`` is only
added when tests are not run. On Windows, editors older than 2019
cannot send their log to stdout; they get a temp log file to tail.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from pathlib import Path

from packaging.version import Version

from unity_runner.adapters.detectors import is_windows
from unity_runner.core.models.build import (
    BuildContext,
    CommandLine,
    InvocationSpec,
    InvocationState,
)
from unity_runner.core.models.parameters import RUNNER_TYPE
from unity_runner.core.models.version import UNITY_2019
from unity_runner.core.services.arguments import split_command_arguments, split_list
from unity_runner.core.services.build_logger import BuildLogger
from unity_runner.core.services.log_tailer import DEFAULT_DELAY_S, LogTailer
from unity_runner.core.services.service_messages import import_data
from unity_runner.core.services.tool_provider import UnityToolProvider

logger = logging.getLogger(__name__)

ARG_BATCH_MODE = "-batchmode"
ARG_PROJECT_PATH = "-projectPath"
ARG_BUILD_TARGET = "-buildTarget"
ARG_RUN_TESTS = "-runEditorTests"
ARG_NO_GRAPHICS = "-nographics"
ARG_EXECUTE_METHOD = "-executeMethod"
ARG_QUIT = "-quit"
ARG_TESTS_FILE = "-editorTestsResultFile"
ARG_TEST_PLATFORM = "-testPlatform"
ARG_TEST_CATEGORIES = "-editorTestsCategories"
ARG_TEST_FILTER = "-editorTestsFilter"
ARG_CACHE_SERVER = "-CacheServerIPAddress"
ARG_LOG_FILE = "-logFile"

TEST_REPORT_TYPE = "nunit"


class UnityRunnerBuildService:
    """Builds and supervises one Unity editor invocation.

    A service instance handles a single build step; create a new one
    per step.

    Args:
        tool_provider: Registry used to resolve the editor.
        build_logger: Console sink for tailed lines and service messages.
        system: OS name as returned by ``platform.system()``
            (default: the host).
        tail_delay: Tailer poll interval, also the post-exit grace period.
    """

    def __init__(
        self,
        tool_provider: UnityToolProvider,
        build_logger: BuildLogger | None = None,
        system: str | None = None,
        tail_delay: float = DEFAULT_DELAY_S,
    ):
        self._tool_provider = tool_provider
        self._build_logger = build_logger or BuildLogger()
        self._system = system
        self._tail_delay = tail_delay

        self.state = InvocationState.NOT_STARTED
        self.spec: InvocationSpec | None = None
        self.log_file: Path | None = None
        self.tests_report_file: Path | None = None
        self._tailer: LogTailer | None = None

    @property
    def tailer(self) -> LogTailer | None:
        return self._tailer

    def is_command_line_logging_enabled(self) -> bool:
        return True

    # ── Command line ────────────────────────────────────────────

    def make_command_line(self, context: BuildContext) -> CommandLine:
        """Resolve the editor and assemble its batch-mode arguments.

        Raises:
            ToolNotFoundError: No editor matches the requested version.
            InvalidVersion: The requested version is malformed.
        """
        version, tool_path = self._tool_provider.get_unity_for_build(RUNNER_TYPE, context)
        params = context.runner
        working_dir = context.working_path
        arguments = [ARG_BATCH_MODE]

        project_dir = working_dir
        if params.project_path:
            project_dir = _resolve(working_dir, params.project_path)
        arguments += [ARG_PROJECT_PATH, str(project_dir)]

        build_target = params.build_target.strip() or None
        if build_target:
            arguments += [ARG_BUILD_TARGET, build_target]

        player_path: Path | None = None
        if params.build_player and params.build_player_path.strip():
            player_path = _resolve(working_dir, params.build_player_path)
            arguments += ["-" + params.build_player.strip(), str(player_path)]

        if params.run_editor_tests:
            arguments.append(ARG_RUN_TESTS)

        if params.no_graphics:
            arguments.append(ARG_NO_GRAPHICS)

        if params.execute_method:
            arguments += [ARG_EXECUTE_METHOD, params.execute_method.strip()]

        extra_args: list[str] = []
        if params.arguments:
            extra_args = split_command_arguments(params.arguments)
            arguments += extra_args

        test_filters: list[str] = []
        if ARG_RUN_TESTS not in arguments:
            arguments.append(ARG_QUIT)
        else:
            self.tests_report_file = self._tests_report_file(arguments, context, working_dir)

            if params.test_platform:
                arguments += [ARG_TEST_PLATFORM, params.test_platform]

            if params.test_categories:
                categories = split_list(params.test_categories)
                test_filters += categories
                arguments += [ARG_TEST_CATEGORIES, ",".join(categories)]

            if params.test_names:
                names = split_list(params.test_names)
                test_filters += names
                arguments += [ARG_TEST_FILTER, ",".join(names)]

            if context.feature is not None and context.feature.cache_server.strip():
                arguments += [ARG_CACHE_SERVER, context.feature.cache_server.strip()]

        arguments += self._log_arguments(version, context)

        self.spec = InvocationSpec(
            executable_path=tool_path,
            project_directory=str(project_dir),
            build_target=build_target,
            output_player_path=str(player_path) if player_path else None,
            run_tests=params.run_editor_tests,
            test_filters=test_filters,
            extra_args=extra_args,
            log_file_path=str(self.log_file) if self.log_file else None,
            test_report_path=str(self.tests_report_file) if self.tests_report_file else None,
        )
        return CommandLine(
            executable=tool_path,
            arguments=arguments,
            working_directory=str(working_dir),
        )

    def _tests_report_file(
        self, arguments: list[str], context: BuildContext, working_dir: Path,
    ) -> Path:
        """Reuse a user-supplied report path, else append a fresh temp file.

        A reused path stays verbatim on the command line; the editor runs in
        the working directory, so that is where a relative one lands.
        """
        if ARG_TESTS_FILE in arguments:
            index = arguments.index(ARG_TESTS_FILE)
            if 0 < index and index + 1 < len(arguments):
                return _resolve(working_dir, arguments[index + 1])

        report = _create_temp_file("unityTestResults-", f"-{context.build_id}.xml", context)
        arguments += [ARG_TESTS_FILE, str(report)]
        return report

    def _log_arguments(self, version: Version, context: BuildContext) -> list[str]:
        # Windows editors before 2019 ignore a bare -logFile, so their log is tailed
        if is_windows(self._system) and version < UNITY_2019:
            self.log_file = _create_temp_file("unityBuildLog-", f"-{context.build_id}.txt", context)
            return [ARG_LOG_FILE, str(self.log_file)]
        return [ARG_LOG_FILE]

    # ── Process lifecycle ───────────────────────────────────────

    def before_process_started(self) -> None:
        self.state = InvocationState.STARTING
        if self.log_file is not None:
            self._tailer = LogTailer(
                self.log_file,
                on_line=self._build_logger.message,
                on_rotated=self._on_log_rotated,
                delay=self._tail_delay,
            )
            self._tailer.start()

    def process_started(self) -> None:
        self.state = InvocationState.RUNNING

    def after_process_finished(self) -> None:
        if self._tailer is not None:
            # Give the tailer one more poll to pick up the last lines
            time.sleep(self._tail_delay)
            self._tailer.stop()

        if self.tests_report_file is not None:
            self._build_logger.message(
                import_data(TEST_REPORT_TYPE, str(self.tests_report_file))
            )

        self.state = InvocationState.FINISHED

    def _on_log_rotated(self) -> None:
        logger.info("Unity log file %s was rotated, stop tailing", self.log_file)
        if self._tailer is not None:
            self._tailer.stop()


def _resolve(working_dir: Path, value: str) -> Path:
    path = Path(value.strip())
    if not path.is_absolute():
        path = working_dir / path
    return path.absolute()


def _create_temp_file(prefix: str, suffix: str, context: BuildContext) -> Path:
    directory = Path(context.temp_directory)
    directory.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=directory)
    os.close(fd)
    return Path(name).absolute()
